"""
noisesurvey Audiometry Reducers

Pure state transitions for an employee's test history.
"""

from __future__ import annotations
from dataclasses import replace
import logging

from ..core.models import AudiometryTest, Employee
from .calculators import detect_sts

logger = logging.getLogger(__name__)


def apply_new_test(employee: Employee, test: AudiometryTest) -> Employee:
    """
    Record a new audiometric test.

    A Baseline test replaces the baseline. Any other test is appended to
    the periodic tests and, when a baseline exists, checked for STS.

    ``has_sts`` is sticky: a later test without a shift never clears it.
    ``sts_date`` keeps the first detection; ``sts_details`` holds the
    latest shift message.

    Returns:
        New Employee; ``employee`` is left unchanged
    """
    if test.is_baseline:
        return replace(employee, baseline_test=test)

    updated = replace(employee, periodic_tests=[*employee.periodic_tests, test])
    if employee.baseline_test is None:
        return updated

    sts = detect_sts(employee.baseline_test.audiogram, test.audiogram)
    if not sts.has_sts:
        return updated

    logger.info(f"STS detected for employee {employee.id} on {test.test_date}: {sts.message}")
    return replace(
        updated,
        has_sts=True,
        sts_date=employee.sts_date or test.test_date,
        sts_details=sts.message,
    )
