"""
noisesurvey Area Tree

Traversal of the main > sub > sub-sub area tree and structural deletion
that keeps every area-keyed map of a survey aligned with the tree.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional
import logging

from .area_key import AreaKey, rekey_after_delete
from .models import AREA_MAP_FIELDS, Area, SurveyData

logger = logging.getLogger(__name__)

UNKNOWN_AREA_NAME = "Unknown Area"


class AreaNotFoundError(LookupError):
    """Raised when a key does not address a node of the area tree."""

    def __init__(self, key: AreaKey):
        self.key = key
        super().__init__(f"No area at {key.to_key()}")


@dataclass(frozen=True)
class LeafArea:
    """Area without sub-areas, evaluated on its own by survey validation."""
    key: AreaKey
    name: str  # "Main > Sub > Sub-sub"

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key.to_dict(), "name": self.name}


# =============================================================================
# TRAVERSAL
# =============================================================================

def collect_leaf_areas(survey: SurveyData) -> List[LeafArea]:
    """Leaf areas in depth-first order with their display names."""
    leaves: List[LeafArea] = []

    def walk(nodes: List[Area], parent: Optional[AreaKey], prefix: str) -> None:
        for index, node in enumerate(nodes):
            key = AreaKey(index) if parent is None else parent.child(index)
            name = f"{prefix}{node.name}"
            if node.is_leaf or key.level == 3:
                leaves.append(LeafArea(key=key, name=name))
            else:
                walk(node.sub_areas, key, f"{name} > ")

    walk(survey.areas, None, "")
    return leaves


def find_area(survey: SurveyData, key: AreaKey) -> Optional[Area]:
    """Node addressed by ``key``, or None when any level is missing."""
    nodes = survey.areas
    node = None
    for index in key.indices:
        if index >= len(nodes):
            return None
        node = nodes[index]
        nodes = node.sub_areas
    return node


def area_exists(survey: SurveyData, key: AreaKey) -> bool:
    return find_area(survey, key) is not None


def area_name(survey: SurveyData, key: AreaKey) -> str:
    """
    Display name for a key, e.g. "Plant > Mill > Crusher".

    Falls back to the deepest existing ancestor, or "Unknown Area" when
    the main area is missing.
    """
    names = []
    nodes = survey.areas
    for index in key.indices:
        if index >= len(nodes):
            break
        names.append(nodes[index].name)
        nodes = nodes[index].sub_areas
    return " > ".join(names) if names else UNKNOWN_AREA_NAME


# =============================================================================
# STRUCTURAL CHANGES
# =============================================================================

def _remove_node(nodes: List[Area], indices: tuple) -> List[Area]:
    head, rest = indices[0], indices[1:]
    if not rest:
        return nodes[:head] + nodes[head + 1:]
    parent = nodes[head]
    updated = replace(parent, sub_areas=_remove_node(parent.sub_areas, rest))
    return nodes[:head] + [updated] + nodes[head + 1:]


def delete_area(survey: SurveyData, key: AreaKey) -> SurveyData:
    """
    Remove an area and its subtree.

    Every area-keyed map drops the deleted subtree's entries and shifts
    later siblings down by one index, so surviving data stays attached to
    the same area.

    Raises:
        AreaNotFoundError: if ``key`` does not address an existing area

    Returns:
        New SurveyData; ``survey`` is left unchanged
    """
    if not area_exists(survey, key):
        raise AreaNotFoundError(key)

    changes: Dict[str, Any] = {"areas": _remove_node(survey.areas, key.indices)}
    for attr, _ in AREA_MAP_FIELDS:
        changes[attr] = rekey_after_delete(getattr(survey, attr), key)

    logger.info(f"Deleted area {key.to_key()} ({area_name(survey, key)})")
    return replace(survey, **changes)
