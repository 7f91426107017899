"""
noisesurvey - SANS 10083 noise survey rules engine.
"""

__version__ = "1.0.0"
