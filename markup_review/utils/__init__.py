"""Utility functions for Markup Review"""

from .coordinate_utils import CoordinateMapper
from .logging_config import LoggingConfig

__all__ = [
    'CoordinateMapper',
    'LoggingConfig',
]
