"""
Markup Review

Image markup for clinical review: draw shapes on a submitted image, describe
them, and burn them into a flattened copy for the report.
"""

__version__ = "1.0.0"
__author__ = "CGstuff"

from .config import Config, MarkupStyle

__all__ = [
    'Config',
    'MarkupStyle',
]
