"""
Spatial clustering and scoring of OCR detections into a title candidate.
"""

from .block_filter import BlockFilter
from .resolver     import ScoredBlock, TextGroup, TitleResolver

__all__ = ['BlockFilter', 'ScoredBlock', 'TextGroup', 'TitleResolver']
