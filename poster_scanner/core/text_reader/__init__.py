"""
EasyOCR-backed text detection for poster photographs.
"""

from .reader import TextReader

__all__ = ['TextReader']
