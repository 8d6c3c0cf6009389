"""
Structured configuration for the title resolution pipeline.
"""

from .config import ScannerConfig

__all__ = ['ScannerConfig']
