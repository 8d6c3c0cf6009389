"""
Per-module file logging for Poster Scanner.
"""

from .logger import ModuleLogger

__all__ = ['ModuleLogger']
