"""
Two-stage title resolution: clustering scorer followed by fuzzy candidate ranking.
"""

from .pipeline import CandidateSource, ScanResult, TitleResolutionPipeline

__all__ = ['CandidateSource', 'ScanResult', 'TitleResolutionPipeline']
