"""
Fuzzy ranking of movie database records against a guessed title.
"""

from .matcher import CandidateRecord, FuzzyMatcher, MatchResult, similarity
from .catalog import MovieCatalog

__all__ = ['CandidateRecord', 'FuzzyMatcher', 'MatchResult', 'MovieCatalog', 'similarity']
