"""
Poster Scanner
Resolves the title of a photographed movie poster from OCR text detections.
"""

__version__ = '0.1.0'

from poster_scanner.core.module_logger  import ModuleLogger
from poster_scanner.core.scanner_config import ScannerConfig
from poster_scanner.core.text_detection import BlockMetrics, ImageBounds, TextDetection
from poster_scanner.core.title_resolver import TitleResolver
from poster_scanner.core.fuzzy_matcher  import CandidateRecord, FuzzyMatcher, MatchResult, MovieCatalog
from poster_scanner.core.pipeline       import ScanResult, TitleResolutionPipeline

__all__ = [
    'ModuleLogger',
    'ScannerConfig',
    'BlockMetrics',
    'ImageBounds',
    'TextDetection',
    'TitleResolver',
    'CandidateRecord',
    'FuzzyMatcher',
    'MatchResult',
    'MovieCatalog',
    'ScanResult',
    'TitleResolutionPipeline'
]
