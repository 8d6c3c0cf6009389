from dataclasses import dataclass
from pathlib     import Path
from typing      import Any, Protocol

from poster_scanner.core.fuzzy_matcher  import CandidateRecord, FuzzyMatcher, MatchResult
from poster_scanner.core.module_logger  import ModuleLogger
from poster_scanner.core.scanner_config import ScannerConfig
from poster_scanner.core.text_detection import TextDetection
from poster_scanner.core.title_resolver import TitleResolver

logger = ModuleLogger('pipeline')()

class CandidateSource(Protocol):
    """
    Anything that can look up movie records for a guessed title.
    """
    def search(self, query: str) -> list[CandidateRecord]: ...

@dataclass
class ScanResult:
    """
    Outcome of one scan: the guessed title and the record it resolved to.
    """
    title : str | None
    match : MatchResult | None

    def to_dict(self) -> dict[str, Any]:
        return {
            'title' : self.title,
            'match' : self.match.to_dict() if self.match else None
        }

class TitleResolutionPipeline:
    """
    Resolves OCR detections of a poster to a single movie record: the
    TitleResolver guesses the title, then the FuzzyMatcher picks the
    closest candidate record.
    """

    def __init__(
        self,
        config          : ScannerConfig | None  = None,
        config_file     : Path | None           = None,
        config_override : dict[str, Any] | None = None
    ):
        """
        Initializes the pipeline with a shared configuration.

        Args:
            config          : Ready configuration; loaded from config_file when omitted
            config_file     : Optional custom path to scanner.yml
            config_override : Optional nested dictionary of overrides applied on load
        """
        self.config   = config or ScannerConfig.load(config_file = config_file, config_override = config_override)
        self.resolver = TitleResolver(config = self.config)
        self.matcher  = FuzzyMatcher(config = self.config.matcher)

    def resolve(
        self,
        detections : list[TextDetection],
        records    : list[CandidateRecord]
    ) -> ScanResult:
        """
        Runs both stages against an already fetched list of candidate records.
        """
        title = self.resolver.resolve_title(detections)
        if title is None:
            return ScanResult(title = None, match = None)
        return ScanResult(title = title, match = self.matcher.best_result(title, records))

    def scan(
        self,
        detections : list[TextDetection],
        source     : CandidateSource
    ) -> ScanResult:
        """
        Runs both stages, fetching candidate records for the guessed title from the source.
        The source is not queried when no title was found.

        Args:
            detections : OCR detections of the poster
            source     : Movie database collaborator

        Returns:
            ScanResult with the title and best match, either of which may be None.
        """
        title = self.resolver.resolve_title(detections)
        if title is None:
            logger.info("No title found; skipping candidate search")
            return ScanResult(title = None, match = None)

        records = source.search(title)
        match   = self.matcher.best_result(title, records)
        return ScanResult(title = title, match = match)
