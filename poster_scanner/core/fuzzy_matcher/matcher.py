from dataclasses        import dataclass
from pathlib            import Path
from rapidfuzz.distance import Levenshtein
from typing             import Any, NamedTuple

from poster_scanner.core.module_logger         import ModuleLogger
from poster_scanner.core.scanner_config        import ScannerConfig
from poster_scanner.core.scanner_config.config import MatcherConfig

logger = ModuleLogger('matcher')()

def similarity(first: str, second: str) -> float:
    """
    Normalized Levenshtein similarity: 1 - distance / max(len(first), len(second)).
    Two empty strings are identical and score 1.0.
    """
    if not first and not second:
        return 1.0
    return Levenshtein.normalized_similarity(first, second)

# -------------------- Data Classes --------------------

class CandidateRecord(NamedTuple):
    """
    Represents a movie record returned by a movie database search.
    """
    title          : str
    original_title : str | None = None
    popularity     : float      = 0.0
    vote_count     : int        = 0
    id             : int | None = None
    release_date   : str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'CandidateRecord':
        """
        Creates a CandidateRecord from a search result dictionary.
        TV results carry 'name' and 'original_name' instead of 'title' and 'original_title'.
        Unknown keys are ignored and null values fall back to the defaults.

        Raises:
            KeyError: If the result has neither a title nor a name
        """
        title = data.get('title') or data.get('name')
        if title is None:
            raise KeyError('title')

        return cls(
            title          = str(title),
            original_title = data.get('original_title') or data.get('original_name'),
            popularity     = float(data.get('popularity') or 0.0),
            vote_count     = int(data.get('vote_count') or 0),
            id             = data.get('id'),
            release_date   = data.get('release_date') or data.get('first_air_date')
        )

@dataclass
class MatchResult:
    """
    Stores the score of one candidate record against a title query.
    """
    record : CandidateRecord
    score  : float  # Weighted composite in [0, 1]

    def to_dict(self) -> dict[str, Any]:
        return {**self.record._asdict(), 'score': self.score}

# -------------------- FuzzyMatcher Class --------------------

class FuzzyMatcher:
    """
    Ranks movie database records against a guessed title. The score combines
    edit-distance similarity to the title or original title with the
    record's popularity and vote count.
    """

    def __init__(
        self,
        config          : MatcherConfig | None  = None,
        config_file     : Path | None           = None,
        config_override : dict[str, Any] | None = None
    ):
        """
        Initializes the FuzzyMatcher instance.

        Args:
            config          : Matcher section of the scanner configuration; loaded when omitted
            config_file     : Optional custom path to scanner.yml
            config_override : Optional nested dictionary of overrides applied on load
        """
        self.config = config or ScannerConfig.load(config_file = config_file, config_override = config_override).matcher

    def score_record(self, query: str, record: CandidateRecord) -> float:
        """
        Computes the composite score of a record for the given query.

        Args:
            query  : Guessed title
            record : Candidate record

        Returns:
            float: text_weight * text similarity + popularity_weight * popularity + vote_weight * votes
        """
        query      = query.lower()
        text_score = similarity(query, record.title.lower())

        if record.original_title:
            text_score = max(text_score, similarity(query, record.original_title.lower()))

        popularity_score = min(record.popularity / self.config.popularity_saturation, 1.0)
        vote_score       = min(record.vote_count / self.config.vote_saturation, 1.0)

        return (
            self.config.text_weight       * text_score +
            self.config.popularity_weight * popularity_score +
            self.config.vote_weight       * vote_score
        )

    def rank(self, query: str, records: list[CandidateRecord]) -> list[MatchResult]:
        """
        Scores every record and sorts them best first. Records with equal
        scores keep their input order.
        """
        results = [
            MatchResult(record = record, score = self.score_record(query, record))
            for record in records
        ]
        results.sort(key = lambda result: result.score, reverse = True)
        return results

    def best_result(self, query: str, records: list[CandidateRecord]) -> MatchResult | None:
        """
        Returns the highest scoring MatchResult, or None when there are no records.
        """
        results = self.rank(query, records)
        if not results:
            logger.info(f"No candidate records to match '{query}' against")
            return None

        best = results[0]
        logger.info(f"Best match for '{query}': '{best.record.title}' (Score: {best.score:.2f})")
        return best

    def best_match(self, query: str, records: list[CandidateRecord]) -> CandidateRecord | None:
        """
        Finds the record that best matches the guessed title.

        Args:
            query   : Guessed title
            records : Candidate records from a movie database search

        Returns:
            The highest scoring record, or None when there are no records.
        """
        result = self.best_result(query, records)
        return result.record if result else None
