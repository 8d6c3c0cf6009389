from dataclasses import dataclass, field
from omegaconf   import OmegaConf
from pathlib     import Path
from typing      import Any, List, Optional

from poster_scanner.core.module_logger import ModuleLogger

logger = ModuleLogger('config')()

DEFAULT_CONFIG_FILE = Path(__file__).resolve().parents[2] / 'config' / 'scanner.yml'

# -------------------- Vocabularies --------------------

# Two-character tokens survive filtering only when listed here; three-letter
# all-caps tokens are treated as abbreviations unless listed here.
SHORT_WORDS = [
    'OF', 'THE', 'IN', 'ON', 'AT', 'BY', 'OR', 'AND', 'FOR', 'TO', 'AN', 'IS',
    'IT', 'MY', 'ME', 'WE', 'US', 'UP', 'NO', 'GO', 'SO', 'DO', 'BE', 'HE',
    'ALL', 'OUT', 'WAR', 'MAN', 'DAY', 'ONE', 'TWO', 'TEN', 'NEW', 'OLD', 'BIG',
    'RED', 'SUN', 'SEA', 'BOY', 'HER', 'HIS', 'YOU', 'WHO', 'NOT', 'BUT', 'GET',
    'GUN', 'DIE', 'HOW', 'WHY', 'MAX', 'BAD', 'MAD', 'DOG', 'CAT', 'KID', 'SPY',
    'ICE', 'AGE', 'FLY', 'SAW', 'SKY', 'AIR', 'ART', 'ARK', 'BAT', 'BEE', 'CAR',
    'COP', 'EYE', 'FOX', 'HIT', 'HOT', 'JAW', 'JOY', 'LAW', 'LIE', 'MOM', 'OUR',
    'OWL', 'RUN', 'SIN', 'SIX', 'WAY', 'WIN', 'ZOO', 'ANT', 'APE', 'GOD', 'RAY',
    'ROW', 'SHE', 'TOY', 'WEB'
]

KEYBOARD_TOKENS = [
    'ENTER', 'RETURN', 'TAB', 'BACKSPACE', 'DELETE', 'DEL', 'INSERT', 'INS',
    'HOME', 'END', 'PGUP', 'PGDN', 'PAGE UP', 'PAGE DOWN', 'ESC', 'ESCAPE',
    'SHIFT', 'CTRL', 'CONTROL', 'ALT', 'ALTGR', 'CMD', 'COMMAND', 'OPTION',
    'FN', 'CAPS LOCK', 'CAPSLOCK', 'NUM LOCK', 'NUMLOCK', 'SCROLL LOCK',
    'PRTSC', 'PRINT SCREEN', 'SPACE', 'PAUSE', 'BREAK'
]

# Keys that mark a phrase as keyboard-like when enough of them appear in it.
MODIFIER_KEYS = [
    'CTRL', 'ALT', 'ALTGR', 'SHIFT', 'ESC', 'CMD', 'FN', 'BACKSPACE', 'PGUP',
    'PGDN', 'PRTSC', 'CAPSLOCK', 'NUMLOCK'
]

# -------------------- Section Schemas --------------------

@dataclass
class FilterConfig:
    """
    Thresholds and vocabularies used to discard junk detections.
    """
    min_length        : int       = 2
    long_token_length : int       = 20
    min_modifier_keys : int       = 2
    short_words       : List[str] = field(default_factory = lambda: list(SHORT_WORDS))
    keyboard_tokens   : List[str] = field(default_factory = lambda: list(KEYBOARD_TOKENS))
    modifier_keys     : List[str] = field(default_factory = lambda: list(MODIFIER_KEYS))

@dataclass
class BlockScoringConfig:
    """
    Weights of the per-detection score terms.
    """
    position_weight      : float = 40.0
    top_third_bonus      : float = 30.0
    upper_half_bonus     : float = 15.0
    centering_weight     : float = 20.0
    size_weight          : float = 30.0
    optimal_area         : float = 0.05
    aspect_weight        : float = 15.0
    optimal_aspect_ratio : float = 3.0
    aspect_penalty       : float = 3.0
    proximity_weight     : float = 5.0
    proximity_band       : float = 10.0
    short_phrase_words   : int   = 4
    short_phrase_bonus   : float = 15.0
    phrase_words         : int   = 6
    phrase_bonus         : float = 8.0
    letter_ratio_weight  : float = 10.0
    keyboard_penalty     : float = 50.0

@dataclass
class GroupingConfig:
    """
    Line grouping of detections sorted by vertical center.
    """
    line_gap_factor : float = 1.5

@dataclass
class MergeConfig:
    """
    Cross-group merge thresholds and text-compatibility rules.
    """
    vertical_gap_factor         : float     = 2.0
    vertical_gap_cap            : float     = 50.0
    horizontal_alignment_factor : float     = 0.5
    articles                    : List[str] = field(default_factory = lambda: ['THE', 'A', 'AN'])
    merge_uppercase             : bool      = True
    merge_after_colon           : bool      = True
    merge_after_article         : bool      = True

@dataclass
class GroupScoringConfig:
    """
    Multiplicative modifiers applied to a group's summed score.
    """
    keyboard_multiplier       : float = 0.01
    top_position_threshold    : float = 0.4
    top_position_multiplier   : float = 4.0
    upper_position_threshold  : float = 0.6
    upper_position_multiplier : float = 2.5
    centered_threshold        : float = 0.15
    centered_multiplier       : float = 2.5
    uppercase_multiplier      : float = 1.8
    article_multiplier        : float = 1.4
    title_format_multiplier   : float = 2.2
    two_word_multiplier       : float = 3.0
    few_words_max             : int   = 4
    few_words_multiplier      : float = 2.0

@dataclass
class CleanupConfig:
    """
    Boilerplate stripped from the winning text, and the output case.
    """
    output_case          : str       = 'upper'  # 'upper', 'title' or 'preserve'
    leading_boilerplate  : List[str] = field(default_factory = lambda: [r'(THE\s+)?POSTER', r'OFFICIAL'])
    trailing_boilerplate : List[str] = field(default_factory = lambda: [r'MOVIE', r'TRAILER', r'COMING\s+SOON', r'IN\s+THEATERS'])

@dataclass
class MatcherConfig:
    """
    Weights of the candidate ranking score.
    """
    text_weight           : float = 0.7
    popularity_weight     : float = 0.2
    vote_weight           : float = 0.1
    popularity_saturation : float = 100.0
    vote_saturation       : float = 1000.0

@dataclass
class EasyOCRConfig:
    """
    Settings for the EasyOCR reader.
    """
    language_list : List[str]           = field(default_factory = lambda: ['en'])
    gpu_enabled   : bool                = False
    decoder       : str                 = 'greedy'
    rotation_info : Optional[List[int]] = None

# -------------------- ScannerConfig --------------------

@dataclass
class ScannerConfig:
    """
    Complete configuration of the title resolution pipeline.
    """
    filtering     : FilterConfig       = field(default_factory = FilterConfig)
    block_scoring : BlockScoringConfig = field(default_factory = BlockScoringConfig)
    grouping      : GroupingConfig     = field(default_factory = GroupingConfig)
    merging       : MergeConfig        = field(default_factory = MergeConfig)
    group_scoring : GroupScoringConfig = field(default_factory = GroupScoringConfig)
    cleanup       : CleanupConfig      = field(default_factory = CleanupConfig)
    matcher       : MatcherConfig      = field(default_factory = MatcherConfig)
    easyocr       : EasyOCRConfig      = field(default_factory = EasyOCRConfig)

    @classmethod
    def load(
        cls,
        config_file     : Path | None           = None,
        config_override : dict[str, Any] | None = None
    ) -> 'ScannerConfig':
        """
        Loads the YAML configuration on top of the schema defaults and applies any overrides.

        Args:
            config_file     : Optional custom path to a scanner.yml (defaults to the packaged file)
            config_override : Optional nested dictionary of section-level overrides

        Returns:
            ScannerConfig: Validated configuration instance.

        Raises:
            omegaconf.errors.ValidationError : If a value does not match the schema type
            omegaconf.errors.ConfigKeyError  : If a key is not part of the schema
        """
        config_file = Path(config_file or DEFAULT_CONFIG_FILE)
        layers      = [OmegaConf.structured(cls), OmegaConf.load(config_file)]

        if config_override:
            layers.append(OmegaConf.create(config_override))

        merged_config = OmegaConf.merge(*layers)
        logger.debug(f"Loaded configuration from {config_file}")
        return OmegaConf.to_object(merged_config)
