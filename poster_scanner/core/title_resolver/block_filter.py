import re

from poster_scanner.core.module_logger         import ModuleLogger
from poster_scanner.core.scanner_config.config import FilterConfig
from poster_scanner.core.text_detection        import TextDetection

logger = ModuleLogger('block_filter')()

FILENAME_PATTERN     = re.compile(r'\.(jpe?g|png|gif|webp|bmp|tiff?|pdf|docx?|txt)$', re.IGNORECASE)
FUNCTION_KEY_PATTERN = re.compile(r'^F\d{1,2}$', re.IGNORECASE)
KEY_COMBO_PATTERN    = re.compile(r'^[A-Za-z]+\s*\+\s*\w+$')
ABBREVIATION_PATTERN = re.compile(r'^[A-Z]{2,3}$')

# -------------------- Text Predicates --------------------

def is_uppercase(text: str) -> bool:
    """
    True when the text has letters and none of them are lowercase.
    """
    return any(char.isalpha() for char in text) and text == text.upper()

def count_words(text: str) -> int:
    return len(text.split())

def letter_ratio(text: str) -> float:
    """
    Share of characters in the text that are letters.
    """
    if not text:
        return 0.0
    return sum(char.isalpha() for char in text) / len(text)

# -------------------- BlockFilter Class --------------------

class BlockFilter:
    """
    Discards OCR detections that cannot be part of a title: file names,
    long alphanumeric noise, keyboard and UI labels, and tokens without letters.
    """

    def __init__(self, config: FilterConfig):
        """
        Initializes the BlockFilter instance.

        Args:
            config : Filtering section of the scanner configuration
        """
        self.min_length        = config.min_length
        self.min_modifier_keys = config.min_modifier_keys
        self.short_words       = {word.upper() for word in config.short_words}
        self.keyboard_tokens   = {token.upper() for token in config.keyboard_tokens}
        self.modifier_keys     = {key.upper() for key in config.modifier_keys}
        self.long_token        = re.compile(rf'^[A-Za-z0-9]{{{config.long_token_length},}}$')

    def is_keyboard_token(self, text: str) -> bool:
        """
        True when the whole text is a keyboard key or UI label, or a short
        all-caps abbreviation that is not a common word.
        """
        if text.upper() in self.keyboard_tokens or FUNCTION_KEY_PATTERN.match(text):
            return True
        return bool(ABBREVIATION_PATTERN.match(text)) and text not in self.short_words

    def is_keyboard_like(self, text: str) -> bool:
        """
        True when the text looks like keyboard or UI content: a whole key or UI
        label, a key combination, a phrase with a function key, or a phrase
        naming several modifier keys. A single modifier word such as SHIFT in a
        longer phrase is not enough.
        """
        stripped = text.strip()
        if stripped.upper() in self.keyboard_tokens or KEY_COMBO_PATTERN.match(stripped):
            return True

        words = stripped.upper().split()
        if any(FUNCTION_KEY_PATTERN.match(word) for word in words):
            return True
        return sum(word in self.modifier_keys for word in words) >= self.min_modifier_keys

    def rejection_reason(self, text: str) -> str | None:
        """
        Determines why a detection's text should be discarded.

        Args:
            text : Stripped detection text

        Returns:
            A short reason, or None when the text is kept.
        """
        if len(text) < self.min_length:
            return "too short"
        if FILENAME_PATTERN.search(text):
            return "filename"
        if self.long_token.match(text):
            return "long random string"
        if self.is_keyboard_token(text):
            return "keyboard or UI token"
        if not any(char.isalpha() for char in text):
            return "no letters"
        if len(text) == 2 and text.upper() not in self.short_words:
            return "short token"
        return None

    def filter_detections(self, detections: list[TextDetection]) -> list[TextDetection]:
        """
        Returns the detections that survive junk filtering, in input order.
        """
        kept = []
        for detection in detections:
            text   = detection.text.strip()
            reason = self.rejection_reason(text)

            if reason:
                logger.info(f"Filtered out {reason}: '{text}'")
                continue
            kept.append(detection._replace(text = text))

        logger.info(f"Clean blocks: {len(kept)}/{len(detections)}")
        return kept
