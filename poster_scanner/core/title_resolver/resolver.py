import re
import string

from dataclasses import dataclass
from pathlib     import Path
from typing      import Any

from poster_scanner.core.module_logger               import ModuleLogger
from poster_scanner.core.scanner_config              import ScannerConfig
from poster_scanner.core.text_detection              import BlockMetrics, ImageBounds, TextDetection
from poster_scanner.core.title_resolver.block_filter import BlockFilter, count_words, is_uppercase, letter_ratio

logger = ModuleLogger('resolver')()

COLON_SPACING        = re.compile(r'\s*:\s*')
NON_TITLE_CHARACTERS = re.compile(r"[^\w\s:'-]|_")
WHITESPACE           = re.compile(r'\s+')
TITLE_FORMAT_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9']*(?:[\s:-]+[A-Z0-9][A-Za-z0-9']*)*:?$")
OUTPUT_CASES         = {'upper', 'title', 'preserve'}

def normalize_colons(text: str) -> str:
    """
    Rewrites every colon as ': ' and trims the result.
    """
    return COLON_SPACING.sub(': ', text).strip()

# -------------------- Data Classes --------------------

@dataclass
class ScoredBlock:
    """
    A filtered detection together with its metrics and individual score.
    """
    detection : TextDetection
    metrics   : BlockMetrics
    score     : float

@dataclass
class TextGroup:
    """
    One or more detections merged into a candidate title line or block.
    """
    blocks : list[ScoredBlock]
    text   : str
    score  : float
    bounds : ImageBounds

    @classmethod
    def from_block(cls, block: ScoredBlock) -> 'TextGroup':
        return cls(
            blocks = [block],
            text   = block.detection.text,
            score  = block.score,
            bounds = block.metrics.bounds
        )

    @property
    def last_block(self) -> ScoredBlock:
        return self.blocks[-1]

    def append(self, block: ScoredBlock):
        """
        Adds a detection from the same line to the end of the group.
        """
        self.blocks.append(block)
        self.text   = f"{self.text} {block.detection.text}"
        self.score += block.score
        self.bounds = self.bounds.union(block.metrics.bounds)

    def merged_with(self, other: 'TextGroup') -> 'TextGroup':
        """
        Returns a new group holding this group's blocks followed by the other's.
        """
        return TextGroup(
            blocks = self.blocks + other.blocks,
            text   = normalize_colons(f"{self.text} {other.text}"),
            score  = self.score + other.score,
            bounds = self.bounds.union(other.bounds)
        )

# -------------------- TitleResolver Class --------------------

class TitleResolver:
    """
    Picks the most likely title out of an unordered set of OCR detections
    by scoring their geometry and text, grouping them into lines, merging
    compatible lines and cleaning the winning text.
    """

    def __init__(
        self,
        config          : ScannerConfig | None  = None,
        config_file     : Path | None           = None,
        config_override : dict[str, Any] | None = None
    ):
        """
        Initializes the TitleResolver instance.

        Args:
            config          : Ready configuration; loaded from config_file when omitted
            config_file     : Optional custom path to scanner.yml
            config_override : Optional nested dictionary of overrides applied on load

        Raises:
            ValueError: If the configured output case is unknown
        """
        self.config       = config or ScannerConfig.load(config_file = config_file, config_override = config_override)
        self.block_filter = BlockFilter(self.config.filtering)

        cleanup = self.config.cleanup
        if cleanup.output_case not in OUTPUT_CASES:
            raise ValueError(f"Unknown output case '{cleanup.output_case}', expected one of {sorted(OUTPUT_CASES)}")

        self.leading_patterns  = [re.compile(rf'^(?:{pattern})\b\s*', re.IGNORECASE) for pattern in cleanup.leading_boilerplate]
        self.trailing_patterns = [re.compile(rf'\s*\b(?:{pattern})$', re.IGNORECASE) for pattern in cleanup.trailing_boilerplate]

    # -------------------- Resolution --------------------

    def resolve_title(self, detections: list[TextDetection]) -> str | None:
        """
        Determines the title shown on a poster.

        Args:
            detections : OCR detections of the poster, full-text entry excluded

        Returns:
            The cleaned title, or None when no plausible title was found.
        """
        survivors = self.block_filter.filter_detections(detections)
        if not survivors:
            logger.info("No clean text blocks found")
            return None

        image_bounds = ImageBounds.from_detections(survivors)
        if image_bounds is None:
            logger.warning("No detection carries usable geometry")
            return None

        blocks = self.score_blocks(survivors, image_bounds)
        if not blocks:
            return None

        groups     = self.merge_groups(self.group_lines(blocks))
        best_group = self.select_best_group(groups, image_bounds)
        title      = self.clean_title(best_group.text)

        logger.info(f"Final title: {title!r}")
        return title

    # -------------------- Block Scoring --------------------

    def score_blocks(
        self,
        detections   : list[TextDetection],
        image_bounds : ImageBounds
    ) -> list[ScoredBlock]:
        """
        Measures and scores every detection, skipping those without usable geometry.
        """
        measured = []
        for detection in detections:
            metrics = BlockMetrics.from_detection(detection, image_bounds)
            if metrics is not None:
                measured.append((detection, metrics))

        all_metrics = [metrics for _, metrics in measured]

        return [
            ScoredBlock(
                detection = detection,
                metrics   = metrics,
                score     = self.score_block(detection.text, metrics, all_metrics)
            )
            for detection, metrics in measured
        ]

    def score_block(
        self,
        text        : str,
        metrics     : BlockMetrics,
        all_metrics : list[BlockMetrics]
    ) -> float:
        """
        Weighted sum of position, centering, size, aspect ratio, proximity and text quality terms.

        Args:
            text        : Detection text
            metrics     : Metrics of the detection being scored
            all_metrics : Metrics of every measured detection in the image, including this one

        Returns:
            float: The detection score
        """
        weights = self.config.block_scoring
        score   = weights.position_weight * (1 - metrics.relative_y)

        if metrics.relative_y < 1 / 3:
            score += weights.top_third_bonus
        elif metrics.relative_y < 1 / 2:
            score += weights.upper_half_bonus

        score += weights.centering_weight * (1 - abs(0.5 - metrics.relative_x))

        area_distance = abs(metrics.relative_area - weights.optimal_area)
        score += weights.size_weight * max(0.0, 1 - area_distance / weights.optimal_area)

        aspect_distance = abs(metrics.aspect_ratio - weights.optimal_aspect_ratio)
        score += weights.aspect_weight - min(weights.aspect_weight, weights.aspect_penalty * aspect_distance)

        neighbours = sum(
            1 for other in all_metrics
            if other is not metrics and abs(other.center_y - metrics.center_y) <= weights.proximity_band
        )
        score += weights.proximity_weight * neighbours

        word_count = count_words(text)
        if 1 <= word_count <= weights.short_phrase_words:
            score += weights.short_phrase_bonus
        elif 1 <= word_count <= weights.phrase_words:
            score += weights.phrase_bonus

        score += weights.letter_ratio_weight * letter_ratio(text)

        if self.block_filter.is_keyboard_like(text):
            score -= weights.keyboard_penalty

        logger.debug(f"Block '{text}' scored {score:.1f}")
        return score

    # -------------------- Grouping --------------------

    def group_lines(self, blocks: list[ScoredBlock]) -> list[TextGroup]:
        """
        Groups blocks into lines by walking them top to bottom and starting a
        new group whenever the vertical gap exceeds a size-relative threshold.
        """
        line_gap_factor = self.config.grouping.line_gap_factor
        groups          = []

        for block in sorted(blocks, key = lambda b: b.metrics.center_y):
            if groups:
                last      = groups[-1].last_block.metrics
                gap       = abs(block.metrics.center_y - last.center_y)
                threshold = max(block.metrics.height, last.height) * line_gap_factor

                if gap <= threshold:
                    groups[-1].append(block)
                    continue

            groups.append(TextGroup.from_block(block))

        logger.debug(f"Grouped {len(blocks)} blocks into {len(groups)} lines")
        return groups

    def can_merge(self, upper: TextGroup, lower: TextGroup) -> bool:
        """
        Whether two groups are close, aligned and textually compatible enough to form one title.

        Args:
            upper : The group that comes first in scan order
            lower : The group that comes after it
        """
        rules = self.config.merging

        vertical_gap   = abs(lower.bounds.center_y - upper.bounds.center_y)
        vertical_limit = min(
            max(upper.bounds.height, lower.bounds.height) * rules.vertical_gap_factor,
            rules.vertical_gap_cap
        )
        if vertical_gap >= vertical_limit:
            return False

        horizontal_offset = abs(lower.bounds.center_x - upper.bounds.center_x)
        if horizontal_offset >= max(upper.bounds.width, lower.bounds.width) * rules.horizontal_alignment_factor:
            return False

        if rules.merge_uppercase and all(
            is_uppercase(group.text) and not self.block_filter.is_keyboard_like(group.text)
            for group in (upper, lower)
        ):
            return True

        if rules.merge_after_colon and upper.text.rstrip().endswith(':'):
            return True

        articles = {article.upper() for article in rules.articles}
        return rules.merge_after_article and upper.text.strip().upper() in articles and is_uppercase(lower.text)

    def find_mergeable_pair(self, groups: list[TextGroup]) -> tuple[int, int] | None:
        """
        Returns the indices of the first pair of groups that can be merged, in scan order.
        """
        for i, upper in enumerate(groups):
            for j in range(i + 1, len(groups)):
                if self.can_merge(upper, groups[j]):
                    return i, j
        return None

    def merge_groups(self, groups: list[TextGroup]) -> list[TextGroup]:
        """
        Merges compatible groups until a full pass finds nothing left to merge.
        Every merge removes one group, so at most len(groups) - 1 merges happen.
        """
        groups = list(groups)
        merges = 0

        while True:
            pair = self.find_mergeable_pair(groups)
            if pair is None:
                break

            i, j      = pair
            groups[i] = groups[i].merged_with(groups[j])
            del groups[j]
            merges   += 1
            logger.info(f"Merged groups into '{groups[i].text}'")

        logger.debug(f"Merging finished after {merges} merges with {len(groups)} groups")
        return groups

    # -------------------- Group Selection --------------------

    def score_group(self, group: TextGroup, image_bounds: ImageBounds) -> float:
        """
        Applies position, centering and text-format multipliers to a group's summed score.
        """
        modifiers = self.config.group_scoring
        text      = group.text

        if self.block_filter.is_keyboard_like(text):
            return group.score * modifiers.keyboard_multiplier

        relative_x, relative_y = image_bounds.relative_position(group.bounds.center_x, group.bounds.center_y)
        multiplier             = 1.0

        if relative_y < modifiers.top_position_threshold:
            multiplier *= modifiers.top_position_multiplier
        elif relative_y < modifiers.upper_position_threshold:
            multiplier *= modifiers.upper_position_multiplier

        if abs(0.5 - relative_x) < modifiers.centered_threshold:
            multiplier *= modifiers.centered_multiplier

        if is_uppercase(text):
            multiplier *= modifiers.uppercase_multiplier

        words    = text.split()
        articles = {article.upper() for article in self.config.merging.articles}
        if len(words) > 1 and words[0].upper() in articles:
            multiplier *= modifiers.article_multiplier

        if TITLE_FORMAT_PATTERN.match(text):
            multiplier *= modifiers.title_format_multiplier

        if len(words) == 2:
            multiplier *= modifiers.two_word_multiplier
        elif 3 <= len(words) <= modifiers.few_words_max:
            multiplier *= modifiers.few_words_multiplier

        return group.score * multiplier

    def select_best_group(self, groups: list[TextGroup], image_bounds: ImageBounds) -> TextGroup:
        """
        Returns the highest scoring group; the first one encountered wins ties.
        """
        best_group = None
        best_score = float('-inf')

        for group in groups:
            score = self.score_group(group, image_bounds)
            logger.debug(f"Group '{group.text}' scored {score:.1f}")
            if score > best_score:
                best_group, best_score = group, score

        logger.info(f"Best group: '{best_group.text}' ({best_score:.1f})")
        return best_group

    # -------------------- Cleanup --------------------

    def clean_title(self, text: str) -> str | None:
        """
        Strips stray characters and poster boilerplate, then applies the configured case.

        Returns:
            The cleaned title, or None when nothing is left.
        """
        cleaned  = WHITESPACE.sub(' ', NON_TITLE_CHARACTERS.sub(' ', text)).strip()
        previous = None

        while cleaned != previous:
            previous = cleaned
            for pattern in self.leading_patterns + self.trailing_patterns:
                cleaned = pattern.sub('', cleaned).strip()

        cleaned = normalize_colons(cleaned).strip(' :-')
        if not cleaned:
            logger.info(f"Nothing left of '{text}' after cleanup")
            return None

        output_case = self.config.cleanup.output_case
        if output_case == 'upper':
            return cleaned.upper()
        if output_case == 'title':
            return string.capwords(cleaned)
        return cleaned
