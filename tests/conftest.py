import pytest

from poster_scanner import BlockMetrics, FuzzyMatcher, ImageBounds, ScannerConfig, TextDetection, TitleResolver
from poster_scanner.core.title_resolver import TextGroup


def make_detection(text: str, x1: float, y1: float, x2: float, y2: float) -> TextDetection:
    """Axis-aligned rectangular detection, corners clockwise from top-left"""
    return TextDetection(text = text, quad = ((x1, y1), (x2, y1), (x2, y2), (x1, y2)))


def make_group(text: str, x1: float, y1: float, x2: float, y2: float, score: float = 1.0) -> TextGroup:
    """Text group with explicit bounds and no member blocks"""
    return TextGroup(blocks = [], text = text, score = score, bounds = ImageBounds(x1, y1, x2, y2))


def make_metrics(
    relative_x    : float = 0.5,
    relative_y    : float = 1.0,
    relative_area : float = 0.0,
    aspect_ratio  : float = 3.0,
    center_y      : float = 0.0
) -> BlockMetrics:
    """Block metrics with explicit relative values and a unit-height box"""
    return BlockMetrics(
        center_x      = 0.0,
        center_y      = center_y,
        width         = aspect_ratio,
        height        = 1.0,
        relative_x    = relative_x,
        relative_y    = relative_y,
        aspect_ratio  = aspect_ratio,
        relative_area = relative_area,
        bounds        = ImageBounds(0.0, center_y - 0.5, aspect_ratio, center_y + 0.5)
    )


@pytest.fixture(scope = "session")
def scanner_config() -> ScannerConfig:
    return ScannerConfig.load()


@pytest.fixture
def resolver(scanner_config: ScannerConfig) -> TitleResolver:
    return TitleResolver(config = scanner_config)


@pytest.fixture
def matcher(scanner_config: ScannerConfig) -> FuzzyMatcher:
    return FuzzyMatcher(config = scanner_config.matcher)


@pytest.fixture
def until_dawn_poster() -> list[TextDetection]:
    """Poster with a two-line title, a credit line and OCR junk"""
    return [
        make_detection("poster.jpg", 10, 10, 100, 30),
        make_detection("UNTIL", 200, 150, 600, 250),
        make_detection("DAWN", 250, 270, 550, 350),
        make_detection("Directed by Jane Doe", 250, 900, 550, 930),
        make_detection("2024", 380, 1000, 420, 1020),
        make_detection("F5", 950, 1150, 990, 1180),
    ]
