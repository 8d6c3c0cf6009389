import numpy as np

from dataclasses import dataclass
from typing      import Any, Iterable, NamedTuple

from poster_scanner.core.module_logger import ModuleLogger

logger = ModuleLogger('detection')()

Point = tuple[float, float]

QUAD_POINTS = 4

# -------------------- Data Classes --------------------

class TextDetection(NamedTuple):
    """
    A single OCR-reported text fragment with its bounding polygon in image pixel coordinates.
    """
    text       : str
    quad       : tuple[Point, ...]
    confidence : float | None = None  # Only reported by some OCR engines

    @property
    def is_well_formed(self) -> bool:
        """
        True when the detection carries enough geometry to compute metrics from.
        """
        return len(self.quad) >= QUAD_POINTS

    @staticmethod
    def normalize_quad(points: Iterable[Any]) -> tuple[Point, ...]:
        """
        Converts a sequence of [x, y] pairs into an immutable tuple of float points.
        """
        return tuple((float(x), float(y)) for x, y in points)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'TextDetection':
        """
        Creates a TextDetection from a plain dictionary.

        Args:
            data : Dictionary with a 'text' key, a 'quad' list of [x, y] points and an optional 'confidence'

        Returns:
            TextDetection instance.

        Raises:
            KeyError: If the 'text' key is missing
        """
        return cls(
            text       = str(data['text']).strip(),
            quad       = cls.normalize_quad(data.get('quad') or []),
            confidence = data.get('confidence')
        )

    @classmethod
    def from_easyocr(cls, result: tuple) -> 'TextDetection':
        """
        Creates a TextDetection from one EasyOCR `readtext` result.

        Args:
            result : (bounding_box, text, confidence) tuple as returned by easyocr.Reader.readtext

        Returns:
            TextDetection instance.
        """
        bounding_box, text, confidence = result
        return cls(
            text       = str(text).strip(),
            quad       = cls.normalize_quad(bounding_box),
            confidence = float(confidence)
        )

    @classmethod
    def from_vision_annotations(cls, annotations: list[dict[str, Any]]) -> list['TextDetection']:
        """
        Converts Google Vision `textAnnotations` into TextDetections.

        The first annotation holds the full text of the image and is skipped.
        Vision omits zero-valued coordinates, so missing vertex fields default to 0.

        Args:
            annotations : List of annotation dictionaries with 'description' and 'boundingPoly'

        Returns:
            list: TextDetections for every block annotation
        """
        detections = []
        for annotation in annotations[1:]:
            vertices = (annotation.get('boundingPoly') or {}).get('vertices') or []
            detections.append(cls(
                text = str(annotation['description']).strip(),
                quad = tuple(
                    (float(vertex.get('x', 0)), float(vertex.get('y', 0)))
                    for vertex in vertices
                )
            ))
        return detections

@dataclass(frozen = True)
class ImageBounds:
    """
    Axis-aligned bounding region. Used both for the union of all detections
    in an image and for the extent of a merged text group.
    """
    min_x : float
    min_y : float
    max_x : float
    max_y : float

    @property
    def width(self) -> float:
        return max(0.0, self.max_x - self.min_x)

    @property
    def height(self) -> float:
        return max(0.0, self.max_y - self.min_y)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center_x(self) -> float:
        return (self.min_x + self.max_x) / 2

    @property
    def center_y(self) -> float:
        return (self.min_y + self.max_y) / 2

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> 'ImageBounds':
        """
        Computes the bounding region of a set of points.
        """
        coordinates = np.asarray(list(points), dtype = float).reshape(-1, 2)
        return cls(
            min_x = float(coordinates[:, 0].min()),
            min_y = float(coordinates[:, 1].min()),
            max_x = float(coordinates[:, 0].max()),
            max_y = float(coordinates[:, 1].max())
        )

    @classmethod
    def from_detections(cls, detections: list[TextDetection]) -> 'ImageBounds | None':
        """
        Computes the union of all well-formed detection quads.

        Returns:
            ImageBounds, or None when no detection carries usable geometry.
        """
        points = [point for detection in detections if detection.is_well_formed for point in detection.quad]
        if not points:
            return None
        return cls.from_points(points)

    def union(self, other: 'ImageBounds') -> 'ImageBounds':
        """
        Returns the smallest region containing both regions.
        """
        return ImageBounds(
            min_x = min(self.min_x, other.min_x),
            min_y = min(self.min_y, other.min_y),
            max_x = max(self.max_x, other.max_x),
            max_y = max(self.max_y, other.max_y)
        )

    def relative_position(self, x: float, y: float) -> tuple[float, float]:
        """
        Normalizes a pixel position against this region.
        A collapsed axis yields 0.5 instead of dividing by zero.

        Returns:
            tuple: (relative_x, relative_y)
        """
        relative_x = (x - self.min_x) / self.width  if self.width  > 0 else 0.5
        relative_y = (y - self.min_y) / self.height if self.height > 0 else 0.5
        return relative_x, relative_y

@dataclass(frozen = True)
class BlockMetrics:
    """
    Geometry derived for a single detection relative to the image bounds.
    """
    center_x      : float
    center_y      : float
    width         : float
    height        : float
    relative_x    : float  # May fall outside [0, 1] for detections outside the union
    relative_y    : float
    aspect_ratio  : float
    relative_area : float
    bounds        : ImageBounds

    @classmethod
    def from_detection(
        cls,
        detection    : TextDetection,
        image_bounds : ImageBounds
    ) -> 'BlockMetrics | None':
        """
        Computes the metrics for a detection.

        Args:
            detection    : The detection to measure
            image_bounds : Union of all detections in the current image

        Returns:
            BlockMetrics, or None when the detection lacks usable geometry.
        """
        if not detection.is_well_formed:
            logger.warning(f"Skipping '{detection.text}': expected {QUAD_POINTS} quad points, got {len(detection.quad)}")
            return None

        points   = np.asarray(detection.quad, dtype = float)
        center_x = float(points[:, 0].mean())
        center_y = float(points[:, 1].mean())
        width    = float(points[:, 0].max() - points[:, 0].min())
        height   = float(points[:, 1].max() - points[:, 1].min())

        if height <= 0:
            logger.warning(f"Skipping '{detection.text}': zero height bounding quad")
            return None

        relative_x, relative_y = image_bounds.relative_position(center_x, center_y)
        image_area             = image_bounds.area

        return cls(
            center_x      = center_x,
            center_y      = center_y,
            width         = width,
            height        = height,
            relative_x    = relative_x,
            relative_y    = relative_y,
            aspect_ratio  = width / height,
            relative_area = (width * height) / image_area if image_area > 0 else 0.0,
            bounds        = ImageBounds.from_points(detection.quad)
        )

