"""
OCR text detections and the geometry derived from them.
"""

from .detection import BlockMetrics, ImageBounds, TextDetection

__all__ = ['BlockMetrics', 'ImageBounds', 'TextDetection']
