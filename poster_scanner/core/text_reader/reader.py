import cv2
import numpy as np

from easyocr import Reader
from pathlib import Path

from poster_scanner.core.module_logger         import ModuleLogger
from poster_scanner.core.scanner_config.config import EasyOCRConfig
from poster_scanner.core.text_detection        import TextDetection

logger = ModuleLogger('reader')()

class TextReader:
    """
    Runs EasyOCR over a poster photograph and reports the detected text blocks.
    """
    ALLOWED_FORMATS = {'.bmp', '.jpg', '.jpeg', '.png', '.tiff', '.webp'}

    def __init__(self, config: EasyOCRConfig):
        """
        Initializes the TextReader instance and loads the EasyOCR models.

        Args:
            config : EasyOCR section of the scanner configuration
        """
        self.config = config
        self.reader = Reader(
            lang_list = list(config.language_list),
            gpu       = config.gpu_enabled
        )

    @classmethod
    def load_image(cls, image_path: Path) -> np.ndarray:
        """
        Loads an image from the specified file path.

        Raises:
            FileNotFoundError: If the file is missing, not an image, or cannot be decoded
        """
        image_path = Path(image_path)
        if image_path.suffix.lower() not in cls.ALLOWED_FORMATS:
            raise FileNotFoundError(f"Not a supported image file: {image_path}")

        image = cv2.imread(str(image_path))
        if image is None:
            raise FileNotFoundError(f"Image not found: {image_path}")
        return image

    def read(self, image_path: Path) -> list[TextDetection]:
        """
        Extracts text blocks from a poster image.

        Args:
            image_path : The path to the image to perform OCR on

        Returns:
            list: One TextDetection per detected block, empty if OCR failed
        """
        image = self.load_image(image_path)
        try:
            ocr_results = self.reader.readtext(
                image[..., ::-1],
                decoder       = self.config.decoder,
                rotation_info = self.config.rotation_info
            )
        except Exception as e:
            logger.error(f"OCR failed for {image_path}: {e}")
            return []

        detections = [TextDetection.from_easyocr(result) for result in ocr_results]
        logger.info(f"Extracted {len(detections)} text blocks from '{image_path}'")
        return detections
