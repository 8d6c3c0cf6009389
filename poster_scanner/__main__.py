import argparse
import json

from pathlib import Path
from typing  import Any

from poster_scanner import *

def load_detections(detections_file: Path) -> list[TextDetection]:
    """
    Reads detections from JSON: either a list of {text, quad} objects, a list of
    Google Vision text annotations, or a Vision response holding 'textAnnotations'.
    """
    with detections_file.open('r', encoding = 'utf-8') as f:
        data: Any = json.load(f)

    if isinstance(data, dict):
        data = data.get('textAnnotations', [])
        return TextDetection.from_vision_annotations(data)

    if data and 'description' in data[0]:
        return TextDetection.from_vision_annotations(data)

    return [TextDetection.from_dict(item) for item in data]

def load_records(records_file: Path) -> list[CandidateRecord]:
    """
    Reads candidate records from a JSON list of search results (or a response holding 'results').
    """
    with records_file.open('r', encoding = 'utf-8') as f:
        data: Any = json.load(f)

    if isinstance(data, dict):
        data = data.get('results', [])
    return [CandidateRecord.from_dict(item) for item in data]

def main():

    parser = argparse.ArgumentParser(
        description = "Resolve the movie title shown on a scanned poster."
    )

    source = parser.add_mutually_exclusive_group(required = True)
    source.add_argument(
        "--detections-file",
        type = str,
        help = "JSON file with OCR text detections of the poster."
    )
    source.add_argument(
        "--image-path",
        type = str,
        help = "Poster image to run EasyOCR on (requires the 'ocr' extra)."
    )

    candidates = parser.add_mutually_exclusive_group()
    candidates.add_argument(
        "--catalog",
        type = str,
        help = "DuckDB movie database to search for the resolved title."
    )
    candidates.add_argument(
        "--records-file",
        type = str,
        help = "JSON file with movie search results to rank against the resolved title."
    )

    parser.add_argument(
        "--config-file",
        type = str,
        help = "Custom scanner.yml configuration."
    )

    args        = parser.parse_args()
    config_file = Path(args.config_file).resolve() if args.config_file else None
    pipeline    = TitleResolutionPipeline(config_file = config_file)

    # Gather detections
    if args.detections_file:
        detections_file = Path(args.detections_file).resolve()
        if not detections_file.is_file():
            print(f"Error: The specified detections file does not exist: {detections_file}")
            return
        detections = load_detections(detections_file)
    else:
        from poster_scanner.core.text_reader import TextReader

        image_path = Path(args.image_path).resolve()
        if not image_path.is_file():
            print(f"Error: The specified image does not exist or is not a file: {image_path}")
            return
        detections = TextReader(config = pipeline.config.easyocr).read(image_path)

    # Resolve the title and, if candidates are available, the best record
    if args.catalog:
        result = pipeline.scan(detections, MovieCatalog(db_path = Path(args.catalog).resolve()))
    elif args.records_file:
        result = pipeline.resolve(detections, load_records(Path(args.records_file).resolve()))
    else:
        result = ScanResult(title = pipeline.resolver.resolve_title(detections), match = None)

    print(json.dumps(result.to_dict(), ensure_ascii = False, indent = 4))

if __name__ == "__main__":
    main()
