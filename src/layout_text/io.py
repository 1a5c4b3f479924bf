"""
I/O utilities for the layout text reconstruction pipeline.

Handles:
- Discovery of Document AI JSON files
- JSON loading and document parsing
- Text and JSON output
- Directory management
"""

import json
import logging
from pathlib import Path
from typing import List, Union, Any

import numpy as np

from .document import DocumentRecord, parse_document

logger = logging.getLogger(__name__)

JSON_EXTENSIONS = ('.json',)


# ============================================================================
# Input Discovery
# ============================================================================

def list_json_files(folder_path: Union[str, Path]) -> List[Path]:
    """
    List the JSON files of a folder, sorted by name.

    Args:
        folder_path: Path to the folder

    Returns:
        Sorted list of JSON file paths

    Raises:
        NotADirectoryError: If folder_path is not a directory
    """
    folder_path = Path(folder_path)
    if not folder_path.is_dir():
        raise NotADirectoryError(f"Not a directory: {folder_path}")

    files = sorted(
        f for f in folder_path.iterdir()
        if f.is_file() and f.suffix.lower() in JSON_EXTENSIONS
    )
    logger.info(f"Found {len(files)} JSON file(s) in {folder_path}")
    return files


def detect_input_type(input_path: Union[str, Path]) -> str:
    """
    Detect the type of input file or directory.

    Args:
        input_path: Path to file or directory

    Returns:
        One of: 'json', 'json_folder', 'unknown'
    """
    input_path = Path(input_path)

    if input_path.is_dir():
        has_json = any(
            f.suffix.lower() in JSON_EXTENSIONS
            for f in input_path.iterdir()
        )
        return 'json_folder' if has_json else 'unknown'

    if not input_path.exists():
        return 'unknown'

    if input_path.suffix.lower() in JSON_EXTENSIONS:
        return 'json'

    return 'unknown'


def output_path_for(
    json_path: Union[str, Path],
    output_dir: Union[str, Path],
    extension: str = ".txt"
) -> Path:
    """Map an input JSON file to its text output path."""
    return Path(output_dir) / (Path(json_path).stem + extension)


# ============================================================================
# JSON Serialization
# ============================================================================

class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder for the numpy arrays and scalars found in diagnostics."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.generic):
            return obj.item()
        return super().default(obj)


def load_json(json_path: Union[str, Path]) -> Any:
    """
    Load data from a JSON file.

    Args:
        json_path: Path to the JSON file

    Returns:
        Parsed JSON data

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not valid JSON
    """
    json_path = Path(json_path)
    if not json_path.exists():
        raise FileNotFoundError(f"JSON file not found: {json_path}")

    with open(json_path, 'r', encoding='utf-8') as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {json_path}: {e}")


def load_document(json_path: Union[str, Path]) -> DocumentRecord:
    """
    Load and parse a Document AI JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a valid Document AI JSON object
    """
    data = load_json(json_path)
    document = parse_document(data, source_file=str(json_path))
    logger.debug(f"Loaded document: {json_path} ({len(document.pages)} pages)")
    return document


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, dataclass, etc.)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


def save_text(text: str, output_path: Union[str, Path]) -> Path:
    """Save UTF-8 text, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(text)

    logger.debug(f"Saved text: {output_path}")
    return output_path


# ============================================================================
# Directory Management
# ============================================================================

def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
