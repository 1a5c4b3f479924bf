"""
Document AI record model for layout text reconstruction.

Provides:
- Typed records for pages, tokens, text anchors and vertices
- Parsing of Document AI JSON (camelCase or snake_case keys)

Parsing is lenient: missing fields take the protobuf JSON defaults
(0 for numbers, empty for lists) and malformed entries become records
the extractor will skip.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class Vertex:
    """A normalized polygon vertex in [0, 1]."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class TextSegment:
    """Half-open [start_index, end_index) range into the document text."""
    start_index: int = 0
    end_index: int = 0


@dataclass
class TokenRecord:
    """A token (or line) record with its text anchor and bounding polygon."""
    segments: Optional[List[TextSegment]] = None
    vertices: Optional[List[Vertex]] = None

    @property
    def has_anchor(self) -> bool:
        return bool(self.segments)

    @property
    def has_polygon(self) -> bool:
        return self.vertices is not None and len(self.vertices) >= 3


@dataclass
class PageRecord:
    """A page with its dimensions and token records."""
    page_number: int
    width: Optional[float] = None
    height: Optional[float] = None
    unit: str = ""
    tokens: List[TokenRecord] = field(default_factory=list)
    lines: List[TokenRecord] = field(default_factory=list)

    @property
    def has_dimensions(self) -> bool:
        return bool(self.width and self.height and self.width > 0 and self.height > 0)


@dataclass
class DocumentRecord:
    """A parsed Document AI document."""
    text: str = ""
    pages: List[PageRecord] = field(default_factory=list)
    source_file: str = ""


# ============================================================================
# Parsing
# ============================================================================

def _get(data: Dict[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    if not isinstance(data, dict):
        return default
    if camel in data:
        return data[camel]
    return data.get(snake, default)


def _to_int(value: Any, default: int = 0) -> int:
    # int64 fields are encoded as JSON strings
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    # json.load accepts NaN and Infinity
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def parse_text_anchor(anchor: Any) -> Optional[List[TextSegment]]:
    """Parse a textAnchor into its segments, or None when absent."""
    if not isinstance(anchor, dict):
        return None

    raw_segments = _get(anchor, "textSegments", "text_segments", None)
    if not isinstance(raw_segments, list):
        return None

    segments = []
    for raw in raw_segments:
        if not isinstance(raw, dict):
            continue
        segments.append(TextSegment(
            start_index=_to_int(_get(raw, "startIndex", "start_index", 0)),
            end_index=_to_int(_get(raw, "endIndex", "end_index", 0)),
        ))
    return segments


def parse_bounding_poly(poly: Any) -> Optional[List[Vertex]]:
    """Parse the normalized vertices of a boundingPoly, or None when absent."""
    if not isinstance(poly, dict):
        return None

    raw_vertices = _get(poly, "normalizedVertices", "normalized_vertices", None)
    if not isinstance(raw_vertices, list) or not raw_vertices:
        return None

    vertices = []
    for raw in raw_vertices:
        if not isinstance(raw, dict):
            raw = {}
        x = _to_float(raw.get("x", 0.0), None)
        y = _to_float(raw.get("y", 0.0), None)
        if x is None or y is None:
            # A polygon with an unreadable coordinate cannot be placed
            return None
        vertices.append(Vertex(x=x, y=y))
    return vertices


def parse_token(data: Any) -> TokenRecord:
    """Parse a token or line entry (anything with a `layout`)."""
    layout = _get(data, "layout", "layout", None)
    if not isinstance(layout, dict):
        return TokenRecord()

    return TokenRecord(
        segments=parse_text_anchor(_get(layout, "textAnchor", "text_anchor", None)),
        vertices=parse_bounding_poly(_get(layout, "boundingPoly", "bounding_poly", None)),
    )


def parse_page(data: Any, page_number: int) -> PageRecord:
    """Parse a single page entry."""
    dimension = _get(data, "dimension", "dimension", None) or {}

    page = PageRecord(
        page_number=_to_int(_get(data, "pageNumber", "page_number", page_number), page_number),
        width=_to_float(dimension.get("width"), None) if isinstance(dimension, dict) else None,
        height=_to_float(dimension.get("height"), None) if isinstance(dimension, dict) else None,
        unit=str(dimension.get("unit", "")) if isinstance(dimension, dict) else "",
    )

    for raw in _get(data, "tokens", "tokens", None) or []:
        page.tokens.append(parse_token(raw))
    for raw in _get(data, "lines", "lines", None) or []:
        page.lines.append(parse_token(raw))

    return page


def parse_document(data: Dict[str, Any], source_file: str = "") -> DocumentRecord:
    """
    Parse a Document AI document dictionary.

    Args:
        data: Decoded JSON object
        source_file: Optional path the data was loaded from

    Returns:
        DocumentRecord with text and pages

    Raises:
        ValueError: If data is not a JSON object
    """
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

    text = data.get("text") or ""
    raw_pages = data.get("pages") or []

    document = DocumentRecord(text=str(text), source_file=source_file)
    for i, raw in enumerate(raw_pages, 1):
        document.pages.append(parse_page(raw, i))

    logger.debug(f"Parsed document with {len(document.pages)} page(s), {len(document.text)} chars")
    return document
