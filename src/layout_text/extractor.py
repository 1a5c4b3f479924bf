"""
Token extraction for layout text reconstruction.

Resolves each token's text from the document text buffer and converts its
normalized bounding polygon to page-pixel coordinates.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from .diagnostics import DiagnosticSink, NullSink
from .document import PageRecord, TokenRecord

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class Word:
    """A positioned word in page pixels."""
    text: str
    x0: float
    y_top: float
    y_bottom: float
    x1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y_bottom - self.y_top

    @property
    def is_degenerate(self) -> bool:
        return self.y_bottom <= self.y_top


@dataclass
class PageGeometry:
    """Page-level extrema used as scale references."""
    left: float
    right: float
    row_height: float
    page_width: float = 0.0
    page_height: float = 0.0

    @property
    def used_width(self) -> float:
        return self.right - self.left


@dataclass
class ExtractionResult:
    """Words of one page plus their geometry."""
    words: List[Word] = field(default_factory=list)
    geometry: Optional[PageGeometry] = None
    skipped_no_anchor: int = 0
    skipped_empty_text: int = 0
    skipped_no_geometry: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.words


# ============================================================================
# Token Extractor
# ============================================================================

def resolve_text(record: TokenRecord, text: str) -> str:
    """Concatenate the stripped substrings addressed by a text anchor."""
    if not record.segments:
        return ""
    return "".join(
        text[segment.start_index:segment.end_index].strip()
        for segment in record.segments
    )


class TokenExtractor:
    """
    Converts a page's token records into positioned words.

    Malformed tokens are skipped, never raised; the counts go to the
    diagnostic sink.
    """

    def __init__(
        self,
        token_source: str = "tokens",
        diagnostics: Optional[DiagnosticSink] = None
    ):
        self.token_source = token_source
        self.diagnostics = diagnostics or NullSink()

    def _records(self, page: PageRecord) -> List[TokenRecord]:
        if self.token_source == "lines":
            return page.lines
        return page.tokens

    def extract(self, page: PageRecord, text: str) -> ExtractionResult:
        """
        Extract positioned words from a page.

        Args:
            page: Parsed page record
            text: Full document text buffer

        Returns:
            ExtractionResult with words and page geometry
        """
        result = ExtractionResult()
        records = self._records(page)

        if not page.has_dimensions:
            result.skipped_no_geometry = len(records)
            self.diagnostics.record(
                "page_without_dimensions",
                page=page.page_number,
                tokens=len(records)
            )
            return result

        width = float(page.width)
        height = float(page.height)
        self.diagnostics.record(
            "page_dimensions",
            page=page.page_number,
            width=width,
            height=height,
            unit=page.unit
        )

        left = float("inf")
        right = float("-inf")
        row_height = height

        for record in records:
            if not record.has_anchor:
                result.skipped_no_anchor += 1
                continue

            word_text = resolve_text(record, text)
            if not word_text:
                result.skipped_empty_text += 1
                continue

            if not record.has_polygon:
                result.skipped_no_geometry += 1
                continue

            top_left = record.vertices[0]
            bottom_right = record.vertices[2]
            x0 = top_left.x * width
            y0 = top_left.y * height
            x1 = bottom_right.x * width
            y1 = bottom_right.y * height
            if not all(math.isfinite(v) for v in (x0, y0, x1, y1)):
                result.skipped_no_geometry += 1
                continue

            result.words.append(Word(text=word_text, x0=x0, y_top=y0, y_bottom=y1, x1=x1))

            left = min(left, x0)
            right = max(right, x1)
            if y1 - y0 > 0:
                row_height = min(row_height, y1 - y0)

        if result.words:
            result.geometry = PageGeometry(
                left=left,
                right=right,
                row_height=row_height,
                page_width=width,
                page_height=height
            )

        self.diagnostics.record(
            "extraction",
            page=page.page_number,
            words=len(result.words),
            skipped_no_anchor=result.skipped_no_anchor,
            skipped_empty_text=result.skipped_empty_text,
            skipped_no_geometry=result.skipped_no_geometry,
            left=left if result.words else None,
            right=right if result.words else None,
            row_height=row_height
        )
        return result
