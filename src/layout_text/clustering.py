"""
Line clustering for layout text reconstruction.

Provides:
- Line data model
- Vertical-overlap clustering (default)
- Fixed-threshold row grouping
- Strategy factory

OCR boxes of words on the same visual row rarely share identical top and
bottom coordinates, so lines are built from tolerant comparisons rather than
exact y equality.
"""

import logging
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import List, Optional

from .diagnostics import DiagnosticSink, NullSink
from .extractor import Word, PageGeometry

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class Line:
    """A cluster of words on the same visual row."""
    words: List[Word] = field(default_factory=list)
    top: float = 0.0
    bottom: float = 0.0

    @classmethod
    def from_word(cls, word: Word) -> 'Line':
        return cls(words=[word], top=word.y_top, bottom=word.y_bottom)

    def add(self, word: Word):
        """Append a word and widen the vertical extent to include it."""
        self.words.append(word)
        self.top = min(self.top, word.y_top)
        self.bottom = max(self.bottom, word.y_bottom)

    def finalize(self):
        self.words.sort(key=lambda w: w.x0)

    def overlap_ratio(self, word: Word) -> float:
        """Percentage of the word's height covered by this line, in [0, 100]."""
        height = word.height
        if height <= 0:
            return 0.0
        overlap = min(self.bottom, word.y_bottom) - max(self.top, word.y_top)
        return max(0.0, min(1.0, overlap / height)) * 100.0


def _finalize(lines: List[Line]) -> List[Line]:
    for line in lines:
        line.finalize()
    return sorted(lines, key=lambda l: l.top)


# ============================================================================
# Clustering Strategies
# ============================================================================

class LineClusterer:
    """Base interface: group positioned words into ordered lines."""

    name = "base"

    def __init__(self, diagnostics: Optional[DiagnosticSink] = None):
        self.diagnostics = diagnostics or NullSink()

    def group_into_lines(
        self,
        words: List[Word],
        geometry: Optional[PageGeometry] = None
    ) -> List[Line]:
        raise NotImplementedError


class OverlapClusterer(LineClusterer):
    """
    Vertical-overlap clustering.

    Words are visited top-down. A word joins the first existing line (in
    creation order) that covers at least `overlap_threshold` percent of the
    word's height; otherwise it starts a new line. Words with non-positive
    height are skipped.
    """

    name = "overlap"

    def __init__(
        self,
        overlap_threshold: float = 65.0,
        diagnostics: Optional[DiagnosticSink] = None
    ):
        super().__init__(diagnostics)
        self.overlap_threshold = overlap_threshold

    def group_into_lines(
        self,
        words: List[Word],
        geometry: Optional[PageGeometry] = None
    ) -> List[Line]:
        lines: List[Line] = []
        skipped = 0

        for word in sorted(words, key=lambda w: w.y_top):
            if word.is_degenerate:
                skipped += 1
                continue

            for line in lines:
                if line.overlap_ratio(word) >= self.overlap_threshold:
                    line.add(word)
                    break
            else:
                lines.append(Line.from_word(word))

        if skipped:
            logger.debug(f"Skipped {skipped} degenerate word(s) during clustering")

        self.diagnostics.record(
            "clustering",
            strategy=self.name,
            words=len(words),
            degenerate=skipped,
            lines=len(lines)
        )
        return _finalize(lines)


class FixedThresholdClusterer(LineClusterer):
    """
    Fixed-threshold row grouping.

    Words are sorted top-down and a new line starts whenever two consecutive
    words' tops differ by more than `row_tolerance` of the page height.
    Without page geometry the tolerance is taken as pixels.
    """

    name = "fixed"

    def __init__(
        self,
        row_tolerance: float = 0.015,
        diagnostics: Optional[DiagnosticSink] = None
    ):
        super().__init__(diagnostics)
        self.row_tolerance = row_tolerance

    def _tolerance_px(self, geometry: Optional[PageGeometry]) -> float:
        if geometry is not None and geometry.page_height > 0:
            return self.row_tolerance * geometry.page_height
        return self.row_tolerance

    @staticmethod
    def reading_order(words: List[Word], tolerance: float) -> List[Word]:
        """Sort words top-down; words whose tops are within `tolerance` go left to right."""
        def compare(a: Word, b: Word) -> int:
            if abs(a.y_top - b.y_top) < tolerance:
                return (a.x0 > b.x0) - (a.x0 < b.x0)
            return (a.y_top > b.y_top) - (a.y_top < b.y_top)

        return sorted(words, key=cmp_to_key(compare))

    def group_into_lines(
        self,
        words: List[Word],
        geometry: Optional[PageGeometry] = None
    ) -> List[Line]:
        tolerance = self._tolerance_px(geometry)
        usable = [w for w in words if not w.is_degenerate]
        skipped = len(words) - len(usable)

        lines: List[Line] = []
        current: Optional[Line] = None
        previous: Optional[Word] = None

        for word in self.reading_order(usable, tolerance):
            if current is None or abs(word.y_top - previous.y_top) > tolerance:
                current = Line.from_word(word)
                lines.append(current)
            else:
                current.add(word)
            previous = word

        self.diagnostics.record(
            "clustering",
            strategy=self.name,
            words=len(words),
            degenerate=skipped,
            lines=len(lines),
            tolerance_px=tolerance
        )
        return _finalize(lines)


# ============================================================================
# Factory
# ============================================================================

def create_clusterer(
    strategy: str = "overlap",
    overlap_threshold: float = 65.0,
    row_tolerance: float = 0.015,
    diagnostics: Optional[DiagnosticSink] = None
) -> LineClusterer:
    """Create a line clusterer by strategy name."""
    if strategy == "overlap":
        return OverlapClusterer(overlap_threshold=overlap_threshold, diagnostics=diagnostics)
    elif strategy == "fixed":
        return FixedThresholdClusterer(row_tolerance=row_tolerance, diagnostics=diagnostics)
    else:
        raise ValueError(f"Unknown clustering strategy: {strategy}")
