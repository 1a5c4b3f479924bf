"""
Slot model for layout text reconstruction.

A slot is the pixel width treated as one rendered space character. OCR boxes
are proportional, so the slot is estimated from the distribution of word
widths: the narrowest median word width among lines that span a substantial
part of the page.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .clustering import Line
from .diagnostics import DiagnosticSink, NullSink
from .extractor import PageGeometry

logger = logging.getLogger(__name__)

# (min, median, max) word width of a line
WidthStats = Tuple[float, float, float]

FALLBACK_SLOT = 1.0


@dataclass
class SlotModel:
    """Global slot plus per-line width statistics."""
    global_slot: float
    line_stats: List[Optional[WidthStats]] = field(default_factory=list)
    significant_lines: int = 0

    def slot_for_line(self, index: int) -> float:
        """Median word width of a line, or the global slot when unknown."""
        if 0 <= index < len(self.line_stats):
            stats = self.line_stats[index]
            if stats is not None and stats[1] > 0:
                return stats[1]
        return self.global_slot

    def to_dict(self):
        return {
            "global_slot": self.global_slot,
            "significant_lines": self.significant_lines,
            "line_stats": [list(s) if s is not None else None for s in self.line_stats],
        }


def positive_widths(line: Line) -> np.ndarray:
    """Sorted positive word widths of a line."""
    return np.sort(np.array([w.width for w in line.words if w.width > 0], dtype=float))


def line_width_stats(line: Line) -> Optional[WidthStats]:
    """Return (min, median, max) of the positive word widths of a line."""
    widths = positive_widths(line)
    if widths.size == 0:
        return None
    return (float(widths[0]), float(np.median(widths)), float(widths[-1]))


def compute_slot_model(
    lines: List[Line],
    geometry: PageGeometry,
    significance_ratio: float = 0.30,
    diagnostics: Optional[DiagnosticSink] = None
) -> SlotModel:
    """
    Compute the slot model of a page.

    Args:
        lines: Clustered lines of the page
        geometry: Page extrema from extraction
        significance_ratio: Fraction of the used width a line's summed word
            widths must reach to anchor the slot
        diagnostics: Optional sink for per-line widths

    Returns:
        SlotModel with a strictly positive global slot
    """
    diagnostics = diagnostics or NullSink()
    used_width = geometry.used_width
    global_slot = used_width if used_width > 0 else FALLBACK_SLOT

    stats: List[Optional[WidthStats]] = []
    significant = 0

    for index, line in enumerate(lines):
        line_stats = line_width_stats(line)
        stats.append(line_stats)
        if line_stats is None:
            continue

        widths = positive_widths(line)
        total = widths.sum()
        is_significant = used_width > 0 and total >= significance_ratio * used_width
        diagnostics.record(
            "line_widths",
            line=index,
            widths=widths,
            min=line_stats[0],
            median=line_stats[1],
            max=line_stats[2],
            total=total,
            significant=is_significant
        )

        if is_significant:
            significant += 1
            if line_stats[1] < global_slot:
                global_slot = line_stats[1]

    model = SlotModel(global_slot=global_slot, line_stats=stats, significant_lines=significant)
    diagnostics.record(
        "slot_model",
        global_slot=global_slot,
        used_width=used_width,
        significant_lines=significant
    )
    return model
