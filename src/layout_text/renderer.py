"""
Line rendering for layout text reconstruction.

Provides:
- Spacing policies (grid-anchored, word-to-word)
- Gap policies (fixed row-height multiple, statistical)
- LineRenderer that turns clustered lines into text rows

The grid policy places every word on a slot grid anchored at the page's left
edge, so words starting at similar offsets land in the same column on every
line. The word gap policy spaces each word relative to the previous word's
right edge; it tolerates skew better but cannot align columns across lines.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .clustering import Line
from .diagnostics import DiagnosticSink, NullSink
from .extractor import PageGeometry, Word
from .slots import SlotModel

logger = logging.getLogger(__name__)

_NEWLINES = re.compile(r"\r\n|\r|\n")


@dataclass
class RenderContext:
    """Per-page inputs shared by every line."""
    geometry: PageGeometry
    slot_model: SlotModel

    @property
    def left(self) -> float:
        return self.geometry.left

    @property
    def row_height(self) -> float:
        return self.geometry.row_height


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ============================================================================
# Spacing Policies
# ============================================================================

class SpacingPolicy:
    """Computes the space run placed before each word of a line."""

    name = "base"

    def space_runs(self, words: List[Word], slot: float, left: float) -> List[int]:
        raise NotImplementedError


class GridSpacing(SpacingPolicy):
    """Quantize word starts to a slot grid anchored at the page's left edge."""

    name = "grid"

    def space_runs(self, words: List[Word], slot: float, left: float) -> List[int]:
        runs = []
        last_slot_index = 0
        for word in words:
            slot_index = math.floor((word.x0 - left) / slot)
            runs.append(max(1, slot_index - last_slot_index))
            last_slot_index = slot_index + math.ceil(word.width / slot)
        return runs


class WordGapSpacing(SpacingPolicy):
    """Space each word by its pixel gap to the previous word's right edge."""

    name = "word_gap"

    def __init__(self, max_spaces: int = 25):
        self.max_spaces = max_spaces

    def space_runs(self, words: List[Word], slot: float, left: float) -> List[int]:
        runs = []
        last_right = left
        for word in words:
            gap = word.x0 - last_right
            runs.append(min(self.max_spaces, max(1, _round_half_up(gap / slot))))
            last_right = word.x1
        return runs


def create_spacing(strategy: str = "grid", max_spaces: int = 25) -> SpacingPolicy:
    """Create a spacing policy by strategy name."""
    if strategy == "grid":
        return GridSpacing()
    elif strategy == "word_gap":
        return WordGapSpacing(max_spaces=max_spaces)
    else:
        raise ValueError(f"Unknown spacing strategy: {strategy}")


# ============================================================================
# Gap Policies
# ============================================================================

def line_distances(lines: List[Line]) -> List[float]:
    """Vertical distances between each line's top and the previous bottom."""
    return [lines[i].top - lines[i - 1].bottom for i in range(1, len(lines))]


class GapPolicy:
    """Decides the vertical gap above which a blank line is emitted."""

    name = "base"

    def threshold(self, lines: List[Line], context: RenderContext) -> float:
        raise NotImplementedError


class FixedGapPolicy(GapPolicy):
    """Blank line when the gap exceeds a multiple of the row height."""

    name = "fixed"

    def __init__(self, multiplier: float = 1.5):
        self.multiplier = multiplier

    def threshold(self, lines: List[Line], context: RenderContext) -> float:
        return self.multiplier * context.row_height


class StatisticalGapPolicy(GapPolicy):
    """
    Blank line when the gap exceeds mean + k * std of the page's line
    distances. Pages with fewer than two distances use the fixed multiple.
    """

    name = "statistical"

    def __init__(self, std_factor: float = 1.0, fallback_multiplier: float = 1.5):
        self.std_factor = std_factor
        self.fallback = FixedGapPolicy(fallback_multiplier)

    def threshold(self, lines: List[Line], context: RenderContext) -> float:
        distances = line_distances(lines)
        if len(distances) < 2:
            return self.fallback.threshold(lines, context)
        values = np.array(distances, dtype=float)
        return float(values.mean() + self.std_factor * values.std())


def create_gap_policy(
    strategy: str = "fixed",
    multiplier: float = 1.5,
    std_factor: float = 1.0
) -> GapPolicy:
    """Create a gap policy by strategy name."""
    if strategy == "fixed":
        return FixedGapPolicy(multiplier=multiplier)
    elif strategy == "statistical":
        return StatisticalGapPolicy(std_factor=std_factor, fallback_multiplier=multiplier)
    else:
        raise ValueError(f"Unknown gap policy: {strategy}")


# ============================================================================
# Line Renderer
# ============================================================================

class LineRenderer:
    """
    Renders clustered lines into text rows.

    Lines are visited top to bottom. A blank row is emitted before a line
    whose distance to the previous line exceeds the gap policy's threshold;
    every word is preceded by the space run its spacing policy assigns.
    """

    def __init__(
        self,
        spacing: Optional[SpacingPolicy] = None,
        gap_policy: Optional[GapPolicy] = None,
        slot_scope: str = "global",
        diagnostics: Optional[DiagnosticSink] = None
    ):
        self.spacing = spacing or GridSpacing()
        self.gap_policy = gap_policy or FixedGapPolicy()
        self.slot_scope = slot_scope
        self.diagnostics = diagnostics or NullSink()

    def _slot(self, index: int, context: RenderContext) -> float:
        if self.slot_scope == "line":
            return context.slot_model.slot_for_line(index)
        return context.slot_model.global_slot

    def render_line(self, line: Line, slot: float, left: float) -> str:
        """Render a single line's words with quantized spacing."""
        runs = self.spacing.space_runs(line.words, slot, left)
        parts = []
        for word, spaces in zip(line.words, runs):
            parts.append(" " * spaces)
            parts.append(_NEWLINES.sub(" ", word.text))
        return "".join(parts).rstrip()

    def render(self, lines: List[Line], context: RenderContext) -> List[str]:
        """
        Render lines of one page.

        Args:
            lines: Lines ordered top to bottom
            context: Page geometry and slot model

        Returns:
            Rendered rows, blank rows marking vertical breaks
        """
        output: List[str] = []
        if not lines:
            return output

        threshold = self.gap_policy.threshold(lines, context)
        last_line_bottom: Optional[float] = None
        gaps = 0

        for index, line in enumerate(lines):
            if last_line_bottom is not None:
                vertical_gap = line.top - last_line_bottom
                if vertical_gap > threshold:
                    output.append("")
                    gaps += 1

            output.append(self.render_line(line, self._slot(index, context), context.left))
            last_line_bottom = line.bottom

        self.diagnostics.record(
            "render",
            spacing=self.spacing.name,
            gap_policy=self.gap_policy.name,
            gap_threshold=threshold,
            line_distances=np.array(line_distances(lines), dtype=float),
            lines=len(lines),
            gap_markers=gaps
        )
        return output
