"""
Debug visualization of extracted words and clustered lines.
"""

import logging
from typing import List, Tuple

import numpy as np

from .clustering import Line
from .extractor import PageGeometry, Word

logger = logging.getLogger(__name__)

LINE_COLORS = [
    (255, 0, 0),
    (0, 160, 0),
    (0, 0, 255),
    (200, 120, 0),
    (160, 0, 160),
    (0, 140, 200),
]
DEGENERATE_COLOR = (128, 128, 128)


def _canvas_size(geometry: PageGeometry, max_side: int) -> Tuple[int, int, float]:
    width = max(geometry.page_width, 1.0)
    height = max(geometry.page_height, 1.0)
    scale = min(1.0, max_side / max(width, height))
    return max(1, int(round(width * scale))), max(1, int(round(height * scale))), scale


def draw_page_debug(
    words: List[Word],
    lines: List[Line],
    geometry: PageGeometry,
    max_side: int = 1600
) -> np.ndarray:
    """
    Draw word boxes colored by line on a blank page.

    Args:
        words: All extracted words, including degenerate ones
        lines: Clustered lines
        geometry: Page geometry (page size, left/right extrema)
        max_side: Longest side of the output image in pixels

    Returns:
        BGR image as a numpy array
    """
    import cv2

    width, height, scale = _canvas_size(geometry, max_side)
    debug_img = np.full((height, width, 3), 255, dtype=np.uint8)

    def pt(x: float, y: float) -> Tuple[int, int]:
        return int(round(x * scale)), int(round(y * scale))

    # Used horizontal extent
    cv2.line(debug_img, pt(geometry.left, 0), pt(geometry.left, geometry.page_height), (200, 200, 200), 1)
    cv2.line(debug_img, pt(geometry.right, 0), pt(geometry.right, geometry.page_height), (200, 200, 200), 1)

    clustered = set()
    for index, line in enumerate(lines):
        color = LINE_COLORS[index % len(LINE_COLORS)]
        cv2.rectangle(
            debug_img,
            pt(geometry.left, line.top),
            pt(geometry.right, line.bottom),
            (235, 235, 235),
            1
        )
        for word in line.words:
            clustered.add(id(word))
            cv2.rectangle(debug_img, pt(word.x0, word.y_top), pt(word.x1, word.y_bottom), color, 1)
        label_x, label_y = pt(geometry.left, line.bottom)
        cv2.putText(
            debug_img,
            str(index),
            (max(label_x - 20, 0), label_y),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.4,
            color,
            1
        )

    for word in words:
        if id(word) not in clustered:
            cv2.rectangle(debug_img, pt(word.x0, word.y_top), pt(word.x1, word.y_bottom), DEGENERATE_COLOR, 1)

    return debug_img


def save_debug_image(image: np.ndarray, output_path) -> None:
    """Write a debug image to disk."""
    import cv2
    from pathlib import Path

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(str(output_path), image)
    logger.debug(f"Saved debug image: {output_path}")
