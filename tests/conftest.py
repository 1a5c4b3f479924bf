"""
Shared fixtures for building Document AI style inputs.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

PAGE_SIZE = 1024


def _token(start, end, box, width, height):
    x0, y0, x1, y1 = box
    return {
        "layout": {
            "textAnchor": {
                "textSegments": [{"startIndex": str(start), "endIndex": str(end)}]
            },
            "boundingPoly": {
                "normalizedVertices": [
                    {"x": x0 / width, "y": y0 / height},
                    {"x": x1 / width, "y": y0 / height},
                    {"x": x1 / width, "y": y1 / height},
                    {"x": x0 / width, "y": y1 / height},
                ]
            }
        }
    }


def build_document(pages, width=PAGE_SIZE, height=PAGE_SIZE):
    """
    Build a Document AI dict.

    `pages` is a list of pages, each a list of (text, (x0, y0, x1, y1))
    tuples in page pixels. Words are appended to one text buffer, each
    followed by a space as Document AI does.
    """
    text = ""
    raw_pages = []
    for page_number, words in enumerate(pages, 1):
        tokens = []
        for word, box in words:
            start = len(text)
            text += word + " "
            tokens.append(_token(start, start + len(word) + 1, box, width, height))
        raw_pages.append({
            "pageNumber": page_number,
            "dimension": {"width": width, "height": height, "unit": "pixels"},
            "tokens": tokens
        })
    return {"text": text, "pages": raw_pages}


@pytest.fixture
def doc_builder():
    """Return the Document AI dict builder."""
    return build_document


@pytest.fixture
def table_document():
    """A two-row, two-column table page."""
    return build_document([[
        ("Name", (100, 100, 200, 120)),
        ("Qty", (500, 100, 600, 120)),
        ("Apple", (100, 130, 220, 150)),
        ("12", (500, 130, 560, 150)),
    ]])
