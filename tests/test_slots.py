"""
Tests for the slot model.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def line_of(*spans, top=0, bottom=20):
    """Build a line from (x0, x1) spans."""
    from layout_text.clustering import Line
    from layout_text.extractor import Word

    words = [Word(text=f"w{i}", x0=x0, y_top=top, y_bottom=bottom, x1=x1) for i, (x0, x1) in enumerate(spans)]
    line = Line.from_word(words[0])
    for w in words[1:]:
        line.add(w)
    return line


def geometry(left, right, row_height=20):
    from layout_text.extractor import PageGeometry
    return PageGeometry(left=left, right=right, row_height=row_height, page_width=1000, page_height=1000)


class TestLineWidthStats:
    """Test per-line width statistics."""

    def test_odd_count(self):
        """Test min, median and max with an odd count."""
        from layout_text.slots import line_width_stats

        stats = line_width_stats(line_of((0, 30), (40, 50), (60, 80)))

        assert stats == (10.0, 20.0, 30.0)

    def test_even_count_median(self):
        """Test that an even count averages the two central widths."""
        from layout_text.slots import line_width_stats

        stats = line_width_stats(line_of((0, 10), (20, 40), (50, 80), (90, 130)))

        assert stats == (10.0, 25.0, 40.0)

    def test_no_positive_width(self):
        """Test a line without any usable width."""
        from layout_text.slots import line_width_stats

        assert line_width_stats(line_of((10, 10))) is None


class TestComputeSlotModel:
    """Test slot model computation."""

    def test_two_word_row(self):
        """Test the slot of a single row of two equal words."""
        from layout_text.slots import compute_slot_model

        model = compute_slot_model([line_of((0, 50), (200, 250))], geometry(0, 250))

        assert model.global_slot == pytest.approx(50)
        assert model.significant_lines == 1

    def test_insignificant_line_ignored(self):
        """Test that a short title line does not set the slot."""
        from layout_text.slots import compute_slot_model

        title = line_of((0, 100))
        body = line_of(*[(i * 50, i * 50 + 20) for i in range(20)], top=40, bottom=60)

        model = compute_slot_model([title, body], geometry(0, 1000))

        assert model.global_slot == pytest.approx(20)
        assert model.significant_lines == 1
        assert model.line_stats[0] == (100.0, 100.0, 100.0)

    def test_narrowest_significant_median_wins(self):
        """Test that the smallest median among significant lines is kept."""
        from layout_text.slots import compute_slot_model

        wide = line_of((0, 200), (250, 450))
        narrow = line_of((0, 120), (150, 270), (300, 420), top=40, bottom=60)

        model = compute_slot_model([wide, narrow], geometry(0, 450))

        assert model.global_slot == pytest.approx(120)
        assert model.significant_lines == 2

    def test_no_significant_line_uses_used_width(self):
        """Test the oversized default when no line qualifies."""
        from layout_text.slots import compute_slot_model

        model = compute_slot_model(
            [line_of((0, 10)), line_of((990, 1000), top=40, bottom=60)],
            geometry(0, 1000)
        )

        assert model.global_slot == pytest.approx(1000)
        assert model.significant_lines == 0

    def test_custom_significance(self):
        """Test a lower significance cutoff."""
        from layout_text.slots import compute_slot_model

        model = compute_slot_model(
            [line_of((0, 10)), line_of((990, 1000), top=40, bottom=60)],
            geometry(0, 1000),
            significance_ratio=0.01
        )

        assert model.global_slot == pytest.approx(10)

    def test_slot_positive_for_zero_used_width(self):
        """Test the fallback slot when the page has no horizontal extent."""
        from layout_text.slots import compute_slot_model

        model = compute_slot_model([line_of((10, 10))], geometry(10, 10))

        assert model.global_slot > 0

    def test_slot_for_line(self):
        """Test per-line slot lookup with global fallback."""
        from layout_text.slots import compute_slot_model

        model = compute_slot_model(
            [line_of((0, 50), (200, 250)), line_of((10, 10), top=40, bottom=60)],
            geometry(0, 250)
        )

        assert model.slot_for_line(0) == pytest.approx(50)
        assert model.slot_for_line(1) == model.global_slot
        assert model.slot_for_line(7) == model.global_slot

    def test_to_dict(self):
        """Test slot model serialization."""
        from layout_text.slots import compute_slot_model

        data = compute_slot_model([line_of((0, 50), (200, 250))], geometry(0, 250)).to_dict()

        assert data["global_slot"] == pytest.approx(50)
        assert data["line_stats"] == [[50.0, 50.0, 50.0]]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
