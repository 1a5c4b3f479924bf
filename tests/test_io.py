"""
Tests for I/O utilities and the command-line interface.
"""

import pytest
import json
import sys
from pathlib import Path

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class TestInputDiscovery:
    """Test input file discovery."""

    def test_list_json_files_sorted(self, tmp_path):
        """Test that only JSON files are listed, sorted by name."""
        from layout_text.io import list_json_files

        for name in ["b.json", "a.json", "notes.txt"]:
            (tmp_path / name).write_text("{}", encoding="utf-8")

        files = list_json_files(tmp_path)

        assert [f.name for f in files] == ["a.json", "b.json"]

    def test_list_json_files_not_a_directory(self, tmp_path):
        """Test that a file path is rejected."""
        from layout_text.io import list_json_files

        path = tmp_path / "a.json"
        path.write_text("{}", encoding="utf-8")

        with pytest.raises(NotADirectoryError):
            list_json_files(path)

    def test_detect_input_type(self, tmp_path):
        """Test input type detection."""
        from layout_text.io import detect_input_type

        json_file = tmp_path / "doc.json"
        json_file.write_text("{}", encoding="utf-8")
        empty_dir = tmp_path / "empty"
        empty_dir.mkdir()

        assert detect_input_type(json_file) == "json"
        assert detect_input_type(tmp_path) == "json_folder"
        assert detect_input_type(empty_dir) == "unknown"
        assert detect_input_type(tmp_path / "missing.json") == "unknown"

    def test_output_path_for(self, tmp_path):
        """Test mapping an input file to its text output."""
        from layout_text.io import output_path_for

        assert output_path_for("/data/scan-01.json", tmp_path) == tmp_path / "scan-01.txt"


class TestLoading:
    """Test JSON loading."""

    def test_load_document(self, tmp_path, table_document):
        """Test loading and parsing a Document AI file."""
        from layout_text.io import load_document

        path = tmp_path / "table.json"
        path.write_text(json.dumps(table_document), encoding="utf-8")

        document = load_document(path)

        assert document.source_file == str(path)
        assert len(document.pages[0].tokens) == 4

    def test_missing_file(self, tmp_path):
        """Test loading a missing file."""
        from layout_text.io import load_document

        with pytest.raises(FileNotFoundError):
            load_document(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test loading a malformed file."""
        from layout_text.io import load_document

        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError):
            load_document(path)

    def test_non_object_json(self, tmp_path):
        """Test loading a JSON array."""
        from layout_text.io import load_document

        path = tmp_path / "array.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(ValueError):
            load_document(path)


class TestSaving:
    """Test output writers."""

    def test_save_text(self, tmp_path):
        """Test writing UTF-8 text into a new directory."""
        from layout_text.io import save_text

        path = save_text("café\n---\nx", tmp_path / "out" / "a.txt")

        assert path.read_text(encoding="utf-8") == "café\n---\nx"

    def test_save_json_numpy(self, tmp_path):
        """Test that numpy values serialize."""
        from layout_text.io import save_json

        path = save_json(
            {"slot": np.float32(12.5), "lines": np.int64(3), "significant": np.bool_(True),
             "counts": np.array([1, 2])},
            tmp_path / "d.json"
        )

        assert json.loads(path.read_text(encoding="utf-8")) == {
            "slot": 12.5, "lines": 3, "significant": True, "counts": [1, 2]
        }


class TestCli:
    """Test the command-line interface."""

    def test_parse_page_range(self):
        """Test page range parsing."""
        from cli import parse_page_range

        assert parse_page_range("1-3,5", 10) == [1, 2, 3, 5]
        assert parse_page_range("2,2,9", 4) == [2]
        assert parse_page_range("3-8", 4) == [3, 4]

    def test_convert_folder(self, tmp_path, table_document, doc_builder):
        """Test converting a folder of JSON files."""
        from cli import main

        input_dir = tmp_path / "json"
        input_dir.mkdir()
        (input_dir / "table.json").write_text(json.dumps(table_document), encoding="utf-8")
        (input_dir / "empty.json").write_text(json.dumps({"text": ""}), encoding="utf-8")
        output_dir = tmp_path / "text"

        with pytest.raises(SystemExit) as exc:
            main(["--input", str(input_dir), "--output", str(output_dir), "--quiet"])

        assert exc.value.code == 0
        assert (output_dir / "table.txt").read_text(encoding="utf-8") == " Name  Qty\n Apple  12"
        assert (output_dir / "empty.txt").read_text(encoding="utf-8") == "No pages found in the document."

    def test_strategy_options(self, tmp_path, doc_builder):
        """Test strategy flags reach the renderer."""
        from cli import main

        path = tmp_path / "doc.json"
        path.write_text(json.dumps(doc_builder([[
            ("first", (0, 0, 100, 20)),
            ("second", (0, 80, 100, 100)),
        ]])), encoding="utf-8")

        with pytest.raises(SystemExit) as exc:
            main(["-i", str(path), "-o", str(tmp_path / "out"), "-q", "--gap-multiplier", "4"])

        assert exc.value.code == 0
        assert (tmp_path / "out" / "doc.txt").read_text(encoding="utf-8") == " first\n second"

    def test_max_pages(self, tmp_path, doc_builder):
        """Test limiting conversion to the leading pages."""
        from cli import main

        path = tmp_path / "doc.json"
        path.write_text(json.dumps(doc_builder([
            [("one", (0, 0, 50, 20))],
            [("two", (0, 0, 50, 20))],
            [("three", (0, 0, 50, 20))],
        ])), encoding="utf-8")

        with pytest.raises(SystemExit) as exc:
            main(["-i", str(path), "-o", str(tmp_path / "out"), "-q", "--max-pages", "2"])

        assert exc.value.code == 0
        assert (tmp_path / "out" / "doc.txt").read_text(encoding="utf-8") == " one\n---\n two"

        with pytest.raises(SystemExit):
            main(["-i", str(path), "-o", str(tmp_path / "out"), "-q", "--max-pages", "2", "--pages", "2-3"])

        assert (tmp_path / "out" / "doc.txt").read_text(encoding="utf-8") == " two"

    def test_environment_overrides(self, monkeypatch):
        """Test configuration read from the environment."""
        from config import get_config

        monkeypatch.setenv("LAYOUT_TEXT_CLUSTERING", "FIXED")
        monkeypatch.setenv("LAYOUT_TEXT_SPACING", "diagonal")
        monkeypatch.setenv("LAYOUT_TEXT_MAX_PAGES", "3")

        config = get_config()

        assert config.clustering.strategy == "fixed"
        assert config.render.spacing == "grid"
        assert config.max_pages == 3

    def test_invalid_file_fails_but_continues(self, tmp_path, table_document):
        """Test that one broken file does not stop the batch."""
        from cli import main

        input_dir = tmp_path / "json"
        input_dir.mkdir()
        (input_dir / "a_broken.json").write_text("{oops", encoding="utf-8")
        (input_dir / "b_table.json").write_text(json.dumps(table_document), encoding="utf-8")

        with pytest.raises(SystemExit) as exc:
            main(["-i", str(input_dir), "-o", str(tmp_path / "out"), "-q"])

        assert exc.value.code == 1
        assert (tmp_path / "out" / "b_table.txt").exists()
        assert not (tmp_path / "out" / "a_broken.txt").exists()

    def test_debug_writes_diagnostics(self, tmp_path, table_document):
        """Test the diagnostics dump in debug mode."""
        pytest.importorskip("cv2")
        from cli import main

        path = tmp_path / "table.json"
        path.write_text(json.dumps(table_document), encoding="utf-8")
        output_dir = tmp_path / "out"

        with pytest.raises(SystemExit) as exc:
            main(["-i", str(path), "-o", str(output_dir), "-q", "--debug"])

        assert exc.value.code == 0
        data = json.loads((output_dir / "debug" / "table_diagnostics.json").read_text(encoding="utf-8"))
        assert data["result"]["pages"][0]["line_count"] == 2
        assert any(e["event"] == "slot_model" for e in data["events"])
        assert (output_dir / "debug" / "table_page_0001_debug.png").exists()

    def test_debug_diagnostics_numpy_values(self, tmp_path, table_document):
        """Test that numpy arrays and scalars in diagnostics reach the JSON dump."""
        pytest.importorskip("cv2")
        from cli import main

        path = tmp_path / "table.json"
        path.write_text(json.dumps(table_document), encoding="utf-8")
        output_dir = tmp_path / "out"

        with pytest.raises(SystemExit) as exc:
            main(["-i", str(path), "-o", str(output_dir), "-q", "--debug", "--gap-policy", "statistical"])

        assert exc.value.code == 0
        data = json.loads((output_dir / "debug" / "table_diagnostics.json").read_text(encoding="utf-8"))
        widths = [e for e in data["events"] if e["event"] == "line_widths"]
        assert widths[0]["widths"] == pytest.approx([100.0, 100.0])
        assert widths[1]["widths"] == pytest.approx([60.0, 120.0])
        assert widths[0]["significant"] is True
        render = [e for e in data["events"] if e["event"] == "render"][0]
        assert render["gap_policy"] == "statistical"
        assert render["line_distances"] == pytest.approx([10.0])

    def test_unsupported_input(self, tmp_path):
        """Test an input path that is neither JSON nor a JSON folder."""
        from cli import main

        with pytest.raises(SystemExit) as exc:
            main(["-i", str(tmp_path / "nothing"), "-o", str(tmp_path / "out"), "-q"])

        assert exc.value.code == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
