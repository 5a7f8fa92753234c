"""Tests for partmaster CSV files."""

import pytest

from partmaster_mcp import csvfile
from partmaster_mcp.config import DEFAULT_HEADERS
from partmaster_mcp.csvfile import CSVFile
from partmaster_mcp.errors import CSVParseError, CSVReadError


class TestCodec:
    """Test CSV encode/decode."""

    def test_round_trip(self):
        headers = ["IPN", "Description", "Value"]
        rows = [
            ["CAP-001-0001", "100nF, 16V", "100nF"],
            ["RES-001-0001", 'say "hi"', ""],
            ["RES-002-0001"],
        ]
        assert csvfile.decode(csvfile.encode(headers, rows)) == (headers, rows)

    def test_encode_quotes_only_when_needed(self):
        text = csvfile.encode(["IPN", "Description"], [["CAP-001-0001", "a, b"]])
        assert text == 'IPN,Description\nCAP-001-0001,"a, b"\n'

    def test_decode_skips_blank_lines(self):
        headers, rows = csvfile.decode("\nIPN,Value\n\nCAP-001-0001,1u\n\n")
        assert headers == ["IPN", "Value"]
        assert rows == [["CAP-001-0001", "1u"]]

    def test_row_without_cells_not_kept(self):
        # Written as a blank line; a single empty cell survives instead
        text = csvfile.encode(["IPN"], [["a"], [], [""]])
        assert csvfile.decode(text) == (["IPN"], [["a"], [""]])

    def test_decode_rejects_long_rows(self):
        with pytest.raises(CSVParseError, match="line 2"):
            csvfile.decode("IPN,Value\nCAP-001-0001,1u,extra\n")

    def test_decode_requires_header(self):
        with pytest.raises(CSVParseError):
            csvfile.decode("")


class TestLoad:
    """Test loading files and directories."""

    def test_load(self, pm_dir):
        f = csvfile.load(pm_dir / "res.csv")
        assert f.name == "res.csv"
        assert f.headers == ["IPN", "Description", "Value"]
        assert f.rows[1] == ["", "unnumbered resistor", "1k"]

    def test_load_utf8_bom(self, tmp_path):
        path = tmp_path / "cap.csv"
        path.write_bytes("\ufeffIPN,Value\nCAP-001-0001,1µ\n".encode("utf-8"))
        f = csvfile.load(path)
        assert f.headers == ["IPN", "Value"]
        assert f.rows == [["CAP-001-0001", "1µ"]]

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(CSVReadError):
            csvfile.load(tmp_path / "missing.csv")

    def test_load_all_only_csv_in_name_order(self, pm_dir):
        files = csvfile.load_all(pm_dir)
        assert [f.name for f in files] == ["cap.csv", "parts.csv", "res.csv"]

    def test_load_all_not_recursive(self, pm_dir):
        sub = pm_dir / "archive"
        sub.mkdir()
        (sub / "old.csv").write_text("IPN\nOLD-001-0001\n")
        assert "old.csv" not in [f.name for f in csvfile.load_all(pm_dir)]

    def test_load_all_missing_directory(self, tmp_path):
        with pytest.raises(CSVReadError):
            csvfile.load_all(tmp_path / "nope")

    def test_category_from_file_name(self, tmp_path):
        assert CSVFile(path=tmp_path / "cap.csv").category == "CAP"
        assert CSVFile(path=tmp_path / "parts.csv").category == ""

    def test_blank(self, tmp_path):
        f = csvfile.blank(tmp_path)
        assert f.name == "partmaster.csv"
        assert f.headers == list(DEFAULT_HEADERS)
        assert f.rows == []
        assert not f.path.exists()


class TestColumns:
    """Test column lookup and append."""

    @pytest.fixture
    def f(self, tmp_path):
        return CSVFile(
            path=tmp_path / "cap.csv",
            headers=["IPN", "Description"],
            rows=[["CAP-001-0001", "cap"], ["CAP-002-0001"]],
        )

    def test_find_column_exact(self, f):
        assert f.find_column("Description") == 1
        assert f.find_column("description") == -1

    def test_ensure_column_appends_and_pads(self, f):
        idx = f.ensure_column("MPN")
        assert idx == 2
        assert f.headers == ["IPN", "Description", "MPN"]
        assert f.rows == [["CAP-001-0001", "cap", ""], ["CAP-002-0001", ""]]

    def test_ensure_column_idempotent(self, f):
        first = f.ensure_column("MPN")
        second = f.ensure_column("MPN")
        assert first == second == 2
        assert f.headers.count("MPN") == 1
        assert f.rows[0] == ["CAP-001-0001", "cap", ""]

    def test_ensure_existing_column(self, f):
        assert f.ensure_column("IPN") == 0
        assert f.headers == ["IPN", "Description"]

    def test_pad_row(self, f):
        f.pad_row(1)
        assert f.rows[1] == ["CAP-002-0001", ""]

    def test_find_row(self, f):
        assert f.find_row("IPN", "CAP-002-0001") == 1
        assert f.find_row("IPN", "CAP-003-0001") == -1
        assert f.find_row("MPN", "x") == -1


class TestSave:
    """Test writing files back."""

    def test_save_round_trip(self, pm_dir):
        f = csvfile.load(pm_dir / "cap.csv")
        f.ensure_column("Datasheet")
        f.save()

        again = csvfile.load(pm_dir / "cap.csv")
        assert again.headers == f.headers
        assert again.rows == f.rows
        assert not list(pm_dir.glob(".*.tmp"))

    def test_save_is_deterministic(self, pm_dir):
        f = csvfile.load(pm_dir / "cap.csv")
        f.save()
        first = (pm_dir / "cap.csv").read_bytes()
        f.save()
        assert (pm_dir / "cap.csv").read_bytes() == first
