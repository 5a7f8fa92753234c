"""Partmaster CSV files: one header row plus data rows, kept in file order."""

import csv
import io
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .config import BLANK_PARTMASTER_NAME, CSV_EXTENSION, DEFAULT_HEADERS
from .errors import CSVParseError, CSVReadError, CSVWriteError

logger = logging.getLogger(__name__)


def decode(text: str, path: Path | str = "<string>") -> tuple[list[str], list[list[str]]]:
    """Parse CSV text into (headers, rows).

    The first non-blank line is the header row. Blank lines are skipped, so
    a row with no cells cannot be stored; a row holding one empty cell can.
    A row with more cells than there are headers is rejected.
    """
    headers: list[str] | None = None
    rows: list[list[str]] = []
    try:
        for line_no, record in enumerate(csv.reader(io.StringIO(text)), start=1):
            if not record:
                continue
            if headers is None:
                headers = record
                continue
            if len(record) > len(headers):
                raise CSVParseError(
                    path, f"line {line_no} has {len(record)} cells for {len(headers)} columns"
                )
            rows.append(record)
    except csv.Error as e:
        raise CSVParseError(path, str(e)) from e

    if headers is None:
        raise CSVParseError(path, "missing header row")
    return headers, rows


def encode(headers: list[str], rows: list[list[str]]) -> str:
    """Serialize headers and rows as CSV text, preserving order.

    A row with no cells is written as a blank line, which :func:`decode`
    skips. Use ``[""]`` for an empty row that must survive a round trip.
    """
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return output.getvalue()


@dataclass
class CSVFile:
    """One partmaster file held in memory.

    Column order is significant and append-only: columns are added at the
    end and never removed or reordered. Rows may be shorter than the header.
    """

    path: Path
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def category(self) -> str:
        """Category implied by a three-letter file name (cap.csv -> CAP), else ""."""
        stem = self.path.stem.upper()
        return stem if len(stem) == 3 else ""

    def find_column(self, name: str) -> int:
        """Index of the header ``name`` (exact match), or -1."""
        try:
            return self.headers.index(name)
        except ValueError:
            return -1

    def ensure_column(self, name: str) -> int:
        """Index of ``name``, appending it as a new last column if missing."""
        idx = self.find_column(name)
        if idx == -1:
            self.headers.append(name)
            idx = len(self.headers) - 1
            for row in self.rows:
                row.append("")
        return idx

    def pad_row(self, index: int) -> list[str]:
        """Extend row ``index`` with empty cells up to the header width."""
        row = self.rows[index]
        if len(row) < len(self.headers):
            row.extend([""] * (len(self.headers) - len(row)))
        return row

    def cell(self, row: list[str], column: int) -> str:
        if 0 <= column < len(row):
            return row[column]
        return ""

    def find_row(self, column: str, value: str) -> int:
        """Index of the first row whose ``column`` equals ``value``, or -1."""
        idx = self.find_column(column)
        if idx == -1:
            return -1
        for i, row in enumerate(self.rows):
            if idx < len(row) and row[idx] == value:
                return i
        return -1

    def save(self) -> None:
        """Write the file back to disk, replacing the previous contents."""
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8", newline="") as f:
                f.write(encode(self.headers, self.rows))
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise CSVWriteError(self.path, str(e)) from e
        logger.info(f"Saved {self.name}: {len(self.rows)} rows, {len(self.headers)} columns")


def load(path: Path | str) -> CSVFile:
    """Read one partmaster file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise CSVParseError(path, f"not valid UTF-8: {e}") from e
    except OSError as e:
        raise CSVReadError(path, str(e)) from e

    headers, rows = decode(text, path)
    return CSVFile(path=path, headers=headers, rows=rows)


def load_all(directory: Path | str, extension: str = CSV_EXTENSION) -> list[CSVFile]:
    """Load every partmaster file directly inside ``directory``.

    Files are loaded in name order. The first file that fails to load aborts
    the whole load.
    """
    directory = Path(directory)
    try:
        paths = sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() == extension
        )
    except OSError as e:
        raise CSVReadError(directory, str(e)) from e

    return [load(p) for p in paths]


def blank(directory: Path | str) -> CSVFile:
    """Empty partmaster with the default columns, not yet written to disk."""
    return CSVFile(path=Path(directory) / BLANK_PARTMASTER_NAME, headers=list(DEFAULT_HEADERS))
