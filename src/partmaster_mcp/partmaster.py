"""Partmaster catalog: all CSV files in a directory, queried by IPN.

A part may be listed on several rows, possibly across several files. Each
row is one source (manufacturer option) for the part, ranked by the
Priority column where lower numbers win.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from . import csvfile
from .config import IPN_COLUMN, SHARED_FIELDS
from .csvfile import CSVFile
from .errors import CSVError, PartNotFoundError
from .ipn import IPN

logger = logging.getLogger(__name__)

# CSV header -> PartmasterLine attribute
_COLUMNS = {
    "IPN": "ipn",
    "Description": "description",
    "Footprint": "footprint",
    "Value": "value",
    "Manufacturer": "manufacturer",
    "MPN": "mpn",
    "Datasheet": "datasheet",
    "Checked": "checked",
}


def _parse_priority(value: str) -> int | None:
    value = value.strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


@dataclass
class PartmasterLine:
    """One source row for a part."""

    ipn: IPN = IPN("")
    description: str = ""
    footprint: str = ""
    value: str = ""
    manufacturer: str = ""
    mpn: str = ""
    datasheet: str = ""
    priority: int | None = None
    checked: str = ""
    source: str = ""  # File the row came from

    @classmethod
    def from_row(cls, headers: list[str], row: list[str], source: str = "") -> "PartmasterLine":
        line = cls(source=source)
        raw_priority = ""
        for i, header in enumerate(headers):
            if i >= len(row):
                break
            if header == "Priority":
                raw_priority = row[i]
            elif header in _COLUMNS:
                setattr(line, _COLUMNS[header], row[i])
        line.ipn = IPN(line.ipn)

        line.priority = _parse_priority(raw_priority)
        if line.priority is None and raw_priority.strip():
            logger.warning(f"{source}: ignoring non-numeric priority {raw_priority!r} for {line.ipn}")
        return line

    def to_dict(self) -> dict:
        return {
            "ipn": self.ipn,
            "description": self.description,
            "footprint": self.footprint,
            "value": self.value,
            "manufacturer": self.manufacturer,
            "mpn": self.mpn,
            "datasheet": self.datasheet,
            "priority": self.priority,
            "checked": self.checked,
            "source": self.source,
        }


def _priority_key(line: PartmasterLine) -> tuple[bool, int]:
    # Lines without a priority sort after every numbered line
    return (line.priority is None, line.priority or 0)


def merge_sources(lines: list[PartmasterLine]) -> list[PartmasterLine]:
    """Sort sources by priority and share descriptive fields between them.

    Blank description/footprint/value on the highest priority line are
    filled from the first other line (in priority order) that has one, then
    every line still blank in those fields takes the value from the highest
    priority line. Manufacturer-specific fields are left alone.
    """
    found = sorted(lines, key=_priority_key)
    base = found[0]
    for other in found[1:]:
        for name in SHARED_FIELDS:
            if not getattr(base, name) and getattr(other, name):
                setattr(base, name, getattr(other, name))

    for line in found:
        for name in SHARED_FIELDS:
            if not getattr(line, name):
                setattr(line, name, getattr(base, name))
    return found


class Partmaster:
    """All partmaster files of one directory.

    The catalog is rebuilt from disk by :meth:`reload`; there is no
    incremental update. Lines returned by lookups are copies, so the merge
    never alters the loaded data.
    """

    def __init__(self, directory: Path | str, files: list[CSVFile]):
        self.directory = Path(directory)
        self.files = files
        self.lines = self._build_lines(files)

    @classmethod
    def load(cls, directory: Path | str) -> "Partmaster":
        """Load every CSV file in ``directory``.

        Never fails on bad or missing files: the catalog falls back to one
        blank partmaster so the server can still start.
        """
        directory = Path(directory)
        try:
            files = csvfile.load_all(directory)
        except CSVError as e:
            logger.warning(f"Failed to load partmaster from {directory}: {e}; using blank partmaster")
            files = []
        else:
            if not files:
                logger.warning(f"No partmaster files in {directory}, starting with a blank partmaster")
        if not files:
            files = [csvfile.blank(directory)]

        pm = cls(directory, files)
        logger.info(f"Loaded partmaster from {directory}: {len(files)} files, {len(pm.lines)} parts")
        return pm

    @staticmethod
    def _build_lines(files: list[CSVFile]) -> list[PartmasterLine]:
        lines = []
        for f in files:
            for row in f.rows:
                line = PartmasterLine.from_row(f.headers, row, source=f.name)
                if not line.value and line.mpn:
                    line.value = line.mpn
                lines.append(line)
        return lines

    def reload(self) -> None:
        """Re-read the directory, discarding all in-memory state."""
        fresh = Partmaster.load(self.directory)
        self.files = fresh.files
        self.lines = fresh.lines

    def find_part_sources(self, pn: str) -> list[PartmasterLine]:
        """All sources for ``pn`` sorted by priority, with shared fields merged."""
        found = [replace(line) for line in self.lines if line.ipn == pn]
        if not found:
            raise PartNotFoundError(str(pn))
        return merge_sources(found)

    def find_part(self, pn: str) -> PartmasterLine:
        """Highest priority source for ``pn``."""
        return self.find_part_sources(pn)[0]

    def locate(self, part_id: str) -> tuple[CSVFile, int]:
        """File and row index of the first row whose IPN is ``part_id``."""
        for f in self.files:
            idx = f.find_row(IPN_COLUMN, part_id)
            if idx >= 0:
                return f, idx
        raise PartNotFoundError(part_id)

    def __len__(self) -> int:
        return len(self.lines)
