"""KiCad HTTP library view of the partmaster.

Maps partmaster files onto the categories / parts / part detail resources
of the KiCad HTTP library API and applies edits back to the CSV files.
Every edit saves the touched file and reloads the whole partmaster.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from .categories import (
    CATEGORY_DESCRIPTIONS,
    CATEGORY_DISPLAY_NAMES,
    CATEGORY_SYMBOLS,
    DEFAULT_SYMBOL,
)
from .config import DESCRIPTION_COLUMN, IPN_COLUMN
from .errors import CSVError, InvalidFormatError
from .ipn import MAX_REVISION, extract_category, extract_revision
from .partmaster import Partmaster

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryTables:
    """Category code -> display metadata."""

    display_names: dict[str, str] = field(default_factory=lambda: dict(CATEGORY_DISPLAY_NAMES))
    descriptions: dict[str, str] = field(default_factory=lambda: dict(CATEGORY_DESCRIPTIONS))
    symbols: dict[str, str] = field(default_factory=lambda: dict(CATEGORY_SYMBOLS))
    default_symbol: str = DEFAULT_SYMBOL

    def display_name(self, code: str) -> str:
        return self.display_names.get(code, code)

    def description(self, code: str) -> str:
        return self.descriptions.get(code, f"{code} components")

    def symbol(self, code: str) -> str:
        return self.symbols.get(code, self.default_symbol)


DEFAULT_TABLES = CategoryTables()


@dataclass
class Category:
    id: str
    name: str
    description: str = ""

    def to_dict(self) -> dict[str, str]:
        result = {"id": self.id, "name": self.name}
        if self.description:
            result["description"] = self.description
        return result


@dataclass
class PartSummary:
    id: str
    name: str = ""
    description: str = ""

    def to_dict(self) -> dict[str, str]:
        result = {"id": self.id}
        if self.name:
            result["name"] = self.name
        if self.description:
            result["description"] = self.description
        return result


@dataclass
class PartField:
    value: str
    visible: str = ""  # "True"/"False" for KiCad, "" leaves it to the symbol

    def to_dict(self) -> dict[str, str]:
        result = {"value": self.value}
        if self.visible:
            result["visible"] = self.visible
        return result


@dataclass
class PartDetail:
    """Part as served to KiCad. ``fields`` keeps the CSV column order."""

    id: str
    name: str = ""
    symbol_id: str = ""
    exclude_from_bom: str = "false"
    fields: dict[str, PartField] = field(default_factory=dict)
    revision: str = ""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id}
        if self.name:
            result["name"] = self.name
        if self.symbol_id:
            result["symbolIdStr"] = self.symbol_id
        if self.exclude_from_bom:
            result["exclude_from_bom"] = self.exclude_from_bom
        if self.fields:
            result["fields"] = {name: f.to_dict() for name, f in self.fields.items()}
        if self.revision:
            result["revision"] = self.revision
        return result


@dataclass
class PartSource:
    manufacturer: str
    mpn: str


@dataclass
class PartUpdate:
    """Editable fields of a part. Empty description means "leave unchanged"."""

    description: str = ""
    sources: list[PartSource] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "PartUpdate":
        if not isinstance(data, dict):
            raise InvalidFormatError("Update must be a JSON object")

        description = data.get("description", "")
        if description is None:
            description = ""
        if not isinstance(description, str):
            raise InvalidFormatError("description must be a string")

        raw_sources = data.get("sources", [])
        if raw_sources is None:
            raw_sources = []
        if not isinstance(raw_sources, list):
            raise InvalidFormatError("sources must be a list")

        sources = []
        for i, src in enumerate(raw_sources):
            if not isinstance(src, dict):
                raise InvalidFormatError(f"sources[{i}] must be an object")
            manufacturer = src.get("manufacturer", "")
            mpn = src.get("mpn", "")
            if not isinstance(manufacturer, str) or not isinstance(mpn, str):
                raise InvalidFormatError(f"sources[{i}] manufacturer and mpn must be strings")
            sources.append(PartSource(manufacturer=manufacturer, mpn=mpn))
        return cls(description=description, sources=sources)


def source_columns(index: int) -> tuple[str, str]:
    """Manufacturer/MPN column names for the source at ``index``.

    The first source uses Manufacturer/MPN, later ones Manufacturer2/MPN2,
    Manufacturer3/MPN3 and so on.
    """
    if index == 0:
        return "Manufacturer", "MPN"
    return f"Manufacturer{index + 1}", f"MPN{index + 1}"


def bump_revision(part_id: str) -> str:
    """IPN of the next revision: CCC-NNN-0004 -> CCC-NNN-0005."""
    parts = part_id.split("-")
    if len(parts) != 3:
        raise InvalidFormatError(f"Invalid IPN format: {part_id!r}")
    # ASCII digits with an optional sign only; int() would also take "1_0", " 1"
    if not (parts[2].isascii() and parts[2].lstrip("-+").isdigit()):
        raise InvalidFormatError(f"Invalid revision in {part_id!r}")
    rev = int(parts[2]) + 1
    if rev > MAX_REVISION:
        raise InvalidFormatError(f"Revision of {part_id} would exceed {MAX_REVISION}")
    parts[2] = f"{rev:04d}"
    return "-".join(parts)


class KiCadLibrary:
    """KiCad HTTP library resources backed by a :class:`Partmaster`."""

    def __init__(self, partmaster: Partmaster, tables: CategoryTables = DEFAULT_TABLES):
        self.partmaster = partmaster
        self.tables = tables

    def list_categories(self) -> list[Category]:
        codes = set()
        for f in self.partmaster.files:
            if f.category:
                codes.add(f.category)

            ipn_idx = f.find_column(IPN_COLUMN)
            if ipn_idx < 0:
                continue
            for row in f.rows:
                category = extract_category(f.cell(row, ipn_idx))
                if category:
                    codes.add(category)

        return [
            Category(
                id=code,
                name=self.tables.display_name(code),
                description=self.tables.description(code),
            )
            for code in sorted(codes)
        ]

    def list_parts(self, category_id: str) -> list[PartSummary]:
        parts: list[PartSummary] = []
        if not category_id:
            # Rows with malformed IPNs have no category; never list them
            return parts
        for f in self.partmaster.files:
            ipn_idx = f.find_column(IPN_COLUMN)
            desc_idx = f.find_column(DESCRIPTION_COLUMN)

            for row in f.rows:
                if not row:
                    continue

                part_id = f.cell(row, ipn_idx)
                # An IPN, even a malformed one, overrides the file name category
                category = extract_category(part_id) if part_id else f.category
                if category != category_id:
                    continue

                if not part_id:
                    part_id = f"{category_id}-unknown-{len(parts)}"
                description = f.cell(row, desc_idx)
                parts.append(PartSummary(id=part_id, name=description, description=description))
        return parts

    def get_part_detail(self, part_id: str) -> PartDetail:
        f, row_idx = self.partmaster.locate(part_id)
        row = f.rows[row_idx]

        fields: dict[str, PartField] = {}
        name = ""
        for i, header in enumerate(f.headers):
            value = f.cell(row, i)
            if not value or not header:
                continue
            fields[header] = PartField(value=value)
            if header == DESCRIPTION_COLUMN:
                name = value

        return PartDetail(
            id=part_id,
            name=name,
            symbol_id=self.tables.symbol(extract_category(part_id)),
            exclude_from_bom="false",
            fields=fields,
            revision=extract_revision(part_id),
        )

    def get_part_sources(self, part_id: str) -> list[dict[str, Any]]:
        """All sources of a part, highest priority first."""
        return [line.to_dict() for line in self.partmaster.find_part_sources(part_id)]

    def _save(self, f) -> None:
        """Save ``f``; on failure drop the unsaved in-memory edits and re-raise."""
        try:
            f.save()
        except CSVError:
            self.partmaster.reload()
            raise

    def update_part(self, part_id: str, update: PartUpdate) -> PartDetail:
        """Write description and manufacturer sources for a part."""
        f, row_idx = self.partmaster.locate(part_id)
        f.pad_row(row_idx)

        if update.description:
            desc_idx = f.ensure_column(DESCRIPTION_COLUMN)
            f.rows[row_idx][desc_idx] = update.description

        for i, src in enumerate(update.sources):
            mfr_header, mpn_header = source_columns(i)
            mfr_idx = f.ensure_column(mfr_header)
            mpn_idx = f.ensure_column(mpn_header)
            f.rows[row_idx][mfr_idx] = src.manufacturer
            f.rows[row_idx][mpn_idx] = src.mpn

        self._save(f)
        logger.info(f"Updated {part_id} in {f.name} ({len(update.sources)} sources)")
        self.partmaster.reload()
        return self.get_part_detail(part_id)

    def start_new_revision(self, part_id: str) -> PartDetail:
        """Copy a part's row under the next revision number.

        The original row stays; revisions accumulate as separate rows.
        """
        f, row_idx = self.partmaster.locate(part_id)
        ipn_idx = f.find_column(IPN_COLUMN)
        if ipn_idx < 0:
            raise InvalidFormatError(f"{f.name} has no {IPN_COLUMN} column")

        row = f.rows[row_idx]
        new_ipn = bump_revision(row[ipn_idx])

        new_row = list(row) + [""] * (len(f.headers) - len(row))
        new_row[ipn_idx] = new_ipn
        f.rows.append(new_row)

        self._save(f)
        logger.info(f"Started revision {new_ipn} from {part_id} in {f.name}")
        self.partmaster.reload()
        return self.get_part_detail(new_ipn)
