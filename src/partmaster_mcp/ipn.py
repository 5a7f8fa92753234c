"""Internal part numbers (IPN).

An IPN has the fixed form CCC-NNN-VVVV:
- CCC: three uppercase letters, the category code (CAP, RES, PCA, ...)
- NNN: three digits, the sequence number within the category
- VVVV: four digits, the revision
"""

import re

from .categories import BOM_CATEGORIES, OUR_CATEGORIES
from .errors import InvalidFormatError

# ASCII-only classes; \d would also accept non-ASCII digits
_IPN_RE = re.compile(r"([A-Z]{3})-([0-9]{3})-([0-9]{4})")
_CATEGORY_RE = re.compile(r"[A-Z]{3}")

MAX_SEQUENCE = 999
MAX_REVISION = 9999


class IPN(str):
    """Immutable internal part number.

    ``IPN(value)`` wraps any string as read from a partmaster file; use
    :meth:`parse` or :meth:`from_parts` to get a validated value. Every
    accessor re-validates, so a malformed wrapped value fails on use.
    """

    __slots__ = ()

    @classmethod
    def parse(cls, value: str) -> "IPN":
        """Validate ``value`` against the CCC-NNN-VVVV grammar."""
        if not isinstance(value, str) or not _IPN_RE.fullmatch(value):
            raise InvalidFormatError(f"Invalid IPN: {value!r}")
        return cls(value)

    @classmethod
    def from_parts(cls, category: str, sequence: int, revision: int) -> "IPN":
        """Build an IPN from its components, enforcing numeric ranges."""
        if not isinstance(category, str) or not _CATEGORY_RE.fullmatch(category):
            raise InvalidFormatError(f"Invalid IPN category: {category!r}")
        if not 0 <= sequence <= MAX_SEQUENCE:
            raise InvalidFormatError(f"IPN sequence out of range: {sequence}")
        if not 0 <= revision <= MAX_REVISION:
            raise InvalidFormatError(f"IPN revision out of range: {revision}")
        return cls(f"{category}-{sequence:03d}-{revision:04d}")

    def _groups(self) -> tuple[str, str, str]:
        match = _IPN_RE.fullmatch(self)
        if not match:
            raise InvalidFormatError(f"Invalid IPN: {str(self)!r}")
        return match.group(1), match.group(2), match.group(3)

    def category(self) -> str:
        return self._groups()[0]

    def sequence(self) -> int:
        return int(self._groups()[1])

    def revision(self) -> int:
        return int(self._groups()[2])

    def is_ours(self) -> bool:
        """True for in-house parts, False for purchased parts referenced by number."""
        return self.category() in OUR_CATEGORIES

    def has_bom(self) -> bool:
        """True if parts of this category carry a bill of materials."""
        return self.category() in BOM_CATEGORIES

    def __repr__(self) -> str:
        return f"IPN({str(self)!r})"


def extract_category(value: str) -> str:
    """Category code of a well-formed IPN, or "" for anything else."""
    try:
        return IPN(value).category()
    except InvalidFormatError:
        return ""


def extract_revision(value: str) -> str:
    """Zero-padded revision of a well-formed IPN, or "" for anything else."""
    try:
        return f"{IPN(value).revision():04d}"
    except InvalidFormatError:
        return ""
