"""Error kinds raised by the partmaster catalog."""


class PartmasterError(Exception):
    """Base class for catalog errors."""


class InvalidFormatError(PartmasterError, ValueError):
    """Malformed part number or update request."""


class PartNotFoundError(PartmasterError, LookupError):
    """No catalog row matches the requested part number."""

    def __init__(self, part_id: str):
        self.part_id = part_id
        super().__init__(f"Part not found: {part_id}")


class CSVError(PartmasterError):
    """Base class for partmaster file failures."""

    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class CSVReadError(CSVError, OSError):
    """A partmaster file could not be read."""


class CSVWriteError(CSVError, OSError):
    """A partmaster file could not be written."""


class CSVParseError(CSVError, ValueError):
    """A partmaster file has malformed delimited content."""
