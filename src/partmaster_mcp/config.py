"""Configuration for the partmaster server."""

import os

# Server settings
HTTP_HOST = os.getenv("HTTP_HOST", "0.0.0.0")
HTTP_PORT = int(os.getenv("HTTP_PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Shared secret for the KiCad HTTP library API ("" disables auth)
KICAD_API_TOKEN = os.getenv("KICAD_API_TOKEN", "")

# Directory holding the partmaster CSV files
PARTMASTER_DIR = os.getenv("PARTMASTER_DIR", "partmaster")

# Partmaster file layout
CSV_EXTENSION = ".csv"
IPN_COLUMN = "IPN"
DESCRIPTION_COLUMN = "Description"
BLANK_PARTMASTER_NAME = "partmaster.csv"  # Synthesized when the directory has no usable files
DEFAULT_HEADERS = (
    "IPN",
    "Description",
    "Footprint",
    "Value",
    "Manufacturer",
    "MPN",
    "Datasheet",
    "Priority",
    "Checked",
)

# Descriptive fields shared by every source of one part (filled by priority merge)
SHARED_FIELDS = ("description", "footprint", "value")
