"""Partmaster MCP - KiCad HTTP library and MCP tools over CSV part catalogs."""

__version__ = "0.1.0"
