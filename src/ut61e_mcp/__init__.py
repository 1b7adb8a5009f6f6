"""Decoder and MCP server for UNI-T UT61E multimeter telemetry."""

__version__ = "0.1.0"
