"""Formatting helpers shared by the CLI and the report services."""
