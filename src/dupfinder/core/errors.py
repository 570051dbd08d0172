"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Exceptions raised by the scanner and the pipeline.

Per-file errors (MetadataError, ReadError) never abort a run: they are caught where
files are grouped or compared and the file is dropped. FatalError is the only
condition that stops the pipeline, and it is raised before any group exists.
"""


class DupFinderError(Exception):
    """Base class for all dupfinder errors."""


class MetadataError(DupFinderError):
    """stat() failed or returned unusable values for a file."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Cannot read metadata of {path}: {message}")


class ReadError(DupFinderError):
    """I/O failure while digesting or comparing file content."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Error reading {path}: {message}")


class FatalError(DupFinderError):
    """The scan root is missing or inaccessible."""
