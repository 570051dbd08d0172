"""
DupFinder finds byte-identical files and tells real duplicates from hardlinks.

Core features:
- Four-stage verification: size → partial digest (8 KiB) → full digest → byte-by-byte compare
- Hardlinks detected by (device, inode) and left out of duplicate groups unless requested
- Streamed I/O with fixed-size buffers: memory use does not grow with file size
- JSON report and reviewable deletion script (bash / PowerShell); optional move to trash
- CLI interface for headless/server usage
"""

# Get version
try:
    from importlib.metadata import version as _version, PackageNotFoundError
    __version__ = _version("dupfinder")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from dupfinder.commands import DeduplicationCommand
from dupfinder.core import (
    DeduplicationParams, DeduplicationResult, DeduplicationStats,
    FileRecord, DuplicateGroup, HardlinkRelation, DropReason, FatalError)
from dupfinder.utils.convert_utils import ConvertUtils
from dupfinder.services import DuplicateService, FileService, ReportService, ScriptService

__all__ = [
    "DeduplicationCommand",
    "DeduplicationParams",
    "DeduplicationResult",
    "DeduplicationStats",
    "FileRecord",
    "DuplicateGroup",
    "HardlinkRelation",
    "DropReason",
    "FatalError",
    "ConvertUtils",
    "DuplicateService",
    "FileService",
    "ReportService",
    "ScriptService",
    "__version__",
]
