"""Reporting, deletion-script and trash services built on top of the core pipeline."""

from .file_service import FileService
from .duplicate_service import DuplicateService
from .report_service import ReportService
from .script_service import ScriptService

__all__ = ["FileService", "DuplicateService", "ReportService", "ScriptService"]
