"""
Unified command orchestrator for duplicate detection.
This is the single entry point for business logic used by the CLI and by library callers.
"""
from typing import List, Optional, Callable
from dupfinder.core.models import DeduplicationParams, DeduplicationResult, FileRecord
from dupfinder.core.scanner import FileScannerImpl
from dupfinder.core.deduplicator import DeduplicatorImpl


class DeduplicationCommand:
    """
    Orchestrates the entire workflow:
    1. Scan the root directory with the filters from params
    2. Run the four-stage pipeline on the scanned records
    3. Merge scanner drops into the result statistics

    Usage:
        params = DeduplicationParams(root_dir="~/Downloads", include_hardlinks=False)
        result = DeduplicationCommand().execute(
            params,
            progress_callback=cli_progress_printer,
            stopped_flag=signal_handler_check
        )
    """

    def __init__(self, deduplicator: DeduplicatorImpl = None):
        self._deduplicator = deduplicator or DeduplicatorImpl()
        self._files: List[FileRecord] = []

    def execute(
            self,
            params: DeduplicationParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> DeduplicationResult:
        """
        Execute duplicate detection with given parameters.

        Args:
            params: Validated parameters
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None
            stopped_flag: () -> bool (returns True if operation should stop)

        Returns:
            DeduplicationResult (an empty file set yields an empty result)

        Raises:
            FatalError: If the root directory cannot be scanned
        """
        scanner = FileScannerImpl.from_params(params)
        self._files = scanner.scan(
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )

        result = self._deduplicator.find_duplicates(
            self._files,
            params,
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )
        result.stats.dropped[:0] = scanner.dropped
        return result

    def get_files(self) -> List[FileRecord]:
        """Get scanned files after execution."""
        return self._files.copy()
