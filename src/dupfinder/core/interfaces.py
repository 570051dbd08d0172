"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the duplicate finder.
These protocols enforce structural typing using Python's `typing.Protocol` so that
components can be swapped (e.g. a fake hash algorithm in tests) without touching
the pipeline.

Key Components:
---------------
- HashAlgorithm: Factory for incremental hash objects (xxHash, MD5, ...).
- Hasher: Computes and caches partial and full digests of files.
- ByteComparator: Streams two files and reports whether their bytes are equal.
- FileScanner: Walks a directory tree and returns FileRecords.
- FileGrouper: Partitions files by size or digest.
- PipelineStage: One step of the verification pipeline.
- Deduplicator: Runs all stages and aggregates statistics.
"""

from typing import Protocol, List, Dict, Optional, Callable, Any
from dupfinder.core.models import (
    FileRecord,
    CandidateGroup,
    DeduplicationParams,
    DeduplicationResult,
    DeduplicationStats,
)


# ===== Interfaces =====

class HashState(Protocol):
    """Incremental hash object (the hashlib/xxhash object API)."""
    def update(self, data: bytes) -> None: ...
    def digest(self) -> bytes: ...


class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in different hashing functions like MD5 or xxHash
    without affecting the rest of the pipeline.
    """
    name: str

    def new(self) -> HashState:
        """Returns a fresh incremental hash object."""
        ...


class Hasher(Protocol):
    """Interface for hashing the prefix or the whole content of a file."""
    digest_calls: int

    def compute_partial_digest(self, file: FileRecord) -> bytes: ...
    def compute_full_digest(self, file: FileRecord) -> bytes: ...


class ByteComparator(Protocol):
    """Interface for exact content comparison of two files."""
    bytes_compared: int

    def files_equal(self, first: FileRecord, second: FileRecord) -> bool: ...


class FileScanner(Protocol):
    """
    Interface for scanning file systems and collecting file metadata.
    """
    def scan(
        self,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[FileRecord]:
        """
        Scan files from the configured directory.

        Args:
            stopped_flag: Function that returns True if operation should be canceled.
            progress_callback: Optional callback for reporting progress (stage, current, total).

        Returns:
            Records of all files matching the filters, in traversal order.
        """
        ...


class FileGrouper(Protocol):
    """
    Interface for grouping files by a discriminant.

    Used by every stage of the pipeline to split candidate groups.
    """
    def partition(
        self,
        files: List[FileRecord],
        key_func: Callable[[FileRecord], Any],
        on_error: Optional[Callable[[FileRecord, Exception], None]] = None
    ) -> Dict[Any, List[FileRecord]]:
        """Group files by key_func and drop groups with fewer than two files."""
        ...

    def group_by_size(self, files: List[FileRecord], on_error=None) -> Dict[int, List[FileRecord]]: ...
    def group_by_partial_digest(self, files: List[FileRecord], on_error=None) -> Dict[bytes, List[FileRecord]]: ...
    def group_by_full_digest(self, files: List[FileRecord], on_error=None) -> Dict[bytes, List[FileRecord]]: ...


# =============================
# Stage Interfaces
# =============================

class PipelineStage(Protocol):
    """
    Interface for one step of the verification pipeline.

    A stage receives the finalized groups of its predecessor and returns
    refined groups with at least two members each.
    """

    def get_stage_name(self) -> str:
        """Return the name of this stage (used in logging and stats)."""
        ...

    def process(
        self,
        groups: List[CandidateGroup],
        stats: DeduplicationStats,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[CandidateGroup]:
        """
        Refine candidate groups.

        Args:
            groups: Candidate groups from the previous stage.
            stats: Statistics object receiving dropped files and counters.
            stopped_flag: Optional function to check for cancellation.
            progress_callback: Optional callback for progress updates (stage, current, total).

        Returns:
            Groups to hand to the next stage.
        """
        ...


class Deduplicator(Protocol):
    """
    Interface for the main deduplication engine.

    Coordinates the stages (size → partial digest → full digest → bytes) and
    collects statistics about the run.
    """
    def find_duplicates(
        self,
        files: List[FileRecord],
        params: DeduplicationParams,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> DeduplicationResult:
        ...
