"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for file records, candidate/duplicate groups and scan statistics.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Union, Callable, Tuple
import logging
import os
import re
from enum import Enum

from dupfinder.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)

# Canonical prefix length for the partial digest and buffer size for streaming I/O
PARTIAL_DIGEST_SIZE = 8192
READ_CHUNK_SIZE = 8192


# =============================
# Enums
# =============================

class Stage(str, Enum):
    SIZE = "Size grouping"
    PARTIAL = "Partial digest"
    FULL = "Full digest"
    BYTES = "Byte compare"

    @property
    def key(self) -> str:
        """Short key used in statistics tables."""
        mapping = {
            Stage.SIZE: "size",
            Stage.PARTIAL: "partial",
            Stage.FULL: "full",
            Stage.BYTES: "bytes",
        }
        return mapping[self]

    @classmethod
    def get_all(cls):
        return [cls.SIZE, cls.PARTIAL, cls.FULL, cls.BYTES]


class DropReason(Enum):
    """Why a file left the pipeline before reaching a duplicate group."""
    METADATA = "metadata"   # stat failed or returned unusable values
    READ = "read"           # I/O error while digesting or comparing
    MISMATCH = "mismatch"   # digests matched but bytes differ

    @property
    def display_name(self) -> str:
        mapping = {
            DropReason.METADATA: "Metadata error",
            DropReason.READ: "Read error",
            DropReason.MISMATCH: "Content mismatch",
        }
        return mapping.get(self, self.value)


# ======================
#  Core Data Models
# ======================

@dataclass
class FileDigests:
    partial: Optional[bytes] = None
    full: Optional[bytes] = None

    def __post_init__(self):
        for key in ("partial", "full"):
            value = getattr(self, key)
            if value is not None and not isinstance(value, bytes):
                raise ValueError(f"Field '{key}' must be bytes or None")


@dataclass
class FileRecord:
    """
    A single directory entry found by the scanner.
    device + inode identify the storage object behind the path.
    """
    path: str
    size: int  # in bytes
    device: int = 0
    inode: int = 0
    digests: FileDigests = field(default_factory=FileDigests)

    @property
    def identity(self) -> Tuple[int, int]:
        return self.device, self.inode

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @classmethod
    def from_stat(cls, path: str, stat_result: os.stat_result) -> "FileRecord":
        return cls(
            path=path,
            size=stat_result.st_size,
            device=stat_result.st_dev,
            inode=stat_result.st_ino,
        )

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}>"


@dataclass
class CandidateGroup:
    """
    Files that agree on every discriminant checked so far.
    Groups only shrink or split as they move through the stages.
    """
    size: int
    files: List[FileRecord]
    key: object = None

    @property
    def file_count(self) -> int:
        return len(self.files)

    def is_candidate(self) -> bool:
        """True if this group still contains at least two files."""
        return self.file_count >= 2

    def __repr__(self):
        return f"<CandidateGroup size={self.size}, count={len(self.files)}>"


@dataclass
class DuplicateGroup:
    """
    Files verified byte-identical. The first file is the one to keep.
    """
    size: int
    files: List[FileRecord]
    digest: Optional[bytes] = None

    def __post_init__(self):
        if len(self.files) < 2:
            raise ValueError("A duplicate group needs at least two files")
        if any(f.size != self.size for f in self.files):
            raise ValueError("All files in a duplicate group must have the same size")

    @property
    def duplicate_count(self) -> int:
        """How many files are in this group."""
        return len(self.files)

    @property
    def kept(self) -> FileRecord:
        return self.files[0]

    @property
    def deletable_count(self) -> int:
        return len(self.files) - 1

    @property
    def reclaimable_bytes(self) -> int:
        return self.size * self.deletable_count

    @property
    def digest_hex(self) -> Optional[str]:
        return self.digest.hex() if self.digest is not None else None

    def __repr__(self):
        return f"<DuplicateGroup size={self.size}, count={len(self.files)}>"


@dataclass(frozen=True)
class HardlinkRelation:
    """Two paths referencing the same (device, inode)."""
    anchor: FileRecord
    linked: FileRecord


@dataclass(frozen=True)
class DroppedFile:
    path: str
    reason: DropReason
    stage: Stage
    message: str = ""

    def __str__(self):
        text = f"{self.path} [{self.reason.display_name} during {self.stage.value}]"
        return f"{text}: {self.message}" if self.message else text


class DeduplicationStats:
    """
    Statistics collected during the deduplication process.
    """
    def __init__(self):
        self.total_time: float = 0.0
        self.files_examined: int = 0
        self.digest_calls: int = 0
        self.bytes_compared: int = 0
        self.comparisons: int = 0
        self.cancelled: bool = False
        self.dropped: List[DroppedFile] = []
        self.hardlinks: List[HardlinkRelation] = []
        self.stage_stats: Dict[str, Dict[str, Union[int, float]]] = {}
        self._listeners: List[Callable[[str, Dict], None]] = []

    def add_listener(self, listener: Callable[[str, Dict], None]):
        """Adds a listener to receive updates when stats are updated."""
        self._listeners.append(listener)

    def record_drop(self, path: str, reason: DropReason, stage: Stage, message: str = "") -> None:
        dropped = DroppedFile(path=path, reason=reason, stage=stage, message=message)
        self.dropped.append(dropped)
        if reason is DropReason.MISMATCH:
            logger.debug(f"Dropped {dropped}")
        else:
            logger.warning(f"Dropped {dropped}")

    def record_hardlink(self, relation: HardlinkRelation) -> None:
        self.hardlinks.append(relation)
        logger.debug(f"Hardlink: {relation.anchor.path} <-> {relation.linked.path}")

    @property
    def failure_count(self) -> int:
        """Files lost to metadata or read errors (mismatches are not failures)."""
        return sum(1 for d in self.dropped if d.reason is not DropReason.MISMATCH)

    def update_stage(
            self,
            stage_name: str,
            groups_found: int,
            files_processed: int,
            duration: float
    ) -> None:
        if stage_name not in self.stage_stats:
            self.stage_stats[stage_name] = {
                "groups": 0,
                "files": 0,
                "time": 0.0
            }
        self.stage_stats[stage_name]["groups"] += groups_found
        self.stage_stats[stage_name]["files"] += files_processed
        self.stage_stats[stage_name]["time"] += duration

        for listener in self._listeners:
            try:
                listener(stage_name, self.stage_stats[stage_name])
            except Exception as e:
                logger.error(f"Error in stats event handler: {e}")

    def notify_stage_start(self, stage_name: str):
        """Notifies listeners that a new stage has started."""
        for listener in self._listeners:
            try:
                listener(stage_name, {"status": "started"})
            except Exception as e:
                logger.error(f"Error in stats event handler: {e}")

    def print_summary(self) -> str:
        labels = {
            "size": "📁 Size Groups",
            "partial": "📄 Partial Digest Groups",
            "full": "🔍 Full Digest Groups",
            "bytes": "🧮 Byte-Verified Groups",
        }

        lines = [
            "📊 Deduplication Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s",
            f"Files examined: {self.files_examined}",
            f"Digests computed: {self.digest_calls}",
            f"Byte comparisons: {self.comparisons} ({ConvertUtils.bytes_to_human(self.bytes_compared)})\n",
            "Stage: GROUPS / FILES / TIME"
        ]

        for stage, data in self.stage_stats.items():
            label = labels.get(stage.lower(), stage.title())
            lines.append(f"{label}: {data['groups']} / {data['files']} / {data['time']:.3f}s")

        return "\n".join(lines)


@dataclass
class DeduplicationResult:
    groups: List[DuplicateGroup]
    stats: DeduplicationStats

    @property
    def total_duplicate_files(self) -> int:
        return sum(g.duplicate_count for g in self.groups)

    @property
    def deletable_files(self) -> int:
        return sum(g.deletable_count for g in self.groups)

    @property
    def potential_space_savings(self) -> int:
        return sum(g.reclaimable_bytes for g in self.groups)

    @property
    def failure_count(self) -> int:
        return self.stats.failure_count


"""
DTO for deduplication parameters with built-in validation.
Interface-agnostic, threaded explicitly through command, scanner and pipeline.
"""

HASH_ALGORITHMS = ("xxhash", "md5")


@dataclass
class DeduplicationParams:
    """Parameters for deduplication operation with validation."""
    root_dir: str
    recursive: bool = True
    follow_symlinks: bool = False
    include_hardlinks: bool = False
    include_empty: bool = True
    patterns: List[str] = field(default_factory=list)
    regex: Optional[str] = None
    min_size_bytes: Optional[int] = None
    max_size_bytes: Optional[int] = None
    hash_algorithm: str = "xxhash"
    verbose: bool = False

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if self.min_size_bytes is not None and self.min_size_bytes < 0:
            raise ValueError("Minimum size cannot be negative")

        if (self.min_size_bytes is not None and self.max_size_bytes is not None
                and self.max_size_bytes < self.min_size_bytes):
            raise ValueError("Maximum size cannot be less than minimum size")

        if self.hash_algorithm not in HASH_ALGORITHMS:
            raise ValueError(
                f"Unknown hash algorithm: '{self.hash_algorithm}'. "
                f"Valid options: {', '.join(HASH_ALGORITHMS)}"
            )

        if self.regex:
            try:
                re.compile(self.regex)
            except re.error as e:
                raise ValueError(f"Invalid regular expression '{self.regex}': {e}") from e

        self.patterns = [p.strip() for p in self.patterns if p and p.strip()]

    @staticmethod
    def from_human_readable(
            root_dir: str,
            min_size_str: str = "",
            max_size_str: str = "",
            **kwargs
    ) -> 'DeduplicationParams':
        """
        Factory method to create params from human-readable size inputs.
        Empty size strings mean "no limit".
        """
        min_size = ConvertUtils.human_to_bytes(min_size_str) if min_size_str else None
        max_size = ConvertUtils.human_to_bytes(max_size_str) if max_size_str else None

        return DeduplicationParams(
            root_dir=root_dir,
            min_size_bytes=min_size,
            max_size_bytes=max_size,
            **kwargs
        )
