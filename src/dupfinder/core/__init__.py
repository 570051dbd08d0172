"""
Core duplicate detection engine: scanner, hasher, grouper, verifier and pipeline orchestrator.

This package contains the performance-critical foundation of dupfinder:
- FileScannerImpl: directory traversal with recursion, symlink, name and size filters
- HasherImpl + XXHashAlgorithmImpl/MD5AlgorithmImpl: streamed partial/full content digests
- FileGrouperImpl: "partition by key, discard singletons" shared by every stage
- ByteComparatorImpl + HardlinkClassifier: byte-exact verification and hardlink carve-out
- DeduplicatorImpl: four-stage pipeline (size → partial digest → full digest → bytes)
- Models: FileRecord, CandidateGroup, DuplicateGroup, statistics and configuration objects

All components are pure Python and read-only with respect to the filesystem.
"""

from .errors import DupFinderError, MetadataError, ReadError, FatalError
from .scanner import FileScannerImpl
from .grouper import FileGrouperImpl
from .hasher import HasherImpl, XXHashAlgorithmImpl, MD5AlgorithmImpl, get_algorithm
from .comparator import ByteComparatorImpl
from .hardlinks import HardlinkClassifier, hardlink_detection_supported
from .deduplicator import DeduplicatorImpl
from .models import (
    FileRecord, FileDigests, CandidateGroup, DuplicateGroup, HardlinkRelation,
    DroppedFile, DropReason, Stage, DeduplicationParams, DeduplicationStats,
    DeduplicationResult)

__all__ = [
    "DupFinderError",
    "MetadataError",
    "ReadError",
    "FatalError",
    "FileScannerImpl",
    "FileGrouperImpl",
    "HasherImpl",
    "XXHashAlgorithmImpl",
    "MD5AlgorithmImpl",
    "get_algorithm",
    "ByteComparatorImpl",
    "HardlinkClassifier",
    "hardlink_detection_supported",
    "DeduplicatorImpl",
    "FileRecord",
    "FileDigests",
    "CandidateGroup",
    "DuplicateGroup",
    "HardlinkRelation",
    "DroppedFile",
    "DropReason",
    "Stage",
    "DeduplicationParams",
    "DeduplicationStats",
    "DeduplicationResult",
]
