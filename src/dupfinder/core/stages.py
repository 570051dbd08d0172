"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/stages.py
Verification pipeline stages for DupFinder's four-stage duplicate detection engine.

CLASS HIERARCHY
---------------
SizeStageImpl       : Stage 1, groups scanned records by exact byte length
DigestStageBase     : Shared regrouping logic for digest stages
PartialDigestStage  : Stage 2, digest of the first 8 KiB
FullDigestStage     : Stage 3, digest of the whole content (streamed)
ByteVerifyStage     : Stage 4, byte-exact comparison against an anchor, with
                      hardlink classification

STAGE CONTRACTS
---------------
Each stage implements a consistent `process()` interface that:
  • Accepts the finalized candidate groups of the previous stage
  • Returns refined groups, each with at least two files
  • Records every dropped file (with its reason) on the shared stats object
  • Reports progress via callback (stage name, processed count, total count)
  • Checks stopped_flag between whole-file operations and returns [] when set

ERRORS
------
A file whose metadata or content cannot be read is dropped on its own; the rest
of its group carries on. Nothing in a stage aborts the run.
"""

from typing import List, Dict, Optional, Callable, Set
import logging

from dupfinder.core.errors import ReadError
from dupfinder.core.models import (
    FileRecord, CandidateGroup, DeduplicationStats, DropReason, HardlinkRelation, Stage)
from dupfinder.core.grouper import FileGrouperImpl
from dupfinder.core.comparator import ByteComparatorImpl
from dupfinder.core.hardlinks import HardlinkClassifier
from dupfinder.core.interfaces import ByteComparator, PipelineStage

logger = logging.getLogger(__name__)


def _drop_handler(stats: DeduplicationStats, stage: Stage, reason: DropReason):
    def on_error(file: FileRecord, error: Exception) -> None:
        stats.record_drop(file.path, reason, stage, str(error))
    return on_error


# =============================
# Stage 1
# =============================
class SizeStageImpl:
    stage = Stage.SIZE

    def __init__(self, grouper: FileGrouperImpl):
        self.grouper = grouper

    def get_stage_name(self) -> str:
        return self.stage.value

    def process(
            self,
            files: List[FileRecord],
            stats: DeduplicationStats,
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[CandidateGroup]:
        """
        Group by file size.
        Returns list of CandidateGroups with 2+ files of same size, zero-length group included.
        """
        if stopped_flag and stopped_flag():
            return []

        size_groups = self.grouper.group_by_size(
            files, on_error=_drop_handler(stats, self.stage, DropReason.METADATA))
        groups = [
            CandidateGroup(size=size, files=files_list, key=size)
            for size, files_list in size_groups.items()
        ]

        if progress_callback:
            total_files = len(files)
            progress_callback(self.get_stage_name(), total_files, total_files)

        return groups


# =============================
# Digest stages
# =============================
class DigestStageBase(PipelineStage):
    """
    Base class for stages that regroup files by a digest.
    Regrouping happens inside each incoming group, never across groups.
    """
    stage: Stage = None

    def __init__(self, grouper: FileGrouperImpl):
        self.grouper = grouper

    def get_stage_name(self) -> str:
        return self.stage.value

    def _group_files(self, files: List[FileRecord], on_error) -> Dict[bytes, List[FileRecord]]:
        """
        Groups files by the stage's digest.

        Args:
            files: Files of one candidate group.
            on_error: Callback invoked for files whose digest cannot be computed.

        Returns:
            Dict mapping digest to the 2+ files sharing it.
        """
        raise NotImplementedError

    def process(
        self,
        groups: List[CandidateGroup],
        stats: DeduplicationStats,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[CandidateGroup]:
        if stopped_flag and stopped_flag():
            return []

        on_error = _drop_handler(stats, self.stage, DropReason.READ)
        new_groups = []
        total_files = sum(len(group.files) for group in groups)
        processed_files = 0

        for group in groups:
            if stopped_flag and stopped_flag():
                return []

            for digest, files_in_group in self._group_files(group.files, on_error).items():
                new_groups.append(CandidateGroup(size=group.size, files=files_in_group, key=digest))

            processed_files += len(group.files)
            if progress_callback:
                progress_callback(self.get_stage_name(), processed_files, total_files)

        return new_groups


class PartialDigestStage(DigestStageBase):
    stage = Stage.PARTIAL

    def _group_files(self, files, on_error):
        return self.grouper.group_by_partial_digest(files, on_error=on_error)


class FullDigestStage(DigestStageBase):
    stage = Stage.FULL

    def _group_files(self, files, on_error):
        return self.grouper.group_by_full_digest(files, on_error=on_error)


# =============================
# Stage 4
# =============================
class ByteVerifyStage(PipelineStage):
    """
    Confirms candidate groups byte by byte.

    The first file of a group is the anchor and every other file is compared
    with it only (k-1 comparisons for k files), relying on the transitivity of
    exact equality. Files that differ from the anchor are not thrown away: they
    form a new candidate set verified the same way with its own anchor, so the
    output is a true equivalence partition of the group.

    Hardlinks of an accepted file are recorded and, unless include_hardlinks is
    set, left out of the group. Zero-length groups are accepted without reading.
    """
    stage = Stage.BYTES

    def __init__(
            self,
            comparator: ByteComparator = None,
            classifier: HardlinkClassifier = None,
            include_hardlinks: bool = False
    ):
        self.comparator = comparator or ByteComparatorImpl()
        self.classifier = classifier or HardlinkClassifier()
        self.include_hardlinks = include_hardlinks

    def get_stage_name(self) -> str:
        return self.stage.value

    def process(
            self,
            groups: List[CandidateGroup],
            stats: DeduplicationStats,
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[CandidateGroup]:
        if stopped_flag and stopped_flag():
            return []

        verified = []
        total_files = sum(len(g.files) for g in groups)
        processed_files = 0

        for group in groups:
            if stopped_flag and stopped_flag():
                return []

            for files in self._verify_group(group, stats, stopped_flag):
                verified.append(CandidateGroup(size=group.size, files=files, key=group.key))

            processed_files += len(group.files)
            if progress_callback:
                progress_callback(self.get_stage_name(), processed_files, total_files)

        return verified

    def _verify_group(
            self,
            group: CandidateGroup,
            stats: DeduplicationStats,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> List[List[FileRecord]]:
        classes: List[List[FileRecord]] = []
        unreadable: Set[str] = set()
        linked: Set[str] = set()
        pending = list(group.files)

        while len(pending) >= 2:
            anchor = pending[0]
            accepted = [anchor]
            identities = {anchor.identity: anchor} if self.classifier.has_identity(anchor) else {}
            relations: List[HardlinkRelation] = []
            stragglers = []
            anchor_failed = False

            for candidate in pending[1:]:
                if stopped_flag and stopped_flag():
                    return []

                original = identities.get(candidate.identity) if self.classifier.has_identity(candidate) else None
                if original is not None and self.classifier.is_hardlink(original, candidate):
                    relations.append(HardlinkRelation(anchor=original, linked=candidate))
                    if self.include_hardlinks:
                        accepted.append(candidate)
                    continue

                try:
                    equal = self._equal(anchor, candidate, group.size, stats)
                except ReadError as e:
                    stats.record_drop(e.path, DropReason.READ, self.stage, str(e))
                    unreadable.add(e.path)
                    if e.path == anchor.path:
                        anchor_failed = True
                        break
                    continue

                if equal:
                    accepted.append(candidate)
                    if self.classifier.has_identity(candidate):
                        identities.setdefault(candidate.identity, candidate)
                else:
                    stragglers.append(candidate)

            if anchor_failed:
                # Start over without the anchor; nothing found in this round is kept
                pending = [f for f in pending[1:] if f.path not in unreadable]
                continue

            for relation in relations:
                stats.record_hardlink(relation)
                linked.update((relation.anchor.path, relation.linked.path))

            if len(accepted) >= 2:
                classes.append(accepted)
            pending = stragglers

        grouped = {f.path for files in classes for f in files}
        for file in group.files:
            if file.path not in grouped and file.path not in unreadable and file.path not in linked:
                stats.record_drop(file.path, DropReason.MISMATCH, self.stage,
                                  "content differs from every other candidate")
        return classes

    def _equal(self, anchor: FileRecord, candidate: FileRecord, size: int, stats: DeduplicationStats) -> bool:
        if size == 0:
            return True
        result = self.comparator.files_equal(anchor, candidate)
        stats.comparisons += 1
        return result
