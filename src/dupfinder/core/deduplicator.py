"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

deduplicator.py
Implements the pipeline that turns scanned FileRecords into verified duplicate groups:
    size → partial digest → full digest → byte compare (+ hardlink carve-out)

Zero-length files skip both digest stages: all empty files are identical, so the
size stage hands their group straight to the byte verifier, which only applies the
hardlink rules to it.
"""
import time
from typing import List, Dict, Optional, Callable
import logging

from dupfinder.core.models import (
    FileRecord, FileDigests, CandidateGroup, DuplicateGroup, DeduplicationParams,
    DeduplicationResult, DeduplicationStats, Stage)
from dupfinder.core.grouper import FileGrouperImpl
from dupfinder.core.hasher import HasherImpl, get_algorithm
from dupfinder.core.comparator import ByteComparatorImpl
from dupfinder.core.hardlinks import HardlinkClassifier, hardlink_detection_supported
from dupfinder.core.interfaces import Deduplicator, Hasher, ByteComparator
from dupfinder.core.stages import SizeStageImpl, PartialDigestStage, FullDigestStage, ByteVerifyStage

logger = logging.getLogger(__name__)


# =============================
# Main Deduplicator Class
# =============================
class DeduplicatorImpl(Deduplicator):
    """
    Runs the four verification stages strictly in sequence and collects statistics.
    Each stage consumes only the finalized output of the previous one.

    The hasher and comparator can be injected (e.g. a fake digest in tests);
    otherwise they are built from params.hash_algorithm.
    """
    def __init__(
            self,
            hasher: Hasher = None,
            comparator: ByteComparator = None,
            classifier: HardlinkClassifier = None
    ):
        self._hasher = hasher
        self._comparator = comparator
        self._classifier = classifier

    def find_duplicates(
        self,
        files: List[FileRecord],
        params: DeduplicationParams,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> DeduplicationResult:
        """
        Main pipeline.
        Args:
            files: Scanned records in encounter order, no duplicate paths
            params: Configuration (hardlink inclusion, hash algorithm, ...)
            stopped_flag: Function that returns True if operation should be stopped.
            progress_callback: Reports progress per stage (stage, current, total).
        Returns:
            DeduplicationResult with groups ordered by their first file's position in `files`
        """
        stats = DeduplicationStats()
        stats.files_examined = len(files)
        total_start_time = time.time()

        hasher = self._hasher or HasherImpl(get_algorithm(params.hash_algorithm))
        comparator = self._comparator or ByteComparatorImpl()
        classifier = self._classifier or HardlinkClassifier(hardlink_detection_supported(files))
        # Digests cached by an earlier run may come from another algorithm
        for file in files:
            file.digests = FileDigests()
        grouper = FileGrouperImpl(hasher)
        digest_calls_before = hasher.digest_calls
        bytes_compared_before = comparator.bytes_compared

        # Stage 1
        groups = self._run_stage(SizeStageImpl(grouper), files, stats, stopped_flag, progress_callback)
        empty_groups = [g for g in groups if g.size == 0]
        groups = [g for g in groups if g.size != 0]

        # Stages 2-3
        for stage in (PartialDigestStage(grouper), FullDigestStage(grouper)):
            groups = self._run_stage(stage, groups, stats, stopped_flag, progress_callback)

        # Stage 4
        verify_stage = ByteVerifyStage(comparator, classifier, params.include_hardlinks)
        verified = self._run_stage(verify_stage, empty_groups + groups, stats, stopped_flag, progress_callback)

        stats.digest_calls = hasher.digest_calls - digest_calls_before
        stats.bytes_compared = comparator.bytes_compared - bytes_compared_before
        stats.cancelled = bool(stopped_flag and stopped_flag())
        if stats.cancelled:
            logger.info("Deduplication cancelled, results are incomplete")

        duplicates = self._to_duplicate_groups(verified, files)
        stats.total_time = time.time() - total_start_time

        logger.info(
            f"Found {len(duplicates)} duplicate groups among {len(files)} files "
            f"({stats.failure_count} failures)"
        )
        return DeduplicationResult(groups=duplicates, stats=stats)

    @staticmethod
    def _run_stage(stage, groups, stats: DeduplicationStats, stopped_flag, progress_callback) -> List[CandidateGroup]:
        stats.notify_stage_start(stage.get_stage_name())
        start_time = time.time()
        result = stage.process(
            groups,
            stats,
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )
        duration = time.time() - start_time
        DeduplicatorImpl._update_stats(stats, stage.stage, duration, result)
        logger.debug(f"{stage.get_stage_name()}: {len(result)} groups left")
        return result

    @staticmethod
    def _to_duplicate_groups(groups: List[CandidateGroup], files: List[FileRecord]) -> List[DuplicateGroup]:
        """Builds the final groups, sorted by where their first file was encountered."""
        position: Dict[str, int] = {f.path: i for i, f in enumerate(files)}
        duplicates = []
        for group in groups:
            members = sorted(group.files, key=lambda f: position[f.path])
            digest = members[0].digests.full if group.size > 0 else None
            duplicates.append(DuplicateGroup(size=group.size, files=members, digest=digest))
        duplicates.sort(key=lambda g: position[g.files[0].path])
        return duplicates

    @staticmethod
    def _update_stats(
        stats: DeduplicationStats,
        stage: Stage,
        duration: float,
        groups: List[CandidateGroup]
    ):
        """
        Helper to update DeduplicationStats object with the groups a stage kept.
        """
        stats.update_stage(
            stage_name=stage.key,
            groups_found=len(groups),
            files_processed=sum(len(g.files) for g in groups),
            duration=duration
        )
