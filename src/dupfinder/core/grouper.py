"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Implements the "partition by discriminant, discard singletons" operation shared
by every pipeline stage, plus the size and digest groupings built on it.
"""

from typing import List, Dict, Any, Callable, Optional
from collections import defaultdict
import logging

from dupfinder.core.errors import DupFinderError
from dupfinder.core.interfaces import FileGrouper
from dupfinder.core.models import FileRecord
from dupfinder.core.hasher import HasherImpl, Hasher

logger = logging.getLogger(__name__)


class FileGrouperImpl(FileGrouper):
    """
    A concrete implementation of FileGrouper.
    Uses an injected Hasher instance for flexibility and testability.
    """

    def __init__(self, hasher: Hasher = None):
        self.hasher = hasher or HasherImpl()

    def group_by_size(self, files: List[FileRecord], on_error=None) -> Dict[int, List[FileRecord]]:
        """Groups files by their size."""
        return self.partition(files, self._size_key, on_error)

    def group_by_partial_digest(self, files: List[FileRecord], on_error=None) -> Dict[bytes, List[FileRecord]]:
        """Groups files by the digest of their first bytes."""
        return self.partition(files, self.hasher.compute_partial_digest, on_error)

    def group_by_full_digest(self, files: List[FileRecord], on_error=None) -> Dict[bytes, List[FileRecord]]:
        """Groups files by full content digest."""
        return self.partition(files, self.hasher.compute_full_digest, on_error)

    @staticmethod
    def _size_key(file: FileRecord) -> int:
        if file.size is None or file.size < 0:
            raise ValueError(f"Invalid size {file.size!r}")
        return file.size

    @staticmethod
    def partition(
            files: List[FileRecord],
            key_func: Callable[[FileRecord], Any],
            on_error: Optional[Callable[[FileRecord, Exception], None]] = None
    ) -> Dict[Any, List[FileRecord]]:
        """
        Groups files by any computed key and discards groups of one.
        Args:
            files: Files to group, in encounter order
            key_func: Function that computes a hashable key from a FileRecord
            on_error: Called with the file and the exception when key_func fails;
                      the file is left out of every group
        Returns:
            Dict[key, List[FileRecord]] with encounter order preserved inside each group
        """
        groups = defaultdict(list)
        skipped_files = 0
        for file in files:
            try:
                key = key_func(file)
            except (DupFinderError, OSError, ValueError) as e:
                skipped_files += 1
                if on_error:
                    on_error(file, e)
                else:
                    logger.warning(f"Error processing {file.path}: {e}")
                continue
            if key is not None:
                groups[key].append(file)

        if skipped_files > 0:
            logger.info(f"Skipped {skipped_files} files due to errors")

        return {key: group for key, group in groups.items() if len(group) >= 2}
