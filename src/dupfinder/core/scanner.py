"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Collects FileRecords for the pipeline.
Features:
- Recursive (os.walk) or single-level traversal, in sorted order for reproducible output
- Skips symbolic links unless asked to follow them
- Applies glob/regex name filters and size filters
- Records files whose metadata cannot be read instead of failing the scan
"""

import fnmatch
import itertools
import os
import re
import stat
import time
import logging
from pathlib import Path
from typing import List, Optional, Callable, Set

from dupfinder.core.errors import FatalError
from dupfinder.core.interfaces import FileScanner
from dupfinder.core.models import FileRecord, DeduplicationParams, DroppedFile, DropReason, Stage

logger = logging.getLogger(__name__)


class FileScannerImpl(FileScanner):
    """
    Scans a directory and filters files based on name patterns and size.

    Attributes:
        root_dir: Root directory to scan
        recursive: Descend into subdirectories
        follow_symlinks: Treat symbolic links as the files they point to
        include_empty: Keep zero-length files
        patterns: Glob patterns matched against the file name (e.g. ["*.jpg"])
        regex: Regular expression searched in the file name
        min_size / max_size: Size limits in bytes (optional)
        dropped: Files skipped because stat() failed during the last scan
    """

    def __init__(
        self,
        root_dir: str,
        recursive: bool = True,
        follow_symlinks: bool = False,
        include_empty: bool = True,
        patterns: Optional[List[str]] = None,
        regex: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ):
        self.root_dir = root_dir
        self.recursive = recursive
        self.follow_symlinks = follow_symlinks
        self.include_empty = include_empty
        self.patterns = list(patterns) if patterns else []
        self.regex = re.compile(regex) if regex else None
        self.min_size = min_size
        self.max_size = max_size
        self.dropped: List[DroppedFile] = []

    @classmethod
    def from_params(cls, params: DeduplicationParams) -> "FileScannerImpl":
        return cls(
            root_dir=params.root_dir,
            recursive=params.recursive,
            follow_symlinks=params.follow_symlinks,
            include_empty=params.include_empty,
            patterns=params.patterns,
            regex=params.regex,
            min_size=params.min_size_bytes,
            max_size=params.max_size_bytes,
        )

    def scan(self,
             stopped_flag: Optional[Callable[[], bool]] = None,
             progress_callback: Optional[Callable[[str, int, object], None]] = None) -> List[FileRecord]:
        """
        Single-pass scanner with throttled progress updates and debug logging.
        Returns the records of matching files in traversal order.

        Raises:
            FatalError: root directory missing, not a directory or not readable
        """
        logger.debug("Starting scan operation")
        logger.debug(f"Root directory: {self.root_dir}")
        logger.debug(f"Filters: patterns={self.patterns}, regex={self.regex.pattern if self.regex else None}, "
                     f"min_size={self.min_size}, max_size={self.max_size}")

        self.dropped = []
        found_files: List[FileRecord] = []
        seen_paths: Set[str] = set()
        root_path = Path(self.root_dir)
        processed_files = 0

        if stopped_flag and stopped_flag():
            logger.debug("Scan cancelled before start")
            return []

        self._validate_root(root_path)

        # Progress throttling: update every N files to reduce output overhead
        progress_interval = 5000
        progress_counter = 0
        start_time = time.time()

        for root, dirs, files in self._walk(root_path):
            if stopped_flag and stopped_flag():
                logger.debug("Scan interrupted by user")
                return []

            dirs.sort()
            for filename in sorted(files):
                path = os.path.join(root, filename)
                record = self._process_file(path)
                if record and record.path not in seen_paths:
                    seen_paths.add(record.path)
                    found_files.append(record)
                processed_files += 1
                progress_counter += 1

                if progress_callback and progress_counter >= progress_interval:
                    progress_callback('scanning', processed_files, None)
                    progress_counter = 0

        # Final update for small datasets
        if progress_callback and progress_counter > 0:
            progress_callback('scanning', processed_files, None)

        elapsed_time = time.time() - start_time
        logger.debug(f"Total scan time: {elapsed_time:.2f} seconds")
        logger.debug(f"Scan completed. Found {len(found_files)} matching files.")
        return found_files

    def _validate_root(self, root_path: Path) -> None:
        if not root_path.exists():
            error_msg = f"Directory does not exist: {self.root_dir}"
            logger.error(error_msg)
            raise FatalError(error_msg)
        if not root_path.is_dir():
            error_msg = f"Not a directory: {self.root_dir}"
            logger.error(error_msg)
            raise FatalError(error_msg)
        if not os.access(root_path, os.R_OK | os.X_OK):
            error_msg = f"Directory is not accessible: {self.root_dir}"
            logger.error(error_msg)
            raise FatalError(error_msg)

    def _walk(self, root_path: Path):
        walker = os.walk(str(root_path), followlinks=self.follow_symlinks, onerror=self._on_walk_error)
        if self.recursive:
            return walker
        # Only the top-level directory
        return itertools.islice(walker, 1)

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.warning(f"Cannot read directory {error.filename}: {error.strerror}")

    def _process_file(self, path: str) -> Optional[FileRecord]:
        """
        Process an individual file path and return a FileRecord if it passes all filters.
        """
        filename = os.path.basename(path)
        if not self._name_passes(filename):
            logger.debug(f"Skipping {path} (name filter)")
            return None

        try:
            if os.path.islink(path) and not self.follow_symlinks:
                logger.debug(f"Skipping symbolic link: {path}")
                return None
            stat_result = os.stat(path, follow_symlinks=self.follow_symlinks)
        except OSError as e:
            self._record_drop(path, e)
            return None

        if not stat.S_ISREG(stat_result.st_mode):
            logger.debug(f"Skipping non-regular file: {path}")
            return None

        size = stat_result.st_size
        if size == 0 and not self.include_empty:
            logger.debug(f"Skipping zero-byte file: {path}")
            return None

        if not self._size_passes(size):
            logger.debug(f"Skipping {path} (size {size} bytes outside range)")
            return None

        logger.debug(f"Accepted file: {filename} ({size} bytes)")
        return FileRecord.from_stat(path, stat_result)

    def _record_drop(self, path: str, error: OSError) -> None:
        dropped = DroppedFile(path=path, reason=DropReason.METADATA, stage=Stage.SIZE,
                              message=error.strerror or str(error))
        self.dropped.append(dropped)
        logger.warning(f"Could not stat {path}: {error}")

    def _name_passes(self, filename: str) -> bool:
        """
        With no filters every file passes; otherwise any glob OR the regex must match.
        """
        if not self.patterns and self.regex is None:
            return True
        if any(fnmatch.fnmatch(filename, pattern) for pattern in self.patterns):
            return True
        return bool(self.regex and self.regex.search(filename))

    def _size_passes(self, size: int) -> bool:
        """
        Check if file size is within configured limits.
        Args:
            size: File size in bytes
        Returns:
            True if file meets size criteria
        """
        if self.min_size is not None and size < self.min_size:
            return False
        if self.max_size is not None and size > self.max_size:
            return False
        return True
