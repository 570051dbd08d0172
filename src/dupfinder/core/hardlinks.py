"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hardlinks.py
Detects directory entries that point to the same storage object (device + inode).
"""

import logging
from typing import Iterable, Optional

from dupfinder.core.models import FileRecord

logger = logging.getLogger(__name__)


def hardlink_detection_supported(files: Iterable[FileRecord]) -> bool:
    """
    True if the scanned records carry inode numbers.
    Some filesystems (FAT, several network mounts) report 0 for every file.
    """
    return any(f.inode for f in files)


class HardlinkClassifier:
    """
    Decides whether two records are hardlinks of each other.

    When detection is not supported the classifier never reports a hardlink,
    so callers keep both files instead of assuming they are one object.
    A record with inode 0 is never treated as a hardlink either.
    """

    def __init__(self, supported: Optional[bool] = None):
        self.supported = True if supported is None else supported
        if not self.supported:
            logger.info("Hardlink detection not supported, hardlinks will be treated as duplicates")

    def has_identity(self, file: FileRecord) -> bool:
        return self.supported and file.inode != 0

    def is_hardlink(self, first: FileRecord, second: FileRecord) -> bool:
        if not (self.has_identity(first) and self.has_identity(second)):
            return False
        return first.identity == second.identity and first.path != second.path
