"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/comparator.py
Exact, streamed byte comparison of two files.
"""

import logging
from typing import BinaryIO

from dupfinder.core.errors import ReadError
from dupfinder.core.interfaces import ByteComparator
from dupfinder.core.models import FileRecord, READ_CHUNK_SIZE

logger = logging.getLogger(__name__)


class ByteComparatorImpl(ByteComparator):
    """
    Compares two files chunk by chunk and stops at the first differing chunk.
    Only two buffers of chunk_size bytes are alive at any time.
    """

    def __init__(self, chunk_size: int = READ_CHUNK_SIZE):
        self.chunk_size = chunk_size
        self.bytes_compared = 0

    def files_equal(self, first: FileRecord, second: FileRecord) -> bool:
        """
        Returns True when both files have exactly the same bytes.
        Raises ReadError naming the file that could not be read.
        """
        with self._open(first) as f1, self._open(second) as f2:
            while True:
                chunk1 = self._read(f1, first)
                chunk2 = self._read(f2, second)
                self.bytes_compared += len(chunk1)
                if chunk1 != chunk2:
                    logger.debug(f"Content differs: {first.path} <-> {second.path}")
                    return False
                if not chunk1:
                    return True

    @staticmethod
    def _open(file: FileRecord) -> BinaryIO:
        try:
            return open(file.path, 'rb')
        except OSError as e:
            raise ReadError(file.path, str(e)) from e

    def _read(self, handle: BinaryIO, file: FileRecord) -> bytes:
        try:
            return handle.read(self.chunk_size)
        except OSError as e:
            raise ReadError(file.path, str(e)) from e
