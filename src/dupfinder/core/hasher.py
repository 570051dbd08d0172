"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements file digests using FileRecord objects and pluggable hash algorithms.

HasherImpl computes the partial (prefix) digest and the full-content digest,
streaming the file through a fixed-size buffer so memory stays bounded whatever
the file size. Results are cached in the record's FileDigests container.
"""

import hashlib
import logging

import xxhash

from dupfinder.core.errors import ReadError
from dupfinder.core.interfaces import Hasher, HashAlgorithm, HashState
from dupfinder.core.models import FileRecord, PARTIAL_DIGEST_SIZE, READ_CHUNK_SIZE

logger = logging.getLogger(__name__)


# Use the same way to implement and use any other hashing algorithm
class XXHashAlgorithmImpl(HashAlgorithm):
    name = "xxhash"

    def new(self) -> HashState:
        return xxhash.xxh64()


class MD5AlgorithmImpl(HashAlgorithm):
    name = "md5"

    def new(self) -> HashState:
        return hashlib.md5()


ALGORITHMS = {
    XXHashAlgorithmImpl.name: XXHashAlgorithmImpl,
    MD5AlgorithmImpl.name: MD5AlgorithmImpl,
}


def get_algorithm(name: str) -> HashAlgorithm:
    try:
        return ALGORITHMS[name]()
    except KeyError:
        raise ValueError(f"Unknown hash algorithm: '{name}'") from None


class HasherImpl(Hasher):
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    Computes and caches digests of the file prefix and of the whole file.
    """

    def __init__(
            self,
            algorithm: HashAlgorithm = None,
            partial_size: int = PARTIAL_DIGEST_SIZE,
            chunk_size: int = READ_CHUNK_SIZE
    ):
        self.algorithm = algorithm or XXHashAlgorithmImpl()
        self.partial_size = partial_size
        self.chunk_size = chunk_size
        self.digest_calls = 0

    def compute_partial_digest(self, file: FileRecord) -> bytes:
        """Computes and caches the digest of the first partial_size bytes of a file."""
        if file.digests.partial is not None:
            return file.digests.partial
        state = self.algorithm.new()
        try:
            with open(file.path, 'rb') as f:
                state.update(f.read(self.partial_size))
        except OSError as e:
            raise ReadError(file.path, str(e)) from e
        self.digest_calls += 1
        result = state.digest()
        file.digests.partial = result
        # The prefix is the whole file: the full digest is the same value
        if file.size <= self.partial_size:
            file.digests.full = result
        return result

    def compute_full_digest(self, file: FileRecord) -> bytes:
        """Computes and caches the digest of the entire file, one chunk at a time."""
        if file.digests.full is not None:
            return file.digests.full
        state = self.algorithm.new()
        try:
            with open(file.path, 'rb') as f:
                while True:
                    chunk = f.read(self.chunk_size)
                    if not chunk:
                        break
                    state.update(chunk)
        except OSError as e:
            raise ReadError(file.path, str(e)) from e
        self.digest_calls += 1
        result = state.digest()
        file.digests.full = result
        logger.debug(f"Full digest of {file.path}: {result.hex()}")
        return result
