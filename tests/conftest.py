"""
Shared fixtures for dupfinder tests.
Creates isolated temporary directories with controlled test files.
"""
import pytest
from pathlib import Path
from typing import Dict, List

from dupfinder.core.models import FileRecord


class ConstantAlgorithm:
    """Hash algorithm that gives every input the same digest (forces collisions)."""
    name = "constant"

    class _State:
        def update(self, data: bytes) -> None:
            pass

        def digest(self) -> bytes:
            return b"\x00" * 8

    def new(self):
        return self._State()


def make_record(path: Path) -> FileRecord:
    """FileRecord built from a real file on disk."""
    return FileRecord.from_stat(str(path), path.stat())


def make_records(paths: List[Path]) -> List[FileRecord]:
    return [make_record(p) for p in paths]


@pytest.fixture
def temp_dir(tmp_path):
    """Isolated temporary directory, cleaned up by pytest."""
    return tmp_path


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for deduplication scenarios:
    - 2 identical files (duplicates) plus a third copy in a subdirectory
    - 2 identical files of another size
    - 2 unique files (different content)
    - 2 empty files
    - 1 file with .tmp extension
    """
    files = {}

    # Duplicate pair #1 (1KB of 'A')
    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    # Duplicate pair #2 (2KB of 'B')
    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.txt"
    files["dup2_b"] = temp_dir / "dup2_b.txt"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    # Unique files
    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = temp_dir / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2500)

    # Empty files
    files["empty1"] = temp_dir / "empty1.txt"
    files["empty1"].write_bytes(b"")
    files["empty2"] = temp_dir / "empty2.txt"
    files["empty2"].write_bytes(b"")

    # Different extension, same content as pair #1
    files["tmp"] = temp_dir / "ignore.tmp"
    files["tmp"].write_bytes(content_a)

    # Subdirectory with duplicates
    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)  # Same as dup1_a/b

    return files
