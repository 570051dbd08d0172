"""
Tests for selecting the files to delete when one file per group is kept.
"""
from dupfinder.core.models import DuplicateGroup, FileRecord
from dupfinder.services.duplicate_service import DuplicateService


def group(size, *paths):
    return DuplicateGroup(size=size, files=[FileRecord(p, size) for p in paths])


class TestKeepOnlyOne:
    def test_first_file_is_kept(self):
        groups = [group(10, "/a", "/b", "/c"), group(5, "/x", "/y")]

        to_delete = DuplicateService.keep_only_one_file_per_group(groups)

        assert to_delete == ["/b", "/c", "/y"]
        assert "/a" not in to_delete and "/x" not in to_delete

    def test_no_groups(self):
        assert DuplicateService.keep_only_one_file_per_group([]) == []
