"""
Tests for data models: records, groups, statistics and parameter validation.
"""
import pytest

from dupfinder.core.models import (
    FileRecord, FileDigests, CandidateGroup, DuplicateGroup, DroppedFile, DropReason,
    Stage, DeduplicationStats, DeduplicationResult, DeduplicationParams, HardlinkRelation)


class TestFileRecord:
    def test_from_stat_copies_identity(self, tmp_path):
        path = tmp_path / "a.bin"
        path.write_bytes(b"12345")
        st = path.stat()

        record = FileRecord.from_stat(str(path), st)

        assert record.size == 5
        assert record.identity == (st.st_dev, st.st_ino)
        assert record.name == "a.bin"

    def test_digests_must_be_bytes(self):
        with pytest.raises(ValueError):
            FileDigests(partial="not bytes")


class TestDuplicateGroup:
    def test_needs_two_files(self):
        with pytest.raises(ValueError):
            DuplicateGroup(size=1, files=[FileRecord("/a", 1)])

    def test_rejects_mixed_sizes(self):
        with pytest.raises(ValueError):
            DuplicateGroup(size=1, files=[FileRecord("/a", 1), FileRecord("/b", 2)])

    def test_counts_and_reclaimable_bytes(self):
        group = DuplicateGroup(size=100, files=[FileRecord(p, 100) for p in ("/a", "/b", "/c")],
                               digest=b"\xab\xcd")
        assert group.duplicate_count == 3
        assert group.deletable_count == 2
        assert group.reclaimable_bytes == 200
        assert group.kept.path == "/a"
        assert group.digest_hex == "abcd"

    def test_empty_group_has_no_digest(self):
        group = DuplicateGroup(size=0, files=[FileRecord("/a", 0), FileRecord("/b", 0)])
        assert group.digest_hex is None
        assert group.reclaimable_bytes == 0


class TestCandidateGroup:
    def test_is_candidate(self):
        assert CandidateGroup(size=1, files=[FileRecord("/a", 1), FileRecord("/b", 1)]).is_candidate()
        assert not CandidateGroup(size=1, files=[FileRecord("/a", 1)]).is_candidate()


class TestStats:
    def test_failure_count_ignores_mismatches(self):
        stats = DeduplicationStats()
        stats.record_drop("/a", DropReason.READ, Stage.FULL, "boom")
        stats.record_drop("/b", DropReason.METADATA, Stage.SIZE)
        stats.record_drop("/c", DropReason.MISMATCH, Stage.BYTES)

        assert len(stats.dropped) == 3
        assert stats.failure_count == 2

    def test_dropped_file_str(self):
        dropped = DroppedFile("/a", DropReason.READ, Stage.BYTES, "permission denied")
        assert str(dropped) == "/a [Read error during Byte compare]: permission denied"

    def test_update_stage_notifies_listeners(self):
        stats = DeduplicationStats()
        events = []
        stats.add_listener(lambda name, data: events.append((name, dict(data))))

        stats.notify_stage_start("size")
        stats.update_stage("size", groups_found=2, files_processed=5, duration=0.5)

        assert events[0] == ("size", {"status": "started"})
        assert events[1][1]["groups"] == 2
        assert events[1][1]["files"] == 5

    def test_broken_listener_does_not_break_stats(self):
        stats = DeduplicationStats()

        def listener(name, data):
            raise RuntimeError("listener failure")

        stats.add_listener(listener)
        stats.update_stage("size", 1, 2, 0.1)
        assert stats.stage_stats["size"]["groups"] == 1

    def test_print_summary_lists_stages(self):
        stats = DeduplicationStats()
        stats.update_stage("size", 3, 9, 0.01)
        stats.update_stage("bytes", 1, 2, 0.02)

        summary = stats.print_summary()
        assert "Size Groups: 3 / 9" in summary
        assert "Byte-Verified Groups: 1 / 2" in summary

    def test_record_hardlink(self):
        stats = DeduplicationStats()
        stats.record_hardlink(HardlinkRelation(FileRecord("/a", 1, 1, 7), FileRecord("/b", 1, 1, 7)))
        assert stats.hardlinks[0].linked.path == "/b"


class TestDeduplicationResult:
    def test_aggregates(self):
        groups = [
            DuplicateGroup(size=10, files=[FileRecord("/a", 10), FileRecord("/b", 10), FileRecord("/c", 10)]),
            DuplicateGroup(size=0, files=[FileRecord("/d", 0), FileRecord("/e", 0)]),
        ]
        result = DeduplicationResult(groups=groups, stats=DeduplicationStats())

        assert result.total_duplicate_files == 5
        assert result.deletable_files == 3
        assert result.potential_space_savings == 20
        assert result.failure_count == 0


class TestDeduplicationParams:
    def test_defaults(self):
        params = DeduplicationParams(root_dir="/tmp")
        assert params.recursive is True
        assert params.include_hardlinks is False
        assert params.include_empty is True
        assert params.hash_algorithm == "xxhash"

    def test_empty_root_rejected(self):
        with pytest.raises(ValueError, match="Root directory"):
            DeduplicationParams(root_dir="")

    def test_negative_min_size_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            DeduplicationParams(root_dir="/tmp", min_size_bytes=-1)

    def test_max_below_min_rejected(self):
        with pytest.raises(ValueError, match="less than minimum"):
            DeduplicationParams(root_dir="/tmp", min_size_bytes=10, max_size_bytes=5)

    def test_unknown_hash_rejected(self):
        with pytest.raises(ValueError, match="Unknown hash algorithm"):
            DeduplicationParams(root_dir="/tmp", hash_algorithm="sha1")

    def test_invalid_regex_rejected(self):
        with pytest.raises(ValueError, match="Invalid regular expression"):
            DeduplicationParams(root_dir="/tmp", regex="[unclosed")

    def test_patterns_are_stripped(self):
        params = DeduplicationParams(root_dir="/tmp", patterns=[" *.jpg ", "", "  "])
        assert params.patterns == ["*.jpg"]

    def test_from_human_readable(self):
        params = DeduplicationParams.from_human_readable("/tmp", "1KB", "2MB", recursive=False)
        assert params.min_size_bytes == 1024
        assert params.max_size_bytes == 2 * 1024 * 1024
        assert params.recursive is False

    def test_from_human_readable_empty_means_no_limit(self):
        params = DeduplicationParams.from_human_readable("/tmp")
        assert params.min_size_bytes is None
        assert params.max_size_bytes is None
