"""
Tests for the individual pipeline stages, mostly the byte verification stage
with an in-memory comparator so outcomes do not depend on the filesystem.
"""
from dupfinder.core.errors import ReadError
from dupfinder.core.grouper import FileGrouperImpl
from dupfinder.core.hardlinks import HardlinkClassifier
from dupfinder.core.models import CandidateGroup, DeduplicationStats, DropReason, FileRecord, Stage
from dupfinder.core.stages import SizeStageImpl, PartialDigestStage, FullDigestStage, ByteVerifyStage
from conftest import make_records


class FakeComparator:
    """Compares records by a content label; paths listed in `broken` raise ReadError."""

    def __init__(self, contents, broken=()):
        self.contents = contents
        self.broken = set(broken)
        self.bytes_compared = 0
        self.calls = []

    def files_equal(self, first, second):
        self.calls.append((first.path, second.path))
        for file in (first, second):
            if file.path in self.broken:
                raise ReadError(file.path, "Permission denied")
        return self.contents[first.path] == self.contents[second.path]


def group_of(*files, size=10):
    return CandidateGroup(size=size, files=list(files))


def paths(groups):
    return [[f.path for f in g.files] for g in groups]


class TestSizeStage:
    def test_groups_by_size(self):
        files = [FileRecord("/a", 1), FileRecord("/b", 2), FileRecord("/c", 1), FileRecord("/d", 0),
                 FileRecord("/e", 0)]
        stats = DeduplicationStats()
        groups = SizeStageImpl(FileGrouperImpl()).process(files, stats)
        assert paths(groups) == [["/a", "/c"], ["/d", "/e"]]

    def test_invalid_size_is_metadata_drop(self):
        files = [FileRecord("/a", 1), FileRecord("/b", 1), FileRecord("/bad", -5)]
        stats = DeduplicationStats()
        SizeStageImpl(FileGrouperImpl()).process(files, stats)
        assert stats.dropped[0].path == "/bad"
        assert stats.dropped[0].reason is DropReason.METADATA
        assert stats.dropped[0].stage is Stage.SIZE

    def test_stopped_returns_nothing(self):
        files = [FileRecord("/a", 1), FileRecord("/b", 1)]
        assert SizeStageImpl(FileGrouperImpl()).process(files, DeduplicationStats(), lambda: True) == []

    def test_reports_progress(self):
        calls = []
        SizeStageImpl(FileGrouperImpl()).process(
            [FileRecord("/a", 1)], DeduplicationStats(), progress_callback=lambda *a: calls.append(a))
        assert calls == [(Stage.SIZE.value, 1, 1)]


class TestDigestStages:
    def test_splits_within_groups_only(self, tmp_path):
        contents = {"a": b"1" * 9000, "b": b"1" * 9000, "c": b"2" * 9000, "d": b"2" * 9000}
        for name, data in contents.items():
            (tmp_path / name).write_bytes(data)
        files = make_records([tmp_path / n for n in "abcd"])
        stats = DeduplicationStats()
        grouper = FileGrouperImpl()

        groups = [CandidateGroup(size=9000, files=files)]
        groups = PartialDigestStage(grouper).process(groups, stats)
        groups = FullDigestStage(grouper).process(groups, stats)

        assert [[f.name for f in g.files] for g in groups] == [["a", "b"], ["c", "d"]]
        assert stats.dropped == []

    def test_unreadable_file_is_read_drop(self, tmp_path):
        (tmp_path / "a").write_bytes(b"same")
        (tmp_path / "b").write_bytes(b"same")
        files = make_records([tmp_path / "a", tmp_path / "b"])
        files.append(FileRecord(str(tmp_path / "vanished"), 4))
        stats = DeduplicationStats()

        groups = PartialDigestStage(FileGrouperImpl()).process([CandidateGroup(size=4, files=files)], stats)

        assert len(groups) == 1
        assert stats.dropped[0].reason is DropReason.READ
        assert stats.dropped[0].stage is Stage.PARTIAL

    def test_stopped_between_groups(self):
        calls = iter([False, True])
        stage = PartialDigestStage(FileGrouperImpl())
        groups = [group_of(FileRecord("/a", 10), FileRecord("/b", 10))]
        assert stage.process(groups, DeduplicationStats(), stopped_flag=lambda: next(calls)) == []


class TestByteVerifyStage:
    def test_all_equal(self):
        files = [FileRecord(p, 10) for p in ("/a", "/b", "/c")]
        comparator = FakeComparator({"/a": 1, "/b": 1, "/c": 1})
        stats = DeduplicationStats()

        groups = ByteVerifyStage(comparator).process([group_of(*files)], stats)

        assert paths(groups) == [["/a", "/b", "/c"]]
        # k - 1 comparisons, all against the anchor
        assert comparator.calls == [("/a", "/b"), ("/a", "/c")]
        assert stats.comparisons == 2

    def test_stragglers_are_reclustered(self):
        files = [FileRecord(p, 10) for p in ("/a1", "/b1", "/a2", "/b2", "/c")]
        comparator = FakeComparator({"/a1": "A", "/b1": "B", "/a2": "A", "/b2": "B", "/c": "C"})
        stats = DeduplicationStats()

        groups = ByteVerifyStage(comparator).process([group_of(*files)], stats)

        assert paths(groups) == [["/a1", "/a2"], ["/b1", "/b2"]]
        assert [(d.path, d.reason) for d in stats.dropped] == [("/c", DropReason.MISMATCH)]
        assert stats.failure_count == 0

    def test_pair_mismatch_drops_both(self):
        files = [FileRecord("/a", 10), FileRecord("/b", 10)]
        stats = DeduplicationStats()
        groups = ByteVerifyStage(FakeComparator({"/a": 1, "/b": 2})).process([group_of(*files)], stats)
        assert groups == []
        assert {d.path for d in stats.dropped} == {"/a", "/b"}
        assert all(d.reason is DropReason.MISMATCH for d in stats.dropped)

    def test_unreadable_candidate_is_dropped_alone(self):
        files = [FileRecord(p, 10) for p in ("/a", "/b", "/c")]
        comparator = FakeComparator({"/a": 1, "/b": 1, "/c": 1}, broken=["/b"])
        stats = DeduplicationStats()

        groups = ByteVerifyStage(comparator).process([group_of(*files)], stats)

        assert paths(groups) == [["/a", "/c"]]
        assert [(d.path, d.reason) for d in stats.dropped] == [("/b", DropReason.READ)]

    def test_unreadable_anchor_restarts_with_next_file(self):
        files = [FileRecord(p, 10) for p in ("/a", "/b", "/c")]
        comparator = FakeComparator({"/a": 1, "/b": 1, "/c": 1}, broken=["/a"])
        stats = DeduplicationStats()

        groups = ByteVerifyStage(comparator).process([group_of(*files)], stats)

        assert paths(groups) == [["/b", "/c"]]
        assert [(d.path, d.reason) for d in stats.dropped] == [("/a", DropReason.READ)]
        assert stats.failure_count == 1

    def test_hardlinks_excluded_and_recorded(self):
        a = FileRecord("/a", 10, device=1, inode=100)
        a_link = FileRecord("/a_link", 10, device=1, inode=100)
        b = FileRecord("/b", 10, device=1, inode=200)
        comparator = FakeComparator({"/a": 1, "/a_link": 1, "/b": 1})
        stats = DeduplicationStats()

        groups = ByteVerifyStage(comparator).process([group_of(a, a_link, b)], stats)

        assert paths(groups) == [["/a", "/b"]]
        assert [(r.anchor.path, r.linked.path) for r in stats.hardlinks] == [("/a", "/a_link")]
        # the link itself is never compared
        assert ("/a", "/a_link") not in comparator.calls
        assert stats.dropped == []

    def test_hardlinks_included_on_request(self):
        a = FileRecord("/a", 10, device=1, inode=100)
        a_link = FileRecord("/a_link", 10, device=1, inode=100)
        b = FileRecord("/b", 10, device=1, inode=200)
        comparator = FakeComparator({"/a": 1, "/a_link": 1, "/b": 1})
        stats = DeduplicationStats()

        groups = ByteVerifyStage(comparator, include_hardlinks=True).process([group_of(a, a_link, b)], stats)

        assert paths(groups) == [["/a", "/a_link", "/b"]]
        assert len(stats.hardlinks) == 1

    def test_only_hardlinks_give_no_group(self):
        a = FileRecord("/a", 10, device=1, inode=100)
        a_link = FileRecord("/a_link", 10, device=1, inode=100)
        stats = DeduplicationStats()

        groups = ByteVerifyStage(FakeComparator({})).process([group_of(a, a_link)], stats)

        assert groups == []
        assert len(stats.hardlinks) == 1
        assert stats.dropped == []

    def test_link_to_later_member_is_detected(self):
        a = FileRecord("/a", 10, device=1, inode=100)
        b = FileRecord("/b", 10, device=1, inode=200)
        b_link = FileRecord("/b_link", 10, device=1, inode=200)
        stats = DeduplicationStats()

        groups = ByteVerifyStage(FakeComparator({"/a": 1, "/b": 1})).process([group_of(a, b, b_link)], stats)

        assert paths(groups) == [["/a", "/b"]]
        assert [(r.anchor.path, r.linked.path) for r in stats.hardlinks] == [("/b", "/b_link")]

    def test_link_of_unreadable_anchor_is_not_recorded(self):
        a = FileRecord("/a", 10, device=1, inode=100)
        a_link = FileRecord("/a_link", 10, device=1, inode=100)
        b = FileRecord("/b", 10, device=1, inode=200)
        comparator = FakeComparator({"/a": 1, "/a_link": 1, "/b": 1}, broken=["/a"])
        stats = DeduplicationStats()

        groups = ByteVerifyStage(comparator).process([group_of(a, a_link, b)], stats)

        assert paths(groups) == [["/a_link", "/b"]]
        assert stats.hardlinks == []
        assert [(d.path, d.reason) for d in stats.dropped] == [("/a", DropReason.READ)]

    def test_restarted_round_records_each_link_once(self):
        x = FileRecord("/x", 10, device=1, inode=1)
        b = FileRecord("/b", 10, device=1, inode=2)
        b_link = FileRecord("/b_link", 10, device=1, inode=2)
        c = FileRecord("/c", 10, device=1, inode=3)
        comparator = FakeComparator({"/x": 1, "/b": 1, "/b_link": 1, "/c": 1})
        original_equal = comparator.files_equal

        def anchor_breaks_on_second_read(first, second):
            # /x reads fine once, then fails
            if first.path == "/x" and len(comparator.calls) == 1:
                comparator.calls.append((first.path, second.path))
                raise ReadError("/x", "Input/output error")
            return original_equal(first, second)

        comparator.files_equal = anchor_breaks_on_second_read
        stats = DeduplicationStats()

        groups = ByteVerifyStage(comparator).process([group_of(x, b, b_link, c)], stats)

        assert paths(groups) == [["/b", "/c"]]
        assert [(r.anchor.path, r.linked.path) for r in stats.hardlinks] == [("/b", "/b_link")]
        assert [(d.path, d.reason) for d in stats.dropped] == [("/x", DropReason.READ)]

    def test_unsupported_detection_compares_links(self):
        a = FileRecord("/a", 10, device=1, inode=100)
        a_link = FileRecord("/a_link", 10, device=1, inode=100)
        comparator = FakeComparator({"/a": 1, "/a_link": 1})
        stats = DeduplicationStats()

        stage = ByteVerifyStage(comparator, HardlinkClassifier(supported=False))
        groups = stage.process([group_of(a, a_link)], stats)

        assert paths(groups) == [["/a", "/a_link"]]
        assert stats.hardlinks == []

    def test_empty_group_is_accepted_without_reading(self):
        files = [FileRecord("/e1", 0, 1, 1), FileRecord("/e2", 0, 1, 2)]
        comparator = FakeComparator({})
        stats = DeduplicationStats()

        groups = ByteVerifyStage(comparator).process([group_of(*files, size=0)], stats)

        assert paths(groups) == [["/e1", "/e2"]]
        assert comparator.calls == []
        assert stats.comparisons == 0

    def test_stopped_returns_nothing(self):
        files = [FileRecord("/a", 10), FileRecord("/b", 10)]
        stage = ByteVerifyStage(FakeComparator({"/a": 1, "/b": 1}))
        assert stage.process([group_of(*files)], DeduplicationStats(), stopped_flag=lambda: True) == []
