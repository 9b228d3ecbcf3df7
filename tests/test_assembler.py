"""
Tests for group assembly and the keep policy (newest copy survives).
"""
from keepone.core.assembler import GroupAssembler
from keepone.core.models import ScanEntry, ScanStats


class TestKeepPolicy:

    def test_newest_file_is_kept(self):
        """CRITICAL: The most recently modified copy is the one protected from deletion."""
        group = GroupAssembler.build_group("h", [
            ScanEntry("/a/old.bin", 10, modified=100.0),
            ScanEntry("/b/new.bin", 10, modified=300.0),
            ScanEntry("/c/mid.bin", 10, modified=200.0),
        ])
        assert [f.path for f in group.files] == ["/b/new.bin", "/c/mid.bin", "/a/old.bin"]
        assert group.kept_file.path == "/b/new.bin"
        assert sum(f.kept for f in group.files) == 1

    def test_nothing_selected_after_assembly(self):
        group = GroupAssembler.build_group("h", [ScanEntry("/a", 10, 1.0), ScanEntry("/b", 10, 2.0)])
        assert not any(f.selected for f in group.files)

    def test_equal_timestamps_fall_back_to_path_order(self):
        group = GroupAssembler.build_group("h", [
            ScanEntry("/z.bin", 10, modified=500.0),
            ScanEntry("/a.bin", 10, modified=500.0),
            ScanEntry("/m.bin", 10, modified=500.0),
        ])
        assert [f.path for f in group.files] == ["/a.bin", "/m.bin", "/z.bin"]
        assert group.kept_file.path == "/a.bin"

    def test_unknown_timestamps_sort_last(self):
        group = GroupAssembler.build_group("h", [
            ScanEntry("/a.bin", 10, modified=None),
            ScanEntry("/b.bin", 10, modified=1.0),
            ScanEntry("/c.bin", 10, modified=None),
        ])
        assert [f.path for f in group.files] == ["/b.bin", "/a.bin", "/c.bin"]

    def test_input_order_does_not_matter(self):
        entries = [ScanEntry(f"/{i}.bin", 10, modified=float(i % 3)) for i in range(9)]
        forward = GroupAssembler.build_group("h", entries)
        backward = GroupAssembler.build_group("h", list(reversed(entries)))
        assert [f.path for f in forward.files] == [f.path for f in backward.files]


class TestAssemble:

    def test_orders_by_wasted_size_then_hash(self):
        buckets = {
            "bbbb": [ScanEntry("/b1", 100), ScanEntry("/b2", 100)],             # wasted 100
            "aaaa": [ScanEntry("/a1", 50), ScanEntry("/a2", 50), ScanEntry("/a3", 50)],  # wasted 100
            "cccc": [ScanEntry("/c1", 500), ScanEntry("/c2", 500)],             # wasted 500
        }
        groups = GroupAssembler.assemble(buckets.items())
        assert [g.hash for g in groups] == ["cccc", "aaaa", "bbbb"]

    def test_single_member_buckets_are_ignored(self):
        groups = GroupAssembler.assemble([("x", [ScanEntry("/only", 10)])])
        assert groups == []


class TestRefreshMembers:

    def test_current_mtime_replaces_recorded_one(self, tmp_path, make_file):
        f = make_file(tmp_path / "a.bin", b"x" * 100, mtime=5_000)
        fresh = GroupAssembler.refresh_members([ScanEntry(str(f), 100, modified=1.0)])
        assert [e.modified for e in fresh] == [5_000]

    def test_resized_and_vanished_members_are_dropped(self, tmp_path, make_file):
        """CRITICAL: A member whose size changed after bucketing must not join the group."""
        same = make_file(tmp_path / "same.bin", b"x" * 100)
        grown = make_file(tmp_path / "grown.bin", b"x" * 300)
        stats = ScanStats()

        fresh = GroupAssembler.refresh_members([
            ScanEntry(str(same), 100),
            ScanEntry(str(grown), 100),
            ScanEntry(str(tmp_path / "gone.bin"), 100),
        ], stats)

        assert [e.path for e in fresh] == [str(same)]
        assert sorted(i.path for i in stats.issues) == sorted([str(grown), str(tmp_path / "gone.bin")])
        assert {i.stage for i in stats.issues} == {"assemble"}
