"""
Tests for FileIndexerImpl: depth bounds, filtering and emission order.
"""
import os
import sys

import pytest

from checkdupes.core.scanner import FileIndexerImpl
from checkdupes.exceptions import InvalidDirectory


class TestFileIndexer:

    def test_skips_empty_files(self, test_files):
        root = test_files["A"].parent
        records = FileIndexerImpl(str(root)).scan()
        paths = {r.path for r in records}
        assert str(test_files["empty"]) not in paths
        assert str(test_files["A"]) in paths
        assert len(records) == 4

    def test_flat_search_ignores_subdirectories(self, test_files):
        root = test_files["A"].parent
        records = FileIndexerImpl(str(root), max_depth=1).scan()
        assert str(test_files["C"]) not in {r.path for r in records}
        assert len(records) == 3

    def test_max_depth_bounds_walk(self, tmp_path):
        deep = tmp_path / "l1" / "l2" / "l3"
        deep.mkdir(parents=True)
        for directory in (tmp_path, tmp_path / "l1", tmp_path / "l1" / "l2", deep):
            (directory / "f.bin").write_bytes(b"x")

        assert len(FileIndexerImpl(str(tmp_path), max_depth=2).scan()) == 2
        assert len(FileIndexerImpl(str(tmp_path), max_depth=3).scan()) == 3
        assert len(FileIndexerImpl(str(tmp_path)).scan()) == 4

    def test_indices_follow_sorted_walk_order(self, tmp_path):
        for name in ("c.bin", "a.bin", "b.bin"):
            (tmp_path / name).write_bytes(b"data")
        records = FileIndexerImpl(str(tmp_path), workers=4).scan()
        assert [os.path.basename(r.path) for r in records] == ["a.bin", "b.bin", "c.bin"]
        assert [r.index for r in records] == [0, 1, 2]

    def test_index_offset_and_reference_flag(self, tmp_path):
        (tmp_path / "a.bin").write_bytes(b"data")
        records = FileIndexerImpl(str(tmp_path), index_offset=10, is_reference=True).scan()
        assert records[0].index == 10
        assert records[0].is_from_reference is True

    @pytest.mark.skipif(sys.platform == "win32", reason="Symlinks need privileges on Windows")
    def test_symlinks_never_indexed(self, tmp_path):
        real = tmp_path / "real.bin"
        real.write_bytes(b"data")
        (tmp_path / "link.bin").symlink_to(real)
        linked_dir = tmp_path / "linked_dir"
        linked_dir.symlink_to(tmp_path, target_is_directory=True)

        records = FileIndexerImpl(str(tmp_path)).scan()
        assert [r.path for r in records] == [str(real)]

    def test_hard_links_indexed_with_same_inode(self, tmp_path):
        original = tmp_path / "a.bin"
        original.write_bytes(b"data")
        os.link(original, tmp_path / "b.bin")
        records = FileIndexerImpl(str(tmp_path)).scan()
        assert len(records) == 2
        assert records[0].inode_key == records[1].inode_key

    def test_excluded_dirs_skipped(self, test_files):
        root = test_files["A"].parent
        records = FileIndexerImpl(str(root), excluded_dirs=[str(root / "sub")]).scan()
        assert str(test_files["C"]) not in {r.path for r in records}

    def test_metadata_captured(self, test_files):
        records = FileIndexerImpl(str(test_files["A"].parent)).scan()
        record = next(r for r in records if r.path == str(test_files["A"]))
        assert record.size == test_files["A"].stat().st_size
        assert record.mod_time == 1_700_000_000_000_000_000
        assert record.name == "a"
        assert record.extension == "txt"

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(InvalidDirectory):
            FileIndexerImpl(str(tmp_path / "missing")).scan()

    def test_file_root_raises(self, tmp_path):
        file_path = tmp_path / "file.txt"
        file_path.write_text("x")
        with pytest.raises(InvalidDirectory):
            FileIndexerImpl(str(file_path)).scan()

    def test_cancelled_scan_returns_nothing(self, test_files):
        records = FileIndexerImpl(str(test_files["A"].parent)).scan(stopped_flag=lambda: True)
        assert records == []

    def test_progress_reported(self, test_files):
        calls = []
        FileIndexerImpl(str(test_files["A"].parent)).scan(
            progress_callback=lambda stage, current, total: calls.append((stage, current, total))
        )
        assert calls[0][0] == "indexing"
        assert calls[-1][1] == calls[-1][2]
