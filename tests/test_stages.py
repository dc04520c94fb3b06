"""
Unit tests for narrowing pipeline stages.
Verifies hard-link collapsing, metadata splitting and content probe stages.
"""
import os
from unittest import mock

import pytest

from checkdupes.core.grouper import FileGrouperImpl
from checkdupes.core.models import DuplicateGroup, FileRecord, MatchCriterion
from checkdupes.core.stages import InodeStage, MetadataStage, ProbeStage, build_stage


class TestInodeStage:

    def test_collapse_keeps_first_record_per_inode(self):
        files = [
            FileRecord(path="/b", size=1, inode=1, device=1, index=1),
            FileRecord(path="/a", size=1, inode=1, device=1, index=0),
            FileRecord(path="/c", size=1, inode=2, device=1, index=2),
        ]
        kept = InodeStage.collapse(files)
        assert [f.path for f in kept] == ["/a", "/c"]

    def test_match_groups_hard_links(self):
        files = [
            FileRecord(path="/a", size=1, inode=1, device=1),
            FileRecord(path="/b", size=1, inode=1, device=1),
            FileRecord(path="/c", size=1, inode=2, device=1),
        ]
        groups = InodeStage(FileGrouperImpl()).match(files)
        assert len(groups) == 1
        assert groups[0].criteria == [MatchCriterion.INODE]


class TestMetadataStage:

    def test_splits_every_group_and_accumulates_key(self):
        files = [
            FileRecord(path="/a", size=10, mod_time=1),
            FileRecord(path="/b", size=10, mod_time=1),
            FileRecord(path="/c", size=10, mod_time=2),
        ]
        groups = [DuplicateGroup(key=((MatchCriterion.SIZE, 10),), files=files)]
        result = MetadataStage(FileGrouperImpl(), MatchCriterion.TIME).process(groups, [])

        assert len(result) == 1
        assert [f.path for f in result[0].files] == ["/a", "/b"]
        assert result[0].key == ((MatchCriterion.SIZE, 10), (MatchCriterion.TIME, 1))
        # Input groups are left untouched
        assert len(groups[0].files) == 3

    def test_rejects_content_criterion(self):
        with pytest.raises(ValueError):
            MetadataStage(FileGrouperImpl(), MatchCriterion.CHECKSUM)

    def test_stops_when_cancelled(self):
        groups = [DuplicateGroup(key=(), files=[FileRecord(path="/a", size=1), FileRecord(path="/b", size=1)])]
        stage = MetadataStage(FileGrouperImpl(), MatchCriterion.SIZE)
        assert stage.process(groups, [], stopped_flag=lambda: True) == []


class TestProbeStage:

    def test_headtail_then_checksum_splits_collision(self, test_files):
        files = [FileRecord(path=str(test_files[k]), size=os.path.getsize(test_files[k])) for k in ("A", "B", "C")]
        grouper = FileGrouperImpl()
        groups = [DuplicateGroup(key=(), files=files)]

        after_headtail = ProbeStage(grouper, MatchCriterion.HEADTAIL).process(groups, [])
        assert len(after_headtail) == 1
        assert len(after_headtail[0].files) == 3

        after_checksum = ProbeStage(grouper, MatchCriterion.CHECKSUM).process(after_headtail, [])
        assert len(after_checksum) == 1
        assert [f.path for f in after_checksum[0].files] == [str(test_files["A"]), str(test_files["C"])]

    def test_unreadable_records_leave_with_error(self, tmp_path):
        present = tmp_path / "a.bin"
        present.write_bytes(b"data")
        files = [
            FileRecord(path=str(present), size=4),
            FileRecord(path=str(tmp_path / "gone.bin"), size=4),
        ]
        errors = []
        result = ProbeStage(FileGrouperImpl(), MatchCriterion.CHECKSUM).process(
            [DuplicateGroup(key=(), files=files)], errors
        )
        assert result == []
        assert len(errors) == 1

    def test_progress_callback_called(self, test_files):
        files = [FileRecord(path=str(test_files[k]), size=os.path.getsize(test_files[k])) for k in ("A", "C")]
        calls = []
        ProbeStage(FileGrouperImpl(), MatchCriterion.CHECKSUM).process(
            [DuplicateGroup(key=(), files=files)], [],
            progress_callback=lambda stage, current, total: calls.append((stage, current, total))
        )
        assert calls
        assert calls[-1][1] == calls[-1][2] == 2

    def test_groups_split_on_one_batch_read(self, test_files):
        files = [FileRecord(path=str(test_files[k]), size=os.path.getsize(test_files[k])) for k in ("A", "B", "C")]
        groups = [DuplicateGroup(key=(), files=files[:2]), DuplicateGroup(key=(), files=[files[2], files[0]])]
        grouper = FileGrouperImpl()

        with mock.patch.object(grouper, "probe", wraps=grouper.probe) as batch_read:
            result = ProbeStage(grouper, MatchCriterion.CHECKSUM).process(groups, [])

        batch_read.assert_called_once()
        assert [[f.path for f in g.files] for g in result] == [[str(test_files["C"]), str(test_files["A"])]]


def test_build_stage_picks_stage_type():
    grouper = FileGrouperImpl()
    assert isinstance(build_stage(grouper, MatchCriterion.HEADTAIL), ProbeStage)
    assert isinstance(build_stage(grouper, MatchCriterion.NAME), MetadataStage)
