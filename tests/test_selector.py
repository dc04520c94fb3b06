"""
Tests for master/extra selection: the file that is kept must be predictable.
"""
import pytest

from checkdupes.core.models import DuplicateGroup, FileRecord
from checkdupes.core.selector import MasterSelector


def _group(*records):
    return DuplicateGroup(key=(), files=list(records))


class TestMasterSelector:

    def test_first_indexed_record_is_master(self):
        group = _group(
            FileRecord(path="/b", size=1, index=3),
            FileRecord(path="/a", size=1, index=1),
            FileRecord(path="/c", size=1, index=2),
        )
        master, extras = MasterSelector.select(group)
        assert master.path == "/a"
        assert [f.path for f in extras] == ["/c", "/b"]

    def test_target_record_wins_over_earlier_reference_record(self):
        group = _group(
            FileRecord(path="/ref/a", size=1, index=0, is_from_reference=True),
            FileRecord(path="/target/a", size=1, index=5),
        )
        master, extras = MasterSelector.select(group)
        assert master.path == "/target/a"
        assert extras[0].is_from_reference

    def test_split_covers_every_group(self):
        groups = [
            _group(FileRecord(path="/a1", size=1, index=0), FileRecord(path="/a2", size=1, index=1)),
            _group(FileRecord(path="/b1", size=2, index=2), FileRecord(path="/b2", size=2, index=3),
                   FileRecord(path="/b3", size=2, index=4)),
        ]
        split = MasterSelector.split(groups)
        assert [f.path for f in split.masters] == ["/a1", "/b1"]
        assert [f.path for f in split.extras] == ["/a2", "/b2", "/b3"]
        assert split.pairs[2] == (split.extras[2], split.masters[1])
        assert split.pairs[2][1].path == "/b1"
        assert split.extra_bytes == 5

    def test_selection_does_not_modify_group(self):
        records = [FileRecord(path="/b", size=1, index=1), FileRecord(path="/a", size=1, index=0)]
        group = _group(*records)
        MasterSelector.select(group)
        assert group.files == records

    def test_empty_group_rejected(self):
        with pytest.raises(ValueError):
            MasterSelector.select(_group())
