"""
Unit tests for data models: name splitting, record keys and run parameters.
"""
import pytest

from checkdupes.core.models import (
    NO_EXTENSION, DuplicateGroup, FileHashes, FileOperation, FileRecord,
    MasterExtraSplit, MatchCriterion, SearchParams, split_name
)
from checkdupes.exceptions import InvalidArgumentCombination


class TestSplitName:
    """Name/extension split at the last dot."""

    @pytest.mark.parametrize("basename, expected", [
        ("photo.JPG", ("photo", "jpg")),
        ("archive.tar.gz", ("archive.tar", "gz")),
        ("archive.", ("archive", "")),
        ("README", ("README", NO_EXTENSION)),
        (".bashrc", ("", "bashrc")),
    ])
    def test_split_name(self, basename, expected):
        assert split_name(basename) == expected

    def test_no_extension_differs_from_empty_extension(self):
        """'README' and 'README.' must not match on extension."""
        assert split_name("README")[1] != split_name("README.")[1]
        assert str(NO_EXTENSION) == "none"


class TestFileRecord:
    def test_name_and_extension_derived_from_path(self):
        record = FileRecord(path="/data/photos/IMG_01.Jpeg", size=10)
        assert record.name == "IMG_01"
        assert record.extension == "jpeg"

    def test_value_of_each_criterion(self):
        record = FileRecord(path="/x/a.txt", size=5, mod_time=42, inode=7, device=1,
                            hashes=FileHashes(headtail=b"h", checksum=b"c"))
        assert record.value_of(MatchCriterion.INODE) == (1, 7)
        assert record.value_of(MatchCriterion.SIZE) == 5
        assert record.value_of(MatchCriterion.NAME) == "a"
        assert record.value_of(MatchCriterion.EXTENSION) == "txt"
        assert record.value_of(MatchCriterion.TIME) == 42
        assert record.value_of(MatchCriterion.HEADTAIL) == b"h"
        assert record.value_of(MatchCriterion.CHECKSUM) == b"c"

    def test_order_key_puts_target_before_reference(self):
        target = FileRecord(path="/t/a", size=1, index=9)
        reference = FileRecord(path="/r/a", size=1, index=0, is_from_reference=True)
        assert sorted([reference, target], key=lambda f: f.order_key) == [target, reference]

    def test_hashes_must_be_bytes(self):
        with pytest.raises(ValueError):
            FileHashes(headtail="not bytes")


class TestDuplicateGroup:
    def test_refine_accumulates_key(self):
        files = [FileRecord(path="/a", size=1), FileRecord(path="/b", size=1)]
        group = DuplicateGroup(key=(), files=files)
        refined = group.refine(MatchCriterion.SIZE, 1, files)
        assert refined.criteria == [MatchCriterion.SIZE]
        assert refined.refine(MatchCriterion.TIME, 0, files).criteria == [MatchCriterion.SIZE, MatchCriterion.TIME]
        assert group.key == ()

    def test_extra_bytes(self):
        split = MasterExtraSplit(extras=[FileRecord(path="/a", size=10), FileRecord(path="/b", size=5)])
        assert split.extra_bytes == 15


class TestFileOperation:
    @pytest.mark.parametrize("operation, destructive", [
        (FileOperation.LIST, False),
        (FileOperation.SOFT_LINK, False),
        (FileOperation.MOVE, True),
        (FileOperation.MOVE_BACK, True),
        (FileOperation.HARDLINK_EXTRAS, True),
        (FileOperation.REMOVE_EXTRAS, True),
        (FileOperation.COPY_UNIQUES, True),
    ])
    def test_destructive_operations(self, operation, destructive):
        assert operation.is_destructive is destructive


class TestSearchParams:
    """Validation and normalization of run parameters."""

    def test_defaults_to_size_matching(self, tmp_path):
        params = SearchParams(root_dir=str(tmp_path))
        assert params.criteria == [MatchCriterion.SIZE]
        assert params.operation == FileOperation.LIST

    def test_criteria_sorted_by_cost_and_deduplicated(self, tmp_path):
        params = SearchParams(
            root_dir=str(tmp_path),
            criteria=[MatchCriterion.CHECKSUM, MatchCriterion.SIZE, MatchCriterion.TIME, MatchCriterion.SIZE]
        )
        assert params.criteria == [MatchCriterion.SIZE, MatchCriterion.TIME, MatchCriterion.CHECKSUM]

    @pytest.mark.parametrize("operation", [FileOperation.HARDLINK_EXTRAS, FileOperation.REMOVE_EXTRAS])
    def test_extras_operations_enable_checksum(self, tmp_path, operation):
        params = SearchParams(root_dir=str(tmp_path), criteria=[MatchCriterion.SIZE], operation=operation)
        assert MatchCriterion.CHECKSUM in params.criteria

    def test_copy_requires_reference(self, tmp_path):
        with pytest.raises(InvalidArgumentCombination):
            SearchParams(root_dir=str(tmp_path), operation=FileOperation.COPY_UNIQUES)

    def test_reference_only_with_copy(self, tmp_path):
        with pytest.raises(InvalidArgumentCombination):
            SearchParams(root_dir=str(tmp_path), reference_dir=str(tmp_path / "ref"))

    def test_inode_rejected_with_extras_operation(self, tmp_path):
        with pytest.raises(InvalidArgumentCombination, match="Inode"):
            SearchParams(root_dir=str(tmp_path), criteria=[MatchCriterion.INODE],
                         operation=FileOperation.REMOVE_EXTRAS)

    def test_permanent_only_with_remove(self, tmp_path):
        with pytest.raises(InvalidArgumentCombination):
            SearchParams(root_dir=str(tmp_path), operation=FileOperation.MOVE, permanent=True)

    @pytest.mark.parametrize("field_name, value", [
        ("max_depth", 0),
        ("headtail_length", 0),
        ("workers", 0),
        ("checksum_algorithm", "crc32"),
    ])
    def test_rejects_invalid_values(self, tmp_path, field_name, value):
        with pytest.raises(InvalidArgumentCombination):
            SearchParams(root_dir=str(tmp_path), **{field_name: value})

    def test_empty_root_rejected(self):
        with pytest.raises(ValueError):
            SearchParams(root_dir="")
