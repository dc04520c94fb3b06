"""
Tests for the content probes: head/tail digest and full-content checksum.
"""
import hashlib
import os

import pytest
import xxhash

from checkdupes.core.hasher import ContentProberImpl, HashlibAlgorithmImpl, XXHashAlgorithmImpl
from checkdupes.core.models import FileRecord
from checkdupes.exceptions import FileUnreadable


def _record(path) -> FileRecord:
    return FileRecord(path=str(path), size=os.path.getsize(path))


class TestHeadtailProbe:

    def test_digest_covers_first_and_last_bytes(self, tmp_path):
        path = tmp_path / "f.bin"
        path.write_bytes(b"0123456789" + b"x" * 100 + b"abcdefghij")
        prober = ContentProberImpl(headtail_length=10)
        assert prober.headtail_probe(_record(path)) == xxhash.xxh64(b"0123456789abcdefghij").digest()

    def test_small_file_reads_overlapping_head_and_tail(self, tmp_path):
        path = tmp_path / "small.bin"
        path.write_bytes(b"abc")
        prober = ContentProberImpl(headtail_length=10)
        assert prober.headtail_probe(_record(path)) == xxhash.xxh64(b"abcabc").digest()

    def test_same_ends_different_middle_collide(self, test_files):
        prober = ContentProberImpl(headtail_length=10)
        assert prober.headtail_probe(_record(test_files["A"])) == prober.headtail_probe(_record(test_files["B"]))

    def test_digest_cached_on_record(self, tmp_path):
        path = tmp_path / "f.bin"
        path.write_bytes(b"content")
        record = _record(path)
        first = ContentProberImpl().headtail_probe(record)
        path.unlink()
        assert record.hashes.headtail == first
        assert ContentProberImpl().headtail_probe(record) == first

    def test_missing_file_raises_unreadable(self, tmp_path):
        record = FileRecord(path=str(tmp_path / "gone.bin"), size=10)
        with pytest.raises(FileUnreadable):
            ContentProberImpl().headtail_probe(record)


class TestChecksumProbe:

    @pytest.mark.parametrize("algorithm", ["md5", "sha1", "sha256"])
    def test_matches_hashlib(self, tmp_path, algorithm):
        data = os.urandom(5000)
        path = tmp_path / "f.bin"
        path.write_bytes(data)
        prober = ContentProberImpl(checksum_algorithm=HashlibAlgorithmImpl(algorithm), block_size=1024)
        assert prober.checksum_probe(_record(path)) == hashlib.new(algorithm, data).digest()

    def test_distinguishes_headtail_collision(self, test_files):
        prober = ContentProberImpl()
        assert prober.checksum_probe(_record(test_files["A"])) != prober.checksum_probe(_record(test_files["B"]))
        assert prober.checksum_probe(_record(test_files["A"])) == prober.checksum_probe(_record(test_files["C"]))

    def test_missing_file_raises_unreadable(self, tmp_path):
        record = FileRecord(path=str(tmp_path / "gone.bin"), size=10)
        with pytest.raises(FileUnreadable) as exc_info:
            ContentProberImpl().checksum_probe(record)
        assert exc_info.value.path == record.path


class TestAlgorithms:

    def test_unknown_hashlib_algorithm_rejected(self):
        with pytest.raises(ValueError):
            HashlibAlgorithmImpl("crc32")

    def test_incremental_equals_one_shot(self):
        algorithm = XXHashAlgorithmImpl()
        digest = algorithm.new()
        digest.update(b"abc")
        digest.update(b"def")
        assert digest.digest() == algorithm.hash(b"abcdef")
