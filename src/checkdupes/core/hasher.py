"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements the content probes using the FileRecord class and pluggable hash algorithms.

ContentProberImpl computes the head/tail digest and the full-content checksum,
caching results in the record's FileHashes container.
"""

import hashlib
import logging
import os

import xxhash

from checkdupes.core.interfaces import ContentProber, HashAlgorithm
from checkdupes.core.models import FileRecord, SearchConfig
from checkdupes.exceptions import FileUnreadable

logger = logging.getLogger(__name__)


# Use the same way to implement and use any other hashing algorithm
class XXHashAlgorithmImpl(HashAlgorithm):
    def new(self):
        return xxhash.xxh64()

    def hash(self, data: bytes) -> bytes:
        return xxhash.xxh64(data).digest()


class HashlibAlgorithmImpl(HashAlgorithm):
    """Cryptographic digests from hashlib ("md5", "sha1", "sha256")."""

    def __init__(self, name: str = SearchConfig.DEFAULT_CHECKSUM_ALGORITHM):
        if name not in SearchConfig.CHECKSUM_ALGORITHMS:
            raise ValueError(f"Unsupported checksum algorithm: {name}")
        self.name = name

    def new(self):
        return hashlib.new(self.name)

    def hash(self, data: bytes) -> bytes:
        return hashlib.new(self.name, data).digest()


class ContentProberImpl(ContentProber):
    """
    Reads file content for the two expensive probes.
    Head/tail digests use a fast non-cryptographic algorithm; checksums use a
    cryptographic one since they are the final arbiter of equality.
    """

    def __init__(
            self,
            headtail_length: int = SearchConfig.HEADTAIL_LENGTH,
            headtail_algorithm: HashAlgorithm = None,
            checksum_algorithm: HashAlgorithm = None,
            block_size: int = SearchConfig.READ_BLOCK_SIZE
    ):
        self.headtail_length = headtail_length
        self.headtail_algorithm = headtail_algorithm or XXHashAlgorithmImpl()
        self.checksum_algorithm = checksum_algorithm or HashlibAlgorithmImpl()
        self.block_size = block_size

    def headtail_probe(self, file: FileRecord) -> bytes:
        """Computes and caches the digest of the first and last N bytes of a file."""
        if file.hashes.headtail is not None:
            return file.hashes.headtail
        try:
            with open(file.path, 'rb') as f:
                head = f.read(self.headtail_length)
                # Head and tail overlap on files smaller than 2N bytes
                size = f.seek(0, os.SEEK_END)
                f.seek(max(0, size - self.headtail_length))
                tail = f.read(self.headtail_length)
        except OSError as e:
            raise FileUnreadable(file.path, e.strerror or str(e)) from e

        result = self.headtail_algorithm.hash(head + tail)
        file.hashes.headtail = result
        return result

    def checksum_probe(self, file: FileRecord) -> bytes:
        """Computes and caches the digest of the whole file content."""
        if file.hashes.checksum is not None:
            return file.hashes.checksum
        digest = self.checksum_algorithm.new()
        try:
            with open(file.path, 'rb') as f:
                for block in iter(lambda: f.read(self.block_size), b''):
                    digest.update(block)
        except OSError as e:
            raise FileUnreadable(file.path, e.strerror or str(e)) from e

        result = digest.digest()
        file.hashes.checksum = result
        return result
