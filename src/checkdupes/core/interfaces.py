"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the matching engine.
These protocols enforce structural typing using Python's `typing.Protocol` to ensure
consistency across modules while maintaining flexibility and modularity.

Key Components:
---------------
- HashAlgorithm: Standardized interface for hash functions (e.g., SHA-256, MD5, xxHash).
- ContentProber: Interface for the head/tail and full-content probes.
- FileIndexer: Interface for walking a tree and returning file records.
- FileGrouper: Interface for partitioning records by a key.
- MatchStage: Interface for one narrowing stage of the pipeline.
- CandidateFilter: Interface for the engine coordinating all stages.
"""

from typing import Protocol, List, Dict, Any, Optional, Callable, Sequence

from checkdupes.core.models import (
    FileRecord,
    DuplicateGroup,
    FileError,
    MatchCriterion,
    SearchResult,
)


class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in different hashing functions like SHA-256, MD5, or xxHash
    without affecting the rest of the matching logic.
    """

    def new(self) -> Any:
        """Returns a fresh incremental hash object (update()/digest())."""
        ...

    def hash(self, data: bytes) -> bytes:
        """Computes the hash of the provided byte data."""
        ...


class ContentProber(Protocol):
    """Interface for reading and digesting file content."""
    def headtail_probe(self, file: FileRecord) -> bytes: ...
    def checksum_probe(self, file: FileRecord) -> bytes: ...


class FileIndexer(Protocol):
    """
    Interface for walking file systems and collecting file metadata.
    """
    def scan(
        self,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[FileRecord]:
        """
        Index files from the configured directory.

        Args:
            stopped_flag: Function that returns True if operation should be canceled.
            progress_callback: Optional callback for reporting progress (stage, current, total).

        Returns:
            Records in deterministic emission order.
        """
        ...


class FileGrouper(Protocol):
    """
    Interface for partitioning records by any criterion value.
    """
    def group_by(
        self,
        files: Sequence[FileRecord],
        criterion: MatchCriterion,
        errors: Optional[List[FileError]] = None
    ) -> Dict[Any, List[FileRecord]]:
        """Partition files by a criterion, dropping singleton partitions."""
        ...


class MatchStage(Protocol):
    """
    Interface for a single narrowing stage.

    Each stage splits every incoming group by its own criterion and
    returns only partitions holding two or more records.
    """
    criterion: MatchCriterion

    def process(
        self,
        groups: List[DuplicateGroup],
        errors: List[FileError],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[DuplicateGroup]:
        """
        Args:
            groups: Current candidate groups.
            errors: List to append per-file failures to.
            stopped_flag: Optional function to check for cancellation.
            progress_callback: Optional callback for progress updates (stage, current, total).

        Returns:
            Narrower groups for the next stage.
        """
        ...


class CandidateFilter(Protocol):
    """
    Interface for the narrowing engine.

    Runs the inode stage, then every selected criterion cheapest first.
    """
    def find_duplicates(
        self,
        files: List[FileRecord],
        criteria: Sequence[MatchCriterion],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> SearchResult:
        ...
