"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Implements record partitioning using FileRecord objects and a ContentProber.
Metadata keys are read straight from the record; probe digests are computed on a
bounded thread pool, in submission order, only for the records passed in.
"""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Sequence

from checkdupes.core.hasher import ContentProberImpl
from checkdupes.core.interfaces import ContentProber, FileGrouper
from checkdupes.core.models import FileError, FileRecord, MatchCriterion
from checkdupes.exceptions import FileUnreadable

logger = logging.getLogger(__name__)


class FileGrouperImpl(FileGrouper):
    """
    A concrete implementation of FileGrouper.
    Uses an injected ContentProber instance for flexibility and testability.
    """

    def __init__(self, prober: ContentProber = None, workers: int = 1):
        self.prober = prober or ContentProberImpl()
        self.workers = max(1, workers)

    def group_by(
            self,
            files: Sequence[FileRecord],
            criterion: MatchCriterion,
            errors: Optional[List[FileError]] = None
    ) -> Dict[Any, List[FileRecord]]:
        """Groups files by the value of any match criterion, probing content first if needed."""
        if criterion.is_content_probe:
            files = self.probe(files, criterion, errors)
        return self.group_by_value(files, criterion)

    def group_by_value(self, files: Sequence[FileRecord], criterion: MatchCriterion) -> Dict[Any, List[FileRecord]]:
        """Groups files by the value the records already hold. Reads nothing from disk."""
        return self._group_by(files, lambda f: f.value_of(criterion))

    def group_by_inode(self, files: Sequence[FileRecord]) -> Dict[Any, List[FileRecord]]:
        """Groups hard links to the same data."""
        return self._group_by(files, lambda f: f.inode_key)

    def probe(
            self,
            files: Sequence[FileRecord],
            criterion: MatchCriterion,
            errors: Optional[List[FileError]] = None
    ) -> List[FileRecord]:
        """
        Computes the probe digest for every file.
        Returns the readable files in input order; unreadable ones are logged
        and appended to `errors`.
        """
        if criterion == MatchCriterion.HEADTAIL:
            probe_func = self.prober.headtail_probe
        elif criterion == MatchCriterion.CHECKSUM:
            probe_func = self.prober.checksum_probe
        else:
            raise ValueError(f"{criterion.value} is not a content probe")

        def safe_probe(file: FileRecord) -> Optional[FileUnreadable]:
            try:
                probe_func(file)
                return None
            except FileUnreadable as e:
                return e

        if self.workers > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                outcomes = list(executor.map(safe_probe, files))
        else:
            outcomes = [safe_probe(f) for f in files]

        readable = []
        for file, error in zip(files, outcomes):
            if error is None:
                readable.append(file)
                continue
            logger.warning(str(error))
            if errors is not None:
                errors.append(FileError(path=error.path, reason=error.reason))

        skipped_files = len(files) - len(readable)
        if skipped_files > 0:
            logger.warning(f"Skipped {skipped_files} files due to read errors")
        return readable

    @staticmethod
    def _group_by(files: Sequence[FileRecord], key_func: Callable[[FileRecord], Any]) -> Dict[Any, List[FileRecord]]:
        """
        Helper method to group files by any computed key.
        Args:
            files: Records to group, in stable order
            key_func: Function that computes a hashable key from a FileRecord
        Returns:
            Dict[key, List[FileRecord]] holding only partitions of 2+ records,
            each in input order
        """
        groups = defaultdict(list)
        for file in files:
            key = key_func(file)
            if key is not None:
                groups[key].append(file)

        # Avoid groups with less than 2 files
        return {key: group for key, group in groups.items() if len(group) >= 2}
