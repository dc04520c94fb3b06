"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/reference.py
Finds the files of a reference tree that are not already present in a target tree.

Target and reference records go through the same narrowing pipeline, target
records first. In every resulting group the master is chosen with target
priority, so any reference record sharing a group with a target record is an
extra (already present). All other reference records are uniques.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from checkdupes.core.candidate_filter import CandidateFilterImpl
from checkdupes.core.models import (
    DuplicateGroup, FileError, FileRecord, MatchCriterion, SearchStats
)
from checkdupes.core.selector import MasterSelector

logger = logging.getLogger(__name__)


@dataclass
class ReferenceDiff:
    """Outcome of diffing a reference tree against a target tree."""
    groups: List[DuplicateGroup]
    reference_extras: List[FileRecord]
    reference_uniques: List[FileRecord]
    stats: SearchStats
    errors: List[FileError] = field(default_factory=list)


class ReferenceDiffEngine:
    def __init__(self, candidate_filter: CandidateFilterImpl = None):
        self.candidate_filter = candidate_filter or CandidateFilterImpl()

    def diff(
        self,
        target_records: List[FileRecord],
        reference_records: List[FileRecord],
        criteria: Sequence[MatchCriterion],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> ReferenceDiff:
        if not all(f.is_from_reference for f in reference_records):
            raise ValueError("Reference records must be indexed with is_reference=True")
        merged = sorted(list(target_records) + list(reference_records), key=lambda f: f.order_key)

        result = self.candidate_filter.find_duplicates(
            merged,
            criteria,
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )

        # Hard links into the target are collapsed before matching: they are present already
        target_inodes = {f.inode_key for f in target_records}
        present = {id(f) for f in reference_records if f.inode_key in target_inodes}

        split = MasterSelector.split(result.groups)
        for extra, master in split.pairs:
            if extra.is_from_reference and not master.is_from_reference:
                present.add(id(extra))

        # Other links to a present reference record were collapsed away before matching
        present_inodes = {f.inode_key for f in reference_records if id(f) in present}
        present.update(id(f) for f in reference_records if f.inode_key in present_inodes)

        # Records that could not be probed are neither confirmed present nor unique
        unreadable = {e.path for e in result.errors}

        reference_extras = [f for f in reference_records if id(f) in present]
        reference_uniques = [
            f for f in reference_records
            if id(f) not in present and f.path not in unreadable
        ]
        logger.info(
            f"Reference diff: {len(reference_extras)} already present, "
            f"{len(reference_uniques)} unique"
        )

        return ReferenceDiff(
            groups=result.groups,
            reference_extras=reference_extras,
            reference_uniques=reference_uniques,
            stats=result.stats,
            errors=result.errors,
        )
