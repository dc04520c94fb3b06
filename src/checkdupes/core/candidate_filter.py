"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

candidate_filter.py
Implements the pipeline-based narrowing engine using FileRecord objects.
    inode → size → name → extension → time → headtail → checksum
Only the selected criteria run, cheapest first; each stage refines the groups
left by the previous one, so content is read only for metadata survivors.
"""
import logging
import time
from typing import Callable, List, Optional, Sequence

from checkdupes.core.grouper import FileGrouperImpl
from checkdupes.core.interfaces import CandidateFilter
from checkdupes.core.models import (
    DuplicateGroup, FileError, FileRecord, MatchCriterion, SearchResult, SearchStats
)
from checkdupes.core.stages import InodeStage, build_stage

logger = logging.getLogger(__name__)


# =============================
# Main Engine Class
# =============================
class CandidateFilterImpl(CandidateFilter):
    """
    Implements multi-stage duplicate detection using a pipeline architecture.
    Collects detailed statistics and per-file errors.
    """
    def __init__(self, grouper: FileGrouperImpl = None):
        self.grouper = grouper or FileGrouperImpl()

    def find_duplicates(
        self,
        files: List[FileRecord],
        criteria: Sequence[MatchCriterion],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> SearchResult:
        """
        Main narrowing pipeline.
        Args:
            files: Indexed records
            criteria: Selected criteria (any order, duplicates ignored)
            stopped_flag: Function that returns True if operation should be stopped.
            progress_callback: Reports progress per stage.
        Returns:
            SearchResult with groups in stable order; empty if nothing survived.
        """
        stats = SearchStats()
        stats.files_indexed = len(files)
        errors: List[FileError] = []
        total_start_time = time.time()

        selected = sorted(set(criteria), key=lambda c: c.cost)
        inode_stage = InodeStage(self.grouper)

        # Inode stage: identical inode already implies identical content
        start_time = time.time()
        if MatchCriterion.INODE in selected:
            groups = inode_stage.match(files)
            CandidateFilterImpl._update_stats(stats, inode_stage.get_stage_name(), time.time() - start_time, groups)
            return self._finish(groups, stats, errors, total_start_time)

        representatives = inode_stage.collapse(files)
        groups = [DuplicateGroup(key=(), files=representatives)]
        stats.update_stage(
            stage_name=inode_stage.get_stage_name(),
            groups_found=0,
            files_processed=len(representatives),
            duration=time.time() - start_time
        )

        if not selected:
            selected = [MatchCriterion.SIZE]

        for criterion in selected:
            stage = build_stage(self.grouper, criterion)
            start_time = time.time()
            groups = stage.process(
                groups,
                errors,
                stopped_flag=stopped_flag,
                progress_callback=progress_callback
            )
            CandidateFilterImpl._update_stats(stats, stage.get_stage_name(), time.time() - start_time, groups)
            logger.debug(f"{stage.get_stage_name()}: {sum(len(g.files) for g in groups)} candidates left")

            if not groups:
                logger.info(f"No candidates left after {criterion.value} matching")
                break

        return self._finish(groups, stats, errors, total_start_time)

    @staticmethod
    def _finish(
        groups: List[DuplicateGroup],
        stats: SearchStats,
        errors: List[FileError],
        total_start_time: float
    ) -> SearchResult:
        # Fix member and group order independently of probe completion order
        ordered = [
            DuplicateGroup(key=g.key, files=sorted(g.files, key=lambda f: f.order_key))
            for g in groups
        ]
        ordered.sort(key=lambda g: g.files[0].order_key)
        stats.total_time = time.time() - total_start_time
        return SearchResult(groups=ordered, stats=stats, errors=errors)

    @staticmethod
    def _update_stats(
        stats: SearchStats,
        stage: str,
        duration: float,
        groups: List[DuplicateGroup]
    ):
        """
        Helper to update SearchStats object.
        """
        stats.update_stage(
            stage_name=stage,
            groups_found=len(groups),
            files_processed=sum(len(g.files) for g in groups),
            duration=duration
        )
