"""
Unified command orchestrators for searching.
This is the SINGLE source of truth for wiring the engine together, used by the CLI and tests.
"""
import logging
import os
from typing import Callable, List, Optional

from checkdupes.core.candidate_filter import CandidateFilterImpl
from checkdupes.core.grouper import FileGrouperImpl
from checkdupes.core.hasher import ContentProberImpl, HashlibAlgorithmImpl
from checkdupes.core.models import FileRecord, SearchParams, SearchResult
from checkdupes.core.reference import ReferenceDiff, ReferenceDiffEngine
from checkdupes.core.scanner import FileIndexerImpl
from checkdupes.exceptions import InvalidArgumentCombination, InvalidDirectory, NoDuplicatesFound

logger = logging.getLogger(__name__)


def build_candidate_filter(params: SearchParams) -> CandidateFilterImpl:
    """Engine configured from params (probe lengths, algorithm, workers)."""
    prober = ContentProberImpl(
        headtail_length=params.headtail_length,
        checksum_algorithm=HashlibAlgorithmImpl(params.checksum_algorithm)
    )
    return CandidateFilterImpl(FileGrouperImpl(prober, workers=params.workers))


class DuplicateSearchCommand:
    """
    Orchestrates a search over one tree:
    1. Index the target directory
    2. Narrow the records with the selected criteria

    Usage:
        params = SearchParams(root_dir="/data", criteria=[MatchCriterion.CHECKSUM])
        result = DuplicateSearchCommand().execute(
            params,
            progress_callback=cli_progress_printer,
            stopped_flag=signal_handler_check
        )
    """

    def __init__(self):
        self._files: List[FileRecord] = []

    def execute(
            self,
            params: SearchParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> SearchResult:
        """
        Returns:
            SearchResult with at least one duplicate group

        Raises:
            InvalidDirectory: If the root is missing or not a directory
            NoDuplicatesFound: If nothing survived narrowing
        """
        indexer = FileIndexerImpl(
            root_dir=params.root_dir,
            max_depth=params.max_depth,
            excluded_dirs=params.excluded_dirs,
            workers=params.workers
        )
        self._files = indexer.scan(stopped_flag=stopped_flag, progress_callback=progress_callback)

        if not self._files:
            raise NoDuplicatesFound()

        result = build_candidate_filter(params).find_duplicates(
            self._files,
            params.criteria,
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )

        if not result.groups:
            stages = list(result.stats.stage_stats)
            raise NoDuplicatesFound(stages[-1] if stages else "")

        return result

    def get_files(self) -> List[FileRecord]:
        """Get indexed files after execution."""
        return self._files.copy()


class ReferenceDiffCommand:
    """
    Orchestrates a reference diff:
    1. Index the target tree, then the reference tree (indices continue)
    2. Narrow the merged records and split reference files into extras/uniques
    """

    def execute(
            self,
            params: SearchParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> ReferenceDiff:
        if not params.reference_dir:
            raise InvalidArgumentCombination("A reference directory is required")
        self.validate_roots(params.root_dir, params.reference_dir)

        target_files = FileIndexerImpl(
            root_dir=params.root_dir,
            max_depth=params.max_depth,
            excluded_dirs=params.excluded_dirs,
            workers=params.workers
        ).scan(stopped_flag=stopped_flag, progress_callback=progress_callback)

        reference_files = FileIndexerImpl(
            root_dir=params.reference_dir,
            max_depth=params.max_depth,
            excluded_dirs=params.excluded_dirs,
            workers=params.workers,
            index_offset=len(target_files),
            is_reference=True
        ).scan(stopped_flag=stopped_flag, progress_callback=progress_callback)

        engine = ReferenceDiffEngine(build_candidate_filter(params))
        return engine.diff(
            target_files,
            reference_files,
            params.criteria,
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )

    @staticmethod
    def validate_roots(target_dir: str, reference_dir: str):
        """Rejects missing roots and trees that contain each other."""
        for directory in (target_dir, reference_dir):
            if not os.path.isdir(directory):
                raise InvalidDirectory(directory, "Directory does not exist" if not os.path.exists(directory)
                                       else "Not a directory")
        target = os.path.realpath(target_dir)
        reference = os.path.realpath(reference_dir)
        if os.path.commonpath([target, reference]) in (target, reference):
            raise InvalidArgumentCombination(
                f"Target and reference directories must not contain each other: {target_dir}, {reference_dir}"
            )
