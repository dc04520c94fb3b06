"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/stages.py
Narrowing pipeline stages for checkdupes' multi-stage duplicate detection engine.

CLASS HIERARCHY
---------------
InodeStage          : Hard-link discovery or hard-link collapsing (always first)
CriterionStageBase  : Shared split-every-group logic for one criterion
MetadataStage       : Size / name / extension / time, read from the record
ProbeStage          : Head/tail and checksum, content read before partitioning

STAGE CONTRACTS
---------------
Each criterion stage implements a consistent `process()` interface that:
  • Accepts candidate groups from the previous stage
  • Splits every group by its own criterion, so keys accumulate (intersection)
  • Returns new groups of 2+ records, never mutating the ones it received
  • Appends per-file failures to the shared error list
  • Reports progress via callback (stage name, processed count, total count)
  • Respects cancellation via stopped_flag callback
"""

import logging
from typing import Callable, List, Optional

from checkdupes.core.grouper import FileGrouperImpl
from checkdupes.core.interfaces import MatchStage
from checkdupes.core.models import DuplicateGroup, FileError, FileRecord, MatchCriterion

logger = logging.getLogger(__name__)


class InodeStage:
    """
    Runs before every other stage.
    Either reports hard links as duplicates, or keeps one record per inode so
    several links to the same data are never counted as duplicates of each other.
    """
    def __init__(self, grouper: FileGrouperImpl):
        self.grouper = grouper

    def get_stage_name(self) -> str:
        return MatchCriterion.INODE.display_name

    def match(self, files: List[FileRecord]) -> List[DuplicateGroup]:
        """Groups records sharing (device, inode)."""
        return [
            DuplicateGroup(key=((MatchCriterion.INODE, inode_key),), files=group_files)
            for inode_key, group_files in self.grouper.group_by_inode(files).items()
        ]

    @staticmethod
    def collapse(files: List[FileRecord]) -> List[FileRecord]:
        """Keeps the first record (stable order) per (device, inode)."""
        seen = set()
        representatives = []
        for file in sorted(files, key=lambda f: f.order_key):
            if file.inode_key in seen:
                logger.debug(f"Collapsed hard link: {file.path}")
                continue
            seen.add(file.inode_key)
            representatives.append(file)
        collapsed = len(files) - len(representatives)
        if collapsed:
            logger.info(f"Collapsed {collapsed} hard links")
        return representatives


class CriterionStageBase(MatchStage):
    """
    Base class for stages splitting groups by one criterion.
    """

    def __init__(self, grouper: FileGrouperImpl, criterion: MatchCriterion):
        self.grouper = grouper
        self.criterion = criterion

    def get_stage_name(self) -> str:
        return self.criterion.display_name

    def _split(
        self,
        groups: List[DuplicateGroup],
        errors: List[FileError],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[DuplicateGroup]:
        new_groups = []
        total_files = sum(len(group.files) for group in groups)
        processed_files = 0

        for group in groups:
            if stopped_flag and stopped_flag():
                return []

            partitions = self._partition(group.files, errors)
            for value, files_in_group in partitions.items():
                new_groups.append(group.refine(self.criterion, value, files_in_group))

            processed_files += len(group.files)
            if progress_callback:
                progress_callback(self.get_stage_name(), processed_files, total_files)

        return new_groups

    def _partition(self, files: List[FileRecord], errors: List[FileError]):
        return self.grouper.group_by(files, self.criterion, errors)


class MetadataStage(CriterionStageBase):
    """Size, name, extension and modification time: no file content is read."""

    def __init__(self, grouper: FileGrouperImpl, criterion: MatchCriterion):
        if criterion.is_content_probe or criterion == MatchCriterion.INODE:
            raise ValueError(f"{criterion.value} is not a metadata criterion")
        super().__init__(grouper, criterion)

    def process(
        self,
        groups: List[DuplicateGroup],
        errors: List[FileError],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[DuplicateGroup]:
        if stopped_flag and stopped_flag():
            return []
        return self._split(groups, errors, stopped_flag, progress_callback)


class ProbeStage(CriterionStageBase):
    """
    Head/tail and checksum stages.
    Every surviving record is probed in one batch (parallel reads), then groups
    are split on the cached digests. Unreadable records drop out with an error.
    """

    def __init__(self, grouper: FileGrouperImpl, criterion: MatchCriterion):
        if not criterion.is_content_probe:
            raise ValueError(f"{criterion.value} is not a content probe")
        super().__init__(grouper, criterion)

    def process(
        self,
        groups: List[DuplicateGroup],
        errors: List[FileError],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[DuplicateGroup]:
        if stopped_flag and stopped_flag():
            return []

        candidates = [f for group in groups for f in group.files]
        if progress_callback:
            progress_callback(f"Reading ({self.get_stage_name()})", 0, len(candidates))
        readable = self.grouper.probe(candidates, self.criterion, errors)
        if progress_callback:
            progress_callback(f"Reading ({self.get_stage_name()})", len(candidates), len(candidates))

        readable_ids = {id(f) for f in readable}
        probed_groups = [
            DuplicateGroup(key=group.key, files=[f for f in group.files if id(f) in readable_ids])
            for group in groups
        ]
        return self._split(probed_groups, [], stopped_flag, progress_callback)

    def _partition(self, files: List[FileRecord], errors: List[FileError]):
        # Digests were cached by the batch read above
        return self.grouper.group_by_value(files, self.criterion)


def build_stage(grouper: FileGrouperImpl, criterion: MatchCriterion) -> CriterionStageBase:
    """Returns the stage implementing a non-inode criterion."""
    if criterion.is_content_probe:
        return ProbeStage(grouper, criterion)
    return MetadataStage(grouper, criterion)
