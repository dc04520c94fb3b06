"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/operations.py
Applies one file operation to the records found by a search.

Every batch runs file by file: a failure (permission, vanished file, name
collision, path too long to encode) is recorded in the result and the batch
continues. Destructive operations only start through `execute()`, which asks
for confirmation first.
"""
import dataclasses
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from checkdupes.core.models import (
    DuplicateGroup, FileError, FileOperation, FileRecord, MatchCriterion, SearchConfig
)
from checkdupes.core.path_codec import PathCodec
from checkdupes.core.selector import MasterSelector
from checkdupes.exceptions import InvalidArgumentCombination, OperationDeclined, RelocationSkipped
from checkdupes.services.file_service import FileService

logger = logging.getLogger(__name__)

_PER_FILE_ERRORS = (RuntimeError, RelocationSkipped, OSError)


@dataclass
class OperationResult:
    """Outcome of one batch."""
    operation: FileOperation
    records: List[FileRecord] = field(default_factory=list)  # state after the operation
    errors: List[FileError] = field(default_factory=list)
    skipped: int = 0

    @property
    def processed_count(self) -> int:
        return len(self.records)

    @property
    def processed_bytes(self) -> int:
        return sum(f.size for f in self.records)

    def fail(self, path: str, error: Exception):
        reason = getattr(error, "reason", None) or str(error)
        logger.warning(f"{self.operation.value}: {path}: {reason}")
        self.errors.append(FileError(path=path, reason=reason))


class FileOperationExecutor:
    """
    Performs list / soft-link / move / move-back / hard-link / remove / copy
    over a record set, rooted at the target directory.
    """

    def __init__(self, target_root: str, file_service: FileService = None, verify: bool = True):
        self.target_root = target_root
        self.file_service = file_service or FileService()
        self.verify = verify

    @property
    def duplicates_dir(self) -> str:
        return os.path.join(self.target_root, SearchConfig.DUPLICATES_DIR)

    @property
    def links_dir(self) -> str:
        return os.path.join(self.target_root, SearchConfig.LINKS_DIR)

    def execute(
            self,
            operation: FileOperation,
            confirm: Callable[[str], bool],
            groups: Optional[List[DuplicateGroup]] = None,
            uniques: Optional[List[FileRecord]] = None,
            reference_root: Optional[str] = None,
            permanent: bool = False,
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> OperationResult:
        """
        Dispatches one operation. Destructive operations call `confirm(prompt)`
        first and raise OperationDeclined unless it returns True.
        """
        groups = groups or []
        files = [f for group in groups for f in group.files]

        if operation.uses_extras:
            self.require_checksum(groups)

        if operation.is_destructive:
            if operation == FileOperation.MOVE_BACK:
                count = len(self.find_moved())
            elif operation == FileOperation.COPY_UNIQUES:
                count = len(uniques or [])
            elif operation.uses_extras:
                count = len(MasterSelector.split(groups).extras)
            else:
                count = len(files)
            if not confirm(f"Are you sure you want to {operation.verb} {count} files?"):
                raise OperationDeclined(operation.value)

        if operation == FileOperation.LIST:
            return OperationResult(operation=operation, records=list(files))
        if operation == FileOperation.SOFT_LINK:
            return self.soft_link(files, progress_callback)
        if operation == FileOperation.MOVE:
            return self.move(files, progress_callback)
        if operation == FileOperation.MOVE_BACK:
            return self.move_back(progress_callback=progress_callback)
        if operation == FileOperation.HARDLINK_EXTRAS:
            return self.hardlink_extras(groups, progress_callback)
        if operation == FileOperation.REMOVE_EXTRAS:
            return self.remove_extras(groups, permanent, progress_callback)
        if operation == FileOperation.COPY_UNIQUES:
            if not reference_root:
                raise InvalidArgumentCombination("Copying uniques requires a reference directory")
            return self.copy_uniques(uniques or [], reference_root, progress_callback)
        raise ValueError(f"Unknown operation: {operation}")

    @staticmethod
    def require_checksum(groups: List[DuplicateGroup]):
        """Refuses groups that were not confirmed by a full-content checksum."""
        for group in groups:
            if MatchCriterion.CHECKSUM not in group.criteria:
                raise InvalidArgumentCombination(
                    "Acting on extra duplicates requires checksum matching "
                    f"(group matched on: {', '.join(c.value for c in group.criteria) or 'nothing'})"
                )

    def _check(self, file: FileRecord):
        if self.verify:
            self.file_service.verify_unchanged(file)

    # =============================
    # Whole-set operations
    # =============================

    def soft_link(
            self,
            files: List[FileRecord],
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> OperationResult:
        """Creates LINKS_TO_DUPLICATES/'<seq> <name>' links to every file."""
        result = OperationResult(operation=FileOperation.SOFT_LINK)
        width = len(str(len(files)))
        for counter, file in enumerate(files, 1):
            link_path = os.path.join(self.links_dir, f"{counter:0{width}d} {os.path.basename(file.path)}")
            try:
                self.file_service.create_symlink(os.path.abspath(file.path), link_path)
                logger.info(f"Linked {file.path} as {link_path}")
                result.records.append(file)
            except _PER_FILE_ERRORS as e:
                result.fail(file.path, e)
            if progress_callback:
                progress_callback("Linking", counter, len(files))
        return result

    def move(
            self,
            files: List[FileRecord],
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> OperationResult:
        """Relocates every file into DUPLICATES under its encoded name; updates record paths."""
        result = OperationResult(operation=FileOperation.MOVE)
        width = len(str(len(files)))
        name_max = PathCodec.name_max(self.target_root)
        for counter, file in enumerate(files, 1):
            try:
                token = PathCodec.encode(self.target_root, file.path, counter, width, name_max=name_max)
                self._check(file)
                destination = os.path.join(self.duplicates_dir, token)
                self.file_service.relocate(file.path, destination)
                logger.info(f"Moved {file.path} to {self.duplicates_dir}")
                file.path = destination
                result.records.append(file)
            except RelocationSkipped as e:
                result.skipped += 1
                result.fail(file.path, e)
            except _PER_FILE_ERRORS as e:
                result.fail(file.path, e)
            if progress_callback:
                progress_callback("Moving", counter, len(files))
        return result

    def find_moved(self) -> List[str]:
        """Regular files inside DUPLICATES, sorted by name."""
        if not os.path.isdir(self.duplicates_dir):
            return []
        return [
            entry.path
            for entry in sorted(os.scandir(self.duplicates_dir), key=lambda e: e.name)
            if entry.is_file(follow_symlinks=False)
        ]

    def move_back(
            self,
            paths: Optional[List[str]] = None,
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> OperationResult:
        """Moves every file in DUPLICATES back to the path encoded in its name."""
        result = OperationResult(operation=FileOperation.MOVE_BACK)
        paths = self.find_moved() if paths is None else paths
        for counter, path in enumerate(paths, 1):
            try:
                original_path = PathCodec.decode(os.path.basename(path), self.target_root)
                size = os.lstat(path).st_size
                self.file_service.relocate(path, original_path)
                logger.info(f"Moved to {original_path}")
                result.records.append(FileRecord(path=original_path, size=size))
            except RelocationSkipped as e:
                result.skipped += 1
                result.fail(path, e)
            except _PER_FILE_ERRORS as e:
                result.fail(path, e)
            if progress_callback:
                progress_callback("Moving back", counter, len(paths))

        try:
            if os.path.isdir(self.duplicates_dir) and not os.listdir(self.duplicates_dir):
                os.rmdir(self.duplicates_dir)
        except OSError as e:
            logger.debug(f"Could not remove {self.duplicates_dir}: {e}")
        return result

    # =============================
    # Extras operations
    # =============================

    def hardlink_extras(
            self,
            groups: List[DuplicateGroup],
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> OperationResult:
        """Replaces every extra by a hard link to its group's master."""
        self.require_checksum(groups)
        result = OperationResult(operation=FileOperation.HARDLINK_EXTRAS)
        split = MasterSelector.split(groups)
        for counter, (extra, master) in enumerate(split.pairs, 1):
            try:
                if extra.inode_key == master.inode_key:
                    logger.debug(f"Already linked: {extra.path}")
                    result.skipped += 1
                    continue
                self._check(master)
                self._check(extra)
                self.file_service.replace_with_hardlink(master.path, extra.path)
                logger.info(f"Replaced {extra.path} by a link to {master.path}")
                extra.inode, extra.device = master.inode, master.device
                result.records.append(extra)
            except _PER_FILE_ERRORS as e:
                result.fail(extra.path, e)
            finally:
                if progress_callback:
                    progress_callback("Linking extras", counter, len(split.pairs))
        return result

    def remove_extras(
            self,
            groups: List[DuplicateGroup],
            permanent: bool = False,
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> OperationResult:
        """Sends every extra to the trash (or deletes it when `permanent`), keeping masters."""
        self.require_checksum(groups)
        result = OperationResult(operation=FileOperation.REMOVE_EXTRAS)
        split = MasterSelector.split(groups)
        for counter, (extra, master) in enumerate(split.pairs, 1):
            try:
                # Never drop an extra whose master is gone
                self._check(master)
                self._check(extra)
                if permanent:
                    self.file_service.remove(extra.path)
                else:
                    self.file_service.move_to_trash(extra.path)
                logger.info(f"Removed {extra.path}")
                result.records.append(extra)
            except _PER_FILE_ERRORS as e:
                result.fail(extra.path, e)
            if progress_callback:
                progress_callback("Removing extras", counter, len(split.pairs))
        return result

    # =============================
    # Reference copy
    # =============================

    def copy_uniques(
            self,
            uniques: List[FileRecord],
            reference_root: str,
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> OperationResult:
        """Copies reference files into the target, keeping their relative layout."""
        result = OperationResult(operation=FileOperation.COPY_UNIQUES)
        for counter, file in enumerate(uniques, 1):
            try:
                relative_path = os.path.relpath(file.path, reference_root)
                if relative_path.split(os.sep)[0] == os.pardir:
                    raise RelocationSkipped(file.path, f"not inside {reference_root}")
                self._check(file)
                written = self.file_service.copy(file.path, os.path.join(self.target_root, relative_path))
                logger.info(f"Copied {file.path} to {written}")
                result.records.append(dataclasses.replace(
                    file,
                    path=written,
                    is_from_reference=False,
                    name=None,
                    extension=None
                ))
            except _PER_FILE_ERRORS as e:
                result.fail(file.path, e)
            if progress_callback:
                progress_callback("Copying", counter, len(uniques))
        return result
