"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements file indexing using object-oriented design and modern pathlib.
Features:
- Uses pathlib.Path for robust, cross-platform path handling
- Walks directories recursively, optionally bounded by depth
- Keeps regular, non-empty files only (symbolic links are never indexed)
- Visits names in sorted order so the emission order is repeatable
- Runs stat calls on a bounded thread pool, consumed in submission order
"""

import os
import stat
import sys
import time
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional

from checkdupes.core.interfaces import FileIndexer
from checkdupes.core.models import FileRecord
from checkdupes.exceptions import InvalidDirectory

logger = logging.getLogger(__name__)


class FileIndexerImpl(FileIndexer):
    """
    Walks a directory tree and produces one FileRecord per regular non-empty file.

    Attributes:
        root_dir: Root directory to index
        max_depth: 1 = files directly inside root, None = unbounded
        excluded_dirs: Directories skipped entirely
        workers: Thread count for stat calls (1 = inline)
        index_offset: First record index (lets a second tree follow the first)
        is_reference: Marks records as coming from a reference tree
    """

    def __init__(
        self,
        root_dir: str,
        max_depth: Optional[int] = None,
        excluded_dirs: Optional[List[str]] = None,
        workers: int = 1,
        index_offset: int = 0,
        is_reference: bool = False
    ):
        if max_depth is not None and max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.root_dir = root_dir
        self.max_depth = max_depth
        self.excluded_dirs = [str(Path(d).resolve()) for d in excluded_dirs] if excluded_dirs else []
        self.workers = max(1, workers)
        self.index_offset = index_offset
        self.is_reference = is_reference

    def scan(self,
             stopped_flag: Optional[Callable[[], bool]] = None,
             progress_callback: Optional[Callable[[str, int, object], None]] = None) -> List[FileRecord]:
        """
        Returns records for the tree, in sorted walk order, with sequential indices.
        """
        logger.debug(f"Indexing directory: {self.root_dir} (max depth: {self.max_depth or 'unbounded'})")

        root_path = Path(self.root_dir)
        if not root_path.exists():
            logger.error(f"Directory does not exist: {self.root_dir}")
            raise InvalidDirectory(self.root_dir, "Directory does not exist")
        if not root_path.is_dir():
            logger.error(f"Not a directory: {self.root_dir}")
            raise InvalidDirectory(self.root_dir, "Not a directory")

        if stopped_flag and stopped_flag():
            logger.debug("Scan cancelled before start")
            return []

        start_time = time.time()
        candidates = self._walk(root_path, stopped_flag)
        if candidates is None:
            logger.debug("Scan interrupted by user")
            return []

        if progress_callback:
            progress_callback('indexing', 0, len(candidates))

        if self.workers > 1 and len(candidates) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                records = list(executor.map(self._process_file, candidates))
        else:
            records = [self._process_file(path) for path in candidates]

        found_files = []
        for record in records:
            if record is None:
                continue
            record.index = self.index_offset + len(found_files)
            found_files.append(record)

        if progress_callback:
            progress_callback('indexing', len(candidates), len(candidates))

        logger.debug(f"Total scan time: {time.time() - start_time:.2f} seconds")
        logger.debug(f"Scan completed. Indexed {len(found_files)} files.")
        return found_files

    def _walk(self, root_path: Path, stopped_flag: Optional[Callable[[], bool]] = None) -> Optional[List[Path]]:
        """Collects file paths within depth, or None when cancelled."""
        candidates = []
        root_depth = str(root_path).rstrip(os.sep).count(os.sep)

        def on_error(error: OSError):
            logger.warning(f"Cannot read directory {error.filename}: {error.strerror}")

        for root, dirs, files in os.walk(str(root_path), onerror=on_error):
            if stopped_flag and stopped_flag():
                return None

            depth = root.rstrip(os.sep).count(os.sep) - root_depth + 1
            if self.max_depth is not None and depth >= self.max_depth:
                dirs[:] = []
            else:
                # Pre-filter subdirectories BEFORE os.walk enters them
                dirs[:] = sorted(d for d in dirs if self._prefilter_dirs(Path(root) / d))

            for filename in sorted(files):
                candidates.append(Path(root) / filename)

        return candidates

    @staticmethod
    def _is_system_trash(path: Path) -> bool:
        """
        Check if path belongs to OS trash/recycle bin (cross-platform).
        Returns False on any error.
        """
        try:
            path_str = str(path.resolve(strict=False))

            if sys.platform == "win32":
                if "$Recycle.Bin" in path_str or "\\Recycler\\" in path_str:
                    return True
            elif sys.platform == "darwin":
                if "/.Trash/" in path_str or path_str.endswith("/.Trash"):
                    return True
            else:
                if ".local/share/Trash" in path_str or "/.trash/" in path_str:
                    return True

            return False
        except (OSError, ValueError):
            return False

    @staticmethod
    def _is_excluded_directory(path: Path, excluded_dirs: List[str]) -> bool:
        """Check if path is within an excluded directory."""
        try:
            path_str = str(path.resolve(strict=False))
            for excluded_dir in excluded_dirs:
                normalized_excluded = os.path.normpath(excluded_dir)
                if path_str.startswith(normalized_excluded + os.sep) or \
                        path_str == normalized_excluded:
                    return True
            return False
        except (OSError, ValueError):
            return False

    def _prefilter_dirs(self, path: Path) -> bool:
        """Pre-filter directories: skip links, system trash, excluded and inaccessible locations."""
        if path.is_symlink():
            logger.debug(f"Skipping symbolic link to directory: {path}")
            return False

        if FileIndexerImpl._is_system_trash(path):
            logger.debug(f"Skipping system trash directory: {path}")
            return False

        if self.excluded_dirs and self._is_excluded_directory(path, self.excluded_dirs):
            logger.debug(f"Skipping excluded directory: {path}")
            return False

        try:
            return path.is_dir() and os.access(path, os.R_OK | os.X_OK)
        except OSError:
            logger.debug(f"Skipping inaccessible directory: {path}")
            return False

    def _process_file(self, path: Path) -> Optional[FileRecord]:
        """
        Stat a single path and return a FileRecord if it is a regular non-empty file.
        """
        try:
            # lstat: a symbolic link is never taken for its target
            stat_result = path.lstat()
        except OSError as e:
            logger.debug(f"Could not stat {path}: {e}")
            return None

        if not stat.S_ISREG(stat_result.st_mode):
            logger.debug(f"Skipping non-regular file: {path}")
            return None

        if stat_result.st_size == 0:
            logger.debug(f"Skipping zero-byte file: {path}")
            return None

        logger.debug(f"Accepted file: {path.name} ({stat_result.st_size} bytes)")
        return FileRecord(
            path=str(path),
            size=stat_result.st_size,
            mod_time=stat_result.st_mtime_ns,
            inode=stat_result.st_ino,
            device=stat_result.st_dev,
            is_from_reference=self.is_reference
        )
