"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Single-file primitives used by the operation executor.
Every method either completes or raises RuntimeError describing the failure;
none of them overwrites an existing file except the atomic hard-link swap.
"""
import os
import shutil
import time
from pathlib import Path

from send2trash import send2trash

from checkdupes.core.models import FileRecord


class FileService:
    """
    Cross-platform file operations with uniform error reporting.
    """

    @staticmethod
    def move_to_trash(file_path: str):
        """Moves a file to the system trash."""
        path = Path(file_path).resolve()

        if not path.exists():
            raise RuntimeError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

    @staticmethod
    def remove(file_path: str):
        """Deletes a file permanently."""
        try:
            os.remove(file_path)
        except OSError as e:
            raise RuntimeError(f"Failed to remove: {e.strerror or e}") from e

    @staticmethod
    def replace_with_hardlink(master_path: str, extra_path: str):
        """
        Replaces `extra_path` by a hard link to `master_path`.
        The link is created under a temporary name in the same directory and
        renamed over the extra, so the extra is never missing.
        """
        directory, name = os.path.split(extra_path)
        tmp_path = os.path.join(directory, f".{name}.{os.getpid()}.checkdupes-link")
        try:
            os.link(master_path, tmp_path)
        except OSError as e:
            raise RuntimeError(f"Failed to link: {e.strerror or e}") from e
        try:
            os.replace(tmp_path, extra_path)
        except OSError as e:
            try:
                os.remove(tmp_path)
            except OSError:
                pass
            raise RuntimeError(f"Failed to replace by link: {e.strerror or e}") from e

    @staticmethod
    def create_symlink(target_path: str, link_path: str):
        """Creates a symbolic link at `link_path` pointing to `target_path`."""
        try:
            os.makedirs(os.path.dirname(link_path), exist_ok=True)
            os.symlink(target_path, link_path)
        except OSError as e:
            raise RuntimeError(f"Failed to create link: {e.strerror or e}") from e

    @staticmethod
    def relocate(source_path: str, destination_path: str):
        """Moves a file, creating parent directories. Never overwrites."""
        if os.path.lexists(destination_path):
            raise RuntimeError(f"Destination already exists: {destination_path}")
        try:
            os.makedirs(os.path.dirname(destination_path), exist_ok=True)
            shutil.move(source_path, destination_path)
        except OSError as e:
            raise RuntimeError(f"Failed to move: {e.strerror or e}") from e

    @staticmethod
    def free_destination(destination_path: str) -> str:
        """
        Returns `destination_path`, or the same name with a timestamp suffix
        (`name_YYYYmmdd-HHMMSS.ext`) when it is already taken.
        """
        if not os.path.lexists(destination_path):
            return destination_path
        root, ext = os.path.splitext(destination_path)
        candidate = f"{root}_{time.strftime('%Y%m%d-%H%M%S')}{ext}"
        if os.path.lexists(candidate):
            raise RuntimeError(f"Destination already exists: {candidate}")
        return candidate

    @staticmethod
    def copy(source_path: str, destination_path: str) -> str:
        """Copies a file with its metadata; returns the path actually written."""
        destination = FileService.free_destination(destination_path)
        try:
            os.makedirs(os.path.dirname(destination), exist_ok=True)
            shutil.copy2(source_path, destination)
        except OSError as e:
            raise RuntimeError(f"Failed to copy: {e.strerror or e}") from e
        return destination

    @staticmethod
    def verify_unchanged(file: FileRecord):
        """Raises RuntimeError if the file vanished or changed since it was indexed."""
        try:
            stat_result = os.lstat(file.path)
        except OSError as e:
            raise RuntimeError(f"File not found: {file.path}") from e
        if stat_result.st_size != file.size or stat_result.st_mtime_ns != file.mod_time:
            raise RuntimeError(f"File changed since indexing: {file.path}")
