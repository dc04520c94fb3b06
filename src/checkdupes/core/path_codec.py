"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/path_codec.py
Reversible flattening of a tree-relative path into one file name.

    photos/2024/img.jpg  ->  "07 {:photos|2024|img.jpg"

The zero-padded sequence keeps names unique and sorted, the marker separates
it from the encoded path, and the delimiter stands in for the path separator.
"""

import logging
import os

from checkdupes.core.models import SearchConfig
from checkdupes.exceptions import RelocationSkipped

logger = logging.getLogger(__name__)


class PathCodec:
    """Encodes paths relative to a root into flat names and decodes them back."""

    MARKER = SearchConfig.CODEC_MARKER
    DELIMITER = SearchConfig.CODEC_DELIMITER

    @staticmethod
    def name_max(directory: str) -> int:
        """Maximum file name length (bytes) on the filesystem holding `directory`."""
        try:
            return os.pathconf(directory, "PC_NAME_MAX")
        except (AttributeError, ValueError, OSError):
            return SearchConfig.DEFAULT_NAME_MAX

    @classmethod
    def is_encoded(cls, name: str) -> bool:
        return cls.MARKER in name

    @classmethod
    def encode(cls, root: str, path: str, sequence: int = 1, width: int = 1, name_max: int = None) -> str:
        """
        Returns the flat name for `path`.
        Raises RelocationSkipped when the name could not be decoded back exactly.
        """
        relative_path = os.path.relpath(path, root)
        if relative_path == os.curdir or relative_path.split(os.sep)[0] == os.pardir:
            raise RelocationSkipped(path, f"not inside {root}")

        if cls.is_encoded(os.path.basename(path)):
            raise RelocationSkipped(path, "name is already encoded")

        if cls.DELIMITER in relative_path:
            raise RelocationSkipped(path, f"path contains reserved character '{cls.DELIMITER}'")

        token = f"{sequence:0{width}d} {cls.MARKER}{relative_path.replace(os.sep, cls.DELIMITER)}"

        limit = name_max if name_max is not None else cls.name_max(root)
        if len(os.fsencode(token)) > limit:
            raise RelocationSkipped(path, f"encoded name longer than {limit} bytes")

        return token

    @classmethod
    def decode(cls, token: str, root: str) -> str:
        """Returns the original path of an encoded name, resolved under `root`."""
        name = os.path.basename(token)
        _, marker, encoded = name.partition(cls.MARKER)
        if not marker or not encoded:
            raise RelocationSkipped(token, "name is not encoded")
        parts = encoded.split(cls.DELIMITER)
        if os.pardir in parts or "" in parts:
            raise RelocationSkipped(token, f"encoded path leaves {root}")
        return os.path.join(root, *parts)
