"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models and domain logic for file indexing and duplicate matching.
"""

import os
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from checkdupes.exceptions import InvalidArgumentCombination

logger = logging.getLogger(__name__)


# =============================
# Configuration
# =============================

class SearchConfig:
    """Tunable constants shared by the engine, the executor and the CLI."""
    HEADTAIL_LENGTH = 10                # Bytes read at each end by the headtail probe
    READ_BLOCK_SIZE = 1024 * 1024       # Streaming block for full-content checksums
    MAX_WORKERS = 8
    CHECKSUM_ALGORITHMS = ("md5", "sha1", "sha256")
    DEFAULT_CHECKSUM_ALGORITHM = "sha256"

    DUPLICATES_DIR = "DUPLICATES"
    LINKS_DIR = "LINKS_TO_DUPLICATES"
    CODEC_MARKER = "{:"
    CODEC_DELIMITER = "|"
    DEFAULT_NAME_MAX = 255

    CONFIRM_ATTEMPTS = 3

    DUPLICATES_REPORT = "duplicates_report.tsv"
    MASTERS_REPORT = "masters_report.tsv"
    EXTRAS_REPORT = "extras_report.tsv"
    MOVED_REPORT = "moved_report.tsv"
    COPIED_REPORT = "copied_report.tsv"

    @staticmethod
    def default_workers() -> int:
        return min(SearchConfig.MAX_WORKERS, (os.cpu_count() or 1) + 4)


# =============================
# Enums
# =============================

class MatchCriterion(Enum):
    """
    A single field two files must agree on to be considered duplicates.
    Declaration order is the cost order used by the narrowing pipeline.
    """
    INODE = "inode"
    SIZE = "size"
    NAME = "name"
    EXTENSION = "extension"
    TIME = "time"
    HEADTAIL = "headtail"
    CHECKSUM = "checksum"

    @property
    def cost(self) -> int:
        return list(MatchCriterion).index(self)

    @property
    def is_content_probe(self) -> bool:
        """True for criteria that must read file content."""
        return self in (MatchCriterion.HEADTAIL, MatchCriterion.CHECKSUM)

    @property
    def display_name(self) -> str:
        mapping = {
            MatchCriterion.INODE: "Inode",
            MatchCriterion.SIZE: "Size",
            MatchCriterion.NAME: "Name",
            MatchCriterion.EXTENSION: "Extension",
            MatchCriterion.TIME: "Modification time",
            MatchCriterion.HEADTAIL: "Head/tail bytes",
            MatchCriterion.CHECKSUM: "Checksum",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class FileOperation(Enum):
    """File operation applied to the duplicates found. Exactly one per run."""
    LIST = "list"
    SOFT_LINK = "soft-link"
    MOVE = "move"
    MOVE_BACK = "move-back"
    HARDLINK_EXTRAS = "link-extras"
    REMOVE_EXTRAS = "remove-extras"
    COPY_UNIQUES = "copy-uniques"

    @property
    def is_destructive(self) -> bool:
        """Operations that mutate the tree and need confirmation first."""
        return self not in (FileOperation.LIST, FileOperation.SOFT_LINK)

    @property
    def uses_extras(self) -> bool:
        return self in (FileOperation.HARDLINK_EXTRAS, FileOperation.REMOVE_EXTRAS)

    @property
    def verb(self) -> str:
        """Verb used in the confirmation prompt."""
        mapping = {
            FileOperation.LIST: "list",
            FileOperation.SOFT_LINK: "link",
            FileOperation.MOVE: "move",
            FileOperation.MOVE_BACK: "move back",
            FileOperation.HARDLINK_EXTRAS: "hard-link",
            FileOperation.REMOVE_EXTRAS: "remove",
            FileOperation.COPY_UNIQUES: "copy",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class _NoExtension:
    """Marks a file name without any dot. Distinct from the empty extension of 'name.'"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "none"

    __str__ = __repr__


NO_EXTENSION = _NoExtension()


# ======================
#  Core Data Models
# ======================

@dataclass
class FileHashes:
    headtail: Optional[bytes] = None
    checksum: Optional[bytes] = None

    def __post_init__(self):
        fields = getattr(self, '__dataclass_fields__', {})
        for key in fields:
            value = getattr(self, key)
            if value is not None and not isinstance(value, bytes):
                raise ValueError(f"Field '{key}' must be bytes or None")


def split_name(basename: str) -> Tuple[str, Union[str, _NoExtension]]:
    """
    Split a base name at its last dot.
        "photo.JPG" -> ("photo", "jpg")
        "archive."  -> ("archive", "")
        "README"    -> ("README", NO_EXTENSION)
    """
    stem, dot, ext = basename.rpartition(".")
    if not dot:
        return basename, NO_EXTENSION
    return stem, ext.lower()


@dataclass
class FileRecord:
    """
    Represents a single indexed file.
    Metadata is captured once at indexing time; probe digests are filled lazily.
    """
    path: str
    size: int  # in bytes
    mod_time: int = 0  # st_mtime_ns
    inode: int = 0
    device: int = 0
    name: Optional[str] = None
    extension: Any = None
    index: int = 0  # emission order of the indexer
    is_from_reference: bool = False
    hashes: FileHashes = field(default_factory=FileHashes)

    def __post_init__(self):
        """Derive name and extension from the path if not provided."""
        if self.name is None:
            self.name, extension = split_name(os.path.basename(self.path))
            if self.extension is None:
                self.extension = extension
        elif self.extension is None:
            self.extension = NO_EXTENSION

    @property
    def inode_key(self) -> Tuple[int, int]:
        """(device, inode): identifies the on-disk data."""
        return self.device, self.inode

    @property
    def order_key(self) -> Tuple[bool, int]:
        """Stable ordering: target tree first, then indexer emission order."""
        return self.is_from_reference, self.index

    def value_of(self, criterion: MatchCriterion) -> Any:
        """Returns this record's value for a match criterion."""
        if criterion == MatchCriterion.INODE:
            return self.inode_key
        if criterion == MatchCriterion.SIZE:
            return self.size
        if criterion == MatchCriterion.NAME:
            return self.name
        if criterion == MatchCriterion.EXTENSION:
            return self.extension
        if criterion == MatchCriterion.TIME:
            return self.mod_time
        if criterion == MatchCriterion.HEADTAIL:
            return self.hashes.headtail
        if criterion == MatchCriterion.CHECKSUM:
            return self.hashes.checksum
        raise ValueError(f"Unknown criterion: {criterion}")

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}>"


CompositeKey = Tuple[Tuple[MatchCriterion, Any], ...]


@dataclass
class DuplicateGroup:
    """
    A group of records agreeing on every criterion in `key`.
    `key` holds one (criterion, value) pair per criterion applied so far.
    """
    key: CompositeKey
    files: List[FileRecord]

    @property
    def criteria(self) -> List[MatchCriterion]:
        return [criterion for criterion, _ in self.key]

    @property
    def size(self) -> int:
        return self.files[0].size if self.files else 0

    def refine(self, criterion: MatchCriterion, value: Any, files: List[FileRecord]) -> 'DuplicateGroup':
        """Returns a narrower group keyed by one more criterion."""
        return DuplicateGroup(key=self.key + ((criterion, value),), files=list(files))

    def __repr__(self):
        return f"<DuplicateGroup size={self.size}, count={len(self.files)}>"


@dataclass
class MasterExtraSplit:
    """Master/extra partition of a list of duplicate groups."""
    masters: List[FileRecord] = field(default_factory=list)
    extras: List[FileRecord] = field(default_factory=list)
    pairs: List[Tuple[FileRecord, FileRecord]] = field(default_factory=list)  # (extra, master)

    @property
    def extra_bytes(self) -> int:
        """Bytes held by extras (what removing them would free)."""
        return sum(f.size for f in self.extras)


@dataclass
class FileError:
    """A per-file failure recorded during a batch."""
    path: str
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


class SearchStats:
    """
    Statistics collected during the narrowing process.
    """
    def __init__(self):
        self.total_time: float = 0.0
        self.files_indexed: int = 0
        self.stage_stats: Dict[str, Dict[str, Union[int, float]]] = {}

    def update_stage(
            self,
            stage_name: str,
            groups_found: int,
            files_processed: int,
            duration: float
    ) -> None:
        if stage_name not in self.stage_stats:
            self.stage_stats[stage_name] = {
                "groups": 0,
                "files": 0,
                "time": 0.0
            }
        self.stage_stats[stage_name]["groups"] += groups_found
        self.stage_stats[stage_name]["files"] += files_processed
        self.stage_stats[stage_name]["time"] += duration

    def print_summary(self) -> str:
        lines = [
            "📊 Search Statistics:",
            f"Files indexed: {self.files_indexed}",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            "Stage: GROUPS / FILES / TIME"
        ]

        for stage, data in self.stage_stats.items():
            lines.append(f"{stage}: {data['groups']} / {data['files']} / {data['time']:.3f}s")

        return "\n".join(lines)


@dataclass
class SearchResult:
    """Outcome of a narrowing run."""
    groups: List[DuplicateGroup]
    stats: SearchStats
    errors: List[FileError] = field(default_factory=list)

    @property
    def files(self) -> List[FileRecord]:
        """All duplicates, group by group, in stable order."""
        return [f for group in self.groups for f in group.files]


"""
DTO for search parameters with built-in validation.
Interface-agnostic: used by commands, the CLI and tests.
"""

@dataclass
class SearchParams:
    """Parameters for one run with validation and normalization."""
    root_dir: str
    criteria: List[MatchCriterion] = field(default_factory=list)
    operation: FileOperation = FileOperation.LIST
    max_depth: Optional[int] = None
    headtail_length: int = SearchConfig.HEADTAIL_LENGTH
    checksum_algorithm: str = SearchConfig.DEFAULT_CHECKSUM_ALGORITHM
    excluded_dirs: List[str] = field(default_factory=list)
    reference_dir: Optional[str] = None
    workers: int = field(default_factory=SearchConfig.default_workers)
    permanent: bool = False

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise InvalidArgumentCombination("Root directory cannot be empty")

        if self.max_depth is not None and self.max_depth < 1:
            raise InvalidArgumentCombination("Search depth must be at least 1")

        if self.headtail_length < 1:
            raise InvalidArgumentCombination("Head/tail length must be at least 1 byte")

        if self.workers < 1:
            raise InvalidArgumentCombination("Worker count must be at least 1")

        if self.checksum_algorithm not in SearchConfig.CHECKSUM_ALGORITHMS:
            raise InvalidArgumentCombination(
                f"Unsupported checksum algorithm: '{self.checksum_algorithm}'. "
                f"Valid options: {', '.join(SearchConfig.CHECKSUM_ALGORITHMS)}"
            )

        if self.operation == FileOperation.COPY_UNIQUES and not self.reference_dir:
            raise InvalidArgumentCombination("Copying uniques requires a reference directory")
        if self.reference_dir and self.operation != FileOperation.COPY_UNIQUES:
            raise InvalidArgumentCombination("A reference directory is only used when copying uniques")

        if self.permanent and self.operation != FileOperation.REMOVE_EXTRAS:
            raise InvalidArgumentCombination("Permanent deletion only applies to removing extras")

        criteria = set(self.criteria)
        if MatchCriterion.INODE in criteria and (
                self.operation.uses_extras or self.operation == FileOperation.COPY_UNIQUES):
            raise InvalidArgumentCombination(
                f"Inode matching cannot be combined with the '{self.operation.value}' operation"
            )

        # Acting on extras is only allowed on full-content matches
        if self.operation.uses_extras and MatchCriterion.CHECKSUM not in criteria:
            logger.info("Checksum matching enabled for safety")
            criteria.add(MatchCriterion.CHECKSUM)

        if not criteria:
            criteria.add(MatchCriterion.SIZE)

        self.criteria = sorted(criteria, key=lambda c: c.cost)
