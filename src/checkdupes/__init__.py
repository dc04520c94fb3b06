"""
checkdupes: probable duplicate file finder.

Core features:
- Match on any combination of inode, size, name, extension, time, head/tail bytes and checksum
- List, soft-link, move aside (and back), hard-link or remove the duplicates found
- Copy into a target only the files of a reference tree it does not hold yet
- Removal goes to the system trash (via send2trash) unless asked otherwise
"""

from importlib.metadata import PackageNotFoundError, version as _version

try:
    __version__ = _version("checkdupes")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from checkdupes.commands import DuplicateSearchCommand, ReferenceDiffCommand
from checkdupes.core import (
    SearchParams, MatchCriterion, FileOperation, FileRecord, DuplicateGroup, MasterSelector
)
from checkdupes.exceptions import CheckDupesError
from checkdupes.services import FileOperationExecutor, FileService, ReportWriter
from checkdupes.utils.convert_utils import ConvertUtils

__all__ = [
    "DuplicateSearchCommand",
    "ReferenceDiffCommand",
    "SearchParams",
    "MatchCriterion",
    "FileOperation",
    "FileRecord",
    "DuplicateGroup",
    "MasterSelector",
    "CheckDupesError",
    "FileOperationExecutor",
    "FileService",
    "ReportWriter",
    "ConvertUtils",
    "__version__",
]
