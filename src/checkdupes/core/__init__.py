"""
Core matching engine: indexer, prober, grouper, stages, and pipeline orchestrator.

This package contains the performance-critical foundation of checkdupes:
- FileIndexerImpl: sorted, depth-bounded directory walk producing FileRecords
- ContentProberImpl: head/tail (xxHash64) and full-content (hashlib) probes
- FileGrouperImpl: partitioning by any criterion with singleton elimination
- CandidateFilterImpl: multi-stage pipeline (inode → metadata → content)
- MasterSelector: deterministic master/extra split
- PathCodec: reversible flat names for relocated files
- ReferenceDiffEngine: which reference files the target does not hold yet

All components are pure Python with no UI dependencies.
"""

from .scanner import FileIndexerImpl
from .hasher import ContentProberImpl, XXHashAlgorithmImpl, HashlibAlgorithmImpl
from .grouper import FileGrouperImpl
from .candidate_filter import CandidateFilterImpl
from .selector import MasterSelector
from .path_codec import PathCodec
from .reference import ReferenceDiffEngine, ReferenceDiff
from .models import (
    FileRecord, FileHashes, DuplicateGroup, MasterExtraSplit, FileError,
    MatchCriterion, FileOperation, SearchParams, SearchResult, SearchStats,
    SearchConfig, NO_EXTENSION)

__all__ = [
    "FileIndexerImpl",
    "ContentProberImpl",
    "XXHashAlgorithmImpl",
    "HashlibAlgorithmImpl",
    "FileGrouperImpl",
    "CandidateFilterImpl",
    "MasterSelector",
    "PathCodec",
    "ReferenceDiffEngine",
    "ReferenceDiff",
    "FileRecord",
    "FileHashes",
    "DuplicateGroup",
    "MasterExtraSplit",
    "FileError",
    "MatchCriterion",
    "FileOperation",
    "SearchParams",
    "SearchResult",
    "SearchStats",
    "SearchConfig",
    "NO_EXTENSION",
]
