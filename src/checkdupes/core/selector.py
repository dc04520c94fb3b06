"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/selector.py
Pure master/extra selection for duplicate groups: zero dependencies outside core.
The master of a group is its first record under a fixed ordering:
1. Target-tree records ALWAYS before reference-tree records
2. Indexer emission order
The ordering never depends on the order in which parallel probes completed.
"""
from typing import List, Tuple

from checkdupes.core.models import DuplicateGroup, FileRecord, MasterExtraSplit


class MasterSelector:
    """
    Picks exactly one master per group; every other record is an extra.
    Does not modify the groups it is given.
    """

    @staticmethod
    def ordered(group: DuplicateGroup) -> List[FileRecord]:
        return sorted(group.files, key=lambda f: f.order_key)

    @staticmethod
    def select(group: DuplicateGroup) -> Tuple[FileRecord, List[FileRecord]]:
        """Returns (master, extras) for one group."""
        if not group.files:
            raise ValueError("Cannot select a master from an empty group")
        ordered = MasterSelector.ordered(group)
        return ordered[0], ordered[1:]

    @staticmethod
    def split(groups: List[DuplicateGroup]) -> MasterExtraSplit:
        """Master/extra partition over all groups, in group order."""
        result = MasterExtraSplit()
        for group in groups:
            master, extras = MasterSelector.select(group)
            result.masters.append(master)
            for extra in extras:
                result.extras.append(extra)
                result.pairs.append((extra, master))
        return result
