"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/report.py
Tab-separated reports written under the target directory.
One header row, then one row per file:
    Size  Headtail  Checksum  Time  Inode  Name  Extension  Path
"""
import csv
import logging
import os
from typing import Iterable, List

from checkdupes.core.models import FileRecord, MasterExtraSplit, SearchConfig
from checkdupes.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)

REPORT_COLUMNS = ("Size", "Headtail", "Checksum", "Time", "Inode", "Name", "Extension", "Path")
MISSING = "-"


def report_row(file: FileRecord) -> List[str]:
    """Report columns for one record, in fixed order."""
    return [
        str(file.size),
        file.hashes.headtail.hex() if file.hashes.headtail is not None else MISSING,
        file.hashes.checksum.hex() if file.hashes.checksum is not None else MISSING,
        ConvertUtils.ns_timestamp_to_human(file.mod_time),
        str(file.inode),
        file.name,
        str(file.extension),
        file.path,
    ]


class ReportWriter:
    """Writes report files into one directory (the target root)."""

    def __init__(self, directory: str):
        self.directory = directory

    def write(self, filename: str, files: Iterable[FileRecord]) -> str:
        path = os.path.join(self.directory, filename)
        with open(path, "w", newline="", encoding="utf-8", errors="surrogateescape") as f:
            writer = csv.writer(f, delimiter="\t", lineterminator="\n")
            writer.writerow(REPORT_COLUMNS)
            count = 0
            for file in files:
                writer.writerow(report_row(file))
                count += 1
        logger.info(f"Wrote {count} rows to {path}")
        return path

    def write_duplicates(self, files: Iterable[FileRecord]) -> str:
        return self.write(SearchConfig.DUPLICATES_REPORT, files)

    def write_split(self, split: MasterExtraSplit) -> List[str]:
        return [
            self.write(SearchConfig.MASTERS_REPORT, split.masters),
            self.write(SearchConfig.EXTRAS_REPORT, split.extras),
        ]

    def write_moved(self, files: Iterable[FileRecord]) -> str:
        return self.write(SearchConfig.MOVED_REPORT, files)

    def write_copied(self, files: Iterable[FileRecord]) -> str:
        return self.write(SearchConfig.COPIED_REPORT, files)
