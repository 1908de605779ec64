"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/output_service.py
Renders a finished ScanResult as plain text, CSV records or a SQLite database.
Only duplicate sets (groups with two or more files) are rendered.
"""
import csv
import logging
import sqlite3
from contextlib import closing
from typing import List, TextIO, Tuple

from redup.core.models import Fingerprint, ScanResult
from redup.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)

GROUPS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS duplicate_groups (
    id INTEGER PRIMARY KEY,
    fingerprint TEXT NOT NULL,
    file_count INTEGER NOT NULL
)
"""

FILES_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS files (
    id INTEGER PRIMARY KEY,
    group_id INTEGER NOT NULL REFERENCES duplicate_groups(id),
    path TEXT NOT NULL
)
"""


class OutputService:
    @staticmethod
    def ordered_duplicate_sets(result: ScanResult) -> List[Tuple[Fingerprint, Tuple[str, ...]]]:
        """
        Duplicate sets in render order: largest group first, then by fingerprint.
        Paths keep their arrival order.
        """
        return sorted(result.duplicate_sets().items(), key=lambda item: (-len(item[1]), item[0]))

    @staticmethod
    def write_text(result: ScanResult, stream: TextIO, quiet: bool = False) -> None:
        """One block per duplicate group: a '-' line, then one path per line."""
        groups = OutputService.ordered_duplicate_sets(result)

        if not quiet:
            stream.write("\nDUPLICATES FOUND!\n" if groups else "\nNo Duplicates Found!\n")

        for _, paths in groups:
            stream.write("-\n")
            for path in paths:
                stream.write(f"{path}\n")

    @staticmethod
    def write_csv(result: ScanResult, stream: TextIO) -> None:
        """Tabular records (fingerprint, path, group_id); group ids start at 1."""
        writer = csv.writer(stream, lineterminator="\n")
        writer.writerow(["fingerprint", "path", "group_id"])
        for group_id, (fingerprint, paths) in enumerate(OutputService.ordered_duplicate_sets(result), 1):
            fp_hex = ConvertUtils.fingerprint_to_hex(fingerprint)
            for path in paths:
                writer.writerow([fp_hex, path, group_id])

    @staticmethod
    def write_sqlite(result: ScanResult, db_path: str) -> int:
        """
        Write duplicate sets into a `duplicate_groups` table and a `files` table keyed by group id.
        Returns:
            Number of groups written
        """
        groups = OutputService.ordered_duplicate_sets(result)
        with closing(sqlite3.connect(db_path)) as conn:
            with conn:
                conn.execute(GROUPS_TABLE_SQL)
                conn.execute(FILES_TABLE_SQL)
                for fingerprint, paths in groups:
                    cursor = conn.execute(
                        "INSERT INTO duplicate_groups (fingerprint, file_count) VALUES (?, ?)",
                        (ConvertUtils.fingerprint_to_hex(fingerprint), len(paths)),
                    )
                    group_id = cursor.lastrowid
                    conn.executemany(
                        "INSERT INTO files (group_id, path) VALUES (?, ?)",
                        [(group_id, path) for path in paths],
                    )
        logger.debug(f"Wrote {len(groups)} duplicate groups to {db_path}")
        return len(groups)
