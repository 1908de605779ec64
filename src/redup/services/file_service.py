"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Filesystem helpers for the CLI boundary: path lists and output targets.
"""
import logging
from pathlib import Path
from typing import List, Optional, TextIO

logger = logging.getLogger(__name__)


class FileService:
    @staticmethod
    def read_path_list(stream: TextIO) -> List[str]:
        """
        Read one path per line (e.g. piped `ls` or `find` output).
        Blank lines are dropped; surrounding whitespace and line endings are stripped.
        """
        paths = []
        for line in stream:
            path = line.strip()
            if path:
                paths.append(path)
        logger.debug(f"Read {len(paths)} paths from input list")
        return paths

    @staticmethod
    def check_output_target(path: Optional[str]) -> None:
        """
        Make sure results can be written to `path` without clobbering anything.
        Raises:
            FileExistsError: if the file already exists
            FileNotFoundError: if the parent directory does not exist
        """
        if path is None:
            return
        target = Path(path)
        if target.exists():
            raise FileExistsError(f"{path} already exists")
        parent = target.resolve().parent
        if not parent.is_dir():
            raise FileNotFoundError(f"Output directory does not exist: {parent}")
