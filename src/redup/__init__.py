"""
redup — find duplicate files by hashing their contents.

Core features:
- Concurrent scan-hash-aggregate pipeline with a bounded path queue and a permit pool
- Streaming xxHash64 content fingerprints (files of any size, constant memory)
- Per-file failures are skipped, never fatal; missing roots fail fast
- Plain text, CSV and SQLite output from the CLI
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("redup")
except Exception:
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib  # Python < 3.11: pip install tomli
    from pathlib import Path as _Path

    with open(_Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API — only what users should import directly
from redup.commands import ScanCommand
from redup.core import (
    PipelineDriver, ScanParams, ScanResult, ScanStats, RootUnavailableError, find_duplicates)
from redup.services import FileService, OutputService

__all__ = [
    "ScanCommand",
    "PipelineDriver",
    "ScanParams",
    "ScanResult",
    "ScanStats",
    "RootUnavailableError",
    "find_duplicates",
    "FileService",
    "OutputService",
    "__version__",
]
