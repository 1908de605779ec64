"""Path list input and result rendering services."""

from .file_service import FileService
from .output_service import OutputService

__all__ = ["FileService", "OutputService"]
