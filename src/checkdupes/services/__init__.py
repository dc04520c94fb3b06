"""File operations, operation executor and report services."""

from .file_service import FileService
from .operations import FileOperationExecutor, OperationResult
from .report import ReportWriter

__all__ = ["FileService", "FileOperationExecutor", "OperationResult", "ReportWriter"]
