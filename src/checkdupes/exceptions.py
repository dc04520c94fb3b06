"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

exceptions.py
Exception hierarchy for checkdupes.

Pre-flight errors (InvalidDirectory, InvalidArgumentCombination) abort a run.
Per-file errors (FileUnreadable, RelocationSkipped) are recorded and skipped.
NoDuplicatesFound and OperationDeclined are normal terminations.
"""


class CheckDupesError(Exception):
    """Base exception for all checkdupes errors."""
    pass


class InvalidDirectory(CheckDupesError):
    """Raised when a root path does not exist or is not a directory."""

    def __init__(self, path: str, reason: str = "Not a directory"):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class InvalidArgumentCombination(CheckDupesError, ValueError):
    """Raised when selected options conflict with each other."""
    pass


class NoDuplicatesFound(CheckDupesError):
    """Raised when a search ends with an empty candidate set."""

    def __init__(self, stage: str = ""):
        self.stage = stage
        message = "No duplicate files found."
        if stage:
            message = f"No duplicate files found (after {stage} matching)."
        super().__init__(message)


class FileUnreadable(CheckDupesError):
    """Raised when a file cannot be read during probing."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")


class RelocationSkipped(CheckDupesError):
    """Raised when a path cannot be encoded or decoded for relocation."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Skipped {path}: {reason}")


class OperationDeclined(CheckDupesError):
    """Raised when the user declines the confirmation prompt."""

    def __init__(self, operation: str = ""):
        self.operation = operation
        super().__init__("Operation canceled. No files were touched.")
