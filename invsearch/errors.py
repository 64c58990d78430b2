"""
invsearch/errors.py

Exception hierarchy shared by the indexer, the backup codec, the loader
and the session layer.

    InvertedSearchError
      ├── AccessError            file cannot be opened / read (also OSError)
      ├── ValidationError        bad input, operation aborted (also ValueError)
      │     ├── ExtensionError
      │     ├── EmptyFileError
      │     ├── DuplicateFileError
      │     ├── InvalidFileNameError
      │     ├── BackupFormatError
      │     └── RecordFormatError
      └── DatabaseStateError     session operation not allowed right now
"""


class InvertedSearchError(Exception):
    """Base class for every error raised by invsearch."""


class AccessError(InvertedSearchError, OSError):
    """A file could not be opened or read."""

    def __init__(self, path: str, reason: str = "cannot be opened"):
        super().__init__(f"'{path}' {reason}")
        self.path = path
        self.reason = reason


class ValidationError(InvertedSearchError, ValueError):
    """Input rejected before the index was touched."""


class ExtensionError(ValidationError):
    def __init__(self, path: str, suffix: str):
        super().__init__(f"'{path}' has invalid extension. It must be {suffix}")
        self.path = path
        self.suffix = suffix


class EmptyFileError(ValidationError):
    def __init__(self, path: str):
        super().__init__(f"'{path}' file is empty")
        self.path = path


class DuplicateFileError(ValidationError):
    def __init__(self, path: str):
        super().__init__(f"duplicate file '{path}' ignored")
        self.path = path


class InvalidFileNameError(ValidationError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"'{path}': {reason}")
        self.path = path


class BackupFormatError(ValidationError):
    """The file is not a backup written by the serializer."""

    def __init__(self, path: str, reason: str = "is not a DATABASE file"):
        super().__init__(f"'{path}' {reason}")
        self.path = path


class RecordFormatError(ValidationError):
    """A single backup record could not be parsed."""

    def __init__(self, reason: str, line_no: int | None = None):
        where = f"line {line_no}: " if line_no is not None else ""
        super().__init__(f"{where}{reason}")
        self.reason = reason
        self.line_no = line_no


class DatabaseStateError(InvertedSearchError):
    """Operation is not allowed in the session's current state."""
