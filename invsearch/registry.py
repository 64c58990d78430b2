# invsearch/registry.py
"""
Ordered list of candidate input files.

Each candidate is checked, in this order, before it is accepted:
    - ends with the required suffix
    - can be opened for reading
    - is not empty
    - is not already registered
Names containing ';' are refused as well, since they could not be written
to a backup record.

The loader removes names from the registry when a backup already accounts
for them.
"""

import os
import sys

from invsearch.errors import (
    AccessError,
    DuplicateFileError,
    EmptyFileError,
    ExtensionError,
    InvalidFileNameError,
    ValidationError,
)
from invsearch.paths import BACKUP_SUFFIX, has_suffix


class FileRegistry:
    def __init__(self, suffix: str = BACKUP_SUFFIX):
        self.suffix = suffix
        self.names: list[str] = []
        self.rejected: list[tuple[str, Exception]] = []

    @classmethod
    def from_candidates(cls, candidates, suffix: str = BACKUP_SUFFIX, quiet: bool = False):
        """
        Register every acceptable candidate; rejections are kept in
        `.rejected` and reported on stderr instead of raised.
        """
        reg = cls(suffix=suffix)
        for name in candidates:
            try:
                reg.add(name)
            except (ValidationError, AccessError) as e:
                reg.rejected.append((name, e))
                print(f"[registry] WARN {e}", file=sys.stderr)
                continue
            if not quiet:
                print(f"[registry] added {name}", file=sys.stderr)
        return reg

    def add(self, name: str) -> None:
        if not has_suffix(name, self.suffix):
            raise ExtensionError(name, self.suffix)
        if ";" in name:
            raise InvalidFileNameError(name, "file names may not contain ';'")
        try:
            with open(name, "rb") as f:
                size = f.seek(0, os.SEEK_END)
        except OSError as e:
            raise AccessError(name, f"not found or cannot be opened ({e.strerror or e})") from e
        if size < 1:
            raise EmptyFileError(name)
        if name in self.names:
            raise DuplicateFileError(name)
        self.names.append(name)

    def remove(self, name: str) -> bool:
        """Drop `name` if registered. Returns True if it was present."""
        try:
            self.names.remove(name)
        except ValueError:
            return False
        return True

    def __contains__(self, name):
        return name in self.names

    def __iter__(self):
        return iter(list(self.names))

    def __len__(self):
        return len(self.names)

    def __repr__(self):
        return f"FileRegistry({self.names!r})"
