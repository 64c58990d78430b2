"""
invsearch/loader.py

Loads a backup into an InvertedIndex and tells the caller which pending
input files the backup already covers.

Steps:
    1. suffix check, size check and structural sniff (see backupio.sniff_backup);
       any failure raises and leaves the index untouched
    2. records are read in file order and merged into their bucket
    3. every file name mentioned by a record is removed from the registry
       (if present) and reported in LoadReport.claimed, so the caller does
       not index the same raw file a second time

A malformed record ends the scan. Records before it stay in the index and
the report is marked truncated; the call itself still succeeds.

Merge policy: a record for a word already present in its bucket extends the
existing entry instead of adding a second one (counts for a known file are
added, new files are appended).
"""

import sys

from invsearch.backupio import BackupReader, sniff_backup
from invsearch.errors import AccessError, ExtensionError, RecordFormatError
from invsearch.index import InvertedIndex
from invsearch.paths import BACKUP_SUFFIX, has_suffix


class LoadReport:
    """
    Outcome of one load.

    Attributes:
        path:             backup that was read
        records:          records merged into the index
        new_words:        records that created a new WordEntry
        claimed:          registry names removed, in first-seen order
        truncated:        True if a malformed record stopped the scan
        stopped_at_line:  1-based line of that record, else None
        reason:           parse error message, else None
    """

    def __init__(self, path: str):
        self.path = path
        self.records = 0
        self.new_words = 0
        self.claimed: list[str] = []
        self.truncated = False
        self.stopped_at_line: int | None = None
        self.reason: str | None = None

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "records": self.records,
            "newWords": self.new_words,
            "claimed": list(self.claimed),
            "truncated": self.truncated,
            "stoppedAtLine": self.stopped_at_line,
            "reason": self.reason,
        }


def _claim(registry, file_name: str) -> bool:
    if registry is None or file_name not in registry:
        return False
    registry.remove(file_name)
    return True


def load(
    index: InvertedIndex,
    path: str,
    registry=None,
    *,
    suffix: str = BACKUP_SUFFIX,
    quiet: bool = False,
) -> LoadReport:
    """
    Merge the backup at `path` into `index`.

    Args:
        index: target index (may already hold entries)
        path: backup file, must end with `suffix`
        registry: pending input file names (FileRegistry or list); names the
            backup accounts for are removed from it. Optional.

    Returns:
        LoadReport
    Raises:
        ExtensionError, AccessError, EmptyFileError, BackupFormatError
    """
    if not has_suffix(path, suffix):
        raise ExtensionError(path, suffix)
    sniff_backup(path)

    report = LoadReport(path)
    try:
        reader = BackupReader(path, suffix)
    except OSError as e:
        raise AccessError(path, f"cannot be opened ({e.strerror or e})") from e

    with reader:
        while True:
            try:
                _, bucket, word, occurrences = next(reader)
            except StopIteration:
                break
            except RecordFormatError as e:
                report.truncated = True
                report.stopped_at_line = e.line_no
                report.reason = e.reason
                print(f"[loader] WARN {path}: stopped at {e}", file=sys.stderr)
                break

            if index.merge_entry(bucket, word, occurrences):
                report.new_words += 1
            report.records += 1

            for file_name, _ in occurrences:
                if _claim(registry, file_name):
                    report.claimed.append(file_name)
                    if not quiet:
                        print(f"[loader] dropping {file_name} from file list "
                              f"(already present in backup {path})", file=sys.stderr)

    if not quiet:
        print(f"[loader] loaded {report.records} records from {path}", file=sys.stderr)
    return report
