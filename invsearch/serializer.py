# invsearch/serializer.py
import sys

from invsearch.backupio import BackupWriter, format_record, parse_record
from invsearch.errors import AccessError, ExtensionError, RecordFormatError
from invsearch.index import InvertedIndex
from invsearch.paths import BACKUP_SUFFIX, has_suffix


def _checked_lines(index: InvertedIndex, suffix: str) -> list[str]:
    """
    Format every record and make sure it reads back as written: no file
    name without the suffix, no word whose ';' makes the record ambiguous,
    nothing that cannot be encoded.
    """
    lines = []
    for bucket, entry in index:
        line = format_record(bucket, entry)
        expected = (bucket, entry.word, [occ.as_tuple() for occ in entry.iter_occurrences()])
        try:
            line.encode("utf-8", "surrogateescape")
            parsed = parse_record(line, suffix)
        except (RecordFormatError, UnicodeEncodeError) as e:
            raise RecordFormatError(f"word {entry.word!r} cannot be saved: {e}") from e
        if parsed != expected:
            raise RecordFormatError(f"word {entry.word!r} cannot be saved: record reads back differently")
        lines.append(line)
    return lines


def save(index: InvertedIndex, path: str, *, suffix: str = BACKUP_SUFFIX, quiet: bool = False) -> int:
    """
    Write `index` to the backup file `path`, replacing any existing file.

    Every record is checked before the destination is opened, so a refused
    save leaves an existing backup untouched.

    Args:
        index: index to serialize
        path: destination, must end with `suffix`

    Returns:
        number of records written
    Raises:
        ExtensionError if `path` has the wrong suffix
        RecordFormatError if a record could not be read back as written
        AccessError if the destination cannot be opened or written
    """
    if not has_suffix(path, suffix):
        raise ExtensionError(path, suffix)
    lines = _checked_lines(index, suffix)
    try:
        writer = BackupWriter(path)
    except OSError as e:
        raise AccessError(path, f"cannot be opened for writing ({e.strerror or e})") from e
    try:
        with writer:
            n = writer.write_lines(lines)
    except OSError as e:
        raise AccessError(path, f"write failed ({e.strerror or e})") from e
    if not quiet:
        print(f"[serializer] saved {n} records -> {path}", file=sys.stderr)
    return n
