# invsearch/backupio.py
"""
Reading and writing the textual backup format, one record per line:

    #<bucket>;<word>;<file_count>;<file_1>;<count_1>;...;<file_n>;<count_n>;#

Records are written bucket by bucket (0..26), each bucket in discovery
order. A backup therefore starts with '#' and its last two bytes are "#\\n".

Words are stored verbatim and may themselves contain ';'. The parser accepts
the one split point after which the rest of the record is exactly
<file_count> pairs, each file name carrying the required suffix and each
count >= 1. For words without ';' that is always the third field; a line
with no such split point, or with more than one, is malformed.

Text is UTF-8 with surrogateescape, so undecodable bytes in words or file
names are written back unchanged.
"""

import os
import re

from invsearch.errors import AccessError, BackupFormatError, EmptyFileError, RecordFormatError
from invsearch.index import HASH_SIZE, WHITESPACE, InvertedIndex, WordEntry, bucket_of
from invsearch.paths import BACKUP_SUFFIX

SENTINEL = "#"
SEP = ";"

_INT = re.compile(r"[0-9]+")


def format_record(bucket: int, entry: WordEntry) -> str:
    parts = [f"{SENTINEL}{bucket}{SEP}{entry.word}{SEP}{entry.file_count}{SEP}"]
    for occ in entry.iter_occurrences():
        parts.append(f"{occ.file_name}{SEP}{occ.count}{SEP}")
    parts.append(f"{SENTINEL}\n")
    return "".join(parts)


def _to_int(field: str, what: str) -> int:
    if not _INT.fullmatch(field):
        raise RecordFormatError(f"{what} is not a number: {field!r}")
    return int(field)


def _pairs_from(fields, k: int, suffix: str):
    """
    Read fields[k] as the file count and the rest as (file, count) pairs.
    Returns None unless the rest is exactly that many pairs, every file name
    carries `suffix` and every count is >= 1.
    """
    n = int(fields[k])
    if n < 1 or len(fields) - k - 1 != 2 * n:
        return None
    pairs = []
    for j in range(k + 1, len(fields), 2):
        file_name, count = fields[j], fields[j + 1]
        if not file_name.endswith(suffix) or not _INT.fullmatch(count) or int(count) < 1:
            return None
        pairs.append((file_name, int(count)))
    return pairs


def parse_record(line: str, suffix: str = BACKUP_SUFFIX):
    """
    Parse one backup line.

    Returns:
        (bucket:int, word:str, occurrences:list[(file_name:str, count:int)])
    Raises:
        RecordFormatError if the line is not a well-formed record, or if a
        word containing ';' leaves more than one way to read it
    """
    line = line.rstrip("\r\n")
    if len(line) < 2 or not line.startswith(SENTINEL) or not line.endswith(SENTINEL):
        raise RecordFormatError("record is not enclosed in '#'")
    body = line[1:-1]
    if not body.endswith(SEP):
        raise RecordFormatError("record does not end with ';#'")
    fields = body[:-1].split(SEP)
    if len(fields) < 5:
        raise RecordFormatError("record is too short")

    bucket = _to_int(fields[0], "bucket index")
    if bucket >= HASH_SIZE:
        raise RecordFormatError(f"bucket index {bucket} out of range")

    # Every split point where the tail reads as valid (file, count) pairs.
    candidates = []
    for k in range(2, len(fields)):
        if not _INT.fullmatch(fields[k]):
            continue
        pairs = _pairs_from(fields, k, suffix)
        if pairs is not None:
            candidates.append((k, pairs))
    if not candidates:
        raise RecordFormatError("file count does not match the file entries")
    if len(candidates) > 1:
        raise RecordFormatError("ambiguous record: word can be split more than one way")
    k, occurrences = candidates[0]

    word = SEP.join(fields[1:k])
    if not word or WHITESPACE.search(word):
        raise RecordFormatError(f"invalid word {word!r}")
    if bucket_of(word) != bucket:
        raise RecordFormatError(f"word {word!r} does not belong to bucket {bucket}")

    seen = set()
    for file_name, _ in occurrences:
        if file_name in seen:
            raise RecordFormatError(f"duplicate file {file_name!r} in record")
        seen.add(file_name)
    return bucket, word, occurrences


def sniff_backup(path: str) -> int:
    """
    Cheap structural check before any record is parsed: the file must be
    non-empty, start with '#' and have '#' as its second-to-last byte.

    Returns:
        file size in bytes
    Raises:
        AccessError, EmptyFileError, BackupFormatError
    """
    try:
        f = open(path, "rb")
    except OSError as e:
        raise AccessError(path, f"cannot be opened ({e.strerror or e})") from e
    with f:
        size = f.seek(0, os.SEEK_END)
        if size < 1:
            raise EmptyFileError(path)
        f.seek(0)
        first = f.read(1)
        if first != SENTINEL.encode():
            raise BackupFormatError(path)
        if size < 2:
            raise BackupFormatError(path)
        f.seek(-2, os.SEEK_END)
        if f.read(1) != SENTINEL.encode():
            raise BackupFormatError(path)
    return size


class BackupWriter:
    """
    Writes an InvertedIndex as backup records, overwriting `path`.

    Usage:
        with BackupWriter("db.txt") as w:
            n = w.write_index(idx)
    """

    def __init__(self, path: str):
        self.path = path
        self._f = open(path, "w", encoding="utf-8", errors="surrogateescape", newline="")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def write_index(self, index: InvertedIndex) -> int:
        return self.write_lines(format_record(bucket, entry) for bucket, entry in index)

    def write_lines(self, lines) -> int:
        n = 0
        for line in lines:
            self._f.write(line)
            n += 1
        return n

    def close(self):
        if not self._f.closed:
            self._f.close()


class BackupReader:
    """
    Sequentially reads a backup written by BackupWriter.

    Yields tuples: (line_no, bucket, word, occurrences). Blank lines are
    skipped. A malformed record raises RecordFormatError carrying its line
    number; iteration should stop there.
    """

    def __init__(self, path: str, suffix: str = BACKUP_SUFFIX):
        self.path = path
        self.suffix = suffix
        self._f = open(path, "r", encoding="utf-8", errors="surrogateescape", newline="")
        self._line_no = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __iter__(self):
        return self

    def __next__(self):
        while True:
            line = self._f.readline()
            if not line:
                raise StopIteration
            self._line_no += 1
            if not WHITESPACE.fullmatch(line):
                break
        try:
            bucket, word, occurrences = parse_record(line, self.suffix)
        except RecordFormatError as e:
            raise RecordFormatError(e.reason, self._line_no) from None
        return self._line_no, bucket, word, occurrences

    def close(self):
        if not self._f.closed:
            self._f.close()
