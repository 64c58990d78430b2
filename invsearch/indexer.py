"""
invsearch/indexer.py

Builds (or extends) an InvertedIndex from a list of text files.

Tokenization is plain ASCII-whitespace splitting: no punctuation stripping
and no case folding, so "Data", "data" and "data," are three different
words. Other whitespace (NBSP and friends) stays inside the word. Tokens
longer than MAX_WORD_LEN are cut into consecutive pieces of at most
MAX_WORD_LEN characters.

Files are decoded as UTF-8 with surrogateescape, so undecodable bytes are
kept in the word and written back unchanged by the serializer.

A file that cannot be opened is reported and skipped. A file that fails
part-way through reading keeps the words already indexed and is reported as
partial; the build itself never fails because of one bad file.
"""

import sys

from invsearch.errors import AccessError
from invsearch.index import InvertedIndex, MAX_WORD_LEN, WHITESPACE


def iter_words(text: str):
    """Yield the words of `text`, split on runs of ASCII whitespace."""
    for token in WHITESPACE.split(text):
        if not token:
            continue
        if len(token) <= MAX_WORD_LEN:
            yield token
            continue
        for start in range(0, len(token), MAX_WORD_LEN):
            yield token[start:start + MAX_WORD_LEN]


class BuildReport:
    """
    Outcome of one build.

    Attributes:
        indexed:   file names that were read to the end, in order
        partial:   file names whose read failed after some words were indexed
        failures:  list[(file_name, AccessError)] for skipped or partial files
        tokens:    number of words processed
        new_words: number of WordEntry values created
    """

    def __init__(self):
        self.indexed: list[str] = []
        self.partial: list[str] = []
        self.failures: list[tuple[str, AccessError]] = []
        self.tokens = 0
        self.new_words = 0

    def to_dict(self) -> dict:
        return {
            "indexed": list(self.indexed),
            "partial": list(self.partial),
            "failures": [{"fileName": name, "error": str(err)} for name, err in self.failures],
            "tokens": self.tokens,
            "newWords": self.new_words,
        }


class Indexer:
    """
    Inverted index builder.

    Typical usage:
        idx = InvertedIndex()
        report = Indexer(idx).build(["a.txt", "b.txt"])
        report.failures      # files that could not be opened or fully read
    """

    def __init__(self, index: InvertedIndex | None = None, quiet: bool = False):
        self.index = index if index is not None else InvertedIndex()
        self.quiet = quiet

    def build(self, files) -> BuildReport:
        """
        Index every file in `files`, in order.

        Args:
            files: iterable of file names (already validated by the caller)

        Returns:
            BuildReport
        """
        report = BuildReport()
        for file_name in files:
            try:
                f = open(file_name, "r", encoding="utf-8", errors="surrogateescape")
            except OSError as e:
                self._fail(report, AccessError(file_name, f"cannot be opened ({e.strerror or e})"))
                continue
            before = report.tokens
            try:
                with f:
                    self._index_lines(f, file_name, report)
            except OSError as e:
                done = report.tokens - before
                report.partial.append(file_name)
                self._fail(report, AccessError(file_name, f"read failed after {done} words ({e.strerror or e})"))
                continue
            report.indexed.append(file_name)
            if not self.quiet:
                print(f"[indexer] indexed {file_name}", file=sys.stderr)
        return report

    def _fail(self, report: BuildReport, err: AccessError):
        report.failures.append((err.path, err))
        print(f"[indexer] WARN {err}", file=sys.stderr)

    def _index_lines(self, lines, file_name: str, report: BuildReport):
        for line in lines:
            for word in iter_words(line):
                report.tokens += 1
                if self.index.add_word(word, file_name):
                    report.new_words += 1


def build(index: InvertedIndex, files, quiet: bool = False) -> BuildReport:
    """Functional shortcut for Indexer(index).build(files)."""
    return Indexer(index, quiet=quiet).build(files)
