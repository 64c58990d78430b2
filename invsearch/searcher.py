# invsearch/searcher.py
from invsearch.index import InvertedIndex


class QueryResult:
    """
    Result of an exact-word lookup.

    A miss is a normal result: found=False, file_count=0, no occurrences.
    """

    __slots__ = ("word", "found", "file_count", "occurrences")

    def __init__(self, word: str, found: bool, file_count: int = 0, occurrences=()):
        self.word = word
        self.found = found
        self.file_count = file_count
        self.occurrences: tuple[tuple[str, int], ...] = tuple(occurrences)

    def __bool__(self):
        return self.found

    def to_dict(self) -> dict:
        return {
            "word": self.word,
            "found": self.found,
            "fileCount": self.file_count,
            "occurrences": [{"fileName": f, "count": c} for f, c in self.occurrences],
        }

    def __repr__(self):
        return f"QueryResult({self.word!r}, found={self.found}, file_count={self.file_count})"


class Searcher:
    """
    Exact, case-sensitive word lookup over an InvertedIndex.

    Only the word's own bucket is consulted. The index is never modified.
    """

    def __init__(self, index: InvertedIndex):
        self.index = index

    def search(self, word: str) -> QueryResult:
        """
        Look up `word`.
        Returns the entry's file count and its (file_name, count) pairs in
        insertion order, or a no-match result.
        """
        if not word:
            return QueryResult(word, False)
        entry = self.index.lookup(word)
        if entry is None:
            return QueryResult(word, False)
        return QueryResult(
            word,
            True,
            entry.file_count,
            (occ.as_tuple() for occ in entry.iter_occurrences()),
        )


def search(index: InvertedIndex, word: str) -> QueryResult:
    return Searcher(index).search(word)
