"""
invsearch/index.py

In-memory inverted index partitioned into a fixed array of 27 buckets.

Layout:
    InvertedIndex
      buckets[0..26]           # one WordTable per first-character category
        WordTable              # word -> WordEntry, insertion ordered
          WordEntry            # word, file_count, occurrences
            occurrences        # file_name -> Occurrence, insertion ordered
              Occurrence       # file_name, count

Bucket i < 26 holds words starting with the i-th ASCII letter (either case),
bucket 26 holds everything else. The table is never resized; the backup
format stores the bucket number of every record.

Iteration order everywhere is discovery order, which is also the order the
serializer writes and the order rows are displayed in.
"""

import re

HASH_SIZE = 27
OTHER_BUCKET = HASH_SIZE - 1

# Longest word kept in one piece (buffer of 50 including the terminator)
MAX_WORD_LEN = 49

# Word separators: ASCII whitespace only, as a C "%s" scan sees it
WHITESPACE = re.compile(r"[ \t\n\r\f\v]+")


def bucket_of(word: str) -> int:
    """
    Map a word to its bucket by its first character.
    'A'..'Z' -> 0..25, 'a'..'z' -> 0..25, anything else -> 26.
    """
    if not word:
        raise ValueError("cannot bucket an empty word")
    c = word[0]
    if "A" <= c <= "Z":
        return ord(c) - ord("A")
    if "a" <= c <= "z":
        return ord(c) - ord("a")
    return OTHER_BUCKET


class Occurrence:
    """How many times a word occurs in one file."""

    __slots__ = ("file_name", "count")

    def __init__(self, file_name: str, count: int = 1):
        self.file_name = file_name
        self.count = count

    def as_tuple(self) -> tuple[str, int]:
        return self.file_name, self.count

    def __eq__(self, other):
        if not isinstance(other, Occurrence):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __repr__(self):
        return f"Occurrence({self.file_name!r}, {self.count})"


class WordEntry:
    """
    One distinct word plus its per-file occurrence list.

    `file_count` is derived from the occurrence map, so it always equals the
    number of distinct files the word was seen in.
    """

    __slots__ = ("word", "occurrences")

    def __init__(self, word: str):
        self.word = word
        self.occurrences: dict[str, Occurrence] = {}

    @property
    def file_count(self) -> int:
        return len(self.occurrences)

    def add_occurrence(self, file_name: str, count: int = 1) -> bool:
        """
        Add `count` hits for `file_name`.
        Returns True if the file is new for this word.
        """
        occ = self.occurrences.get(file_name)
        if occ is None:
            self.occurrences[file_name] = Occurrence(file_name, count)
            return True
        occ.count += count
        return False

    def iter_occurrences(self):
        return iter(self.occurrences.values())

    def as_tuple(self):
        return self.word, self.file_count, tuple(o.as_tuple() for o in self.occurrences.values())

    def __eq__(self, other):
        if not isinstance(other, WordEntry):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __repr__(self):
        return f"WordEntry({self.word!r}, file_count={self.file_count})"


class WordTable:
    """Entries of one bucket, keyed by exact (case-sensitive) word."""

    __slots__ = ("entries",)

    def __init__(self):
        self.entries: dict[str, WordEntry] = {}

    def get(self, word: str) -> WordEntry | None:
        return self.entries.get(word)

    def get_or_create(self, word: str) -> tuple[WordEntry, bool]:
        entry = self.entries.get(word)
        if entry is not None:
            return entry, False
        entry = WordEntry(word)
        self.entries[word] = entry
        return entry, True

    def __iter__(self):
        return iter(self.entries.values())

    def __len__(self):
        return len(self.entries)

    def __contains__(self, word):
        return word in self.entries


class InvertedIndex:
    """
    Fixed 27-bucket inverted index.

    Typical usage:
        idx = InvertedIndex()
        idx.add_word("Data", "a.txt")
        entry = idx.lookup("Data")      # WordEntry or None
        for bucket, entry in idx:       # bucket order, then discovery order
            ...
    """

    def __init__(self):
        self.buckets = [WordTable() for _ in range(HASH_SIZE)]

    def bucket(self, i: int) -> WordTable:
        return self.buckets[i]

    def lookup(self, word: str) -> WordEntry | None:
        return self.buckets[bucket_of(word)].get(word)

    def add_word(self, word: str, file_name: str) -> bool:
        """
        Record one occurrence of `word` in `file_name`.
        Returns True if a new WordEntry was created.
        """
        entry, created = self.buckets[bucket_of(word)].get_or_create(word)
        entry.add_occurrence(file_name)
        return created

    def merge_entry(self, bucket: int, word: str, occurrences) -> bool:
        """
        Merge a (word, [(file_name, count), ...]) record into `bucket`.

        An existing entry for the same word is extended rather than
        duplicated: counts for known files are added, new files appended.
        Returns True if a new WordEntry was created.
        """
        entry, created = self.buckets[bucket].get_or_create(word)
        for file_name, count in occurrences:
            entry.add_occurrence(file_name, count)
        return created

    def __iter__(self):
        for i, table in enumerate(self.buckets):
            for entry in table:
                yield i, entry

    def __len__(self):
        return sum(len(t) for t in self.buckets)

    def is_empty(self) -> bool:
        return all(len(t) == 0 for t in self.buckets)

    def snapshot(self):
        """Hashable, order-preserving view of the whole index (for comparisons)."""
        return tuple((i, entry.as_tuple()) for i, entry in self)
