"""
invsearch/database.py

Session wrapper that owns one InvertedIndex and one FileRegistry and
enforces the order in which they may be populated:

    create()           build from the registry; only once
    update(backup)     load a backup; only once, and never after create()
    search/save/rows   need a populated index

create() and update() are mutually exclusive: once either has succeeded the
other is refused, so a file is never indexed twice in one session.
"""

from invsearch.errors import DatabaseStateError
from invsearch.index import InvertedIndex
from invsearch.indexer import BuildReport, Indexer
from invsearch.loader import LoadReport, load
from invsearch.registry import FileRegistry
from invsearch.searcher import QueryResult, Searcher
from invsearch.serializer import save


class Database:
    def __init__(self, registry: FileRegistry, index: InvertedIndex | None = None, quiet: bool = False):
        self.registry = registry
        self.index = index if index is not None else InvertedIndex()
        self.quiet = quiet
        self.created = False
        self.updated = False

    @property
    def ready(self) -> bool:
        return self.created or self.updated

    def create(self) -> BuildReport:
        if self.created:
            raise DatabaseStateError("database already created or loaded from backup")
        report = Indexer(self.index, quiet=self.quiet).build(list(self.registry))
        self.created = True
        return report

    def update(self, backup_path: str) -> LoadReport:
        if self.updated:
            raise DatabaseStateError("database already loaded from backup")
        if self.created:
            raise DatabaseStateError("cannot load a backup while a database is active")
        report = load(self.index, backup_path, self.registry, quiet=self.quiet)
        self.updated = True
        self.created = True
        return report

    def _require_ready(self, action: str):
        if not self.ready:
            raise DatabaseStateError(f"cannot {action}: database not created or loaded")

    def search(self, word: str) -> QueryResult:
        self._require_ready("search")
        return Searcher(self.index).search(word)

    def save(self, path: str) -> int:
        self._require_ready("save")
        return save(self.index, path, quiet=self.quiet)

    def rows(self) -> list[dict]:
        """Every entry as a display row, bucket order then discovery order."""
        self._require_ready("display")
        return [
            {
                "index": bucket,
                "word": entry.word,
                "file_count": entry.file_count,
                "occurrences": [
                    {"file_name": occ.file_name, "count": occ.count} for occ in entry.iter_occurrences()
                ],
            }
            for bucket, entry in self.index
        ]
