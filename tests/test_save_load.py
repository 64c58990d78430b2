# tests/test_save_load.py
import pytest

from invsearch.errors import (
    AccessError,
    BackupFormatError,
    EmptyFileError,
    ExtensionError,
    RecordFormatError,
    ValidationError,
)
from invsearch.index import InvertedIndex
from invsearch.indexer import build
from invsearch.loader import load
from invsearch.registry import FileRegistry
from invsearch.serializer import save


@pytest.fixture
def corpus(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "f1.txt").write_text("foo bar foo", encoding="utf-8")
    (tmp_path / "f2.txt").write_text("bar", encoding="utf-8")
    idx = InvertedIndex()
    build(idx, ["f1.txt", "f2.txt"], quiet=True)
    return idx


def test_save_writes_records_in_bucket_order(corpus, tmp_path):
    n = save(corpus, "db.txt", quiet=True)
    assert n == 2
    assert (tmp_path / "db.txt").read_text(encoding="utf-8") == (
        "#1;bar;2;f1.txt;1;f2.txt;1;#\n"
        "#5;foo;1;f1.txt;2;#\n"
    )


def test_save_overwrites(corpus, tmp_path):
    (tmp_path / "db.txt").write_text("old contents that are much longer than the new ones\n" * 10)
    save(corpus, "db.txt", quiet=True)
    assert (tmp_path / "db.txt").read_text(encoding="utf-8").startswith("#1;bar;")


def test_save_rejects_extension(corpus, tmp_path):
    with pytest.raises(ExtensionError):
        save(corpus, "db.bak", quiet=True)
    assert not (tmp_path / "db.bak").exists()


def test_round_trip(corpus):
    save(corpus, "db.txt", quiet=True)
    fresh = InvertedIndex()
    report = load(fresh, "db.txt", quiet=True)

    assert report.records == 2
    assert not report.truncated
    assert fresh.snapshot() == corpus.snapshot()
    assert fresh.lookup("foo").file_count == 1
    assert [o.as_tuple() for o in fresh.lookup("bar").iter_occurrences()] == [("f1.txt", 1), ("f2.txt", 1)]


def test_round_trip_with_semicolon_words(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "a.txt").write_text("however; it works; 1;2 x a;2;b 1;2;3", encoding="utf-8")
    idx = InvertedIndex()
    build(idx, ["a.txt"], quiet=True)
    save(idx, "db.txt", quiet=True)

    fresh = InvertedIndex()
    report = load(fresh, "db.txt", quiet=True)
    assert not report.truncated
    assert fresh.snapshot() == idx.snapshot()


@pytest.mark.parametrize("content,error", [
    (b"x1;bar;1;a.txt;1;#\n", BackupFormatError),
    (b"#1;bar;1;a.txt;1;", BackupFormatError),
    (b"", EmptyFileError),
])
def test_rejected_backup_leaves_index_untouched(corpus, tmp_path, content, error):
    (tmp_path / "bad.txt").write_bytes(content)
    before = corpus.snapshot()
    registry = ["f1.txt"]
    with pytest.raises(error):
        load(corpus, "bad.txt", registry, quiet=True)
    assert corpus.snapshot() == before
    assert registry == ["f1.txt"]


def test_load_validation_errors(tmp_path):
    idx = InvertedIndex()
    with pytest.raises(ExtensionError):
        load(idx, str(tmp_path / "db.csv"))
    with pytest.raises(AccessError):
        load(idx, str(tmp_path / "missing.txt"))
    assert issubclass(ExtensionError, ValidationError)
    assert issubclass(ValidationError, ValueError)


def test_malformed_record_truncates_load(tmp_path, capsys):
    p = tmp_path / "db.txt"
    p.write_text(
        "#1;bar;1;a.txt;1;#\n"
        "#5;foo;x;a.txt;1;#\n"
        "#6;go;1;a.txt;1;#\n",
        encoding="utf-8",
    )
    idx = InvertedIndex()
    report = load(idx, str(p), quiet=True)

    assert report.records == 1
    assert report.truncated
    assert report.stopped_at_line == 2
    assert idx.lookup("bar") is not None
    assert idx.lookup("foo") is None
    assert idx.lookup("go") is None, "records after a malformed one must not be loaded"
    assert "[loader] WARN" in capsys.readouterr().err


def test_load_merges_into_existing_entry(tmp_path):
    (tmp_path / "a.txt").write_text("bar bar", encoding="utf-8")
    idx = InvertedIndex()
    build(idx, [str(tmp_path / "a.txt")], quiet=True)
    a = str(tmp_path / "a.txt")

    p = tmp_path / "db.txt"
    p.write_text(f"#1;bar;2;{a};1;b.txt;3;#\n#1;baz;1;b.txt;1;#\n", encoding="utf-8")
    report = load(idx, str(p), quiet=True)

    assert report.records == 2
    assert report.new_words == 1
    assert [e.word for e in idx.bucket(1)] == ["bar", "baz"]
    bar = idx.lookup("bar")
    assert bar.file_count == 2
    assert [o.as_tuple() for o in bar.iter_occurrences()] == [(a, 3), ("b.txt", 3)]


def test_load_claims_registry_names_once(tmp_path):
    p = tmp_path / "db.txt"
    p.write_text(
        "#0;alpha;2;a.txt;1;b.txt;2;#\n"
        "#1;beta;1;a.txt;4;#\n",
        encoding="utf-8",
    )
    registry = ["a.txt", "c.txt"]
    report = load(InvertedIndex(), str(p), registry, quiet=True)

    assert report.claimed == ["a.txt"]
    assert registry == ["c.txt"]


def test_load_claims_from_file_registry(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("a.txt", "b.txt"):
        (tmp_path / name).write_text("hello", encoding="utf-8")
    (tmp_path / "db.txt").write_text("#7;hello;1;a.txt;1;#\n", encoding="utf-8")

    registry = FileRegistry.from_candidates(["a.txt", "b.txt"], quiet=True)
    report = load(InvertedIndex(), "db.txt", registry, quiet=True)

    assert report.claimed == ["a.txt"]
    assert list(registry) == ["b.txt"]
    assert "a.txt" not in registry


def test_save_refuses_ambiguous_word(tmp_path):
    idx = InvertedIndex()
    idx.add_word("w;2;a.txt", "f.txt")
    idx.add_word("w;2;a.txt", "f.txt")
    idx.add_word("plain", "f.txt")
    (tmp_path / "db.txt").write_text("#15;plain;1;old.txt;1;#\n", encoding="utf-8")

    with pytest.raises(RecordFormatError, match="w;2;a.txt"):
        save(idx, str(tmp_path / "db.txt"), quiet=True)
    assert (tmp_path / "db.txt").read_text(encoding="utf-8") == "#15;plain;1;old.txt;1;#\n", \
        "a refused save must not touch the existing backup"


def test_save_refuses_file_name_without_suffix(tmp_path):
    idx = InvertedIndex()
    idx.add_word("hello", "notes.md")
    with pytest.raises(RecordFormatError):
        save(idx, str(tmp_path / "db.txt"), quiet=True)
    assert not (tmp_path / "db.txt").exists()


def test_save_refuses_unencodable_word(tmp_path):
    idx = InvertedIndex()
    idx.add_word("\ud800x", "f.txt")
    with pytest.raises(ValidationError):
        save(idx, str(tmp_path / "db.txt"), quiet=True)
    assert not (tmp_path / "db.txt").exists()


def test_round_trip_keeps_raw_bytes_and_unicode_spaces(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "a.txt").write_bytes(b"x\xc2\xa0y caf\xe9\n")
    idx = InvertedIndex()
    build(idx, ["a.txt"], quiet=True)
    assert idx.lookup("x\u00a0y") is not None
    assert idx.lookup("caf\udce9") is not None

    save(idx, "db.txt", quiet=True)
    raw = (tmp_path / "db.txt").read_bytes()
    assert b"caf\xe9;" in raw
    assert b"x\xc2\xa0y;" in raw

    fresh = InvertedIndex()
    report = load(fresh, "db.txt", quiet=True)
    assert not report.truncated
    assert fresh.snapshot() == idx.snapshot()


def test_save_write_failure_is_access_error(corpus, monkeypatch):
    from invsearch import backupio

    def failing_write_lines(self, lines):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(backupio.BackupWriter, "write_lines", failing_write_lines)
    with pytest.raises(AccessError, match="write failed"):
        save(corpus, "db.txt", quiet=True)
