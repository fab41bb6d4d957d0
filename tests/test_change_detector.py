import pytest

from common.errors import ConfigError, SourceIOError
from ingestion.change_detector import ingest_documents, scan_documents
from ingestion.document_models import ChangeStatus
from ingestion.hash_utils import sha256_text
from vectorstore.embedding_codec import serialize_embedding


def test_new_documents_are_created_and_enqueued(store, docs_dir):
    docs = ingest_documents(store, docs_dir)

    assert [d.path.name for d in docs] == ["fruit.txt", "space.md"]
    assert all(d.status is ChangeStatus.NEW for d in docs)
    assert store.count_documents() == 2

    record = store.get_document_by_path(str((docs_dir / "fruit.txt").resolve()))
    assert record.id == docs[0].id
    assert record.content_hash == sha256_text(docs[0].text)


def test_unchanged_documents_are_not_enqueued(store, docs_dir):
    ingest_documents(store, docs_dir)
    assert ingest_documents(store, docs_dir) == []
    assert store.count_documents() == 2


def test_modified_document_gets_new_fingerprint_and_loses_chunks(store, docs_dir):
    first = {d.path.name: d for d in ingest_documents(store, docs_dir)}
    for d in first.values():
        with store.transaction() as session:
            store.add_chunk(session, d.id, d.text, serialize_embedding([1.0, 2.0]))

    (docs_dir / "fruit.txt").write_text("Cherries are small.")
    second = ingest_documents(store, docs_dir)

    assert len(second) == 1
    changed = second[0]
    assert changed.status is ChangeStatus.MODIFIED
    assert changed.id == first["fruit.txt"].id
    assert changed.text == "Cherries are small."
    assert store.count_chunks(changed.id) == 0
    assert store.count_chunks(first["space.md"].id) == 1
    assert store.count_documents() == 2


def test_unsupported_and_broken_files_are_skipped(store, docs_dir):
    (docs_dir / "image.png").write_bytes(b"\x89PNG")
    (docs_dir / "broken.pdf").write_bytes(b"not a pdf")

    events = list(scan_documents(store, docs_dir))

    skipped = {e.path.name for e in events if e.status is None}
    assert skipped == {"image.png", "broken.pdf"}
    assert store.count_documents() == 2


def test_empty_directory_yields_nothing(store, tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    assert ingest_documents(store, empty) == []


def test_missing_root_is_config_error(store, tmp_path):
    with pytest.raises(ConfigError):
        ingest_documents(store, tmp_path / "missing")


def test_read_failure_aborts_the_run(store, docs_dir, monkeypatch):
    from pathlib import Path

    def unreadable(self, *args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "read_text", unreadable)
    with pytest.raises(SourceIOError):
        ingest_documents(store, docs_dir)
    assert store.count_documents() == 0
