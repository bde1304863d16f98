"""Tests for document persistence."""

import io
import uuid
from pathlib import Path

import pytest

from tabula_api.core.exceptions import InvalidMediaError, NotFoundError
from tabula_api.extraction.pymupdf import PymupdfExtractor
from tabula_api.storage.database import create_db_engine, create_session_factory
from tabula_api.storage.models import Page
from tabula_api.storage.store import DocumentStore


@pytest.fixture
def store(tmp_path) -> DocumentStore:
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    return DocumentStore(create_session_factory(engine), tmp_path / "files", PymupdfExtractor())


def test_upload_records_pages_and_file(store, pdf_bytes):
    doc = store.create_from_upload(io.BytesIO(pdf_bytes), "tables.pdf")

    assert doc.filename == "tables.pdf"
    assert doc.size == len(pdf_bytes)
    assert [p.number for p in doc.pages] == [1, 2]
    assert Path(doc.document_path).read_bytes() == pdf_bytes
    assert store.document_bytes(doc.id) == pdf_bytes
    assert [d.id for d in store.list_documents()] == [doc.id]


def test_non_pdf_upload_is_rejected_without_persisting(store):
    with pytest.raises(InvalidMediaError):
        store.create_from_upload(io.BytesIO(b"GIF89a...."), "image.gif")

    assert store.list_documents() == []
    assert not store.storage_dir.exists()


def test_unreadable_pdf_is_rejected_and_cleaned_up(store):
    with pytest.raises(InvalidMediaError, match="Unreadable"):
        store.create_from_upload(io.BytesIO(b"%PDF-1.4 truncated"), "broken.pdf")

    assert store.list_documents() == []
    assert list(store.storage_dir.iterdir()) == []


def test_find_missing_document(store):
    with pytest.raises(NotFoundError):
        store.find_by_id(uuid.uuid4())


def test_destroy_page(store, pdf_bytes):
    doc = store.create_from_upload(io.BytesIO(pdf_bytes))

    store.destroy_page(doc.id, 1)

    assert [p.number for p in store.list_pages(doc.id)] == [2]
    with pytest.raises(NotFoundError):
        store.find_page(doc.id, 1)
    with pytest.raises(NotFoundError):
        store.destroy_page(doc.id, 1)


def test_destroy_cascades_to_pages_and_file(store, pdf_bytes):
    doc = store.create_from_upload(io.BytesIO(pdf_bytes))
    directory = Path(doc.document_path).parent

    store.destroy(doc.id)

    assert not directory.exists()
    with pytest.raises(NotFoundError):
        store.find_page(doc.id, 1)
    with pytest.raises(NotFoundError):
        store.destroy(doc.id)
    with store.session_factory() as session:
        assert session.query(Page).count() == 0
