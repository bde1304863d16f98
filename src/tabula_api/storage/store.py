"""Document and page persistence: rows in the database, PDFs on disk."""

from __future__ import annotations

import shutil
import uuid
from pathlib import Path
from typing import BinaryIO

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from tabula_api.core.exceptions import ExtractorError, InvalidMediaError, NotFoundError, StorageError
from tabula_api.extraction.base import PageExtractor
from tabula_api.storage.models import Document, Page
from tabula_api.storage.schemas import DocumentRecord, DocumentSummary, PageRecord
from tabula_api.utils.io import has_pdf_signature
from tabula_api.utils.logging import get_logger

LOGGER = get_logger(__name__)

DOCUMENT_FILENAME = "document.pdf"


class DocumentStore:
    """Stores uploaded PDFs under ``storage_dir/<uuid>/`` and their metadata in the database.

    A document exclusively owns its pages; destroying it removes its pages
    and its directory.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        storage_dir: str | Path,
        extractor: PageExtractor,
    ) -> None:
        self.session_factory = session_factory
        self.storage_dir = Path(storage_dir)
        self.extractor = extractor

    def list_documents(self) -> list[DocumentSummary]:
        with self.session_factory() as session:
            documents = session.scalars(select(Document).order_by(Document.created_at)).all()
            return [DocumentSummary.model_validate(doc) for doc in documents]

    def find_by_id(self, document_id: uuid.UUID) -> DocumentRecord:
        """Return the document with its pages, or raise ``NotFoundError``."""
        with self.session_factory() as session:
            document = session.scalar(
                select(Document).options(selectinload(Document.pages)).where(Document.id == document_id)
            )
            if document is None:
                raise NotFoundError(f"Document {document_id} not found")
            return DocumentRecord.model_validate(document)

    def list_pages(self, document_id: uuid.UUID) -> list[PageRecord]:
        return self.find_by_id(document_id).pages

    def find_page(self, document_id: uuid.UUID, number: int) -> PageRecord:
        with self.session_factory() as session:
            return PageRecord.model_validate(self._get_page(session, document_id, number))

    def document_bytes(self, document_id: uuid.UUID) -> bytes:
        path = Path(self.find_by_id(document_id).document_path)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(f"File for document {document_id} is missing", e) from e

    def create_from_upload(self, stream: BinaryIO, filename: str | None = None) -> DocumentRecord:
        """Persist an uploaded PDF and one page row per page.

        Content without the ``%PDF`` signature, or that the extractor cannot
        read, is rejected with ``InvalidMediaError`` and nothing is kept.
        """
        if not has_pdf_signature(stream):
            raise InvalidMediaError("Unsupported media type: not a PDF")

        document_id = uuid.uuid4()
        directory = self.storage_dir / str(document_id)
        path = directory / DOCUMENT_FILENAME
        directory.mkdir(parents=True, exist_ok=True)
        try:
            with open(path, "wb") as f:
                shutil.copyfileobj(stream, f)

            try:
                pages = self.extractor.page_info(path)
            except ExtractorError as e:
                raise InvalidMediaError(f"Unreadable PDF: {e}", e) from e

            document = Document(
                id=document_id,
                filename=filename,
                document_path=str(path.resolve()),
                size=path.stat().st_size,
                pages=[
                    Page(number=p.number, width=p.width, height=p.height, rotation=p.rotation)
                    for p in pages
                ],
            )
            with self.session_factory.begin() as session:
                session.add(document)
                session.flush()
                record = DocumentRecord.model_validate(document)
        except InvalidMediaError:
            shutil.rmtree(directory, ignore_errors=True)
            raise
        except (SQLAlchemyError, OSError) as e:
            shutil.rmtree(directory, ignore_errors=True)
            raise StorageError(f"Could not store upload: {e}", e) from e

        LOGGER.info(f"Stored document {document_id} ({len(record.pages)} pages)")
        return record

    def destroy(self, document_id: uuid.UUID) -> None:
        try:
            with self.session_factory.begin() as session:
                document = session.get(Document, document_id)
                if document is None:
                    raise NotFoundError(f"Document {document_id} not found")
                directory = Path(document.document_path).parent
                session.delete(document)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not delete document {document_id}: {e}", e) from e

        try:
            shutil.rmtree(directory)
        except OSError as e:
            LOGGER.warning(f"Document {document_id} deleted but {directory} was not removed: {e}")
        LOGGER.info(f"Deleted document {document_id}")

    def destroy_page(self, document_id: uuid.UUID, number: int) -> None:
        try:
            with self.session_factory.begin() as session:
                session.delete(self._get_page(session, document_id, number))
        except SQLAlchemyError as e:
            raise StorageError(f"Could not delete page {number} of {document_id}: {e}", e) from e
        LOGGER.info(f"Deleted page {number} of document {document_id}")

    def _get_page(self, session: Session, document_id: uuid.UUID, number: int) -> Page:
        if session.get(Document, document_id) is None:
            raise NotFoundError(f"Document {document_id} not found")
        page = session.scalar(select(Page).where(Page.document_id == document_id, Page.number == number))
        if page is None:
            raise NotFoundError(f"Page {number} of document {document_id} not found")
        return page
