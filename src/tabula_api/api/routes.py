"""Document, page and table endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, Header, Response, UploadFile, status
from fastapi.responses import PlainTextResponse

from tabula_api.api.dependencies import get_extraction_service, get_store
from tabula_api.api.schemas import ExtractPageTablesBody, ExtractTablesBody
from tabula_api.core.document import Rectangle, Table
from tabula_api.extraction.orchestrator import TableExtractionService
from tabula_api.storage.schemas import DocumentRecord, DocumentSummary
from tabula_api.storage.store import DocumentStore
from tabula_api.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])

Store = Annotated[DocumentStore, Depends(get_store)]
Service = Annotated[TableExtractionService, Depends(get_extraction_service)]


def _media_weights(accept: str) -> dict[str, tuple[float, int]]:
    """Map each media range in an Accept header to ``(q, position)``."""
    weights = {}
    for position, part in enumerate(accept.split(",")):
        media, *params = (p.strip() for p in part.split(";"))
        q = 1.0
        for param in params:
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 0.0
        weights.setdefault(media.lower(), (q, position))
    return weights


def _wants_csv(accept: str | None) -> bool:
    """CSV only when it outranks JSON; equal weights go to whichever is listed first."""
    if not accept:
        return False
    weights = _media_weights(accept)
    csv_q, csv_pos = weights.get("text/csv", (0.0, 0))
    json_q, json_pos = weights.get("application/json", (0.0, 0))
    if csv_q <= 0:
        return False
    return csv_q > json_q or (csv_q == json_q and csv_pos < json_pos)


def _tables_response(tables: list[Table], accept: str | None) -> Response | list[Table]:
    """JSON by default; CSV (tables concatenated) when the client prefers it."""
    if _wants_csv(accept):
        return PlainTextResponse("".join(t.to_csv() for t in tables), media_type="text/csv")
    return tables


@router.get("", response_model=list[DocumentSummary], summary="List stored documents")
def list_documents(store: Store):
    return store.list_documents()


@router.post(
    "",
    response_model=DocumentRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a PDF",
)
def upload_document(store: Store, file: UploadFile = File(..., description="PDF document")):
    return store.create_from_upload(file.file, file.filename)


@router.get("/{document_id}", response_model=DocumentRecord, summary="A document and its pages")
def get_document(document_id: uuid.UUID, store: Store):
    return store.find_by_id(document_id)


@router.get("/{document_id}/document", summary="Download the original PDF")
def download_document(document_id: uuid.UUID, store: Store):
    return Response(content=store.document_bytes(document_id), media_type="application/pdf")


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a document")
def delete_document(document_id: uuid.UUID, store: Store):
    store.destroy(document_id)


@router.get(
    "/{document_id}/tables",
    response_model=list[list[Rectangle]],
    summary="Autodetect tables on every page",
)
def autodetect_document_tables(document_id: uuid.UUID, service: Service):
    return service.autodetect_document(document_id)


@router.post(
    "/{document_id}/tables",
    response_model=list[Table],
    summary="Extract tables from regions across pages",
)
def extract_tables(
    document_id: uuid.UUID,
    body: ExtractTablesBody,
    service: Service,
    accept: Annotated[str | None, Header()] = None,
):
    LOGGER.info(f"Extracting {len(body.coords)} regions from {document_id}, default method {body.extraction_method}")
    return _tables_response(service.extract(document_id, body.to_requests()), accept)


@router.delete(
    "/{document_id}/pages/{number}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a page from a document",
)
def delete_page(document_id: uuid.UUID, number: int, store: Store):
    store.destroy_page(document_id, number)


@router.get(
    "/{document_id}/pages/{number}/tables",
    response_model=list[Rectangle],
    summary="Autodetect tables on this page",
)
def autodetect_page_tables(document_id: uuid.UUID, number: int, service: Service):
    return service.autodetect(document_id, number)


@router.post(
    "/{document_id}/pages/{number}/tables",
    response_model=list[Table],
    summary="Extract tables from this page",
)
def extract_page_tables(
    document_id: uuid.UUID,
    number: int,
    body: ExtractPageTablesBody,
    service: Service,
    accept: Annotated[str | None, Header()] = None,
):
    return _tables_response(service.extract_page(document_id, number, body.to_regions()), accept)
