"""FastAPI dependencies resolving the services attached to the app."""

from fastapi import Request

from tabula_api.extraction.orchestrator import TableExtractionService
from tabula_api.storage.store import DocumentStore


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_extraction_service(request: Request) -> TableExtractionService:
    return request.app.state.extraction_service
