"""Table extraction across the pages of a stored document."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from contextlib import ExitStack, contextmanager
from pathlib import Path

from pydantic import BaseModel

from tabula_api.core.document import ExtractionMethod, ExtractionRequest, Rectangle, Table
from tabula_api.core.exceptions import ExtractorError, TabulaError
from tabula_api.extraction.assembler import assemble
from tabula_api.extraction.base import DocumentHandle, PageExtractor, PageHandle
from tabula_api.extraction.grouping import IndexedRequest, group_by_page
from tabula_api.extraction.selector import select_method
from tabula_api.storage.store import DocumentStore
from tabula_api.utils.logging import get_logger

LOGGER = get_logger(__name__)


class ExtractionEvent(BaseModel):
    """Emitted once per region with the method that was actually used."""

    document_id: uuid.UUID
    page: int
    index: int  # position in the caller's request list
    requested: ExtractionMethod
    used: ExtractionMethod


Observer = Callable[[ExtractionEvent], None]


@contextmanager
def backend_errors(context: str) -> Iterator[None]:
    """Report unexpected failures of page extractor calls as ``ExtractorError``.

    Wrap only calls into the backend, so bugs elsewhere still surface as server errors.
    """
    try:
        yield
    except TabulaError:
        raise
    except Exception as e:
        raise ExtractorError(f"{context}: {e}", e) from e


class PageCache:
    """Pages materialized during one call, keyed by page number.

    Created per call and dropped with it; never shared between calls.
    """

    def __init__(self, document: DocumentHandle) -> None:
        self.document = document
        self._pages: dict[int, PageHandle] = {}

    def get(self, number: int) -> PageHandle:
        if number not in self._pages:
            with backend_errors(f"Cannot open page {number}"):
                self._pages[number] = self.document.extract_page(number)
        return self._pages[number]


class TableExtractionService:
    """Extracts one table per requested region, in request order.

    Requests are processed page by page (each page is opened once per call)
    and the results are put back in the order they were requested.
    """

    def __init__(
        self,
        store: DocumentStore,
        extractor: PageExtractor,
        max_workers: int = 1,
        observers: Sequence[Observer] = (),
    ) -> None:
        self.store = store
        self.extractor = extractor
        self.max_workers = max_workers
        self.observers: list[Observer] = list(observers)

    def add_observer(self, observer: Observer) -> None:
        self.observers.append(observer)

    def extract(self, document_id: uuid.UUID, requests: Sequence[ExtractionRequest]) -> list[Table]:
        """Extract a table for every request; all succeed or the call fails."""
        document = self.store.find_by_id(document_id)
        if not requests:
            return []

        groups = group_by_page(requests)
        results: list[Table | None] = [None] * len(requests)

        with self._open(document.document_path) as handle:
            pages = PageCache(handle)

            def run(group: tuple[int, list[IndexedRequest]]) -> list[tuple[int, Table]]:
                page_number, items = group
                page = pages.get(page_number)
                return [(index, self._extract_region(document_id, page, index, req)) for index, req in items]

            for group_results in self._map(run, groups):
                for index, table in group_results:
                    results[index] = table

        return results  # type: ignore[return-value]

    def extract_page(
        self,
        document_id: uuid.UUID,
        page_number: int,
        regions: Sequence[tuple[Rectangle, ExtractionMethod]],
    ) -> list[Table]:
        """Extract regions of a single stored page."""
        self.store.find_page(document_id, page_number)
        requests = [
            ExtractionRequest(page=page_number, rectangle=rectangle, method=method)
            for rectangle, method in regions
        ]
        return self.extract(document_id, requests)

    def autodetect(self, document_id: uuid.UUID, page_number: int) -> list[Rectangle]:
        """Candidate table regions of one page, as reported by the extractor."""
        self.store.find_page(document_id, page_number)
        document = self.store.find_by_id(document_id)
        with self._open(document.document_path) as handle:
            with backend_errors(f"Cannot detect tables on page {page_number}"):
                return handle.extract_page(page_number).candidate_regions()

    def autodetect_document(self, document_id: uuid.UUID) -> list[list[Rectangle]]:
        """Candidate table regions for every stored page, in page order."""
        document = self.store.find_by_id(document_id)
        regions = []
        with self._open(document.document_path) as handle:
            for page in document.pages:
                with backend_errors(f"Cannot detect tables on page {page.number}"):
                    regions.append(handle.extract_page(page.number).candidate_regions())
        return regions

    def _extract_region(
        self, document_id: uuid.UUID, page: PageHandle, index: int, request: ExtractionRequest
    ) -> Table:
        context = f"Cannot extract region {index} on page {page.number}"
        with backend_errors(context):
            area = page.materialize_area(request.rectangle)
            used = select_method(area, request.method)
        LOGGER.info(
            f"Page {page.number} region {index}: requested {request.method}, using {used}"
        )
        self._notify(
            ExtractionEvent(
                document_id=document_id,
                page=page.number,
                index=index,
                requested=request.method,
                used=used,
            )
        )
        if used is ExtractionMethod.SPREADSHEET:
            with backend_errors(context):
                fragments = area.extract_structural()
            return assemble(fragments, page.number, request.rectangle)
        with backend_errors(context):
            return area.extract_by_layout()

    def _notify(self, event: ExtractionEvent) -> None:
        for observer in self.observers:
            observer(event)

    def _map(self, fn, groups):
        if self.max_workers > 1 and self.extractor.supports_concurrency and len(groups) > 1:
            with ThreadPoolExecutor(max_workers=min(len(groups), self.max_workers)) as pool:
                return list(pool.map(fn, groups))
        return [fn(group) for group in groups]

    @contextmanager
    def _open(self, document_path: str | Path) -> Iterator[DocumentHandle]:
        """Open the document; errors raised inside the ``with`` block pass through unchanged."""
        with ExitStack() as stack:
            with backend_errors(f"Cannot open {document_path}"):
                handle = stack.enter_context(self.extractor.open(document_path))
            yield handle
