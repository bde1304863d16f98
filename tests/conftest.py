"""Shared fixtures: an in-memory page extractor and generated PDFs."""

from __future__ import annotations

import uuid
from collections import Counter
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

import pymupdf as fitz
import pytest

from tabula_api.core.document import Cell, ExtractionMethod, Rectangle, Table
from tabula_api.core.exceptions import ExtractorError, NotFoundError
from tabula_api.extraction.base import Area, DocumentHandle, PageExtractor, PageHandle, PageInfo
from tabula_api.storage.schemas import DocumentRecord, PageRecord


def rect(top: float, left: float = 0, bottom: float | None = None, right: float = 100) -> Rectangle:
    return Rectangle(top=top, left=left, bottom=top + 10 if bottom is None else bottom, right=right)


def fragment(page: int, *rows: list[str], top: float = 0) -> Table:
    return Table(
        page=page,
        method=ExtractionMethod.SPREADSHEET,
        rectangle=rect(top, bottom=top + 10 * len(rows)),
        rows=[[Cell(text=t) for t in row] for row in rows],
    )


class FakeArea(Area):
    def __init__(self, page_number, rectangle, calls, tabular=False, fragments=(), error=None):
        super().__init__(page_number, rectangle)
        self.calls = calls
        self.tabular = tabular
        self.fragments = list(fragments)
        self.error = error

    def is_tabular(self) -> bool:
        self.calls["is_tabular"] += 1
        return self.tabular

    def extract_structural(self) -> list[Table]:
        self.calls["structural"] += 1
        if self.error is not None:
            raise self.error
        return list(self.fragments)

    def extract_by_layout(self) -> Table:
        self.calls["layout"] += 1
        return Table(
            page=self.page_number,
            method=ExtractionMethod.ORIGINAL,
            rectangle=self.rectangle,
            rows=[[Cell(text=f"layout p{self.page_number} top={self.rectangle.top:g}")]],
        )


class FakePage(PageHandle):
    def __init__(self, number, extractor):
        super().__init__(number)
        self.extractor = extractor

    def candidate_regions(self) -> list[Rectangle]:
        return list(self.extractor.candidates.get(self.number, []))

    def materialize_area(self, rectangle: Rectangle) -> Area:
        config = self.extractor.regions.get((self.number, rectangle), {})
        return FakeArea(self.number, rectangle, self.extractor.calls, **config)


class FakeDocument(DocumentHandle):
    def __init__(self, extractor):
        self.extractor = extractor

    def extract_page(self, number: int) -> PageHandle:
        if not 1 <= number <= self.extractor.page_count:
            raise ExtractorError(f"Page {number} out of range")
        self.extractor.materialized.append(number)
        return FakePage(number, self.extractor)


class FakeExtractor(PageExtractor):
    """Records which pages were opened and which primitives ran.

    ``regions`` maps ``(page, rectangle)`` to ``FakeArea`` keyword arguments.
    """

    name = "fake"

    def __init__(self, page_count=2, regions=None, candidates=None, supports_concurrency=False):
        self.page_count = page_count
        self.regions = regions or {}
        self.candidates = candidates or {}
        self.supports_concurrency = supports_concurrency
        self.materialized: list[int] = []
        self.opened: list[str] = []
        self.calls: Counter = Counter()

    @contextmanager
    def open(self, file_path):
        self.opened.append(str(file_path))
        yield FakeDocument(self)

    def page_info(self, file_path) -> list[PageInfo]:
        return [PageInfo(number=n, width=612, height=792) for n in range(1, self.page_count + 1)]


class FakeStore:
    """Implements the lookups the extraction service needs."""

    def __init__(self, *documents: DocumentRecord):
        self.documents = {doc.id: doc for doc in documents}

    def find_by_id(self, document_id):
        if document_id not in self.documents:
            raise NotFoundError(f"Document {document_id} not found")
        return self.documents[document_id]

    def find_page(self, document_id, number):
        for page in self.find_by_id(document_id).pages:
            if page.number == number:
                return page
        raise NotFoundError(f"Page {number} of document {document_id} not found")


def make_record(page_numbers=(1, 2)) -> DocumentRecord:
    return DocumentRecord(
        id=uuid.uuid4(),
        filename="fake.pdf",
        document_path="/tmp/fake.pdf",
        size=0,
        created_at=datetime.now(timezone.utc),
        pages=[PageRecord(number=n, width=612, height=792) for n in page_numbers],
    )


# ── Generated PDFs ──────────────────────────────────────────────────────

GRID_A = [["Item", "Qty"], ["Apple", "3"], ["Pear", "10"]]
GRID_B = [["Code", "Price"], ["X1", "4.50"]]
LAYOUT_ROWS = [["Name", "Qty"], ["Apple", "3"], ["Pear", "10"]]

# regions on page 1 (points, origin top-left)
GRID_A_TOP, GRID_B_TOP, GRID_LEFT = 60, 260, 60
CELL_W, CELL_H = 120, 24


def _draw_grid(page: fitz.Page, top: float, left: float, texts: list[list[str]]) -> None:
    rows, cols = len(texts), len(texts[0])
    for r in range(rows + 1):
        page.draw_line((left, top + r * CELL_H), (left + cols * CELL_W, top + r * CELL_H))
    for c in range(cols + 1):
        page.draw_line((left + c * CELL_W, top), (left + c * CELL_W, top + rows * CELL_H))
    for r, row in enumerate(texts):
        for c, text in enumerate(row):
            page.insert_text((left + c * CELL_W + 6, top + r * CELL_H + 16), text, fontsize=10)


def build_pdf() -> bytes:
    """Two pages: page 1 holds two ruled grids, page 2 holds unruled columns of text."""
    doc = fitz.open()
    page = doc.new_page(width=612, height=792)
    _draw_grid(page, GRID_A_TOP, GRID_LEFT, GRID_A)
    _draw_grid(page, GRID_B_TOP, GRID_LEFT, GRID_B)

    page = doc.new_page(width=612, height=792)
    for r, (name, qty) in enumerate(LAYOUT_ROWS):
        y = 100 + r * 20
        page.insert_text((72, y), name, fontsize=10)
        page.insert_text((300, y), qty, fontsize=10)

    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def pdf_bytes() -> bytes:
    return build_pdf()


@pytest.fixture
def pdf_path(tmp_path: Path, pdf_bytes: bytes) -> Path:
    path = tmp_path / "tables.pdf"
    path.write_bytes(pdf_bytes)
    return path
