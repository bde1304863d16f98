"""PyMuPDF page extractor backend."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from functools import cached_property
from pathlib import Path

import pymupdf as fitz

from tabula_api.core.document import Cell, ExtractionMethod, Rectangle, Table
from tabula_api.core.exceptions import ExtractorError
from tabula_api.core.registry import ExtractorRegistry
from tabula_api.extraction.base import Area, DocumentHandle, PageExtractor, PageHandle, PageInfo

# Ruling lines drawn exactly on the region border must still be found.
CLIP_TOLERANCE = 1.0

# Words closer than this fraction of the line height belong to the same cell.
WORD_GAP_RATIO = 0.6


def _safe_clip(page: fitz.Page, rectangle: Rectangle) -> fitz.Rect | None:
    r = fitz.Rect(rectangle.as_bbox()).normalize()
    r = (r + (-CLIP_TOLERANCE, -CLIP_TOLERANCE, CLIP_TOLERANCE, CLIP_TOLERANCE)) & page.rect
    if r.is_empty or r.width < 2 or r.height < 2:
        return None
    return r


def _cell_text(value: str | None) -> str:
    return "" if value is None else str(value).strip()


def _to_table(page_number: int, tab) -> Table:
    """Convert a PyMuPDF table into a spreadsheet fragment."""
    rows: list[list[Cell]] = []
    for texts, row in zip(tab.extract(), tab.rows):
        cells = []
        for text, bbox in zip(texts, row.cells):
            rectangle = Rectangle.from_bbox(tuple(bbox)) if bbox is not None else None
            cells.append(Cell(text=_cell_text(text), rectangle=rectangle))
        rows.append(cells)
    return Table(
        page=page_number,
        method=ExtractionMethod.SPREADSHEET,
        rectangle=Rectangle.from_bbox(tuple(tab.bbox)),
        rows=rows,
    )


def _layout_rows(words: list[tuple]) -> list[list[tuple[float, float, float, float, str]]]:
    """Group words into text lines by vertical overlap, then merge neighbours into chunks.

    Each chunk is ``(x0, y0, x1, y1, text)``.
    """
    lines: list[list[tuple]] = []
    line_bottom = None
    for w in sorted(words, key=lambda w: (w[1], w[0])):
        center = (w[1] + w[3]) / 2
        if line_bottom is None or center > line_bottom:
            lines.append([w])
            line_bottom = w[3]
        else:
            lines[-1].append(w)
            line_bottom = max(line_bottom, w[3])

    rows = []
    for line in lines:
        chunks: list[list] = []
        for x0, y0, x1, y1, text, *_ in sorted(line, key=lambda w: w[0]):
            gap = WORD_GAP_RATIO * (y1 - y0)
            if chunks and x0 - chunks[-1][2] <= gap:
                chunk = chunks[-1]
                chunk[1], chunk[2], chunk[3] = min(chunk[1], y0), x1, max(chunk[3], y1)
                chunk[4] = f"{chunk[4]} {text}"
            else:
                chunks.append([x0, y0, x1, y1, text])
        rows.append([tuple(c) for c in chunks])
    return rows


def _columns(rows: list[list[tuple]]) -> list[tuple[float, float]]:
    """Column bands: overlapping horizontal extents of all chunks merged together."""
    spans = sorted((c[0], c[2]) for row in rows for c in row)
    columns: list[list[float]] = []
    for x0, x1 in spans:
        if columns and x0 <= columns[-1][1]:
            columns[-1][1] = max(columns[-1][1], x1)
        else:
            columns.append([x0, x1])
    return [(x0, x1) for x0, x1 in columns]


class PymupdfArea(Area):
    def __init__(self, page: fitz.Page, page_number: int, rectangle: Rectangle) -> None:
        super().__init__(page_number, rectangle)
        self.page = page
        self.clip = _safe_clip(page, rectangle)

    @cached_property
    def tables(self) -> list:
        """Tables found inside the clip; searched once per area."""
        if self.clip is None:
            return []
        return list(self.page.find_tables(clip=self.clip, strategy="lines").tables)

    def is_tabular(self) -> bool:
        return bool(self.tables)

    def extract_structural(self) -> list[Table]:
        return [_to_table(self.page_number, tab) for tab in self.tables]

    def extract_by_layout(self) -> Table:
        if self.clip is None:
            return Table(page=self.page_number, method=ExtractionMethod.ORIGINAL, rectangle=self.rectangle)

        rows = _layout_rows(self.page.get_text("words", clip=self.clip))
        columns = _columns(rows)
        cells: list[list[Cell]] = []
        for row in rows:
            texts = [""] * len(columns)
            for x0, _y0, x1, _y1, text in row:
                center = (x0 + x1) / 2
                col = next(i for i, (c0, c1) in enumerate(columns) if c0 <= center <= c1)
                texts[col] = f"{texts[col]} {text}".strip()
            cells.append([Cell(text=t) for t in texts])

        return Table(
            page=self.page_number,
            method=ExtractionMethod.ORIGINAL,
            rectangle=self.rectangle,
            rows=cells,
        )


class PymupdfPage(PageHandle):
    def __init__(self, page: fitz.Page, number: int) -> None:
        super().__init__(number)
        self.page = page

    def candidate_regions(self) -> list[Rectangle]:
        tabs = self.page.find_tables(strategy="lines")
        return [Rectangle.from_bbox(tuple(tab.bbox)) for tab in tabs.tables]

    def materialize_area(self, rectangle: Rectangle) -> Area:
        return PymupdfArea(self.page, self.number, rectangle)


class PymupdfDocument(DocumentHandle):
    def __init__(self, doc: fitz.Document) -> None:
        self.doc = doc

    def extract_page(self, number: int) -> PageHandle:
        if not 1 <= number <= self.doc.page_count:
            raise ExtractorError(f"Page {number} out of range (document has {self.doc.page_count} pages)")
        return PymupdfPage(self.doc.load_page(number - 1), number)


class PymupdfExtractor(PageExtractor):
    """Backend using PyMuPDF's table finder and word positions."""

    name = "pymupdf"
    supports_concurrency = False

    @contextmanager
    def open(self, file_path: str | Path) -> Iterator[DocumentHandle]:
        doc = self._open(file_path)
        try:
            yield PymupdfDocument(doc)
        finally:
            doc.close()

    def page_info(self, file_path: str | Path) -> list[PageInfo]:
        doc = self._open(file_path)
        try:
            return [
                PageInfo(number=page.number + 1, width=page.rect.width, height=page.rect.height, rotation=page.rotation)
                for page in doc
            ]
        finally:
            doc.close()

    def _open(self, file_path: str | Path) -> fitz.Document:
        try:
            doc = fitz.open(str(file_path), filetype="pdf")
        except Exception as e:
            raise ExtractorError(f"Cannot open {file_path}: {e}", e) from e
        if not doc.is_pdf or doc.page_count == 0:
            doc.close()
            raise ExtractorError(f"Not a readable PDF: {file_path}")
        return doc


ExtractorRegistry.register("pymupdf", PymupdfExtractor)
