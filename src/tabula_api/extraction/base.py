"""Base classes for page extractor backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from pydantic import BaseModel

from tabula_api.core.document import Rectangle, Table


class PageInfo(BaseModel):
    """Page geometry recorded when a document is uploaded."""

    number: int
    width: float
    height: float
    rotation: int = 0


class Area(ABC):
    """A rectangle materialized against one page.

    Only lives for the duration of one extraction call.
    """

    def __init__(self, page_number: int, rectangle: Rectangle) -> None:
        self.page_number = page_number
        self.rectangle = rectangle

    @abstractmethod
    def is_tabular(self) -> bool:
        """Whether the region looks like a ruled table."""
        ...

    @abstractmethod
    def extract_structural(self) -> list[Table]:
        """Spreadsheet fragments found from ruling lines, possibly none."""
        ...

    @abstractmethod
    def extract_by_layout(self) -> Table:
        """One table built from text positions alone."""
        ...


class PageHandle(ABC):
    """An opened page of a document."""

    def __init__(self, number: int) -> None:
        self.number = number

    @abstractmethod
    def candidate_regions(self) -> list[Rectangle]:
        """Regions the backend detects as tables."""
        ...

    @abstractmethod
    def materialize_area(self, rectangle: Rectangle) -> Area: ...


class DocumentHandle(ABC):
    """An opened document; pages are addressed by 1-based number."""

    @abstractmethod
    def extract_page(self, number: int) -> PageHandle: ...


class PageExtractor(ABC):
    """Abstract base for PDF backends.

    Backends register themselves in ``ExtractorRegistry`` under ``name``.
    """

    name: str  # unique identifier for this backend
    supports_concurrency: bool = False  # may pages of one document be read in parallel

    @abstractmethod
    @contextmanager
    def open(self, file_path: str | Path) -> Iterator[DocumentHandle]:
        """Open a document for the duration of the ``with`` block."""
        ...

    @abstractmethod
    def page_info(self, file_path: str | Path) -> list[PageInfo]:
        """Read page geometry; raises ``ExtractorError`` on unreadable files."""
        ...
