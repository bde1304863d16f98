"""Unified table model for extraction requests and results."""

from __future__ import annotations

import csv
import io
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ExtractionMethod(StrEnum):
    """How a region is turned into a table."""

    ORIGINAL = "original"  # text-layout heuristics
    SPREADSHEET = "spreadsheet"  # ruling lines / grid structure
    GUESS = "guess"  # pick one of the above per region


class Rectangle(BaseModel):
    """Rectangular region in page coordinates (points, origin top-left)."""

    model_config = ConfigDict(frozen=True)

    top: float
    left: float
    bottom: float
    right: float

    @computed_field
    @property
    def width(self) -> float:
        return self.right - self.left

    @computed_field
    @property
    def height(self) -> float:
        return self.bottom - self.top

    def as_bbox(self) -> tuple[float, float, float, float]:
        """Return ``(x0, y0, x1, y1)`` as used by PDF libraries."""
        return (self.left, self.top, self.right, self.bottom)

    @classmethod
    def from_bbox(cls, bbox: tuple[float, float, float, float]) -> Rectangle:
        x0, y0, x1, y1 = bbox
        return cls(top=y0, left=x0, bottom=y1, right=x1)

    def union(self, other: Rectangle) -> Rectangle:
        return Rectangle(
            top=min(self.top, other.top),
            left=min(self.left, other.left),
            bottom=max(self.bottom, other.bottom),
            right=max(self.right, other.right),
        )


class Cell(BaseModel):
    """A single table cell."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    rectangle: Rectangle | None = None


class Table(BaseModel):
    """An extracted table: rows of cells tagged with their page and provenance.

    Spreadsheet fragments and layout tables share this shape; ``method``
    records which primitive produced the table.
    """

    model_config = ConfigDict(frozen=True)

    page: int
    method: ExtractionMethod
    rectangle: Rectangle | None = None
    rows: list[list[Cell]] = Field(default_factory=list)

    @classmethod
    def empty(cls, page: int, rectangle: Rectangle | None = None) -> Table:
        """A table with no rows, still bound to its page and region."""
        return cls(page=page, method=ExtractionMethod.SPREADSHEET, rectangle=rectangle)

    @property
    def width(self) -> int:
        return max((len(row) for row in self.rows), default=0)

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def combine(self, other: Table) -> Table:
        """Stack ``other`` below this table.

        Rows are padded with empty cells to the wider column count and the
        bounds become the union of both, so the operation is associative.
        """
        width = max(self.width, other.width)
        rows = [_pad(row, width) for row in (*self.rows, *other.rows)]
        if self.rectangle is None:
            rectangle = other.rectangle
        elif other.rectangle is None:
            rectangle = self.rectangle
        else:
            rectangle = self.rectangle.union(other.rectangle)
        return Table(page=self.page, method=self.method, rectangle=rectangle, rows=rows)

    def __add__(self, other: Table) -> Table:
        return self.combine(other)

    def to_list(self) -> list[list[str]]:
        return [[cell.text for cell in row] for row in self.rows]

    def to_csv(self) -> str:
        buf = io.StringIO()
        csv.writer(buf, lineterminator="\n").writerows(self.to_list())
        return buf.getvalue()


class ExtractionRequest(BaseModel):
    """One region to extract: a rectangle on a 1-based page."""

    model_config = ConfigDict(frozen=True)

    page: int
    rectangle: Rectangle
    method: ExtractionMethod = ExtractionMethod.GUESS


def _pad(row: list[Cell], width: int) -> list[Cell]:
    if len(row) >= width:
        return list(row)
    return [*row, *(Cell() for _ in range(width - len(row)))]
