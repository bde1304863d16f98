"""Request bodies for the extraction endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from tabula_api.core.document import ExtractionMethod, ExtractionRequest, Rectangle


class RegionCoordinate(BaseModel):
    top: float
    left: float
    bottom: float
    right: float
    extraction_method: ExtractionMethod | None = None  # overrides the body default

    @property
    def rectangle(self) -> Rectangle:
        return Rectangle(top=self.top, left=self.left, bottom=self.bottom, right=self.right)


class Coordinate(RegionCoordinate):
    page: int = Field(ge=1)


class ExtractTablesBody(BaseModel):
    """``POST /documents/{id}/tables``"""

    coords: list[Coordinate]
    extraction_method: ExtractionMethod = ExtractionMethod.GUESS

    def to_requests(self) -> list[ExtractionRequest]:
        return [
            ExtractionRequest(
                page=c.page,
                rectangle=c.rectangle,
                method=c.extraction_method or self.extraction_method,
            )
            for c in self.coords
        ]


class ExtractPageTablesBody(BaseModel):
    """``POST /documents/{id}/pages/{number}/tables``"""

    coords: list[RegionCoordinate]
    extraction_method: ExtractionMethod = ExtractionMethod.GUESS

    def to_regions(self) -> list[tuple[Rectangle, ExtractionMethod]]:
        return [(c.rectangle, c.extraction_method or self.extraction_method) for c in self.coords]
