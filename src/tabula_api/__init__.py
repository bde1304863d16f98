"""Table extraction service over uploaded PDF documents."""

from tabula_api.core.document import Cell, ExtractionMethod, ExtractionRequest, Rectangle, Table
from tabula_api.core.registry import ExtractorRegistry

__all__ = [
    "Cell",
    "ExtractionMethod",
    "ExtractionRequest",
    "Rectangle",
    "Table",
    "ExtractorRegistry",
]
