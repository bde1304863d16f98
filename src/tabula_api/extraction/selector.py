"""Choose the extraction primitive for a region."""

from __future__ import annotations

from tabula_api.core.document import ExtractionMethod
from tabula_api.extraction.base import Area


def select_method(area: Area, requested: ExtractionMethod) -> ExtractionMethod:
    """Resolve ``requested`` to ORIGINAL or SPREADSHEET for this area.

    Only GUESS consults the tabularity heuristic, exactly once.
    """
    match requested:
        case ExtractionMethod.ORIGINAL:
            return ExtractionMethod.ORIGINAL
        case ExtractionMethod.SPREADSHEET:
            return ExtractionMethod.SPREADSHEET
        case ExtractionMethod.GUESS:
            if area.is_tabular():
                return ExtractionMethod.SPREADSHEET
            return ExtractionMethod.ORIGINAL
        case _:
            raise ValueError(f"Unknown extraction method: {requested!r}")
