"""Reduce spreadsheet fragments to one table per region."""

from __future__ import annotations

from collections.abc import Sequence
from functools import reduce

from tabula_api.core.document import Rectangle, Table


def assemble(fragments: Sequence[Table], page: int, rectangle: Rectangle | None = None) -> Table:
    """Merge fragments left to right in backend order.

    No fragments gives an empty table for the page, so every region yields a result.
    """
    if not fragments:
        return Table.empty(page, rectangle)
    return reduce(Table.combine, fragments)
