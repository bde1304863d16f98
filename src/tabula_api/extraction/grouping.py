"""Bucket extraction requests by page."""

from __future__ import annotations

from collections.abc import Sequence

from tabula_api.core.document import ExtractionRequest

# (index in the caller's list, request)
IndexedRequest = tuple[int, ExtractionRequest]


def group_by_page(requests: Sequence[ExtractionRequest]) -> list[tuple[int, list[IndexedRequest]]]:
    """Group requests by page number, pages ascending, caller order kept within a page.

    Each request travels with its original index so results can be put
    back into request order.
    """
    groups: dict[int, list[IndexedRequest]] = {}
    for index, request in enumerate(requests):
        groups.setdefault(request.page, []).append((index, request))
    return sorted(groups.items(), key=lambda item: item[0])
