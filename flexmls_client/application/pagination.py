"""
Turns decoded results and their pagination descriptor into what the caller
receives: a plain collection, a paginated collection or a total row count.
"""

from typing import Any, Mapping, Optional, Sequence, Union

from .domain import PaginatedCollection, ResponseCollection

COUNT_MODE = "count"


def paginate_response(
    results: Any,
    pagination: Mapping[str, Any],
    details: Sequence[Any] = (),
) -> PaginatedCollection:
    """Decorates one page of results with the server's paging metadata."""
    return PaginatedCollection(
        results=results,
        details=details,
        current_page=pagination.get("CurrentPage") or 1,
        page_size=pagination.get("PageSize"),
        total_pages=pagination.get("TotalPages"),
        total_rows=pagination.get("TotalRows"),
    )


def normalize_results(
    results: Any,
    pagination: Optional[Mapping[str, Any]],
    details: Sequence[Any],
    options: Mapping[str, Any],
) -> Union[ResponseCollection, int, None]:
    """
    Selects the shape of a call's result from its pagination descriptor.

    Only the presence of the descriptor matters: an empty descriptor still
    yields a paginated collection, and count mode returns ``TotalRows`` even
    when no rows matched.

    Args:
        results: The decoded ``Results`` value.
        pagination: The decoded ``Pagination`` block, or None.
        details: The decoded ``Details`` messages.
        options: The request options the call was made with.

    Returns:
        A ResponseCollection, a PaginatedCollection, or the total row count.
    """

    if pagination is None:
        return ResponseCollection(results=results, details=details)

    if options.get("_pagination") == COUNT_MODE:
        return pagination.get("TotalRows")

    return paginate_response(results, pagination, details)
