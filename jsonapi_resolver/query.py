from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50

QueryParams = list[tuple[str, str]]


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_blank(value: Any) -> bool:
    if value is None or value == "":
        return True
    return isinstance(value, (list, tuple, set, frozenset)) and not value


def include_param(include: str | Iterable[str] | None) -> str | None:
    """Join relationship paths into the comma separated ``include`` value."""
    if not include:
        return None
    if isinstance(include, str):
        return include
    joined = ",".join(path for path in include if path)
    return joined or None


def build_query_params(
    *,
    filters: Mapping[str, Any] | None = None,
    sort_by: str | None = None,
    sort_direction: str = "asc",
    page: int | None = None,
    page_size: int | None = None,
    include: str | Iterable[str] | None = None,
    max_page_size: int = MAX_PAGE_SIZE,
) -> QueryParams:
    """
    Build the query string pairs for a collection request.

    Returns a list of (key, value) tuples so repeated ``filter[x][]`` keys
    survive; ``requests`` accepts it directly as ``params``.
    """
    if sort_direction not in ("asc", "desc"):
        raise ValueError(f"sort_direction must be 'asc' or 'desc', got {sort_direction!r}")

    params: QueryParams = []
    for name, value in (filters or {}).items():
        if _is_blank(value):
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            items = sorted(value, key=str) if isinstance(value, (set, frozenset)) else value
            params.extend((f"filter[{name}][]", _render(item)) for item in items)
        else:
            params.append((f"filter[{name}]", _render(value)))

    if sort_by:
        prefix = "-" if sort_direction == "desc" else ""
        params.append(("sort", f"{prefix}{sort_by}"))

    if page is not None or page_size is not None:
        number = max(1 if page is None else page, 1)
        size = min(max(DEFAULT_PAGE_SIZE if page_size is None else page_size, 1), max_page_size)
        params.append(("page[number]", str(number)))
        params.append(("page[size]", str(size)))

    joined = include_param(include)
    if joined:
        params.append(("include", joined))
    return params
