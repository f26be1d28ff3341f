"""
Shared list view-model: search, filter, sort and paginate.

Every list endpoint (and every in-memory dashboard list) goes through the same
three steps instead of re-deriving predicates per page:

    query = ListQuery.from_params(request.query_params, filter_fields=("status",))
    items = filter_items(items, query, search_fields=("name", "description"))
    items = sort_items(items, query.sort_by, {"name": ("name", False)})
    page = paginate(items, query.page, query.per_page)

The same ListQuery can be applied to a Django queryset with apply_to_queryset().
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q, QuerySet
from rest_framework.exceptions import ValidationError

# Filter values that mean "do not filter on this field"
ALL_VALUES = ("", "all", None)

DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100

# sort key -> (field path, descending)
SortMap = Mapping[str, Tuple[str, bool]]


@dataclass(frozen=True)
class ListQuery:
    search: str = ""
    filters: Dict[str, Any] = field(default_factory=dict)
    sort_by: Optional[str] = None
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, Any],
        filter_fields: Sequence[str] = (),
        default_sort: Optional[str] = None,
        per_page: int = DEFAULT_PER_PAGE,
        max_per_page: int = MAX_PER_PAGE,
    ) -> "ListQuery":
        """
        Build a query from request parameters (`search`, `sort_by`, `page`,
        `limit` and one parameter per filter field). Malformed numbers fall back
        to the defaults; `limit` is capped at `max_per_page`.
        """
        filters = {}
        for name in filter_fields:
            value = params.get(name)
            if value not in ALL_VALUES:
                filters[name] = _coerce_filter_value(value)

        return cls(
            search=(params.get("search") or "").strip(),
            filters=filters,
            sort_by=params.get("sort_by") or default_sort,
            page=max(_to_int(params.get("page"), 1), 1),
            per_page=min(max(_to_int(params.get("limit"), per_page), 1), max_per_page),
        )


@dataclass(frozen=True)
class Page:
    items: List[Any]
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.total else 0

    @property
    def start_index(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def has_pagination(self) -> bool:
        """Pagination controls are only shown when there is more than one page."""
        return self.total_pages > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def meta(self) -> Dict[str, int]:
        return {
            "page": self.page,
            "limit": self.per_page,
            "total": self.total,
            "pages": self.total_pages,
        }


def _to_int(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_filter_value(value):
    if isinstance(value, str):
        lowered = value.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return value


def resolve(item, path: str):
    """Read a dotted path from a mapping or an object (`category.name`)."""
    value = item
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def _text_values(value) -> Iterable[str]:
    if value is None:
        return
    if isinstance(value, (list, tuple, set)):
        for element in value:
            if isinstance(element, Mapping):
                yield str(element.get("name", ""))
            else:
                yield str(element)
        return
    yield str(value)


def matches_search(item, search: str, fields: Sequence[str]) -> bool:
    """Case-insensitive substring match of `search` against any of `fields`."""
    needle = (search or "").strip().lower()
    if not needle:
        return True
    for path in fields:
        for text in _text_values(resolve(item, path)):
            if needle in text.lower():
                return True
    return False


def matches_filters(item, filters: Mapping[str, Any]) -> bool:
    for path, expected in filters.items():
        if expected in ALL_VALUES:
            continue
        actual = resolve(item, path)
        if isinstance(expected, bool) or isinstance(actual, bool):
            if bool(actual) != expected:
                return False
        elif str(actual) != str(expected):
            return False
    return True


def filter_items(items: Iterable, query: ListQuery, search_fields: Sequence[str] = ()) -> list:
    return [
        item for item in items
        if matches_search(item, query.search, search_fields) and matches_filters(item, query.filters)
    ]


def _sort_key(value):
    # None sorts last, strings compare case-insensitively
    if value is None:
        return (1, "")
    if isinstance(value, str):
        return (0, value.lower())
    return (0, value)


def sort_items(items: Iterable, sort_by: Optional[str], sorters: SortMap) -> list:
    items = list(items)
    if not sort_by or sort_by not in sorters:
        return items
    path, descending = sorters[sort_by]
    return sorted(items, key=lambda item: _sort_key(resolve(item, path)), reverse=descending)


def paginate(items, page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> Page:
    """Slice `items` (a list or a queryset) to the requested page."""
    if page < 1:
        raise ValueError("page must be >= 1")
    if per_page < 1:
        raise ValueError("per_page must be >= 1")

    total = items.count() if isinstance(items, QuerySet) else len(items)
    start = (page - 1) * per_page
    return Page(items=list(items[start:start + per_page]), page=page, per_page=per_page, total=total)


def filter_queryset(queryset: QuerySet, param: str, lookup: str, value) -> QuerySet:
    """
    `queryset.filter(lookup=value)`, with a value the field cannot hold
    reported as a 400 on `param` instead of a server error.
    """
    try:
        return queryset.filter(**{lookup.replace(".", "__"): value})
    except (ValueError, TypeError, DjangoValidationError):
        raise ValidationError({param: f"Invalid value '{value}'."})


def apply_to_queryset(
    queryset: QuerySet,
    query: ListQuery,
    search_fields: Sequence[str] = (),
    sorters: Optional[SortMap] = None,
    params: Optional[Mapping[str, str]] = None,
) -> QuerySet:
    """
    Database-side equivalent of filter_items + sort_items. `params` maps a
    filter lookup back to the request parameter it came from, for errors.
    """
    if query.search and search_fields:
        condition = Q()
        for path in search_fields:
            condition |= Q(**{f"{path.replace('.', '__')}__icontains": query.search})
        queryset = queryset.filter(condition)

    params = params or {}
    for path, value in query.filters.items():
        queryset = filter_queryset(queryset, params.get(path, path), path, value)

    if sorters and query.sort_by in sorters:
        path, descending = sorters[query.sort_by]
        column = path.replace(".", "__")
        queryset = queryset.order_by(f"-{column}" if descending else column, "pk")
    return queryset
