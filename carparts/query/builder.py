import logging
from typing import Any

from pydantic import BaseModel, Field

from carparts.query.errors import (
    ConfigurationError, InvalidFilterError, InvalidRangeError, InvalidSortError,
)
from carparts.query.operators import DIALECTS, LIKE_OPERATORS, OPERATOR_MAP, like_pattern
from carparts.query.schema import DESCRIPTORS, EntityDescriptor, FilterSpec

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_SORT_BY = "createdDate"
DEFAULT_SORT_ORDER = "desc"


class FilterRequest(BaseModel):
    entity_type: str
    search_term: str | None = None
    field_filters: dict[str, Any] = Field(default_factory=dict)
    sort_by: str | None = None
    sort_order: str | None = None
    page: int | None = None
    limit: int | None = None


class BuiltQuery(BaseModel):
    sql: str
    params: list[Any]
    count_sql: str
    count_params: list[Any]
    page: int
    limit: int


class _Params:
    """Positional bind accumulator. Placeholders are numbered in bind order."""

    def __init__(self):
        self.values: list[Any] = []

    def bind(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


def _resolve_filters(descriptor: EntityDescriptor, field_filters: dict[str, Any]) -> list[tuple[FilterSpec, Any]]:
    """Validate and coerce filters, returned in the descriptor's fixed key order."""
    for key in sorted(field_filters):
        if descriptor.filter_spec(key) is None:
            raise InvalidFilterError(key, f"not a {descriptor.entity_type} filter")

    resolved = []
    for spec in descriptor.filters:
        value = field_filters.get(spec.key)
        if value is None:
            continue
        resolved.append((spec, spec.coerce(spec.key, value)))
    return resolved


def _check_ranges(filters: list[tuple[FilterSpec, Any]]):
    values = {spec.key: value for spec, value in filters}
    low, high = values.get("minPrice"), values.get("maxPrice")
    if low is not None and high is not None and low > high:
        raise InvalidRangeError(f"minPrice ({low}) is greater than maxPrice ({high})")


def _resolve_sort(descriptor: EntityDescriptor, sort_by: str | None, sort_order: str | None) -> tuple[str, str]:
    sort_by = DEFAULT_SORT_BY if sort_by is None else sort_by
    column = descriptor.sorts.get(sort_by)
    if column is None:
        allowed = ", ".join(descriptor.sorts)
        raise InvalidSortError(f"Invalid sort field '{sort_by}'. Must be one of: {allowed}")

    sort_order = DEFAULT_SORT_ORDER if sort_order is None else sort_order
    if not isinstance(sort_order, str) or sort_order.lower() not in ("asc", "desc"):
        raise InvalidSortError(f"Invalid sort order '{sort_order}'. Must be 'asc' or 'desc'")
    return column, sort_order.upper()


def _clamp_page(page: int | None, limit: int | None) -> tuple[int, int]:
    page = DEFAULT_PAGE if page is None else max(page, 1)
    limit = DEFAULT_LIMIT if limit is None else min(max(limit, 1), MAX_LIMIT)
    return page, limit


def build_search(request: FilterRequest, dialect: str = "postgresql") -> BuiltQuery:
    """
    Translate a filter request into a data query and a matching count query.

    Every user-supplied value is passed as a positional `$n` bind parameter.
    Only identifiers from the entity's descriptor ever reach the SQL text, so
    unknown filter keys and sort keys are rejected up front. The count query
    shares the data query's FROM/JOIN/WHERE and its parameters.
    """
    descriptor = DESCRIPTORS.get(request.entity_type)
    if descriptor is None:
        raise ConfigurationError(f"Unknown entity type: {request.entity_type!r}")
    if dialect not in DIALECTS:
        raise ConfigurationError(f"Unsupported SQL dialect: {dialect!r}")
    like, escape = DIALECTS[dialect]

    filters = _resolve_filters(descriptor, request.field_filters)
    _check_ranges(filters)
    sort_column, direction = _resolve_sort(descriptor, request.sort_by, request.sort_order)
    page, limit = _clamp_page(request.page, request.limit)

    params = _Params()
    clauses = []

    if descriptor.default_status and not any(spec.key == "status" for spec, _ in filters):
        column, value = descriptor.default_status
        clauses.append(f"{column} = '{value}'")

    for spec, value in filters:
        if spec.op in LIKE_OPERATORS:
            value = like_pattern(value)
        clauses.append(OPERATOR_MAP[spec.op].format(
            col=spec.column, p=params.bind(value), end=spec.end_column, like=like, escape=escape,
        ))

    term = (request.search_term or "").strip()
    if term and descriptor.search_columns:
        p = params.bind(like_pattern(term))
        matches = [f"{col} {like} {p}{escape}" for col in descriptor.search_columns]
        clauses.append(f"({' OR '.join(matches)})")

    from_sql = " ".join((f"FROM {descriptor.table}",) + descriptor.joins)
    where_sql = f" WHERE {' AND '.join(clauses)}" if clauses else ""

    count_sql = f"SELECT COUNT(*) AS count {from_sql}{where_sql}"
    count_params = list(params.values)

    limit_p = params.bind(limit)
    offset_p = params.bind((page - 1) * limit)
    sql = (
        f"SELECT {', '.join(descriptor.columns)} {from_sql}{where_sql}"
        f" ORDER BY {sort_column} {direction}, {descriptor.primary_key} {direction}"
        f" LIMIT {limit_p} OFFSET {offset_p}"
    )

    logger.debug(f"Built {descriptor.entity_type} search: {sql} {params.values}")
    return BuiltQuery(
        sql=sql,
        params=params.values,
        count_sql=count_sql,
        count_params=count_params,
        page=page,
        limit=limit,
    )
