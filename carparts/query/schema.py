"""Schema descriptors for every searchable entity type.

A descriptor tells the builder which table to select from, which joins to
emit, which columns free-text search covers, which filter keys exist (and in
what order their clauses are emitted), and which sort keys are allowed.
Filter tuples are ordered on purpose: clause order and placeholder numbering
follow this order, never the order of the caller's mapping.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from math import isfinite
from typing import Any, Callable

from carparts.query.errors import InvalidFilterError

LISTING_STATUSES = ("active", "pending", "sold", "hidden")
CONDITIONS = ("new", "like_new", "good", "fair", "poor")


# Largest value a BIGINT column can hold
MAX_ID = 2 ** 63 - 1


# --- Value coercion ---

def as_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidFilterError(key, "expected an integer")
    if isinstance(value, str):
        digits = value.strip()
        # str.isdigit() also accepts superscripts and non-Latin digits
        if not (digits.isascii() and digits.isdigit()) or len(digits) > len(str(MAX_ID)):
            raise InvalidFilterError(key, "expected an integer")
        value = int(digits)
    if not isinstance(value, int):
        raise InvalidFilterError(key, "expected an integer")
    if abs(value) > MAX_ID:
        raise InvalidFilterError(key, "integer out of range")
    return value


def as_number(key: str, value: Any) -> int | float | Decimal:
    if isinstance(value, bool):
        raise InvalidFilterError(key, "expected a number")
    if isinstance(value, (int, float, Decimal)):
        number = value
    elif isinstance(value, str):
        try:
            number = int(value)
        except ValueError:
            try:
                number = float(value)
            except ValueError:
                raise InvalidFilterError(key, "expected a number") from None
    else:
        raise InvalidFilterError(key, "expected a number")
    if not isfinite(number):
        raise InvalidFilterError(key, "expected a finite number")
    return number


def as_text(key: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidFilterError(key, "expected non-empty text")
    return value.strip()


def one_of(*choices: str) -> Callable[[str, Any], str]:
    def coerce(key: str, value: Any) -> str:
        if value not in choices:
            raise InvalidFilterError(key, f"must be one of: {', '.join(choices)}")
        return value
    return coerce


@dataclass(frozen=True)
class FilterSpec:
    key: str
    column: str
    op: str
    coerce: Callable[[str, Any], Any]
    end_column: str | None = None  # only used by the "span" operator


@dataclass(frozen=True)
class EntityDescriptor:
    entity_type: str
    table: str
    primary_key: str
    columns: tuple[str, ...]
    joins: tuple[str, ...] = ()
    search_columns: tuple[str, ...] = ()
    filters: tuple[FilterSpec, ...] = ()
    sorts: dict[str, str] = field(default_factory=dict)
    # (column, value) applied unless the caller filters on "status" explicitly
    default_status: tuple[str, str] | None = None

    def filter_spec(self, key: str) -> FilterSpec | None:
        for spec in self.filters:
            if spec.key == key:
                return spec
        return None

    @property
    def filter_keys(self) -> tuple[str, ...]:
        return tuple(spec.key for spec in self.filters)


_LISTING = EntityDescriptor(
    entity_type="listing",
    table="product_listings l",
    primary_key="l.id",
    columns=(
        "l.id", "l.user_id", "l.car_part_id", "l.name", "l.description",
        "l.price_usd", "l.condition", "l.location", "l.status", "l.created_date",
        "u.username AS seller_username",
        "p.name AS part_name",
        "c.name AS category_name",
        "b.name AS brand_name",
        "m.name AS model_name",
    ),
    joins=(
        "LEFT JOIN users u ON l.user_id = u.id",
        "LEFT JOIN car_parts p ON l.car_part_id = p.id",
        "LEFT JOIN car_parts_categories c ON p.car_part_category_id = c.id",
        "LEFT JOIN car_brands b ON p.car_brand_id = b.id",
        "LEFT JOIN car_models m ON p.car_model_id = m.id",
    ),
    search_columns=("l.name", "l.description"),
    filters=(
        FilterSpec("status", "l.status", "eq", one_of(*LISTING_STATUSES)),
        FilterSpec("userId", "l.user_id", "eq", as_int),
        FilterSpec("condition", "l.condition", "eq", one_of(*CONDITIONS)),
        FilterSpec("minPrice", "l.price_usd", "gte", as_number),
        FilterSpec("maxPrice", "l.price_usd", "lte", as_number),
        FilterSpec("location", "l.location", "contains", as_text),
        # Brand, model and category belong to the part, not the listing.
        FilterSpec("categoryId", "p.car_part_category_id", "eq", as_int),
        FilterSpec("brandId", "p.car_brand_id", "eq", as_int),
        FilterSpec("modelId", "p.car_model_id", "eq", as_int),
    ),
    sorts={
        "createdDate": "l.created_date",
        "price": "l.price_usd",
        "name": "l.name",
        "condition": "l.condition",
    },
    default_status=("l.status", "active"),
)

_PART = EntityDescriptor(
    entity_type="part",
    table="car_parts p",
    primary_key="p.id",
    columns=(
        "p.id", "p.name", "p.car_part_category_id", "p.car_brand_id", "p.car_model_id",
        "p.serial_number", "p.description", "p.price", "p.condition", "p.created_date",
        "c.name AS category_name",
        "b.name AS brand_name",
        "m.name AS model_name",
    ),
    joins=(
        "LEFT JOIN car_parts_categories c ON p.car_part_category_id = c.id",
        "LEFT JOIN car_brands b ON p.car_brand_id = b.id",
        "LEFT JOIN car_models m ON p.car_model_id = m.id",
    ),
    search_columns=("p.name", "p.description"),
    filters=(
        FilterSpec("categoryId", "p.car_part_category_id", "eq", as_int),
        FilterSpec("brandId", "p.car_brand_id", "eq", as_int),
        FilterSpec("modelId", "p.car_model_id", "eq", as_int),
        FilterSpec("condition", "p.condition", "eq", one_of(*CONDITIONS)),
        FilterSpec("minPrice", "p.price", "gte", as_number),
        FilterSpec("maxPrice", "p.price", "lte", as_number),
    ),
    sorts={
        "createdDate": "p.created_date",
        "price": "p.price",
        "name": "p.name",
        "condition": "p.condition",
    },
)

_BRAND = EntityDescriptor(
    entity_type="brand",
    table="car_brands b",
    primary_key="b.id",
    columns=("b.id", "b.name", "b.created_date"),
    search_columns=("b.name",),
    sorts={"createdDate": "b.created_date", "name": "b.name"},
)

_MODEL = EntityDescriptor(
    entity_type="model",
    table="car_models m",
    primary_key="m.id",
    columns=(
        "m.id", "m.car_brand_id", "m.name", "m.years_start", "m.years_end", "m.created_date",
        "b.name AS brand_name",
    ),
    joins=("LEFT JOIN car_brands b ON m.car_brand_id = b.id",),
    search_columns=("m.name",),
    filters=(
        FilterSpec("brandId", "m.car_brand_id", "eq", as_int),
        FilterSpec("year", "m.years_start", "span", as_int, end_column="m.years_end"),
    ),
    sorts={"createdDate": "m.created_date", "name": "m.name", "yearsStart": "m.years_start"},
)

_CATEGORY = EntityDescriptor(
    entity_type="category",
    table="car_parts_categories c",
    primary_key="c.id",
    columns=("c.id", "c.name", "c.description", "c.created_date"),
    search_columns=("c.name",),
    sorts={"createdDate": "c.created_date", "name": "c.name"},
)

DESCRIPTORS: dict[str, EntityDescriptor] = {
    d.entity_type: d for d in (_LISTING, _PART, _BRAND, _MODEL, _CATEGORY)
}
