import logging

from sqlalchemy.ext.asyncio import AsyncSession

from carparts.config import settings
from carparts.db.crud import count_active_listings_by_condition, list_brands, list_categories
from carparts.db.executor import SearchExecutor
from carparts.query import FilterRequest, InvalidFilterError
from carparts.query.schema import DESCRIPTORS
from carparts.schemas.search import (
    GlobalSearchResponse, Suggestion, SearchFiltersResponse, FilterOption, ConditionCount,
)

logger = logging.getLogger(__name__)

# Public search type -> entity type
SEARCH_TYPES = {
    "listings": "listing",
    "parts": "part",
    "brands": "brand",
    "models": "model",
    "categories": "category",
}

# Catalog results shown alongside listings and parts when searching everything
CATALOG_PREVIEW_LIMIT = 5
MIN_SUGGESTION_LENGTH = 2


def _split_filters(filters: dict) -> tuple[dict, dict, dict]:
    """Route each filter to the listing, part and model searches that understand it."""
    listing_keys = DESCRIPTORS["listing"].filter_keys
    part_keys = DESCRIPTORS["part"].filter_keys
    model_keys = DESCRIPTORS["model"].filter_keys
    for key in sorted(filters):
        if key not in listing_keys and key not in part_keys and key not in model_keys:
            raise InvalidFilterError(key, "not a listing, part or model filter")
    return (
        {k: v for k, v in filters.items() if k in listing_keys},
        {k: v for k, v in filters.items() if k in part_keys},
        {k: v for k, v in filters.items() if k in model_keys},
    )


async def global_search(
    db: AsyncSession,
    search_term: str,
    search_type: str = "all",
    filters: dict | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> GlobalSearchResponse:
    """Search one entity type, or listings and parts plus a catalog preview for "all"."""
    filters = filters or {}
    executor = SearchExecutor(db)
    response = GlobalSearchResponse(search_term=search_term, type=search_type)

    if search_type != "all":
        entity_type = SEARCH_TYPES[search_type]
        result = await executor.search(FilterRequest(
            entity_type=entity_type, search_term=search_term,
            field_filters=filters, page=page, limit=limit,
        ))
        setattr(response, search_type, result)
        response.total = result.total
        return response

    listing_filters, part_filters, model_filters = _split_filters(filters)
    response.listings = await executor.search(FilterRequest(
        entity_type="listing", search_term=search_term,
        field_filters=listing_filters, page=page, limit=limit,
    ))
    response.parts = await executor.search(FilterRequest(
        entity_type="part", search_term=search_term,
        field_filters=part_filters, page=page, limit=limit,
    ))
    response.brands = await executor.search(FilterRequest(
        entity_type="brand", search_term=search_term, sort_by="name", sort_order="asc",
        limit=CATALOG_PREVIEW_LIMIT,
    ))
    response.models = await executor.search(FilterRequest(
        entity_type="model", search_term=search_term, field_filters=model_filters,
        sort_by="name", sort_order="asc", limit=CATALOG_PREVIEW_LIMIT,
    ))
    response.categories = await executor.search(FilterRequest(
        entity_type="category", search_term=search_term, sort_by="name", sort_order="asc",
        limit=CATALOG_PREVIEW_LIMIT,
    ))
    response.total = response.listings.total + response.parts.total
    logger.info(f"Search '{search_term}' matched {response.total} listings and parts")
    return response


async def get_suggestions(db: AsyncSession, partial: str | None, suggestion_type: str = "all") -> list[Suggestion]:
    """Autocomplete over brands, models and categories."""
    if not partial or len(partial.strip()) < MIN_SUGGESTION_LENGTH:
        return []

    if suggestion_type == "all":
        sources, per_source = ("brands", "models", "categories"), CATALOG_PREVIEW_LIMIT
    else:
        sources, per_source = (suggestion_type,), settings.SUGGESTION_LIMIT

    executor = SearchExecutor(db)
    suggestions = []
    for source in sources:
        result = await executor.search(FilterRequest(
            entity_type=SEARCH_TYPES[source], search_term=partial,
            sort_by="name", sort_order="asc", limit=per_source,
        ))
        for row in result.items:
            if source == "models":
                suggestions.append(Suggestion(
                    type="model", id=row["id"], name=row["name"], brand=row["brand_name"],
                    display=f"{row['brand_name']} {row['name']}",
                ))
            else:
                suggestions.append(Suggestion(
                    type=SEARCH_TYPES[source], id=row["id"], name=row["name"], display=row["name"],
                ))
    return suggestions[:settings.SUGGESTION_LIMIT]


async def get_search_filters(db: AsyncSession) -> SearchFiltersResponse:
    brands = await list_brands(db)
    categories = await list_categories(db)
    conditions = await count_active_listings_by_condition(db)
    return SearchFiltersResponse(
        brands=[FilterOption(id=b.id, name=b.name) for b in brands],
        categories=[FilterOption(id=c.id, name=c.name) for c in categories],
        conditions=[ConditionCount(**c) for c in conditions],
    )
