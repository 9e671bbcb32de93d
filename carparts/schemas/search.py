from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from carparts.schemas.common import Page


class AdvancedSearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_term: str | None = Field(None, alias="searchTerm")
    filters: dict[str, Any] = {}
    sort_by: str = Field("createdDate", alias="sortBy")
    sort_order: str = Field("desc", alias="sortOrder")
    page: int = 1
    limit: int = 20


class AdvancedSearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    listings: Page
    filters: dict[str, Any]
    sort_by: str = Field(alias="sortBy")
    sort_order: str = Field(alias="sortOrder")


class GlobalSearchResponse(BaseModel):
    search_term: str
    type: str
    listings: Page | None = None
    parts: Page | None = None
    brands: Page | None = None
    models: Page | None = None
    categories: Page | None = None
    # Combined over listings and parts when type is "all"
    total: int = 0


class Suggestion(BaseModel):
    type: str  # "brand", "model" or "category"
    id: int
    name: str
    brand: str | None = None
    display: str


class SuggestionsResponse(BaseModel):
    suggestions: list[Suggestion]


class FilterOption(BaseModel):
    id: int
    name: str


class ConditionCount(BaseModel):
    value: str
    count: int


class SearchFiltersResponse(BaseModel):
    brands: list[FilterOption]
    categories: list[FilterOption]
    conditions: list[ConditionCount]
