from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from carparts.db.database import get_db
from carparts.db.executor import SearchExecutor
from carparts.query import FilterRequest
from carparts.schemas.search import (
    AdvancedSearchRequest, AdvancedSearchResponse, GlobalSearchResponse,
    SuggestionsResponse, SearchFiltersResponse,
)
from carparts.services.search import global_search, get_suggestions, get_search_filters

router = APIRouter(prefix="/api/v1/search", tags=["search"])

# Query params consumed by the route itself; everything else is a field filter.
RESERVED_PARAMS = {"q", "type", "page", "limit"}


@router.get("", response_model=GlobalSearchResponse)
async def search(
    request: Request,
    q: str | None = None,
    type: Literal["all", "listings", "parts", "brands", "models", "categories"] = "all",
    page: int = 1,
    limit: int | None = None,
    db: AsyncSession = Depends(get_db),
):
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Search term required")

    # Empty values such as `?brandId=` mean "no filter".
    filters = {
        k: v for k, v in request.query_params.items()
        if k not in RESERVED_PARAMS and v.strip()
    }
    return await global_search(db, q, type, filters, page=page, limit=limit)


@router.post("/advanced", response_model=AdvancedSearchResponse)
async def advanced_search(body: AdvancedSearchRequest, db: AsyncSession = Depends(get_db)):
    listings = await SearchExecutor(db).search(FilterRequest(
        entity_type="listing",
        search_term=body.search_term,
        field_filters=body.filters,
        sort_by=body.sort_by,
        sort_order=body.sort_order,
        page=body.page,
        limit=body.limit,
    ))
    return AdvancedSearchResponse(
        listings=listings,
        filters=body.filters,
        sort_by=body.sort_by,
        sort_order=body.sort_order,
    )


@router.get("/suggestions", response_model=SuggestionsResponse)
async def suggestions(
    q: str | None = None,
    type: Literal["all", "brands", "models", "categories"] = "all",
    db: AsyncSession = Depends(get_db),
):
    return SuggestionsResponse(suggestions=await get_suggestions(db, q, type))


@router.get("/filters", response_model=SearchFiltersResponse)
async def search_filters(db: AsyncSession = Depends(get_db)):
    return await get_search_filters(db)
