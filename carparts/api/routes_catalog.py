from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carparts.config import settings
from carparts.db.database import get_db
from carparts.db.executor import SearchExecutor
from carparts.query import FilterRequest
from carparts.schemas.common import Page

router = APIRouter(prefix="/api/v1", tags=["catalog"])


@router.get("/brands", response_model=Page)
async def list_brands(
    q: str | None = None,
    sort_by: str = "name",
    sort_order: str = "asc",
    page: int = 1,
    limit: int = settings.SEARCH_DEFAULT_LIMIT,
    db: AsyncSession = Depends(get_db),
):
    return await SearchExecutor(db).search(FilterRequest(
        entity_type="brand", search_term=q,
        sort_by=sort_by, sort_order=sort_order, page=page, limit=limit,
    ))


@router.get("/models", response_model=Page)
async def list_models(
    q: str | None = None,
    brand_id: int | None = None,
    year: int | None = None,
    sort_by: str = "name",
    sort_order: str = "asc",
    page: int = 1,
    limit: int = settings.SEARCH_DEFAULT_LIMIT,
    db: AsyncSession = Depends(get_db),
):
    return await SearchExecutor(db).search(FilterRequest(
        entity_type="model", search_term=q, field_filters={"brandId": brand_id, "year": year},
        sort_by=sort_by, sort_order=sort_order, page=page, limit=limit,
    ))


@router.get("/categories", response_model=Page)
async def list_categories(
    q: str | None = None,
    sort_by: str = "name",
    sort_order: str = "asc",
    page: int = 1,
    limit: int = settings.SEARCH_DEFAULT_LIMIT,
    db: AsyncSession = Depends(get_db),
):
    return await SearchExecutor(db).search(FilterRequest(
        entity_type="category", search_term=q,
        sort_by=sort_by, sort_order=sort_order, page=page, limit=limit,
    ))
