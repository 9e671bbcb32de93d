from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from carparts.config import settings
from carparts.db.crud import get_listing_detail, get_part_detail
from carparts.db.database import get_db
from carparts.db.executor import SearchExecutor
from carparts.query import FilterRequest
from carparts.schemas.common import Page
from carparts.schemas.listing import ListingDetail, PartDetail

router = APIRouter(prefix="/api/v1", tags=["listings"])


@router.get("/listings", response_model=Page)
async def list_listings(
    q: str | None = None,
    status: str | None = None,
    user_id: int | None = None,
    condition: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    location: str | None = None,
    category_id: int | None = None,
    brand_id: int | None = None,
    model_id: int | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: int = 1,
    limit: int = settings.SEARCH_DEFAULT_LIMIT,
    db: AsyncSession = Depends(get_db),
):
    filters = {
        "status": status,
        "userId": user_id,
        "condition": condition,
        "minPrice": min_price,
        "maxPrice": max_price,
        "location": location,
        "categoryId": category_id,
        "brandId": brand_id,
        "modelId": model_id,
    }
    return await SearchExecutor(db).search(FilterRequest(
        entity_type="listing", search_term=q, field_filters=filters,
        sort_by=sort_by, sort_order=sort_order, page=page, limit=limit,
    ))


@router.get("/listings/{listing_id}", response_model=ListingDetail)
async def get_listing(listing_id: int, db: AsyncSession = Depends(get_db)):
    listing = await get_listing_detail(db, listing_id)
    if not listing:
        raise HTTPException(status_code=404, detail="Listing not found")
    return listing


@router.get("/parts", response_model=Page)
async def list_parts(
    q: str | None = None,
    category_id: int | None = None,
    brand_id: int | None = None,
    model_id: int | None = None,
    condition: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: int = 1,
    limit: int = settings.SEARCH_DEFAULT_LIMIT,
    db: AsyncSession = Depends(get_db),
):
    filters = {
        "categoryId": category_id,
        "brandId": brand_id,
        "modelId": model_id,
        "condition": condition,
        "minPrice": min_price,
        "maxPrice": max_price,
    }
    return await SearchExecutor(db).search(FilterRequest(
        entity_type="part", search_term=q, field_filters=filters,
        sort_by=sort_by, sort_order=sort_order, page=page, limit=limit,
    ))


@router.get("/parts/{part_id}", response_model=PartDetail)
async def get_part(part_id: int, db: AsyncSession = Depends(get_db)):
    part = await get_part_detail(db, part_id)
    if not part:
        raise HTTPException(status_code=404, detail="Part not found")
    return part
