import json
import logging
from pathlib import Path
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from carparts.db.models import User, CarBrand, CarModel, PartCategory, CarPart, ProductListing

logger = logging.getLogger(__name__)


# --- Catalog ---

async def seed_catalog(db: AsyncSession, catalog_file: Path):
    """Insert brands, models and categories from the catalog file. Safe to re-run."""
    if not catalog_file.exists():
        logger.warning(f"Catalog file not found: {catalog_file}")
        return
    with open(catalog_file) as f:
        data = json.load(f)

    for brand_name, models in data.get("brands", {}).items():
        brand = await get_brand_by_name(db, brand_name)
        if not brand:
            brand = CarBrand(name=brand_name)
            db.add(brand)
            await db.flush()
        for model_name, years_start, years_end in models:
            existing = await db.execute(
                select(CarModel).where(CarModel.car_brand_id == brand.id, CarModel.name == model_name)
            )
            if not existing.scalar_one_or_none():
                db.add(CarModel(
                    car_brand_id=brand.id, name=model_name,
                    years_start=years_start, years_end=years_end,
                ))

    for category_name, description in data.get("categories", {}).items():
        existing = await db.execute(select(PartCategory).where(PartCategory.name == category_name))
        if not existing.scalar_one_or_none():
            db.add(PartCategory(name=category_name, description=description))

    await db.commit()


async def get_brand_by_name(db: AsyncSession, name: str) -> CarBrand | None:
    result = await db.execute(select(CarBrand).where(CarBrand.name == name))
    return result.scalar_one_or_none()


async def get_category_by_name(db: AsyncSession, name: str) -> PartCategory | None:
    result = await db.execute(select(PartCategory).where(PartCategory.name == name))
    return result.scalar_one_or_none()


async def get_model_by_name(db: AsyncSession, brand_id: int, name: str) -> CarModel | None:
    result = await db.execute(
        select(CarModel).where(CarModel.car_brand_id == brand_id, CarModel.name == name)
    )
    return result.scalar_one_or_none()


async def list_brands(db: AsyncSession) -> list[CarBrand]:
    result = await db.execute(select(CarBrand).order_by(CarBrand.name))
    return list(result.scalars().all())


async def list_categories(db: AsyncSession) -> list[PartCategory]:
    result = await db.execute(select(PartCategory).order_by(PartCategory.name))
    return list(result.scalars().all())


# --- Users ---

async def create_user(db: AsyncSession, username: str, email: str, **fields) -> User:
    user = User(username=username, email=email, **fields)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


# --- Parts ---

async def create_part(db: AsyncSession, data: dict) -> CarPart:
    part = CarPart(
        name=data["name"],
        car_part_category_id=data["car_part_category_id"],
        car_brand_id=data.get("car_brand_id"),
        car_model_id=data.get("car_model_id"),
        serial_number=data.get("serial_number"),
        description=data.get("description"),
        price=data.get("price"),
        image=data.get("image"),
        condition=data.get("condition"),
    )
    db.add(part)
    await db.commit()
    await db.refresh(part)
    return part


async def get_part_detail(db: AsyncSession, part_id: int) -> dict | None:
    result = await db.execute(
        select(
            CarPart,
            PartCategory.name.label("category_name"),
            CarBrand.name.label("brand_name"),
            CarModel.name.label("model_name"),
        )
        .outerjoin(PartCategory, CarPart.car_part_category_id == PartCategory.id)
        .outerjoin(CarBrand, CarPart.car_brand_id == CarBrand.id)
        .outerjoin(CarModel, CarPart.car_model_id == CarModel.id)
        .where(CarPart.id == part_id)
    )
    row = result.one_or_none()
    if not row:
        return None
    part, category_name, brand_name, model_name = row
    return {
        "id": part.id,
        "name": part.name,
        "car_part_category_id": part.car_part_category_id,
        "car_brand_id": part.car_brand_id,
        "car_model_id": part.car_model_id,
        "serial_number": part.serial_number,
        "description": part.description,
        "price": part.price,
        "image": part.image,
        "condition": part.condition,
        "created_date": part.created_date,
        "category_name": category_name,
        "brand_name": brand_name,
        "model_name": model_name,
    }


# --- Listings ---

async def create_listing(db: AsyncSession, data: dict) -> ProductListing:
    listing = ProductListing(
        user_id=data["user_id"],
        car_part_id=data.get("car_part_id"),
        name=data["name"],
        description=data.get("description"),
        price_usd=data["price_usd"],
        condition=data["condition"],
        location=data.get("location"),
        status=data.get("status", "active"),
        phone_number=data.get("phone_number"),
        email=data.get("email"),
    )
    db.add(listing)
    await db.commit()
    await db.refresh(listing)
    return listing


async def get_listing_detail(db: AsyncSession, listing_id: int) -> dict | None:
    result = await db.execute(
        select(
            ProductListing,
            User.username.label("seller_username"),
            CarPart.name.label("part_name"),
            PartCategory.name.label("category_name"),
            CarBrand.name.label("brand_name"),
            CarModel.name.label("model_name"),
        )
        .outerjoin(User, ProductListing.user_id == User.id)
        .outerjoin(CarPart, ProductListing.car_part_id == CarPart.id)
        .outerjoin(PartCategory, CarPart.car_part_category_id == PartCategory.id)
        .outerjoin(CarBrand, CarPart.car_brand_id == CarBrand.id)
        .outerjoin(CarModel, CarPart.car_model_id == CarModel.id)
        .where(ProductListing.id == listing_id)
    )
    row = result.one_or_none()
    if not row:
        return None
    listing, seller_username, part_name, category_name, brand_name, model_name = row
    return {
        "id": listing.id,
        "user_id": listing.user_id,
        "car_part_id": listing.car_part_id,
        "name": listing.name,
        "description": listing.description,
        "price_usd": listing.price_usd,
        "condition": listing.condition,
        "location": listing.location,
        "status": listing.status,
        "phone_number": listing.phone_number,
        "email": listing.email,
        "created_date": listing.created_date,
        "seller_username": seller_username,
        "part_name": part_name,
        "category_name": category_name,
        "brand_name": brand_name,
        "model_name": model_name,
    }


async def count_active_listings_by_condition(db: AsyncSession) -> list[dict]:
    result = await db.execute(
        select(ProductListing.condition, func.count(ProductListing.id))
        .where(ProductListing.status == "active", ProductListing.condition.is_not(None))
        .group_by(ProductListing.condition)
        .order_by(ProductListing.condition)
    )
    return [{"value": condition, "count": count} for condition, count in result.all()]
