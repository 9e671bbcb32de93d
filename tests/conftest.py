import os
import tempfile
from pathlib import Path

# Must be set before carparts.config is imported anywhere.
_API_DB_DIR = tempfile.mkdtemp(prefix="carparts-api-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_API_DB_DIR) / 'api.db'}"
os.environ["SEED_CATALOG"] = "true"

import pytest

from carparts.config import settings
from carparts.db import crud
from carparts.db.database import Database


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'search.db'}")
    await db.init_models()
    yield db
    await db.close()


@pytest.fixture
async def session(database):
    async with database.session() as s:
        yield s


@pytest.fixture
async def marketplace(session):
    """Seeded catalog plus a handful of parts and listings with known attributes."""
    await crud.seed_catalog(session, settings.DATA_DIR / "catalog.json")

    toyota = await crud.get_brand_by_name(session, "Toyota")
    honda = await crud.get_brand_by_name(session, "Honda")
    corolla = await crud.get_model_by_name(session, toyota.id, "Corolla")
    civic = await crud.get_model_by_name(session, honda.id, "Civic")
    brakes = await crud.get_category_by_name(session, "Brakes")
    electrical = await crud.get_category_by_name(session, "Electrical")

    sam = await crud.create_user(session, "sam", "sam@example.com", first_name="Sam")
    alex = await crud.create_user(session, "alex", "alex@example.com", first_name="Alex")

    pads = await crud.create_part(session, {
        "name": "Ceramic brake pad set", "car_part_category_id": brakes.id,
        "car_brand_id": toyota.id, "car_model_id": corolla.id,
        "price": 40.0, "condition": "new", "description": "Front axle",
    })
    rotor = await crud.create_part(session, {
        "name": "Front rotor", "car_part_category_id": brakes.id,
        "car_brand_id": honda.id, "car_model_id": civic.id,
        "price": 80.0, "condition": "good", "description": "Vented brake rotor",
    })
    alternator = await crud.create_part(session, {
        "name": "Alternator 90A", "car_part_category_id": electrical.id,
        "car_brand_id": toyota.id, "car_model_id": corolla.id,
        "price": 150.0, "condition": "fair",
    })

    rows = [
        (sam, pads, "Brake pads for Corolla", "Barely used ceramic pads", 35.0, "good", "Austin, TX", "active"),
        (sam, rotor, "Civic rotor", "Front brake rotor, no warping", 50.0, "good", "Dallas, TX", "active"),
        (sam, rotor, "Rotor pair", "Two BRAKE rotors", 90.0, "fair", "Austin, TX", "active"),
        (alex, alternator, "Alternator", "Rebuilt, 90A output", 120.0, "like_new", "Denver, CO", "active"),
        (alex, None, "Floor mats", "All-weather mats, 100% rubber", 25.0, "new", "Denver, CO", "active"),
        (sam, pads, "Old brake pads", "Already gone", 10.0, "poor", "Austin, TX", "sold"),
        (alex, alternator, "Spare alternator", "Not public yet", 60.0, "good", "Austin, TX", "hidden"),
    ]
    listings = []
    for user, part, name, description, price, condition, location, status in rows:
        listings.append(await crud.create_listing(session, {
            "user_id": user.id,
            "car_part_id": part.id if part else None,
            "name": name,
            "description": description,
            "price_usd": price,
            "condition": condition,
            "location": location,
            "status": status,
        }))

    return {
        "toyota": toyota, "honda": honda, "corolla": corolla, "civic": civic,
        "brakes": brakes, "electrical": electrical,
        "sam": sam, "alex": alex,
        "parts": [pads, rotor, alternator],
        "listings": listings,
    }
