import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from carparts.config import settings
from carparts.db.crud import seed_catalog
from carparts.db.database import Database
from carparts.query import ConfigurationError, InvalidSearchRequest
from carparts.api.routes_search import router as search_router
from carparts.api.routes_listings import router as listings_router
from carparts.api.routes_catalog import router as catalog_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database = Database(settings.DATABASE_URL, echo=settings.DEBUG)
    await database.init_models()
    if settings.SEED_CATALOG:
        async with database.session() as db:
            await seed_catalog(db, settings.DATA_DIR / "catalog.json")
    app.state.database = database
    yield
    await database.close()


app = FastAPI(title="CarParts", version="0.1.0", lifespan=lifespan)

logger = logging.getLogger(__name__)


@app.exception_handler(InvalidSearchRequest)
async def invalid_search_handler(request: Request, exc: InvalidSearchRequest):
    logger.info(f"Rejected search on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Search misconfigured on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Search is misconfigured"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exc()
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}\n{tb}")
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc)},
    )


@app.get("/api/v1/health")
async def health_check():
    """Check DB connectivity."""
    try:
        async with app.state.database.session() as db:
            await db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected"}
    except Exception as e:
        return {"status": "error", "database": str(e)}


# API routes
app.include_router(search_router)
app.include_router(listings_router)
app.include_router(catalog_router)
