from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pathlib import Path
import logging

from catering.api.registry import SessionRegistry
from catering.events.web_observers import EventFeed
from catering.infra.Catalog_Repository import CatalogCache, JsonCatalogSource
from catering.infra.Session_Repository import SessionRepository
from catering.infra.paths import PACKAGES_FILE, CATALOG_FILE, SESSIONS_FILE
from catering.utilities.config import CATALOG_TTL_SECONDS
from catering.utilities.errors import UnknownCategoryError, UnknownPackageError

# Routers
from catering.api.routes import catalog, packages, pricing, sessions
from dotenv import load_dotenv
load_dotenv()

# Logging
logger = logging.getLogger("catering_app")


def create_app(packages_path: Path = PACKAGES_FILE, catalog_path: Path = CATALOG_FILE,
               sessions_path: Path = SESSIONS_FILE, catalog_ttl: float = CATALOG_TTL_SECONDS) -> FastAPI:
    """Build the API with its own registry, catalog cache and event feed (no module globals)."""
    app = FastAPI(title="Catering Package Pricing API")

    catalog_cache = CatalogCache(JsonCatalogSource(catalog_path), ttl=catalog_ttl)
    app.state.registry = SessionRegistry(
        packages_path, catalog_cache, SessionRepository(sessions_path), EventFeed()
    )

    # Include routers
    app.include_router(packages.router)
    app.include_router(sessions.router)
    app.include_router(pricing.router)
    app.include_router(catalog.router)

    @app.exception_handler(UnknownCategoryError)
    def _unknown_category(request: Request, exc: UnknownCategoryError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(UnknownPackageError)
    def _unknown_package(request: Request, exc: UnknownPackageError):
        logger.warning(f"Unknown package requested: {exc}")
        return JSONResponse(status_code=404, content={"detail": "Package not found"})

    logger.info(f"Catering API ready (packages={packages_path}, catalog={catalog_path})")
    return app


# Initialize FastAPI app
app = create_app()
