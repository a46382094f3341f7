from contextlib import asynccontextmanager

from fastapi import FastAPI

from vinted_publisher import __version__
from vinted_publisher.core.config import get_settings
from vinted_publisher.core.database import Base, engine
from vinted_publisher.core.logging import configure_logging
from vinted_publisher.models import publication  # noqa: F401  (registers the table)
from vinted_publisher.routers import vinted

# --- Load settings ---
settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Create DB tables ---
    Base.metadata.create_all(bind=engine)
    yield


# --- Create FastAPI app ---
app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)

# --- Routers ---
app.include_router(vinted.router)


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "service": "vinted-publisher",
        "version": __version__,
        "env": settings.app_env,
    }
