import logging
import os

from fastapi import FastAPI

from core.config import get_settings
from core.database import init_database, dispose_database, get_database_manager
from core.logging import setup_logging
from routes.api_v1 import api_v1_router


settings = get_settings()
setup_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

app.include_router(api_v1_router)


@app.on_event("startup")
async def on_startup() -> None:
    """Application startup hook."""
    await init_database(settings.database_url)
    await get_database_manager().create_all()
    logger.info("Application startup complete (database %s)", settings.database_url.split("://", 1)[0])


@app.on_event("shutdown")
async def on_shutdown() -> None:
    """Application shutdown hook."""
    await dispose_database()
    logger.info("Application shutdown complete")


@app.get("/health")
async def health() -> dict:
    """Simple health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=int(os.getenv("PORT", "8000")), log_level=settings.log_level.lower())
