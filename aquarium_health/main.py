import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from aquarium_health.api.routes import router
from aquarium_health.core.config import get_settings, get_thresholds
from aquarium_health.core.log_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    # build thresholds once; bad overrides fail startup instead of the first request
    thresholds = get_thresholds()
    logger.info("Threshold bands loaded: %s", thresholds.model_dump())
    if not settings.FUNCTION_KEY:
        logger.warning("FUNCTION_KEY not set, /aquarium/analyze is unauthenticated")

    yield


app = FastAPI(title="Aquarium Health Service", version="0.1.0", lifespan=lifespan)
app.include_router(router)
