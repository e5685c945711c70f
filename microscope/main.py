import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from microscope.api.extract import router as extract_router
from microscope.config import get_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        f"microscope API started (parser={settings.parser}, "
        f"max_depth={settings.max_depth})"
    )
    yield
    logger.info("microscope API shutting down")


app = FastAPI(
    title="microscope",
    description="HTML Microdata extractor returning ordered JSON items.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(extract_router, prefix="/api", tags=["Extract"])


@app.get("/health")
def health():
    return {"status": "ok", "service": "microscope"}
