"""FastAPI application"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import API_HOST, API_PORT, LOG_LEVEL
from .database import database
from .errors import StoreUnavailable, QueryFailed
from .routes.veterinarians import router as veterinarians_router
from . import models  # noqa: F401  registers tables on Base.metadata

logger = logging.getLogger(__name__)


def configure_logging(level: str = LOG_LEVEL):
    """Root logger setup for running the server directly; importing the app leaves logging alone"""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup if missing; release connections on shutdown"""
    try:
        database.create_all()
    except StoreUnavailable as e:
        logger.warning(f"Schema check skipped, store unavailable: {e}")
    yield
    database.dispose()


app = FastAPI(
    title="Vet Finder API",
    description="Search and browse veterinary clinics by text, category, neighborhood, location and opening hours",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS (open for development, restrict in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(veterinarians_router)


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": "Store unavailable, try again later"})


@app.exception_handler(QueryFailed)
async def query_failed_handler(request: Request, exc: QueryFailed) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": "Query failed"})


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    uvicorn.run("vetfinder.main:app", host=API_HOST, port=API_PORT, log_level=LOG_LEVEL.lower())
