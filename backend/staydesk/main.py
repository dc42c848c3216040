import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from staydesk.config import settings

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(os.environ.get("LOG_DIR", Path(__file__).resolve().parent.parent / "logs"))
_LOG_DIR.mkdir(parents=True, exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "staydesk.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from staydesk.routers import bookings, hotels, loyalty, meta, promo_codes, quotes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"StayDesk starting — booking API at {settings.booking_api_base_url}")

    yield

    # Shutdown
    from staydesk.services.booking_api_client import booking_api_client
    from staydesk.services.cache_service import cache_service

    await booking_api_client.close()
    await cache_service.close()
    logger.info("Booking API client and cache closed")


app = FastAPI(
    title="StayDesk",
    description="Hotel booking pricing and checkout service",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(hotels.router, prefix="/api/hotels", tags=["hotels"])
app.include_router(quotes.router, prefix="/api/quotes", tags=["quotes"])
app.include_router(promo_codes.router, prefix="/api/promo-codes", tags=["promo-codes"])
app.include_router(loyalty.router, prefix="/api/loyalty", tags=["loyalty"])
app.include_router(bookings.router, prefix="/api/bookings", tags=["bookings"])
app.include_router(meta.router, prefix="/api/meta", tags=["meta"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": "staydesk"}
