from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI
from starlette.middleware.cors import CORSMiddleware

ROOT_DIR = Path(__file__).parent

# Load .env only if exists (development fallback)
env_path = ROOT_DIR / ".env"
if env_path.exists():
    load_dotenv(env_path)

from vrtravel.config import APP_NAME, APP_VERSION, CORS_ORIGINS  # noqa: E402
from vrtravel.db import close_mongo, connect_mongo, get_db, ping  # noqa: E402
from vrtravel.exception_handlers import register_exception_handlers  # noqa: E402
from vrtravel.middleware.correlation_id import CorrelationIdMiddleware  # noqa: E402
from vrtravel.middleware.structured_logging_middleware import StructuredLoggingMiddleware  # noqa: E402
from vrtravel.routers.admin import router as admin_router  # noqa: E402
from vrtravel.routers.bookings import router as bookings_router  # noqa: E402
from vrtravel.routers.destinations import router as destinations_router  # noqa: E402
from vrtravel.routers.packages import router as packages_router  # noqa: E402
from vrtravel.routers.quotes import router as quotes_router  # noqa: E402
from vrtravel.routers.users import router as users_router  # noqa: E402
from vrtravel.seed import ensure_seed_data  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("vrtravel")

app = FastAPI(title=APP_NAME, version=APP_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(StructuredLoggingMiddleware)
# Outermost, so the access log and error handlers see the correlation id
app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

# Routers (/api prefix is on each router)
app.include_router(users_router)
app.include_router(destinations_router)
app.include_router(bookings_router)
app.include_router(packages_router)
app.include_router(quotes_router)
app.include_router(admin_router)


@app.get("/api/health")
async def health(db=Depends(get_db)) -> dict[str, Any]:
    """Main health check with database ping"""
    return {"ok": await ping(db), "service": "vr-travel"}


@app.on_event("startup")
async def _startup() -> None:
    await ensure_seed_data(await connect_mongo())
    logger.info("Startup complete")


@app.on_event("shutdown")
async def _shutdown() -> None:
    await close_mongo()
    logger.info("Shutdown complete")
