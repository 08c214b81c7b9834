from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from taskpulse.api.middleware import AccessLogMiddleware
from taskpulse.api.v1.router import v1_router
from taskpulse.common.logging import get_logger, setup_logging
from taskpulse.config import settings
from taskpulse.core.boards.cache import BoardCache
from taskpulse.core.employees.directory import EmployeeDirectory
from taskpulse.core.live.broadcaster import Broadcaster
from taskpulse.integrations.monday import fetch_boards

VERSION = "1.0.0"

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    broadcaster = Broadcaster(delivery_timeout=settings.STREAM_DELIVERY_TIMEOUT_SECONDS)
    board_cache = BoardCache(
        fetch_boards,
        ttl_seconds=settings.BOARD_CACHE_TTL_SECONDS,
        max_entries=settings.BOARD_CACHE_MAX_ENTRIES,
    )
    # Webhook events refresh cached boards through the same fan-out as streams
    cache_channel = await broadcaster.subscribe(board_cache.handle_event)

    app.state.broadcaster = broadcaster
    app.state.board_cache = board_cache
    app.state.employees = EmployeeDirectory()
    logger.info("TaskPulse started (env=%s)", settings.APP_ENV)

    yield

    broadcaster.unsubscribe(cache_channel)
    await board_cache.aclose()


app = FastAPI(
    title="TaskPulse API",
    description="Live workload and payment dashboard for monday.com boards",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
origins = settings.ALLOWED_ORIGINS.split(",") if settings.ALLOWED_ORIGINS != "*" else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AccessLogMiddleware)

# API routes
app.include_router(v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check(request: Request):
    return {
        "status": "healthy",
        "service": "taskpulse",
        "version": VERSION,
        "env": settings.APP_ENV,
        "stream_channels": request.app.state.broadcaster.active_channels,
    }
