import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.exceptions import DevMatchError, RateLimitExceeded
from app.core.rate_limiter import rate_limiter
from app.realtime.rooms import room_manager
from app.api.auth import router as auth_router
from app.api.swipes import router as swipes_router
from app.api.matches import router as matches_router
from app.api.realtime import router as realtime_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up FastAPI...")
    rate_limiter.start_cleanup_task()
    yield
    rate_limiter.stop_cleanup_task()
    await room_manager.drain()
    logger.info("Shutting down FastAPI...")


app = FastAPI(
    title="DevMatch API",
    docs_url="/docs" if not settings.APP_DOMAIN else None,
    redoc_url=None,
    lifespan=lifespan,
)


@app.exception_handler(DevMatchError)
async def devmatch_error_handler(request: Request, exc: DevMatchError):
    headers = None
    if isinstance(exc, RateLimitExceeded):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


# Include routers
app.include_router(auth_router)
app.include_router(swipes_router)
app.include_router(matches_router)
app.include_router(realtime_router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "realtime_connections": room_manager.connection_count()}


@app.get("/")
async def root():
    return {"message": "DevMatch API", "version": "1.0"}
