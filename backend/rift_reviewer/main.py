"""Main FastAPI application for the Rift Reviewer backend."""

from contextlib import asynccontextmanager
from typing import Any, Dict

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rift_reviewer.core import get_global_settings
from rift_reviewer.core.database import get_db_manager
from rift_reviewer.core.dependencies import close_shared_resources, get_side_task_queue
from rift_reviewer.core.enums import ErrorCode
from rift_reviewer.core.exceptions import ServiceException
from rift_reviewer.core.logging import setup_logging
from rift_reviewer.features.insights.router import router as insights_router
from rift_reviewer.features.matches.dependencies import close_object_cache
from rift_reviewer.features.matches.router import router as matches_router
from rift_reviewer.features.players.router import router as players_router

settings = get_global_settings()
setup_logging(settings.log_level)
logger = structlog.get_logger(__name__)

ERROR_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID_MATCH_DATA: 422,
    ErrorCode.DUPLICATE_WRITE: 409,
    ErrorCode.INVALID_UPSTREAM_PAYLOAD: 502,
    ErrorCode.INSIGHT_FAILURE: 502,
    ErrorCode.UPSTREAM_UNAVAILABLE: 503,
    ErrorCode.AGGREGATION_FAILURE: 503,
    ErrorCode.STORE_FAILURE: 503,
}


def _warn_if_api_key_missing() -> None:
    if not settings.riot_api_key:
        logger.warning(
            "RIOT_API_KEY not configured, upstream calls will fail",
            hint="Get your key from https://developer.riotgames.com",
        )
    elif settings.riot_api_key.startswith("RGAPI-"):
        logger.info("Riot API key configured (development key detected)")
    else:
        logger.info("Riot API key configured")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting up Rift Reviewer backend")
    _warn_if_api_key_missing()
    await get_db_manager().create_all()
    await get_side_task_queue().start()
    yield
    logger.info("Shutting down Rift Reviewer backend")
    await close_shared_resources()
    await close_object_cache()
    await get_db_manager().close()


app = FastAPI(
    title="Rift Reviewer API",
    description="Match cache and player statistics for League of Legends",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceException)
async def service_exception_handler(
    request: Request, exc: ServiceException
) -> JSONResponse:
    """Map service-layer failures to HTTP responses."""
    status_code = ERROR_STATUS.get(exc.code, 500)
    logger.info(
        "request_failed",
        path=request.url.path,
        code=exc.code.value,
        status_code=status_code,
        detail=exc.message,
    )
    return JSONResponse(status_code=status_code, content=exc.to_dict())


app.include_router(players_router, prefix="/api/v1")
app.include_router(matches_router, prefix="/api/v1")
app.include_router(insights_router, prefix="/api/v1")

# Root-level paths for existing clients
app.include_router(players_router)
app.include_router(matches_router)
app.include_router(insights_router)


@app.get("/health", tags=["health"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Reports the application status and the side task queue counters.
    """
    queue = get_side_task_queue()
    return {
        "status": "healthy",
        "message": "Application is running",
        "version": "0.1.0",
        "debug": settings.debug,
        "side_tasks": {"running": queue.running, **dict(queue.stats)},
    }


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "rift_reviewer.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
