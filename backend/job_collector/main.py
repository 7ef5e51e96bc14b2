"""
FastAPI Main Application

HTTP surface of the job collector. The lifespan builds the container and,
when background scraping is enabled, starts the periodic scheduler.
"""

from typing import Dict, Any
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from job_collector.core.config import get_settings
from job_collector.core.container import get_container, init_container, shutdown_container
from job_collector.core.exceptions import JobCollectorError
from job_collector.api.v1 import collector_router, health_router, jobs_router
from job_collector.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

settings = get_settings()

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    logger.info("Collector API starting", app=settings.APP_NAME, environment=settings.ENVIRONMENT)

    try:
        await init_container(settings)
    except Exception as e:
        logger.error("Container initialization failed", error=str(e))
        raise

    if settings.ENABLE_BACKGROUND_SCRAPING:
        get_container().get("scheduler").start()
    else:
        logger.info("Background scraping disabled, cycles run on demand only")

    yield

    try:
        await shutdown_container()
    except Exception as e:
        logger.warning("Error during shutdown", error=str(e))
    logger.info("Collector API stopped")


app = FastAPI(
    title=settings.APP_NAME,
    description="Periodic job listing collector with deduplication and enrichment",
    version=settings.VERSION,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan
)

app.include_router(health_router, prefix=API_PREFIX)
app.include_router(collector_router, prefix=API_PREFIX)
app.include_router(jobs_router, prefix=API_PREFIX)


@app.exception_handler(JobCollectorError)
async def collector_exception_handler(request: Request, exc: JobCollectorError) -> JSONResponse:
    """Render application errors with their category and details."""
    logger.error(
        "Application error",
        error_code=exc.error_code,
        detail=exc.message,
        path=request.url.path
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Request validation failed", path=request.url.path)
    return JSONResponse(
        status_code=422,
        content={"detail": "Request validation failed", "errors": exc.errors()}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler; hides the error text in production."""
    logger.error("Unhandled exception", path=request.url.path, exc_info=exc)

    content: Dict[str, Any] = {"detail": "Internal server error"}
    if settings.ENVIRONMENT != "production":
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


@app.get("/")
async def root() -> Dict[str, Any]:
    """Service information and endpoint map."""
    return {
        "message": settings.APP_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "status": "running",
        "endpoints": {
            "health": f"{API_PREFIX}/health/",
            "run": f"{API_PREFIX}/collector/run",
            "status": f"{API_PREFIX}/collector/status",
            "stats": f"{API_PREFIX}/collector/stats",
            "jobs": f"{API_PREFIX}/jobs/recent",
            "search": f"{API_PREFIX}/jobs/search"
        }
    }


def run_server() -> None:
    """Serve the API with uvicorn."""
    uvicorn.run(
        "job_collector.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run_server()
