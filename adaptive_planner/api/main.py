"""
FastAPI Application

Main entry point for the adaptive planner web API. All routes share the
process-wide plan engine from `dependencies.get_engine`.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adaptive_planner.api.dependencies import to_http_exception
from adaptive_planner.api.routes import plans, training, workouts
from adaptive_planner.config import configure_logging, get_settings
from adaptive_planner.errors import PlannerError

configure_logging()
logger = logging.getLogger(__name__)

SERVICE_NAME = "adaptive-planner-api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        f"Starting {SERVICE_NAME} (model {settings.ANTHROPIC_MODEL}, "
        f"fallback {'on' if settings.FALLBACK_ENABLED else 'off'})"
    )
    if not settings.ANTHROPIC_API_KEY:
        logger.warning("ANTHROPIC_API_KEY is not set; plan generation requests will fail")
    yield


app = FastAPI(
    title="Adaptive Training Planner API",
    description="Week-by-week endurance training plans generated and adapted from athlete feedback",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Frontend dev servers by default; override with CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(plans.router, prefix="/api", tags=["Plans"])
app.include_router(workouts.router, prefix="/api", tags=["Workouts"])
app.include_router(training.router, prefix="/api", tags=["Training Reference"])


@app.get("/")
async def root() -> Dict[str, str]:
    """API information."""
    return {
        "name": "Adaptive Training Planner API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health_check() -> Dict[str, Any]:
    """Liveness plus whether a generation credential is configured."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "generation_configured": bool(get_settings().ANTHROPIC_API_KEY),
    }


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Return error details as a flat JSON body."""
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": exc.detail, "message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(PlannerError)
async def planner_exception_handler(request: Request, exc: PlannerError):
    """Map planner errors that escaped a route."""
    http_exc = to_http_exception(exc)
    return JSONResponse(status_code=http_exc.status_code, content=http_exc.detail)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "message": str(exc),
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "adaptive_planner.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=get_settings().LOG_LEVEL.lower(),
    )
