"""
Application entry point for the Visnet E-Learning API.

Builds the FastAPI app: CORS, error handlers, request logging, the API
router under ``API_PREFIX`` and the health endpoints.
"""

from contextlib import asynccontextmanager
from datetime import datetime
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from elearning.core.config import settings
from elearning.core.database import DatabaseManager, SessionLocal, check_database_connection, init_db
from elearning.core.exceptions import register_exception_handlers
from elearning.core.logging import RequestLoggingMiddleware, setup_logging
from elearning.routers import api_router


setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.TESTING:
        DatabaseManager.create_all_tables()
        db = SessionLocal()
        try:
            init_db(db)
        finally:
            db.close()
    logger.info(f"{settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")
    yield
    logger.info(f"{settings.PROJECT_NAME} shutting down")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if not settings.is_production:
    app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get(f"{settings.API_PREFIX}/health", tags=["health"])
def health_check():
    return {
        "status": "SUCCESS",
        "message": f"{settings.PROJECT_NAME} is running",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
    }


@app.get(f"{settings.API_PREFIX}/db-test", tags=["health"])
def database_check():
    if check_database_connection():
        return {"status": "SUCCESS", "message": "Database connection successful"}
    return JSONResponse(
        status_code=500,
        content={"status": "ERROR", "message": "Database connection failed"}
    )


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "elearning.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
