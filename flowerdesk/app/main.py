import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from flowerdesk.app.api import bouquets, flowers, notes, orders, writeoffs
from flowerdesk.app.api.deps import get_session
from flowerdesk.app.core.logging import RequestContextMiddleware, get_logger, setup_logging
from flowerdesk.app.core.metrics import PrometheusMiddleware, get_metrics_response
from flowerdesk.app.core.settings import get_settings

VERSION = "1.0.0"

# Load and validate settings
try:
    settings = get_settings()
except ValueError as e:
    print(f"Configuration error: {e}", file=sys.stderr)
    sys.exit(1)

# Use JSON format in production
setup_logging(
    log_level=settings.LOG_LEVEL,
    json_format=settings.is_production
)

logger = get_logger(__name__)

logger.info(
    "Application configuration loaded",
    environment=settings.ENVIRONMENT,
    db_host=settings.DB_HOST,
    strict_stock_check=settings.STRICT_STOCK_CHECK,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    - Startup: optionally seed an empty database with sample data
    - Shutdown: dispose of the connection pool
    """
    from flowerdesk.app.core.database import async_session, engine

    logger.info("Application starting up", version=VERSION)
    if settings.SEED_ON_STARTUP:
        from flowerdesk.app.core.seed import seed_database
        from flowerdesk.app.storage import DatabaseStorage

        async with async_session() as session:
            try:
                await seed_database(DatabaseStorage(session))
            except Exception:
                await session.rollback()
                logger.exception("Seeding database failed")
    yield
    logger.info("Application shutting down")
    await engine.dispose()


app = FastAPI(title="Flowerdesk Backend", version=VERSION, lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Schema violations are reported as 400 with one entry per offending field."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    logger.info("Request validation failed", errors=errors)
    return JSONResponse(status_code=400, content={"detail": "Validation error", "errors": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error while serving request")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# CORS middleware - ДОЛЖЕН БЫТЬ ПЕРВЫМ (выполняется последним при ответе)
ALLOWED_ORIGINS = settings.allowed_origins_list
if not ALLOWED_ORIGINS:
    # Development fallback (production is rejected by get_settings)
    ALLOWED_ORIGINS = ["*"]
    logger.warning("CORS: Allowing all origins (development mode). Set ALLOWED_ORIGINS in production!")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=ALLOWED_ORIGINS != ["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# Add Prometheus metrics middleware AFTER CORS (выполняется раньше при ответе)
app.add_middleware(PrometheusMiddleware)
app.add_middleware(RequestContextMiddleware)

# Подключаем роутеры
app.include_router(flowers.router, prefix="/api/flowers", tags=["warehouse"])
app.include_router(writeoffs.router, prefix="/api/writeoffs", tags=["writeoffs"])
app.include_router(notes.router, prefix="/api/notes", tags=["notes"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
app.include_router(bouquets.router, prefix="/api/bouquets", tags=["bouquets"])


@app.get("/")
async def root():
    return {"status": "ok"}


@app.get("/health")
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    Health check endpoint for monitoring and orchestration.
    Checks database connectivity.
    """
    health_status = {
        "status": "healthy",
        "version": VERSION,
        "checks": {
            "database": "ok",
        }
    }

    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = f"error: {str(e)}"

    return health_status


@app.get("/metrics")
async def metrics_endpoint(openmetrics: bool = False):
    """
    Prometheus metrics endpoint.

    Args:
        openmetrics: If True, return OpenMetrics format
    """
    return get_metrics_response(openmetrics=openmetrics)
