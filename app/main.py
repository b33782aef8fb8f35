"""
app/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Registers API routes (auth, clients, admin, documents)
- No business logic should be written here
- Manages application lifecycle (startup/shutdown)
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
from contextlib import asynccontextmanager
from uuid import uuid4
import time

from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import setup_logging, get_logger, LogContext
from app.services.user_service import ensure_bootstrap_admin
from app.storage.memory import MemoryStorage
from app.storage.provider import StorageProvider
from app.api import admin, auth, clients, documents

APP_VERSION = "1.0.0"
REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_SECONDS = 5.0

# Initialize logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("🚀 Starting document portal...")

    try:
        logger.info("Validating configuration...")
        validate_settings()
        logger.info("✅ Configuration validated")

        provider: StorageProvider = app.state.storage_provider
        storage = await provider.get()
        logger.info(f"✅ Storage ready: {storage.name}")

        await ensure_bootstrap_admin(storage, settings)

        logger.info("🎉 Document portal started successfully!")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"Debug Mode: {settings.DEBUG}")

    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield  # Application runs here

    # Shutdown
    logger.info("🛑 Shutting down document portal...")

    try:
        await app.state.storage_provider.close()
        logger.info("✅ Storage closed")

    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)


# Create FastAPI app with lifespan
app = FastAPI(
    title="Document Portal",
    description="PDF document exchange between an admin and clients identified by phone number",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,  # Disable docs in production
    redoc_url="/redoc" if settings.is_development else None,
)

app.state.storage_provider = StorageProvider(settings)

# Signed cookie sessions
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.session_max_age_seconds,
    same_site="lax",
    https_only=settings.is_production,
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request id + timing middleware
@app.middleware("http")
async def add_request_context(request: Request, call_next):
    """Tags every log line of a request with its id and times the request."""
    request_id = (request.headers.get(REQUEST_ID_HEADER) or uuid4().hex)[:64]

    with LogContext(request_id=request_id):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = str(process_time)

        # Log slow requests
        if process_time > SLOW_REQUEST_SECONDS:
            logger.warning(f"Slow request detected: {request.method} {request.url.path} took {process_time:.2f}s")

    return response


add_exception_handlers(app)

# Register API routes
app.include_router(auth.router, prefix=settings.API_PREFIX, tags=["Auth"])
app.include_router(clients.router, prefix=settings.API_PREFIX, tags=["Clients"])
app.include_router(admin.router, prefix=settings.API_PREFIX, tags=["Admin"])
app.include_router(documents.router, prefix=settings.API_PREFIX, tags=["Documents"])


# Root endpoint
@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic info."""
    return {
        "name": "Document Portal API",
        "version": APP_VERSION,
        "status": "running",
        "environment": settings.ENVIRONMENT
    }


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """
    Health check endpoint.
    Reports the storage backend and whether it answers.
    """
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": APP_VERSION,
        "checks": {}
    }

    try:
        storage = await request.app.state.storage_provider.get()
        health_status["checks"]["storage"] = storage.name

        if isinstance(storage, MemoryStorage):
            # Running without a database: data does not survive restarts
            health_status["status"] = "degraded"
        elif not await storage.ping():
            health_status["checks"]["database"] = "unhealthy"
            health_status["status"] = "unhealthy"
        else:
            health_status["checks"]["database"] = "healthy"
    except Exception as e:
        logger.error(f"Storage health check failed: {str(e)}")
        health_status["checks"]["database"] = "unhealthy"
        health_status["status"] = "unhealthy"

    status_code = 503 if health_status["status"] == "unhealthy" else 200
    return JSONResponse(content=health_status, status_code=status_code)


# Readiness probe (for Kubernetes/orchestration)
@app.get("/ready", tags=["Health"])
async def readiness_check(request: Request):
    """
    Readiness probe - indicates if app is ready to receive traffic.
    """
    try:
        storage = await request.app.state.storage_provider.get()
        if await storage.ping():
            return {"status": "ready", "storage": storage.name}
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "database_unavailable"}
        )
    except Exception as e:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": str(e)}
        )


# Liveness probe (for Kubernetes/orchestration)
@app.get("/live", tags=["Health"])
async def liveness_check():
    """
    Liveness probe - indicates if app is alive.
    """
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
