import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config, models  # noqa: F401 - registers the tables on Base
from .database import Base, engine
from .domain.bookings.router import router as bookings_router
from .domain.hair_services.router import router as hair_services_router
from .domain.schedules.router import router as schedules_router
from .rate_limiter import get_redis_client
from .routes.blog import router as blog_router
from .routes.media import router as media_router
from .routes.seo import router as seo_router
from .routes.users import router as users_router
from .security_headers import SecurityHeadersMiddleware
from .shared.envelope import envelope_response

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        # Another worker may have created them first
        if "already exists" in str(e):
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    try:
        if get_redis_client():
            logger.info("Redis connection established")
        else:
            logger.info("Redis not configured - rate limits are counted in memory")
    except Exception as e:
        logger.warning(f"Redis connection failed - rate limits fall back to memory counting: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Salon Booking API", version="1.0.0", lifespan=lifespan)


# ============================================================================
# ERROR HANDLERS - every error leaves as {"isSuccess": false, "content": message}
# ============================================================================


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {exc.status_code}: {exc.detail}")
    response = envelope_response(False, exc.detail, status_code=exc.status_code)
    for key, value in (getattr(exc, "headers", None) or {}).items():
        response.headers[key] = value
    return response


def _validation_message(error: dict) -> str:
    message = error.get("msg") or "Invalid request argument"
    # field_validator errors carry pydantic's "Value error, " prefix
    if message.startswith("Value error, "):
        return message[len("Value error, ") :]
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{field}: {message}" if field else message


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning(f"Validation error for {request.url.path}: {errors}")
    message = _validation_message(errors[0]) if errors else "Invalid request argument"
    return envelope_response(False, message, status_code=400)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}")
    return envelope_response(False, "Internal Server Error", status_code=500)


# ============================================================================
# MIDDLEWARE
# ============================================================================


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise
    duration_ms = (time.time() - start) * 1000
    logger.info(f"{request.method} {request.url.path} - {response.status_code} ({duration_ms:.1f}ms)")
    return response


if config.SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/ping", "/docs", "/openapi.json"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

# Cookies carry the admin session, so origins must be listed explicitly
ALLOWED_ORIGINS = list(dict.fromkeys([config.FRONTEND_URL, config.CRM_FRONTEND_URL, *config.ALLOWED_ORIGINS]))
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-CSRF-Token"],
)

# Routes
app.include_router(users_router, prefix=config.BASE_PATH)
app.include_router(bookings_router, prefix=config.BASE_PATH)
app.include_router(schedules_router, prefix=config.BASE_PATH)
app.include_router(hair_services_router, prefix=config.BASE_PATH)
app.include_router(media_router, prefix=config.BASE_PATH)
app.include_router(blog_router, prefix=config.BASE_PATH)
app.include_router(seo_router)


@app.get("/health/redis")
async def redis_health_check():
    """Check Redis connectivity for monitoring"""
    try:
        client = get_redis_client()
        if client is None:
            return {"status": "healthy", "redis": {"connected": False, "mode": "memory"}}

        start_time = time.time()
        client.ping()
        response_time = (time.time() - start_time) * 1000
        return {"status": "healthy", "redis": {"connected": True, "response_time_ms": round(response_time, 2)}}
    except Exception as e:
        return {"status": "unhealthy", "redis": {"connected": False, "error": str(e)}}
