import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_DEVELOPMENT = ENVIRONMENT == "development"

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./salon_booking.db")

# All API routers are mounted under this prefix
BASE_PATH = os.getenv("BASE_PATH", "/api/v1").rstrip("/")

# Public booking site and admin dashboard
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
CRM_FRONTEND_URL = os.getenv("CRM_FRONTEND_URL", FRONTEND_URL)
SITE_URL = os.getenv("SITE_URL", FRONTEND_URL).rstrip("/")
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("JWT_SECRET") or os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_TTL = os.getenv("ACCESS_TOKEN_TTL", "15m")
REFRESH_TOKEN_TTL = os.getenv("REFRESH_TOKEN_TTL", "7d")
COOKIE_TTL = "365d"

# Admin signup is gated by the sha256 hex digest of this value
SIGNUP_SECRET = os.getenv("SIGNUP_SECRET")

# Google OAuth (admin login)
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_REDIRECT_URI = os.getenv(
    "GOOGLE_REDIRECT_URI", f"http://localhost:8000{BASE_PATH}/user/login/callback"
)

# S3-compatible object storage (category covers, gallery media)
STORAGE_ENDPOINT_URL = os.getenv("STORAGE_ENDPOINT_URL")
STORAGE_ACCESS_KEY_ID = os.getenv("STORAGE_ACCESS_KEY_ID")
STORAGE_SECRET_ACCESS_KEY = os.getenv("STORAGE_SECRET_ACCESS_KEY")
STORAGE_REGION = os.getenv("STORAGE_REGION", "auto")
STORAGE_BUCKET_NAME = os.getenv("STORAGE_BUCKET_NAME", "salon-booking")
# Public base URL for stored objects; falls back to the API's own proxy route
STORAGE_PUBLIC_URL = os.getenv("STORAGE_PUBLIC_URL")
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", str(50 * 1024 * 1024)))

# Email: SMTP first, Resend as fallback
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Salon Bookings <bookings@localhost>")
ADMIN_NOTIFICATION_EMAIL = os.getenv("ADMIN_NOTIFICATION_EMAIL")
# "personal" (500 recipients / 24h) or "workspace" (2000 recipients / 24h)
EMAIL_ACCOUNT_TYPE = os.getenv("EMAIL_ACCOUNT_TYPE", "workspace").lower()
EMAIL_ENABLED = os.getenv("EMAIL_ENABLED", "true").lower() == "true"

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
