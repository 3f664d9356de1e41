"""
Security Headers Middleware for FastAPI

Adds security headers to every API response:
- X-Frame-Options / X-Content-Type-Options / Referrer-Policy
- Content-Security-Policy: JSON only, framed by the booking site and dashboard alone
- Permissions-Policy: disables browser features the API never needs
- Strict-Transport-Security: production only
- Cache-Control: no-store unless the route set its own policy (sitemap, media proxy)
"""

import logging
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from . import config

logger = logging.getLogger(__name__)

DISABLED_FEATURES = ["accelerometer", "camera", "geolocation", "gyroscope", "microphone", "payment", "usb"]


def get_csp_policy() -> str:
    frame_ancestors = " ".join(dict.fromkeys([config.FRONTEND_URL, config.CRM_FRONTEND_URL]))
    directives = [
        "default-src 'none'",
        f"frame-ancestors 'self' {frame_ancestors}",
        "base-uri 'none'",
        "form-action 'self'",
    ]
    return "; ".join(directives)


def get_security_headers() -> dict[str, str]:
    headers = {
        "X-Frame-Options": "SAMEORIGIN",
        "X-Content-Type-Options": "nosniff",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Content-Security-Policy": get_csp_policy(),
        "Permissions-Policy": ", ".join(f"{feature}=()" for feature in DISABLED_FEATURES),
        "X-Permitted-Cross-Domain-Policies": "none",
        # same-origin-allow-popups keeps the Google sign-in popup working
        "Cross-Origin-Opener-Policy": "same-origin-allow-popups",
    }
    if config.ENVIRONMENT == "production":
        headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or []
        self.headers = get_security_headers()
        logger.debug(f"🔒 Security headers: {sorted(self.headers)}")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        path = request.url.path
        if any(path.startswith(excluded) for excluded in self.exclude_paths):
            return response

        for name, value in self.headers.items():
            response.headers[name] = value

        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"

        return response
