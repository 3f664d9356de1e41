"""
Admin authentication

Admins sign in with Google, then carry three httpOnly cookies:
- accessToken: JWT, 15 minutes
- refreshToken: JWT, 7 days, also stored on the AuthCode row
- csrf_token: HMAC token bound to the AuthCode id, echoed back in the X-CSRF-Token header

Cookies live for a year while the JWTs inside carry their real expiry, so an
expired token still reaches the server and can be rotated.
"""

import hashlib
import hmac
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends, HTTPException, Request, Response
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from . import config
from .database import get_db
from .models import Admin, AuthCode, utcnow
from .security_utils import constant_time_compare, random_alphanumeric, sha256_hex

logger = logging.getLogger(__name__)

ACCESS_COOKIE_NAME = "accessToken"
REFRESH_COOKIE_NAME = "refreshToken"
CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"

DEFAULT_EXPIRY_MS = 60 * 1000
_UNIT_MS = {"s": 1000, "m": 60 * 1000, "h": 60 * 60 * 1000, "d": 24 * 60 * 60 * 1000}


def get_expiry_time(expire_at: str) -> int:
    """Milliseconds for "30s", "15m", "2h", "7d"; one minute for anything unparseable"""
    if not expire_at:
        return DEFAULT_EXPIRY_MS

    unit = expire_at[-1].lower()
    try:
        amount = int(expire_at[:-1])
    except ValueError:
        logger.warning(f"⚠️ Invalid duration value '{expire_at}', using default expiry")
        return DEFAULT_EXPIRY_MS

    if unit not in _UNIT_MS:
        logger.warning(f"⚠️ Invalid duration format '{expire_at}', using default expiry")
        return DEFAULT_EXPIRY_MS
    return amount * _UNIT_MS[unit]


def generate_token(user_id: Any, expires: str, grant_type: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(milliseconds=get_expiry_time(expires))
    claims = {
        "userId": str(user_id),
        "grantType": grant_type,
        "jti": str(uuid.uuid4()),
        "exp": expire,
    }
    return jwt.encode(claims, config.SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def verify_token(token: Optional[str]) -> tuple[str, Optional[dict]]:
    """
    Returns ("valid", claims), ("expired", claims) or ("invalid", None).
    Expired tokens still have their signature checked before the claims are returned.
    """
    if not token:
        return "invalid", None
    try:
        return "valid", jwt.decode(token, config.SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except ExpiredSignatureError:
        try:
            claims = jwt.decode(
                token,
                config.SECRET_KEY,
                algorithms=[config.JWT_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError:
            return "invalid", None
        return "expired", claims
    except JWTError as e:
        logger.debug(f"Token verification failed: {e}")
        return "invalid", None


def _csrf_message(auth_id: str, random_value: str) -> str:
    return f"{len(auth_id)}!{auth_id}!{len(random_value)}!{random_value}"


def get_csrf_token(auth_id: Any) -> str:
    """HMAC CSRF token: "<hex hmac>.<random value>" signed with the JWT secret"""
    auth_id = str(auth_id)
    random_value = random_alphanumeric(128)
    digest = hmac.new(
        config.SECRET_KEY.encode(), _csrf_message(auth_id, random_value).encode(), hashlib.sha256
    ).hexdigest()
    return f"{digest}.{random_value}"


def validate_csrf_token(csrf_token: Optional[str], auth_id: Any) -> bool:
    if not csrf_token or "." not in csrf_token:
        return False

    digest, random_value = csrf_token.split(".", 1)
    if not digest or not random_value:
        return False

    expected = hmac.new(
        config.SECRET_KEY.encode(), _csrf_message(str(auth_id), random_value).encode(), hashlib.sha256
    ).hexdigest()
    return constant_time_compare(expected, digest)


def verify_signup_code(signup_code: Optional[str]) -> bool:
    """Signup links carry sha256(SIGNUP_SECRET) so the secret itself never travels"""
    if not config.SIGNUP_SECRET or not signup_code:
        return False
    return constant_time_compare(sha256_hex(config.SIGNUP_SECRET), signup_code)


# ============================================================================
# COOKIES
# ============================================================================


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "max_age": get_expiry_time(config.COOKIE_TTL) // 1000,
        "samesite": "lax" if config.IS_DEVELOPMENT else "none",
        "secure": not config.IS_DEVELOPMENT,
    }


def set_auth_cookies(
    response: Response,
    access_token: Optional[str] = None,
    refresh_token: Optional[str] = None,
    csrf_token: Optional[str] = None,
) -> None:
    options = _cookie_options()
    if access_token:
        response.set_cookie(ACCESS_COOKIE_NAME, access_token, **options)
    if refresh_token:
        response.set_cookie(REFRESH_COOKIE_NAME, refresh_token, **options)
    if csrf_token:
        response.set_cookie(CSRF_COOKIE_NAME, csrf_token, **options)


def clear_auth_cookies(response: Response) -> None:
    options = _cookie_options()
    options.pop("max_age")
    for name in (ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME, CSRF_COOKIE_NAME):
        response.delete_cookie(name, **options)


# ============================================================================
# SESSIONS
# ============================================================================


def get_latest_auth_code(db: Session, user_id: int) -> Optional[AuthCode]:
    return (
        db.query(AuthCode)
        .filter(AuthCode.user_id == user_id)
        .order_by(AuthCode.updated_at.desc(), AuthCode.id.desc())
        .first()
    )


def start_session(db: Session, admin: Admin) -> dict:
    """
    Issue tokens for a freshly authenticated admin.
    An existing session keeps its refresh token; otherwise a new AuthCode is stored.
    """
    access_token = generate_token(admin.id, config.ACCESS_TOKEN_TTL, "accessToken")
    auth_code = get_latest_auth_code(db, admin.id)

    if auth_code:
        logger.info(f"🔑 Admin {admin.id} already has a session, reusing refresh token")
    else:
        refresh = generate_token(admin.id, config.REFRESH_TOKEN_TTL, "refreshToken")
        auth_code = AuthCode(
            user_id=admin.id,
            refresh_token=refresh,
            refresh_token_expiry=utcnow() + timedelta(milliseconds=get_expiry_time(config.REFRESH_TOKEN_TTL)),
        )
        db.add(auth_code)
        db.commit()
        db.refresh(auth_code)
        logger.info(f"🔑 New session {auth_code.id} for admin {admin.id}")

    return {
        "access_token": access_token,
        "refresh_token": auth_code.refresh_token,
        "csrf_token": get_csrf_token(auth_code.id),
    }


def _rotate_refresh_token(db: Session, auth_code: AuthCode, response: Response) -> None:
    new_refresh = generate_token(auth_code.user_id, config.REFRESH_TOKEN_TTL, "refreshToken")
    new_access = generate_token(auth_code.user_id, config.ACCESS_TOKEN_TTL, "accessToken")
    auth_code.refresh_token = new_refresh
    auth_code.refresh_token_expiry = utcnow() + timedelta(milliseconds=get_expiry_time(config.REFRESH_TOKEN_TTL))
    db.commit()
    set_auth_cookies(response, access_token=new_access, refresh_token=new_refresh)
    logger.info(f"🔄 Rotated refresh token for admin {auth_code.user_id}")


def _unauthorized(message: str = "Unauthorized access") -> HTTPException:
    return HTTPException(status_code=401, detail=message)


async def get_current_admin(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
) -> Admin:
    """
    Guard for admin endpoints.

    1. accessToken and csrf_token cookies must be present and the X-CSRF-Token header must match the cookie
    2. The admin's newest AuthCode must exist and validate the CSRF token
    3. Token cases:
       - both expired: the refresh cookie must match the stored one, then both are reissued
       - access valid, refresh expired: both are reissued
       - access expired, refresh valid: the refresh cookie must match, a new access token is issued
       - otherwise both must be valid
    """
    access_token = request.cookies.get(ACCESS_COOKIE_NAME)
    refresh_token = request.cookies.get(REFRESH_COOKIE_NAME)
    csrf_cookie = request.cookies.get(CSRF_COOKIE_NAME)
    csrf_header = request.headers.get(CSRF_HEADER_NAME)

    if not access_token or not csrf_cookie:
        raise _unauthorized("Unauthorized. Please login again.")
    if not constant_time_compare(csrf_header, csrf_cookie):
        raise _unauthorized()

    at_state, at_claims = verify_token(access_token)
    rt_state, rt_claims = verify_token(refresh_token)

    if at_state == "invalid":
        raise _unauthorized()

    try:
        user_id = int(at_claims.get("userId"))
    except (TypeError, ValueError) as e:
        raise _unauthorized() from e

    auth_code = get_latest_auth_code(db, user_id)
    if not auth_code:
        raise _unauthorized("Unauthorized access. Authorization not found")

    if not validate_csrf_token(csrf_header, auth_code.id):
        raise _unauthorized()

    if rt_claims and rt_claims.get("userId") != str(user_id):
        raise _unauthorized()

    if at_state == "expired" and rt_state == "expired":
        if not constant_time_compare(auth_code.refresh_token, refresh_token):
            raise _unauthorized("Invalid refresh token")
        _rotate_refresh_token(db, auth_code, response)
    elif at_state == "valid" and rt_state == "expired":
        _rotate_refresh_token(db, auth_code, response)
    elif at_state == "expired" and rt_state == "valid":
        if not constant_time_compare(auth_code.refresh_token, refresh_token):
            raise _unauthorized("Invalid refresh token")
        set_auth_cookies(
            response, access_token=generate_token(user_id, config.ACCESS_TOKEN_TTL, "accessToken")
        )
        logger.info(f"🔄 Refreshed access token for admin {user_id}")
    elif rt_state != "valid":
        raise _unauthorized()

    admin = db.query(Admin).filter(Admin.id == user_id).first()
    if not admin:
        raise _unauthorized()

    request.state.admin_id = admin.id
    return admin
