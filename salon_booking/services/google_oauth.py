"""
Google sign-in for admins
Builds the consent URL and exchanges the callback code for the Google profile.
The OAuth state is a short-lived JWT, so the signup mode can only come from /user/login.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

import httpx
from jose import JWTError, jwt

from .. import config

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105 - OAuth endpoint URL
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
GOOGLE_LOGIN_SCOPES = ["openid", "profile", "email"]

STATE_GRANT_TYPE = "oauth_state"
STATE_TTL = timedelta(minutes=10)


class GoogleAuthError(Exception):
    pass


def sign_state(mode: Optional[str]) -> str:
    claims = {
        "mode": mode,
        "grantType": STATE_GRANT_TYPE,
        "nonce": str(uuid.uuid4()),
        "exp": datetime.now(timezone.utc) + STATE_TTL,
    }
    return jwt.encode(claims, config.SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def build_authorization_url(mode: Optional[str]) -> str:
    params = {
        "client_id": config.GOOGLE_CLIENT_ID,
        "redirect_uri": config.GOOGLE_REDIRECT_URI,
        "response_type": "code",
        "scope": " ".join(GOOGLE_LOGIN_SCOPES),
        "access_type": "offline",
        "prompt": "select_account",
        "include_granted_scopes": "false",
        "state": sign_state(mode),
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def parse_state(state: Optional[str]) -> Optional[dict]:
    """Claims of a state issued by sign_state, or None when it is missing, forged or expired"""
    if not state:
        return None
    try:
        claims = jwt.decode(state, config.SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"⚠️ Rejected OAuth state: {e}")
        return None
    if claims.get("grantType") != STATE_GRANT_TYPE:
        logger.warning("⚠️ Rejected OAuth state: wrong grant type")
        return None
    return claims


async def fetch_google_profile(code: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> dict:
    """Exchange the authorization code and return the userinfo payload (id, email, given_name, ...)"""
    async with httpx.AsyncClient(transport=transport, timeout=15) as client:
        token_response = await client.post(
            GOOGLE_TOKEN_URL,
            data={
                "code": code,
                "client_id": config.GOOGLE_CLIENT_ID,
                "client_secret": config.GOOGLE_CLIENT_SECRET,
                "redirect_uri": config.GOOGLE_REDIRECT_URI,
                "grant_type": "authorization_code",
            },
        )
        if token_response.status_code != 200:
            logger.error(f"Token exchange failed: {token_response.text}")
            raise GoogleAuthError("Failed to exchange authorization code")

        access_token = token_response.json().get("access_token")
        if not access_token:
            raise GoogleAuthError("Invalid token response")

        user_info_response = await client.get(
            GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
        )
        if user_info_response.status_code != 200:
            logger.error(f"Failed to get user info: {user_info_response.text}")
            raise GoogleAuthError("Failed to get user info")

    profile = user_info_response.json()
    if not profile.get("id"):
        raise GoogleAuthError("Google profile is missing an id")
    return profile
