"""
Admin login via Google, sessions, and customer management
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from .. import config
from ..auth import clear_auth_cookies, get_current_admin, set_auth_cookies, start_session, verify_signup_code
from ..database import get_db
from ..enums import UserRoles
from ..models import Admin, AuthCode, User
from ..rate_limiter import auth_rate_limit
from ..services.customer_service import get_customer, set_blocked
from ..services.google_oauth import GoogleAuthError, build_authorization_url, fetch_google_profile, parse_state
from ..shared.envelope import envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["Users"])

GENERIC_AUTH_ERROR = "An error occurred during Google authentication."


def _login_redirect(params: dict) -> RedirectResponse:
    return RedirectResponse(url=f"{config.CRM_FRONTEND_URL}/admin/login?{urlencode(params)}", status_code=302)


def _auth_error_redirect(message: str) -> RedirectResponse:
    return _login_redirect({"authError": message})


# ============================================================================
# GOOGLE LOGIN
# ============================================================================


@router.get("/login")
async def login(
    request: Request,
    mode: Optional[str] = None,
    signupcode: Optional[str] = None,
    _: None = Depends(auth_rate_limit),
):
    """
    Start Google sign-in.
    Login needs mode=login; signup needs a signupcode equal to sha256(SIGNUP_SECRET).
    """
    if signupcode:
        if not verify_signup_code(signupcode):
            logger.warning(f"⚠️ Rejected signup attempt from {request.client.host if request.client else 'unknown'}")
            raise HTTPException(status_code=404, detail="Unauthorized access")
        mode = "signup"
    elif mode != "login":
        raise HTTPException(status_code=404, detail="Unauthorized access")

    if not config.GOOGLE_CLIENT_ID:
        raise HTTPException(status_code=500, detail="Google sign-in is not configured")

    return RedirectResponse(url=build_authorization_url(mode), status_code=302)


@router.get("/login/callback")
async def login_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    db: Session = Depends(get_db),
):
    if error or not code:
        logger.warning(f"⚠️ Google sign-in aborted: {error or 'missing code'}")
        return _auth_error_redirect(GENERIC_AUTH_ERROR)

    claims = parse_state(state)
    if not claims:
        return _auth_error_redirect(GENERIC_AUTH_ERROR)
    mode = claims.get("mode")

    try:
        profile = await fetch_google_profile(code)
    except GoogleAuthError as e:
        logger.error(f"❌ Google sign-in failed: {e}")
        return _auth_error_redirect(GENERIC_AUTH_ERROR)

    admin = db.query(Admin).filter(Admin.google_id == str(profile["id"])).first()

    if mode == "signup":
        if admin:
            return _auth_error_redirect("User already exists. Please login instead.")
        admin = Admin(
            google_id=str(profile["id"]),
            google_email=profile.get("email", ""),
            first_name=profile.get("given_name"),
            last_name=profile.get("family_name"),
            role=UserRoles.EMPLOYEE.value,
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        logger.info(f"✅ Admin {admin.id} signed up ({admin.google_email})")
    elif not admin:
        return _auth_error_redirect(f"{GENERIC_AUTH_ERROR} User not found.")

    tokens = start_session(db, admin)
    response = _login_redirect({"userId": admin.id, "token": tokens["csrf_token"]})
    set_auth_cookies(
        response,
        access_token=tokens["access_token"],
        refresh_token=tokens["refresh_token"],
        csrf_token=tokens["csrf_token"],
    )
    logger.info(f"✅ Admin {admin.id} logged in")
    return response


@router.get("/logout/{user_id}")
async def logout(user_id: int, db: Session = Depends(get_db)):
    admin = db.query(Admin).filter(Admin.id == user_id).first()
    if not admin:
        raise HTTPException(status_code=404, detail="User does not exist.")

    removed = db.query(AuthCode).filter(AuthCode.user_id == user_id).delete(synchronize_session=False)
    db.commit()
    logger.info(f"👋 Admin {user_id} logged out, {removed} session(s) removed")

    response = JSONResponse(content=envelope(True, "Successfully Logged Out"))
    clear_auth_cookies(response)
    return response


# ============================================================================
# CUSTOMERS
# ============================================================================


@router.get("/customer")
async def get_customers(
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Every customer, each with their bookings"""
    customers = (
        db.query(User)
        .filter(User.role == UserRoles.CUSTOMER.value)
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )
    return envelope(True, [c.to_dict() for c in customers])


@router.get("/customer/unblock/{customer_id}")
async def unblock_customer(
    customer_id: int,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    if not set_blocked(db, customer_id, False):
        raise HTTPException(status_code=404, detail="Customer not found")
    return envelope(True, "Unblocked user")


@router.get("/customer/{customer_id}")
async def get_customer_by_id(
    customer_id: int,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    customer = get_customer(db, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return envelope(True, customer.to_dict())


# ============================================================================
# ADMINS
# ============================================================================


@router.get("/{user_id}")
async def get_authenticated_user(
    user_id: int,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    user = db.query(Admin).filter(Admin.id == user_id, Admin.role == UserRoles.EMPLOYEE.value).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return envelope(True, user.to_dict())
