"""Customer records created on the fly from booking details"""

import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..enums import UserRoles
from ..models import User

logger = logging.getLogger(__name__)


def get_customer_for_booking(db: Session, first_name: str, last_name: str, phone: str, email: str) -> User:
    """
    Find the customer behind a booking or create one.
    An exact phone + email match wins; otherwise either one identifies the customer,
    since both columns are unique. A new customer is only flushed; the caller commits.
    """
    customer = db.query(User).filter(User.phone == phone, User.email == email).first()
    if customer:
        return customer

    customer = db.query(User).filter(or_(User.phone == phone, User.email == email)).first()
    if customer:
        logger.info(f"👤 Matched customer {customer.id} on phone or email only")
        return customer

    customer = User(
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        email=email,
        role=UserRoles.CUSTOMER.value,
        is_blocked=False,
    )
    db.add(customer)
    db.flush()
    logger.info(f"👤 Created customer {customer.id}")
    return customer


def get_customer(db: Session, customer_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == customer_id, User.role == UserRoles.CUSTOMER.value).first()


def set_blocked(db: Session, user_id: int, blocked: bool) -> Optional[User]:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        return None
    user.is_blocked = blocked
    db.commit()
    db.refresh(user)
    logger.info(f"{'🚫 Blocked' if blocked else '✅ Unblocked'} customer {user_id}")
    return user


def block_user(db: Session, user_id: int) -> Optional[User]:
    """Called once a customer has missed too many appointments"""
    return set_blocked(db, user_id, True)
