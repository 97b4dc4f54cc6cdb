"""Team members synced from the identity provider, and organizations."""

from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from injaz.config import get_settings
from injaz.db.models import Organization, User
from injaz.services.base import get_or_404
from injaz.services.errors import InvalidInputError

logger = structlog.get_logger(__name__)

ROLES = ("Admin", "Manager", "Employee")
APPROVAL_STATUSES = ("pending", "approved", "rejected")


def get_or_create_organization(session: Session) -> Organization:
    """Return the first organization, creating the default one when there is none."""
    organization = session.scalars(select(Organization).order_by(Organization.created_at)).first()
    if organization is None:
        settings = get_settings()
        organization = Organization(
            id=settings.default_org_id,
            name=settings.default_org_name,
            currency=settings.default_currency,
        )
        session.add(organization)
        session.flush()
        logger.info("organization_created", org_id=organization.id)
    return organization


def sync_user(
    session: Session, uid: str, email: str, display_name: str | None = None
) -> User:
    """Upsert a user by provider uid.

    New users listed in ``ADMIN_UIDS`` start as approved Admins, everyone
    else as pending Employees. Existing users only get email and name
    refreshed.
    """
    if not uid or not email:
        raise InvalidInputError("uid and email are required")
    name = display_name or email.split("@")[0]

    user = session.get(User, uid)
    if user is not None:
        user.email = email
        user.name = name
        session.flush()
        return user

    organization = get_or_create_organization(session)
    is_admin = uid in get_settings().admin_uids
    user = User(
        id=uid,
        email=email,
        name=name,
        role="Admin" if is_admin else "Employee",
        approval_status="approved" if is_admin else "pending",
        organization_id=organization.id,
    )
    session.add(user)
    session.flush()
    logger.info("user_created", user_id=uid, role=user.role)
    return user


def list_users(session: Session) -> list[User]:
    return list(session.scalars(select(User).order_by(User.name)))


def get_user(session: Session, user_id: str) -> User:
    return get_or_404(session, User, user_id)


def update_user_role(session: Session, user_id: str, role: str) -> User:
    if role not in ROLES:
        raise InvalidInputError(f"Invalid role: {role!r}")
    user = get_user(session, user_id)
    user.role = role
    session.flush()
    return user


def update_user_approval(session: Session, user_id: str, status: str) -> User:
    if status not in APPROVAL_STATUSES:
        raise InvalidInputError(f"Invalid approval status: {status!r}")
    user = get_user(session, user_id)
    user.approval_status = status
    session.flush()
    return user


def update_user_profile(session: Session, user_id: str, data: dict[str, Any]) -> User:
    user = get_user(session, user_id)
    for key in ("name", "phone", "avatar"):
        if data.get(key) is not None:
            setattr(user, key, data[key])
    session.flush()
    return user
