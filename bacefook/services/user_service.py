"""
bacefook.services.user_service — Registration, Profile Update, Deletion
========================================================================

Every write follows the pattern:
  1. Begin transaction
  2. Existence / uniqueness checks
  3. Apply change
  4. Append the journal event (and award referral points on register)
  5. Commit
  6. Recompute network strength for each user whose adjacency changed
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, delete, or_, select, update
from sqlalchemy.orm import Session

from bacefook.database.engine import get_session
from bacefook.database.models import EventType, User, friendships
from bacefook.errors import ConflictError, NotFoundError
from bacefook.services.event_log import record_event
from bacefook.services.network_strength import refresh_network_strengths
from bacefook.services.profiles import load_user, user_profile
from bacefook.services.referral_service import award_referral_points

logger = logging.getLogger(__name__)

# Model attribute → journal / API key
PROFILE_FIELDS: dict[str, str] = {
    "email": "email",
    "username": "username",
    "first_name": "firstName",
    "last_name": "lastName",
    "bio": "bio",
    "avatar": "avatar",
}

DUPLICATE_USER_MESSAGE = "User with this email or username already exists"


def _profile(engine: Engine, user_id: str) -> dict[str, Any]:
    with Session(engine) as session:
        user = load_user(session, user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user_profile(user)


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------
def create_user(
    engine: Engine,
    *,
    email: str,
    username: str,
    first_name: str,
    last_name: str,
    bio: str | None = None,
    avatar: str | None = None,
    referred_by_id: str | None = None,
) -> dict[str, Any]:
    """Register a user, journal it, and award referral points.

    An unknown ``referred_by_id`` is dropped: the user is created without a
    referrer.  User row, journal rows and point awards share one
    transaction, so a failed award leaves no half-registered user.
    """
    with get_session(engine) as session:
        existing = session.scalar(
            select(User.id)
            .where(or_(User.email == email, User.username == username))
            .limit(1)
        )
        if existing is not None:
            raise ConflictError(DUPLICATE_USER_MESSAGE)

        referrer_id = None
        if referred_by_id:
            referrer_id = session.scalar(select(User.id).where(User.id == referred_by_id))
            if referrer_id is None:
                logger.warning("Unknown referrer %s ignored for %s", referred_by_id, username)

        user = User(
            email=email,
            username=username,
            first_name=first_name,
            last_name=last_name,
            bio=bio,
            avatar=avatar,
            referred_by_id=referrer_id,
        )
        session.add(user)
        session.flush()

        record_event(session, EventType.REGISTER, {
            "email": email,
            "username": username,
            "firstName": first_name,
            "lastName": last_name,
            "bio": bio,
            "avatar": avatar,
            "referredById": referrer_id,
            "userId": user.id,
            "createdAt": user.created_at,
        })
        if referrer_id:
            record_event(session, EventType.REFERRAL, {
                "referredBy": referrer_id,
                "user": user.id,
                "createdAt": user.created_at,
            })

        award_referral_points(session, user.id, referrer_id)
        user_id = user.id

    logger.info("User registered: %s (%s), referrer=%s", username, user_id, referrer_id)
    refresh_network_strengths(engine, user_id, referrer_id)
    return _profile(engine, user_id)


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------
def update_user(engine: Engine, user_id: str, **changes: Any) -> dict[str, Any]:
    """Apply profile changes.  Unknown keys (including the referrer) are ignored."""
    changes = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}

    with get_session(engine) as session:
        user = session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")

        unique_checks = []
        if changes.get("email"):
            unique_checks.append(User.email == changes["email"])
        if changes.get("username"):
            unique_checks.append(User.username == changes["username"])
        if unique_checks:
            conflict = session.scalar(
                select(User.id).where(or_(*unique_checks), User.id != user_id).limit(1)
            )
            if conflict is not None:
                raise ConflictError(DUPLICATE_USER_MESSAGE)

        for key, value in changes.items():
            setattr(user, key, value)
        session.flush()

        record_event(session, EventType.UPDATED, {
            **{PROFILE_FIELDS[k]: v for k, v in changes.items()},
            "userId": user_id,
            "updatedAt": user.updated_at,
        })

    logger.info("User updated: %s fields=%s", user_id, sorted(changes))
    return _profile(engine, user_id)


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------
def delete_user(engine: Engine, user_id: str) -> dict[str, str]:
    """Delete a user and everything that only makes sense while it exists.

    Both directions of its friendships go, its point and strength rows go
    with it (ORM cascade), and the users it referred lose their referrer.
    The journal is kept.  Everyone whose adjacency changed is recomputed.
    """
    with get_session(engine) as session:
        user = session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")

        friend_ids = set(session.scalars(
            select(friendships.c.friend_id).where(friendships.c.user_id == user_id)
        ))
        friend_ids |= set(session.scalars(
            select(friendships.c.user_id).where(friendships.c.friend_id == user_id)
        ))
        referral_ids = set(session.scalars(
            select(User.id).where(User.referred_by_id == user_id)
        ))
        referrer_id = user.referred_by_id

        session.execute(
            delete(friendships).where(
                or_(friendships.c.user_id == user_id, friendships.c.friend_id == user_id)
            )
        )
        session.execute(
            update(User).where(User.referred_by_id == user_id).values(referred_by_id=None)
        )
        session.delete(user)
        record_event(session, EventType.DELETED, {"userId": user_id})

    logger.info(
        "User deleted: %s (%d friends, %d referrals detached)",
        user_id, len(friend_ids), len(referral_ids),
    )
    refresh_network_strengths(engine, referrer_id, *sorted(friend_ids), *sorted(referral_ids))
    return {"message": "User deleted successfully"}
