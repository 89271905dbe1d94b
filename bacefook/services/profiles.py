"""
bacefook.services.profiles — User loading & response shaping
=============================================================

Shared by the mutation and query services so every endpoint renders a
user the same way.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from bacefook.database.models import User
from bacefook.engine.metrics import as_utc

# Options for a "full profile" load: adjacency + both derived rows.
PROFILE_LOAD_OPTIONS = (
    selectinload(User.friends),
    selectinload(User.referrals),
    joinedload(User.referral_point),
    joinedload(User.network_strength),
)


def iso(value: datetime | None) -> str | None:
    return as_utc(value).isoformat() if value is not None else None


def load_user(session: Session, user_id: str) -> User | None:
    """Fetch a user with friends, referrals and derived rows eagerly loaded."""
    return session.scalar(
        select(User).where(User.id == user_id).options(*PROFILE_LOAD_OPTIONS)
    )


def user_summary(u: User | None) -> dict[str, Any] | None:
    """The compact ``{id, username, firstName, lastName, avatar}`` projection."""
    if u is None:
        return None
    return {
        "id": u.id,
        "username": u.username,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "avatar": u.avatar,
    }


def user_profile(u: User, *, network_strength: int | None = None) -> dict[str, Any]:
    """Full profile.  *network_strength* overrides the cached value when given."""
    if network_strength is None:
        network_strength = u.network_strength.strength if u.network_strength else 0
    return {
        "id": u.id,
        "email": u.email,
        "username": u.username,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "bio": u.bio,
        "avatar": u.avatar,
        "createdAt": iso(u.created_at),
        "updatedAt": iso(u.updated_at),
        "friends": [user_summary(f) for f in u.friends],
        "referrals": [user_summary(r) for r in u.referrals],
        "referralPoints": u.referral_point.points if u.referral_point else 0,
        "networkStrength": network_strength,
    }
