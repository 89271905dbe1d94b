"""
bacefook.services.network_strength — Network Strength Cache
============================================================

``strength = friends + direct referrals + (1 if the user was referred)``

The cached row is a full recompute, never an increment, so calling
:func:`update_network_strength` twice (or racing two requests) is
harmless.  Only the users whose own adjacency changed are recomputed;
friends-of-friends are left alone.
"""

from __future__ import annotations

import logging

from sqlalchemy import DateTime, Engine, bindparam, func, select, text
from sqlalchemy.orm import Session

from bacefook.database.engine import get_session
from bacefook.database.models import User, friendships, utcnow
from bacefook.engine.metrics import network_strength

logger = logging.getLogger(__name__)

_UPSERT_SQL = text("""
    INSERT INTO network_strengths (user_id, strength, calculated_at)
    VALUES (:user_id, :strength, :now)
    ON CONFLICT (user_id)
    DO UPDATE SET strength = :strength, calculated_at = :now
""").bindparams(bindparam("now", type_=DateTime(timezone=True)))


def calculate_network_strength(session: Session, user_id: str) -> int:
    """Compute the live strength of *user_id*; 0 if the user doesn't exist."""
    referred_by_id = session.execute(
        select(User.referred_by_id).where(User.id == user_id)
    ).first()
    if referred_by_id is None:
        return 0

    friend_count = session.scalar(
        select(func.count()).select_from(friendships)
        .where(friendships.c.user_id == user_id)
    ) or 0
    referral_count = session.scalar(
        select(func.count()).select_from(User)
        .where(User.referred_by_id == user_id)
    ) or 0
    return network_strength(friend_count, referral_count, referred_by_id[0] is not None)


def update_network_strength(session: Session, user_id: str) -> int | None:
    """Recompute and upsert the cached strength for *user_id*.

    Returns the stored value, or ``None`` when the user no longer exists.
    """
    if session.get(User, user_id) is None:
        return None
    strength = calculate_network_strength(session, user_id)
    session.execute(
        _UPSERT_SQL,
        {"user_id": user_id, "strength": strength, "now": utcnow()},
    )
    logger.debug("Network strength for %s → %d", user_id, strength)
    return strength


def refresh_network_strengths(engine: Engine, *user_ids: str | None) -> dict[str, int | None]:
    """Recompute each user in its own transaction.

    Each recompute commits independently; errors propagate.  A row left
    stale by a failure is repaired by the next recompute of that user.
    """
    results: dict[str, int | None] = {}
    for user_id in dict.fromkeys(uid for uid in user_ids if uid):
        with get_session(engine) as session:
            results[user_id] = update_network_strength(session, user_id)
    return results
