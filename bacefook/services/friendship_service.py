"""
bacefook.services.friendship_service — Symmetric Friendship Mutations
======================================================================

A friendship is stored as two directed rows, ``(A, B)`` and ``(B, A)``.
The store does not enforce the pairing; this module always writes and
removes both rows in the same transaction, together with the journal
event.  Network strength for both endpoints is recomputed after commit.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, func, select
from sqlalchemy.orm import Session

from bacefook.database.engine import get_session
from bacefook.database.models import EventType, User, friendships, utcnow
from bacefook.engine.metrics import paginate
from bacefook.errors import ConflictError, NotFoundError
from bacefook.services.event_log import record_event
from bacefook.services.network_strength import refresh_network_strengths
from bacefook.services.profiles import user_summary

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


def _load_pair(session: Session, user_id: str, friend_id: str) -> tuple[User, User]:
    """Fetch both endpoints, rejecting self-friendship and unknown ids."""
    if user_id == friend_id:
        raise ConflictError("You cannot friend yourself")

    user = session.get(User, user_id)
    friend = session.get(User, friend_id)
    missing = [uid for uid, row in ((user_id, user), (friend_id, friend)) if row is None]
    if missing:
        raise NotFoundError(f"User or friend not found: {', '.join(missing)}")
    return user, friend


def add_friend(engine: Engine, user_id: str, friend_id: str) -> dict[str, str]:
    """Connect both directions; an existing row is left as is."""
    with get_session(engine) as session:
        user, friend = _load_pair(session, user_id, friend_id)

        if friend not in user.friends:
            user.friends.append(friend)
        if user not in friend.friends:
            friend.friends.append(user)

        record_event(session, EventType.ADD_FRIEND, {
            "user1Id": user_id,
            "user2Id": friend_id,
            "createdAt": utcnow(),
        })

    logger.info("Friendship added: %s ↔ %s", user_id, friend_id)
    refresh_network_strengths(engine, user_id, friend_id)
    return {"message": "Friend added successfully"}


def remove_friend(engine: Engine, user_id: str, friend_id: str) -> dict[str, str]:
    """Disconnect both directions; a missing row is a no-op."""
    with get_session(engine) as session:
        user, friend = _load_pair(session, user_id, friend_id)

        if friend in user.friends:
            user.friends.remove(friend)
        if user in friend.friends:
            friend.friends.remove(user)

        record_event(session, EventType.UNFRIEND, {
            "user1Id": user_id,
            "user2Id": friend_id,
            "createdAt": utcnow(),
        })

    logger.info("Friendship removed: %s ↮ %s", user_id, friend_id)
    refresh_network_strengths(engine, user_id, friend_id)
    return {"message": "Friend removed successfully"}


def get_friends(
    engine: Engine,
    user_id: str,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    *,
    max_limit: int | None = None,
) -> dict[str, Any]:
    """One page of *user_id*'s friends, oldest accounts first."""
    with Session(engine) as session:
        if session.get(User, user_id) is None:
            raise NotFoundError(f"User with ID {user_id} not found")

        total = session.scalar(
            select(func.count()).select_from(friendships)
            .where(friendships.c.user_id == user_id)
        ) or 0
        window = paginate(total, page, limit, max_limit)

        rows = session.scalars(
            select(User)
            .join(friendships, friendships.c.friend_id == User.id)
            .where(friendships.c.user_id == user_id)
            .order_by(User.created_at, User.id)
            .offset(window.offset)
            .limit(window.limit)
        ).all()

        return {
            "data": [user_summary(u) for u in rows],
            "meta": {
                "total": total,
                "currentPage": window.page,
                "limit": window.limit,
                "totalPages": window.total_pages,
            },
        }
