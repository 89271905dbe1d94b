"""
bacefook.services.analytics_service — Read-side Queries
========================================================

Listing, single-profile lookup, network-graph lookup by name,
leaderboards, referral / friend-add counts and daily series, and the
"top influential friends" ranking.

List views use the cached ``network_strengths`` value; :func:`find_one`
recomputes the strength live so a single-profile read is always fresh.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import Engine, Select, func, or_, select
from sqlalchemy.orm import Session, joinedload

from bacefook.database.models import (
    Event,
    EventType,
    NetworkStrength,
    ReferralPoint,
    User,
    friendships,
)
from bacefook.engine.metrics import bucket_by_day, paginate, parse_window
from bacefook.errors import NotFoundError
from bacefook.services.network_strength import calculate_network_strength
from bacefook.services.profiles import (
    PROFILE_LOAD_OPTIONS,
    iso,
    load_user,
    user_profile,
    user_summary,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
DEFAULT_LEADERBOARD_LIMIT = 10
TOP_INFLUENTIAL_LIMIT = 3


# ---------------------------------------------------------------------------
# Listing & lookup
# ---------------------------------------------------------------------------
def find_all(
    engine: Engine,
    search: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    *,
    max_limit: int | None = None,
) -> dict[str, Any]:
    """Paginated user listing with optional case-insensitive substring search."""
    filters = []
    if search:
        filters.append(or_(
            User.username.icontains(search, autoescape=True),
            User.email.icontains(search, autoescape=True),
            User.first_name.icontains(search, autoescape=True),
            User.last_name.icontains(search, autoescape=True),
        ))

    with Session(engine) as session:
        total = session.scalar(
            select(func.count()).select_from(User).where(*filters)
        ) or 0
        window = paginate(total, page, limit, max_limit)

        users = session.scalars(
            select(User)
            .where(*filters)
            .options(*PROFILE_LOAD_OPTIONS)
            .order_by(User.created_at, User.id)
            .offset(window.offset)
            .limit(window.limit)
        ).all()

        return {
            "data": [user_profile(u) for u in users],
            "total": total,
            "page": window.page,
            "limit": window.limit,
            "totalPages": window.total_pages,
        }


def find_one(engine: Engine, user_id: str) -> dict[str, Any]:
    """Full profile with a live network-strength recomputation."""
    with Session(engine) as session:
        user = load_user(session, user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        strength = calculate_network_strength(session, user_id)
        return user_profile(user, network_strength=strength)


def get_network_graph_by_name(engine: Engine, name: str) -> dict[str, Any]:
    """First user whose username, first name or last name equals *name*."""
    with Session(engine) as session:
        user = session.scalar(
            select(User)
            .where(or_(
                User.username == name,
                User.first_name == name,
                User.last_name == name,
            ))
            .options(*PROFILE_LOAD_OPTIONS, joinedload(User.referred_by))
            .order_by(User.created_at, User.id)
            .limit(1)
        )
        if user is None:
            raise NotFoundError(f"User with name {name} not found")

        return {
            "user": user_summary(user),
            "referredBy": user_summary(user.referred_by),
            "referrals": [user_summary(r) for r in user.referrals],
            "friends": [user_summary(f) for f in user.friends],
        }


# ---------------------------------------------------------------------------
# Leaderboards
# ---------------------------------------------------------------------------
def get_network_strength_leaderboard(
    engine: Engine,
    from_: str | datetime | None = None,
    to: str | datetime | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Users ranked by cached strength, optionally by calculation time window."""
    start, end = parse_window(from_, to, required=False)
    stmt = (
        select(NetworkStrength)
        .options(joinedload(NetworkStrength.user))
        .order_by(NetworkStrength.strength.desc(), NetworkStrength.user_id)
        .limit(max(int(limit or DEFAULT_LEADERBOARD_LIMIT), 1))
    )
    if start is not None:
        stmt = stmt.where(NetworkStrength.calculated_at >= start)
    if end is not None:
        stmt = stmt.where(NetworkStrength.calculated_at <= end)

    with Session(engine) as session:
        return [
            {
                "user": user_summary(row.user),
                "strength": row.strength,
                "calculatedAt": iso(row.calculated_at),
            }
            for row in session.scalars(stmt).all()
        ]


def get_referral_points_leaderboard(
    engine: Engine,
    from_: str | datetime | None = None,
    to: str | datetime | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Users ranked by referral points, optionally by last-award time window."""
    start, end = parse_window(from_, to, required=False)
    stmt = (
        select(ReferralPoint)
        .options(joinedload(ReferralPoint.user))
        .order_by(ReferralPoint.points.desc(), ReferralPoint.user_id)
        .limit(max(int(limit or DEFAULT_LEADERBOARD_LIMIT), 1))
    )
    if start is not None:
        stmt = stmt.where(ReferralPoint.updated_at >= start)
    if end is not None:
        stmt = stmt.where(ReferralPoint.updated_at <= end)

    with Session(engine) as session:
        return [
            {
                "user": user_summary(row.user),
                "points": row.points,
                "updatedAt": iso(row.updated_at),
            }
            for row in session.scalars(stmt).all()
        ]


# ---------------------------------------------------------------------------
# Windowed counts & daily series
# ---------------------------------------------------------------------------
def _referrals_in_window(user_id: str, start: datetime, end: datetime) -> Select:
    return select(User.created_at).where(
        User.referred_by_id == user_id,
        User.created_at >= start,
        User.created_at <= end,
    )


def _friend_adds_in_window(user_id: str, start: datetime, end: datetime) -> Select:
    # Initiator only: an addfriend event where this user is user2Id is not
    # counted, even though the friendship itself is symmetric.
    return select(Event.created_at).where(
        Event.type == EventType.ADD_FRIEND.value,
        Event.data["user1Id"].as_string() == user_id,
        Event.created_at >= start,
        Event.created_at <= end,
    )


def get_referral_count(engine: Engine, user_id: str, from_, to) -> dict[str, int]:
    """Users referred by *user_id* who joined within ``[from, to]``."""
    start, end = parse_window(from_, to)
    with Session(engine) as session:
        count = session.scalar(
            select(func.count()).select_from(_referrals_in_window(user_id, start, end).subquery())
        )
    return {"count": count or 0}


def get_referral_timeseries(engine: Engine, user_id: str, from_, to) -> dict[str, list]:
    """Daily referral counts within ``[from, to]``, ascending by date."""
    start, end = parse_window(from_, to)
    with Session(engine) as session:
        stamps = session.scalars(_referrals_in_window(user_id, start, end)).all()
    return {"series": bucket_by_day(stamps)}


def get_friends_count(engine: Engine, user_id: str, from_, to) -> dict[str, int]:
    """Friend additions initiated by *user_id* within ``[from, to]``."""
    start, end = parse_window(from_, to)
    with Session(engine) as session:
        count = session.scalar(
            select(func.count()).select_from(_friend_adds_in_window(user_id, start, end).subquery())
        )
    return {"count": count or 0}


def get_friends_timeseries(engine: Engine, user_id: str, from_, to) -> dict[str, list]:
    """Daily friend additions initiated by *user_id*, ascending by date."""
    start, end = parse_window(from_, to)
    with Session(engine) as session:
        stamps = session.scalars(_friend_adds_in_window(user_id, start, end)).all()
    return {"series": bucket_by_day(stamps)}


# ---------------------------------------------------------------------------
# Influence
# ---------------------------------------------------------------------------
def get_top_influential_friends(engine: Engine, user_id: str) -> list[dict[str, Any]]:
    """Up to three friends with the highest cached strength.

    Ties go to the older account.  A friend without a strength row ranks
    as 0.
    """
    with Session(engine) as session:
        if session.get(User, user_id) is None:
            raise NotFoundError(f"User with ID {user_id} not found")

        friend_ids = session.scalars(
            select(friendships.c.friend_id).where(friendships.c.user_id == user_id)
        ).all()
        if not friend_ids:
            return []

        strength = func.coalesce(NetworkStrength.strength, 0)
        rows = session.execute(
            select(User, strength.label("strength"))
            .outerjoin(NetworkStrength, NetworkStrength.user_id == User.id)
            .where(User.id.in_(friend_ids))
            .order_by(strength.desc(), User.created_at.asc(), User.id.asc())
            .limit(TOP_INFLUENTIAL_LIMIT)
        ).all()

        return [
            {**user_summary(u), "networkStrength": s}
            for u, s in rows
        ]
