"""
bacefook.api.routes.analytics — Graph, leaderboard & time-series endpoints
===========================================================================

Mounted before :mod:`bacefook.api.routes.users` so the fixed paths
(``/users/network-graph``, ``/users/leaderboard/...``) win over
``/users/{user_id}``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import Engine

from bacefook.api.deps import get_config, get_engine
from bacefook.config import BacefookConfig
from bacefook.services import analytics_service

router = APIRouter(prefix="/users", tags=["analytics"])


# ---------------------------------------------------------------------------
# Graph lookup
# ---------------------------------------------------------------------------
@router.get("/network-graph")
def get_network_graph(name: str = Query(..., min_length=1), engine: Engine = Depends(get_engine)):
    """User, its referrer, its referrals and its friends, found by name."""
    return analytics_service.get_network_graph_by_name(engine, name)


# ---------------------------------------------------------------------------
# Leaderboards
# ---------------------------------------------------------------------------
@router.get("/leaderboard/network-strength")
def network_strength_leaderboard(
    from_: str | None = Query(None, alias="from"),
    to: str | None = Query(None),
    limit: int | None = Query(None, ge=1),
    engine: Engine = Depends(get_engine),
    cfg: BacefookConfig = Depends(get_config),
):
    return analytics_service.get_network_strength_leaderboard(
        engine, from_, to, min(limit or cfg.leaderboard_limit, cfg.max_page_size),
    )


@router.get("/leaderboard/referral-points")
def referral_points_leaderboard(
    from_: str | None = Query(None, alias="from"),
    to: str | None = Query(None),
    limit: int | None = Query(None, ge=1),
    engine: Engine = Depends(get_engine),
    cfg: BacefookConfig = Depends(get_config),
):
    return analytics_service.get_referral_points_leaderboard(
        engine, from_, to, min(limit or cfg.leaderboard_limit, cfg.max_page_size),
    )


# ---------------------------------------------------------------------------
# Per-user windows
# ---------------------------------------------------------------------------
@router.get("/{user_id}/referral-count")
def referral_count(
    user_id: str,
    from_: str | None = Query(None, alias="from"),
    to: str | None = Query(None),
    engine: Engine = Depends(get_engine),
):
    return analytics_service.get_referral_count(engine, user_id, from_, to)


@router.get("/{user_id}/referral-timeseries")
def referral_timeseries(
    user_id: str,
    from_: str | None = Query(None, alias="from"),
    to: str | None = Query(None),
    engine: Engine = Depends(get_engine),
):
    return analytics_service.get_referral_timeseries(engine, user_id, from_, to)


@router.get("/{user_id}/friends-count")
def friends_count(
    user_id: str,
    from_: str | None = Query(None, alias="from"),
    to: str | None = Query(None),
    engine: Engine = Depends(get_engine),
):
    return analytics_service.get_friends_count(engine, user_id, from_, to)


@router.get("/{user_id}/friends-timeseries")
def friends_timeseries(
    user_id: str,
    from_: str | None = Query(None, alias="from"),
    to: str | None = Query(None),
    engine: Engine = Depends(get_engine),
):
    return analytics_service.get_friends_timeseries(engine, user_id, from_, to)


@router.get("/{user_id}/top-influential-friends")
def top_influential_friends(user_id: str, engine: Engine = Depends(get_engine)):
    """Top three friends by cached network strength."""
    return analytics_service.get_top_influential_friends(engine, user_id)
