"""
Bacefook — Social-Graph REST Backend
=====================================
User accounts, bidirectional friendships and referral chains, plus the
derived signals built on top of them: network strength, multi-level
referral points, leaderboards and daily activity time-series.

Package layout::

    bacefook/
    ├── config.py          # YAML → typed Python config
    ├── errors.py          # NotFound / Conflict / Validation outcomes
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session helper
    │   └── models.py      # User, friendships, ReferralPoint, NetworkStrength, Event
    ├── engine/
    │   └── metrics.py     # Pure formulas: strength, pagination, day buckets, windows
    ├── services/
    │   ├── profiles.py            # Profile / summary response shaping
    │   ├── event_log.py           # Append-only event journal
    │   ├── referral_service.py    # 2-level referral point propagation
    │   ├── network_strength.py    # Strength recompute + upsert
    │   ├── user_service.py        # Registration, profile update, deletion
    │   ├── friendship_service.py  # Symmetric add/remove friend, friend pages
    │   └── analytics_service.py   # Listing, graph lookup, leaderboards, series
    └── api/
        ├── __main__.py    # python -m bacefook.api (uvicorn)
        ├── main.py        # FastAPI app + error mapping
        ├── deps.py        # Engine / config dependencies
        └── routes/        # /users REST endpoints
"""

__version__ = "0.1.0"
