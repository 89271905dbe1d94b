"""
bacefook.services.referral_service — Two-level Referral Points
===============================================================

On registration:
  1. The new user gets 1 point (row created; must not already exist).
  2. The direct referrer gets +1.
  3. The referrer's own referrer (depth 2) gets +1.

Nothing beyond depth 2 is rewarded.  Increments go through a single
``INSERT … ON CONFLICT DO UPDATE`` so concurrent registrations under the
same ancestor cannot lose an update.
"""

from __future__ import annotations

import logging

from sqlalchemy import DateTime, bindparam, select, text
from sqlalchemy.orm import Session

from bacefook.database.models import ReferralPoint, User, utcnow

logger = logging.getLogger(__name__)

JOIN_BONUS = 1
REFERRAL_BONUS = 1

_INCREMENT_SQL = text("""
    INSERT INTO referral_points (user_id, points, updated_at)
    VALUES (:user_id, :amount, :now)
    ON CONFLICT (user_id)
    DO UPDATE SET points = referral_points.points + :amount, updated_at = :now
""").bindparams(bindparam("now", type_=DateTime(timezone=True)))


def increment_points(session: Session, user_id: str, amount: int = REFERRAL_BONUS) -> None:
    """Atomically add *amount* points to *user_id*, creating the row if absent."""
    session.execute(
        _INCREMENT_SQL,
        {"user_id": user_id, "amount": amount, "now": utcnow()},
    )


def get_points(session: Session, user_id: str) -> int:
    """Current points for *user_id* (0 when the user never earned any)."""
    points = session.scalar(
        select(ReferralPoint.points).where(ReferralPoint.user_id == user_id)
    )
    return points or 0


def award_referral_points(
    session: Session,
    new_user_id: str,
    referrer_id: str | None = None,
) -> None:
    """Grant join and referral points for a freshly registered user.

    Raises ``IntegrityError`` if *new_user_id* already has a points row:
    registration happens exactly once per user.
    """
    session.add(ReferralPoint(user_id=new_user_id, points=JOIN_BONUS))
    session.flush()

    if not referrer_id:
        logger.info("Referral points: %s +%d (join)", new_user_id, JOIN_BONUS)
        return

    increment_points(session, referrer_id)

    grand_referrer_id = session.scalar(
        select(User.referred_by_id).where(User.id == referrer_id)
    )
    if grand_referrer_id:
        increment_points(session, grand_referrer_id)

    logger.info(
        "Referral points: %s +%d (join), %s +%d (direct), %s",
        new_user_id, JOIN_BONUS, referrer_id, REFERRAL_BONUS,
        f"{grand_referrer_id} +{REFERRAL_BONUS} (depth 2)" if grand_referrer_id else "no depth-2 referrer",
    )
