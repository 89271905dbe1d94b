"""
bacefook.services.event_log — Append-only Event Journal
========================================================

Every mutation (register, referral, updated, deleted, addfriend, unfriend)
appends one row here inside the caller's transaction.  Rows are never
updated or deleted; ``processed`` is always ``True``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy.orm import Session

from bacefook.database.models import Event, EventType
from bacefook.engine.metrics import as_utc

logger = logging.getLogger(__name__)


def _json_safe(value: Any) -> Any:
    """Convert datetimes (recursively) to ISO-8601 UTC strings."""
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def record_event(
    session: Session,
    event_type: EventType | str,
    data: dict[str, Any],
    *,
    created_at: datetime | None = None,
) -> Event:
    """Append an event to the journal within the current transaction."""
    event = Event(
        type=EventType(event_type).value,
        data=_json_safe(data),
        processed=True,
    )
    if created_at is not None:
        event.created_at = as_utc(created_at)
    session.add(event)
    logger.debug("Event recorded: %s %s", event.type, event.data)
    return event
