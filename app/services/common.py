"""Shared service utilities: UUID coercion, timezone normalisation."""
from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from app.config import settings


def coerce_uuid(value: Any) -> uuid.UUID | None:
    """Convert a string or UUID to UUID, or return None."""
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def make_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is timezone-aware (UTC). SQLite doesn't preserve tz info."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def utcnow() -> datetime:
    return datetime.now(UTC)


def business_today(now: datetime | None = None, tz_name: str | None = None) -> date:
    """Calendar date at ``now`` in the owners' timezone (``BUSINESS_TIMEZONE``)."""
    now = make_aware(now) or utcnow()
    return now.astimezone(ZoneInfo(tz_name or settings.business_timezone)).date()
