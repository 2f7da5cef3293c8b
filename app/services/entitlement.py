"""Subscriber entitlement: trial window, paid window and paywall gating.

Everything here is a pure function of a profile and the current time.
Callers pass the profile explicitly and re-evaluate on every request;
expiry is never written back to the database.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal

from app.models.profile import Profile, SubscriptionStatus
from app.services.common import make_aware, utcnow

TRIAL_DAYS = 7
SUBSCRIPTION_PERIOD_DAYS = 30
TRIAL_PROPERTY_LIMIT = 1

_PAYWALLED_STATUSES = {SubscriptionStatus.past_due, SubscriptionStatus.canceled}


@dataclass(frozen=True)
class EntitlementState:
    status: SubscriptionStatus
    expires_at: datetime | None
    is_expired: bool
    requires_paywall: bool
    days_left: int | None
    view: Literal["dashboard", "paywall"]
    can_add_property: bool | None = None


def trial_expires_at(signup_time: datetime) -> datetime:
    return signup_time + timedelta(days=TRIAL_DAYS)


def paid_period_expires_at(now: datetime) -> datetime:
    return now + timedelta(days=SUBSCRIPTION_PERIOD_DAYS)


def is_expired(profile: Profile, now: datetime | None = None) -> bool:
    """True only for a trial whose window has closed.

    Paid statuses are never reported as expired here, whatever
    ``expires_at`` says; see ``requires_paywall`` for the gate.
    """
    if profile.subscription_status != SubscriptionStatus.trial:
        return False
    expires_at = make_aware(profile.expires_at)
    if expires_at is None:
        return False
    return expires_at < (now or utcnow())


def requires_paywall(profile: Profile, now: datetime | None = None) -> bool:
    if profile.subscription_status in _PAYWALLED_STATUSES:
        return True
    return is_expired(profile, now)


def days_left(profile: Profile, now: datetime | None = None) -> int | None:
    """Whole days until ``expires_at`` (rounded up, never negative)."""
    expires_at = make_aware(profile.expires_at)
    if expires_at is None:
        return None
    remaining = (expires_at - (now or utcnow())).total_seconds()
    return max(0, math.ceil(remaining / 86400))


def can_add_property(
    profile: Profile, property_count: int, now: datetime | None = None
) -> bool:
    if requires_paywall(profile, now):
        return False
    if profile.subscription_status == SubscriptionStatus.trial:
        return property_count < TRIAL_PROPERTY_LIMIT
    return True


def describe(
    profile: Profile,
    now: datetime | None = None,
    property_count: int | None = None,
) -> EntitlementState:
    now = now or utcnow()
    paywall = requires_paywall(profile, now)
    return EntitlementState(
        status=profile.subscription_status,
        expires_at=make_aware(profile.expires_at),
        is_expired=is_expired(profile, now),
        requires_paywall=paywall,
        days_left=days_left(profile, now),
        view="paywall" if paywall else "dashboard",
        can_add_property=(
            None
            if property_count is None
            else can_add_property(profile, property_count, now)
        ),
    )
