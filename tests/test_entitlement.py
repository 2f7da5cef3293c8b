"""Tests for trial/paid entitlement evaluation."""

from datetime import UTC, datetime, timedelta

from app.models.profile import Profile, SubscriptionStatus
from app.services import entitlement

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


def _profile(status: SubscriptionStatus, expires_at: datetime | None) -> Profile:
    return Profile(
        full_name="Lia Rocha",
        email="lia@example.com",
        subscription_status=status,
        expires_at=expires_at,
    )


class TestIsExpired:
    def test_trial_past_expiry_is_expired(self):
        profile = _profile(SubscriptionStatus.trial, NOW - timedelta(seconds=1))
        assert entitlement.is_expired(profile, NOW) is True

    def test_trial_before_expiry_is_not_expired(self):
        profile = _profile(SubscriptionStatus.trial, NOW + timedelta(days=2))
        assert entitlement.is_expired(profile, NOW) is False

    def test_trial_expiring_exactly_now_is_not_expired(self):
        profile = _profile(SubscriptionStatus.trial, NOW)
        assert entitlement.is_expired(profile, NOW) is False

    def test_trial_without_expiry_is_not_expired(self):
        profile = _profile(SubscriptionStatus.trial, None)
        assert entitlement.is_expired(profile, NOW) is False

    def test_active_with_past_expiry_is_not_expired(self):
        profile = _profile(SubscriptionStatus.active, NOW - timedelta(days=40))
        assert entitlement.is_expired(profile, NOW) is False

    def test_naive_expiry_is_treated_as_utc(self):
        naive = (NOW - timedelta(hours=1)).replace(tzinfo=None)
        profile = _profile(SubscriptionStatus.trial, naive)
        assert entitlement.is_expired(profile, NOW) is True

    def test_evaluation_is_not_persisted(self):
        expires_at = NOW - timedelta(days=1)
        profile = _profile(SubscriptionStatus.trial, expires_at)
        entitlement.is_expired(profile, NOW)
        assert profile.subscription_status == SubscriptionStatus.trial
        assert profile.expires_at == expires_at


class TestPaywall:
    def test_past_due_requires_paywall(self):
        profile = _profile(SubscriptionStatus.past_due, NOW + timedelta(days=1))
        assert entitlement.requires_paywall(profile, NOW) is True

    def test_canceled_requires_paywall(self):
        profile = _profile(SubscriptionStatus.canceled, NOW)
        assert entitlement.requires_paywall(profile, NOW) is True

    def test_active_does_not_require_paywall(self):
        profile = _profile(SubscriptionStatus.active, NOW + timedelta(days=10))
        assert entitlement.requires_paywall(profile, NOW) is False

    def test_expired_trial_requires_paywall(self):
        profile = _profile(SubscriptionStatus.trial, NOW - timedelta(days=1))
        assert entitlement.requires_paywall(profile, NOW) is True


class TestPropertyLimit:
    def test_trial_may_add_first_property(self):
        profile = _profile(SubscriptionStatus.trial, NOW + timedelta(days=3))
        assert entitlement.can_add_property(profile, 0, NOW) is True

    def test_trial_limited_to_one_property(self):
        profile = _profile(SubscriptionStatus.trial, NOW + timedelta(days=3))
        assert entitlement.can_add_property(profile, 1, NOW) is False

    def test_active_is_unlimited(self):
        profile = _profile(SubscriptionStatus.active, NOW + timedelta(days=3))
        assert entitlement.can_add_property(profile, 25, NOW) is True

    def test_paywalled_cannot_add(self):
        profile = _profile(SubscriptionStatus.canceled, NOW)
        assert entitlement.can_add_property(profile, 0, NOW) is False


class TestDescribe:
    def test_trial_window_is_seven_days(self):
        assert entitlement.trial_expires_at(NOW) == NOW + timedelta(days=7)

    def test_days_left_rounds_up(self):
        profile = _profile(SubscriptionStatus.trial, NOW + timedelta(days=2, hours=1))
        assert entitlement.days_left(profile, NOW) == 3

    def test_days_left_never_negative(self):
        profile = _profile(SubscriptionStatus.trial, NOW - timedelta(days=5))
        assert entitlement.days_left(profile, NOW) == 0

    def test_describe_expired_trial(self):
        profile = _profile(SubscriptionStatus.trial, NOW - timedelta(days=1))
        state = entitlement.describe(profile, NOW, property_count=0)
        assert state.is_expired is True
        assert state.requires_paywall is True
        assert state.view == "paywall"
        assert state.can_add_property is False

    def test_describe_active(self):
        profile = _profile(SubscriptionStatus.active, NOW + timedelta(days=30))
        state = entitlement.describe(profile, NOW)
        assert state.view == "dashboard"
        assert state.days_left == 30
        assert state.can_add_property is None
