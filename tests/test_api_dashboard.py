"""API tests for the dashboard and subscription routes."""

import uuid
from datetime import UTC, date, datetime, timedelta
from unittest.mock import patch

import pytest

from app.models.profile import SubscriptionStatus

NOW = datetime(2026, 3, 20, 13, 0, tzinfo=UTC)


@pytest.fixture()
def frozen_now():
    with patch("app.api.dashboard.utcnow", return_value=NOW):
        yield NOW


def test_alerts(client, profile, auth_headers, rental_factory, receipt_factory, frozen_now):
    overdue = rental_factory(profile, due_day=15, tenant_name="Júlia")
    paid = rental_factory(profile, due_day=10)
    receipt_factory(paid, date(2026, 3, 1))

    resp = client.get("/api/dashboard/alerts", headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json() == [
        {
            "id": f"overdue-{overdue.id}",
            "tenantId": str(overdue.id),
            "tenantName": "Júlia",
            "propertyName": "Rua Augusta, 100",
            "dueDate": 15,
            "type": "overdue",
            "amount": "1500.00",
        }
    ]


def test_dashboard(client, profile, auth_headers, rental_factory, receipt_factory, frozen_now):
    tenant = rental_factory(profile, due_day=23)
    receipt_factory(tenant, date(2026, 2, 1))

    resp = client.get("/api/dashboard", headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["stats"] == {
        "totalProperties": 1,
        "activeTenants": 1,
        "receiptsGenerated": 1,
    }
    assert [point["month"] for point in body["revenue"]][-2:] == ["Fev/26", "Mar/26"]
    assert [alert["type"] for alert in body["alerts"]] == ["upcoming"]
    assert body["entitlement"]["status"] == "trial"
    assert body["entitlement"]["canAddProperty"] is False


def test_dashboard_not_gated_by_paywall(
    client, profile_factory, token_factory, rental_factory, frozen_now
):
    profile = profile_factory(
        subscription_status=SubscriptionStatus.trial,
        expires_at=NOW - timedelta(days=2),
    )
    rental_factory(profile, due_day=15)
    headers = {"Authorization": f"Bearer {token_factory(str(profile.id))}"}

    resp = client.get("/api/dashboard", headers=headers)

    assert resp.status_code == 200
    assert resp.json()["entitlement"]["view"] == "paywall"
    assert len(resp.json()["alerts"]) == 1


def test_dashboard_requires_authentication(client):
    assert client.get("/api/dashboard").status_code == 401
    assert client.get("/api/dashboard/alerts").status_code == 401


def test_subscription_for_active_subscriber(client, profile_factory, token_factory):
    profile = profile_factory(
        subscription_status=SubscriptionStatus.active,
        subscription_id="pay_1",
        expires_at=datetime.now(UTC) + timedelta(days=10, hours=1),
    )
    headers = {"Authorization": f"Bearer {token_factory(str(profile.id))}"}

    resp = client.get("/api/subscription", headers=headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "active"
    assert body["isExpired"] is False
    assert body["requiresPaywall"] is False
    assert body["view"] == "dashboard"
    assert body["daysLeft"] == 11
    assert body["canAddProperty"] is True


def test_subscription_for_expired_trial(client, profile_factory, token_factory):
    profile = profile_factory(expires_at=datetime.now(UTC) - timedelta(minutes=1))
    headers = {"Authorization": f"Bearer {token_factory(str(profile.id))}"}

    body = client.get("/api/subscription", headers=headers).json()

    assert body["isExpired"] is True
    assert body["view"] == "paywall"
    assert body["daysLeft"] == 0


def test_subscription_unknown_profile(client, token_factory):
    headers = {"Authorization": f"Bearer {token_factory(str(uuid.uuid4()))}"}

    with patch("app.services.profile.time.sleep") as sleep:
        resp = client.get("/api/subscription", headers=headers)

    assert resp.status_code == 404
    assert sleep.call_count == 2


def test_alerts_use_owner_calendar_at_month_end(
    client, profile, auth_headers, rental_factory, receipt_factory
):
    # 01:00 UTC on 1 April is still 31 March in São Paulo
    late_evening = datetime(2026, 4, 1, 1, 0, tzinfo=UTC)
    paid = rental_factory(profile, due_day=2)
    receipt_factory(paid, date(2026, 3, 1))

    with patch("app.api.dashboard.utcnow", return_value=late_evening):
        resp = client.get("/api/dashboard/alerts", headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json() == []
