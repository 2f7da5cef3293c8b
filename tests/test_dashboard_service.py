"""Tests for DashboardService queries."""

from datetime import UTC, date, datetime
from decimal import Decimal

from app.models.rental import ReceiptKind, TenantStatus
from app.services.common import business_today
from app.services.dashboard import DashboardService

TODAY = date(2026, 3, 20)


def test_due_alerts_for_owner(db_session, profile, rental_factory, receipt_factory):
    overdue = rental_factory(profile, due_day=15, tenant_name="Overdue")
    paid = rental_factory(profile, due_day=12, tenant_name="Paid")
    rental_factory(profile, due_day=23, tenant_name="Upcoming", title="Sala 4")
    rental_factory(profile, due_day=5, tenant_name="Gone", status=TenantStatus.inativo)
    receipt_factory(paid, date(2026, 3, 1))

    alerts = DashboardService(db_session).due_alerts(profile.id, TODAY)

    assert [(a.tenant_name, a.type) for a in alerts] == [
        ("Overdue", "overdue"),
        ("Upcoming", "upcoming"),
    ]
    assert alerts[0].tenant_id == overdue.id
    assert alerts[0].property_name == "Rua Augusta, 100"
    assert alerts[1].property_name == "Sala 4"


def test_receipt_from_last_month_does_not_count(
    db_session, profile, rental_factory, receipt_factory
):
    tenant = rental_factory(profile, due_day=15)
    receipt_factory(tenant, date(2026, 2, 1))

    alerts = DashboardService(db_session).due_alerts(profile.id, TODAY)

    assert [a.type for a in alerts] == ["overdue"]


def test_residency_receipt_does_not_count_as_payment(
    db_session, profile, rental_factory, receipt_factory
):
    tenant = rental_factory(profile, due_day=15)
    receipt_factory(tenant, date(2026, 3, 1), kind=ReceiptKind.residencia)

    alerts = DashboardService(db_session).due_alerts(profile.id, TODAY)

    assert len(alerts) == 1


def test_alerts_scoped_to_owner(db_session, profile, profile_factory, rental_factory):
    other = profile_factory()
    rental_factory(other, due_day=15)

    assert DashboardService(db_session).due_alerts(profile.id, TODAY) == []


def test_stats(db_session, profile, rental_factory, receipt_factory):
    first = rental_factory(profile)
    rental_factory(profile, status=TenantStatus.inativo)
    receipt_factory(first, date(2026, 2, 1))
    receipt_factory(first, date(2026, 3, 1))
    receipt_factory(first, date(2026, 3, 1), kind=ReceiptKind.residencia)

    stats = DashboardService(db_session).stats(profile.id)

    assert stats.total_properties == 2
    assert stats.active_tenants == 1
    assert stats.receipts_generated == 2


def test_revenue_series(db_session, profile, rental_factory, receipt_factory):
    tenant = rental_factory(profile, rent_amount=Decimal("1000.00"))
    receipt_factory(tenant, date(2025, 9, 1))  # outside the window
    receipt_factory(tenant, date(2026, 1, 1), amount=Decimal("950.00"))
    receipt_factory(tenant, date(2026, 3, 1))
    receipt_factory(tenant, date(2026, 3, 1), amount=Decimal("200.00"))

    revenue = DashboardService(db_session).revenue(profile.id, TODAY)

    assert [point.month for point in revenue] == [
        "Out/25",
        "Nov/25",
        "Dez/25",
        "Jan/26",
        "Fev/26",
        "Mar/26",
    ]
    totals = {point.month: point.total for point in revenue}
    assert totals["Jan/26"] == Decimal("950.00")
    assert totals["Mar/26"] == Decimal("1200.00")
    assert totals["Out/25"] == Decimal("0")


def test_business_today_uses_configured_timezone():
    late_evening = datetime(2026, 3, 31, 23, 30, tzinfo=UTC)

    assert business_today(late_evening) == date(2026, 3, 31)
    assert business_today(datetime(2026, 4, 1, 2, 0, tzinfo=UTC)) == date(2026, 3, 31)
    assert business_today(datetime(2026, 4, 1, 2, 0, tzinfo=UTC), "UTC") == date(2026, 4, 1)
