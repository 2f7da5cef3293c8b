"""Owner dashboard: rent due-date alerts, headline counts, revenue series."""

import logging
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Literal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.rental import (
    Property,
    Receipt,
    ReceiptKind,
    Tenant,
    TenantStatus,
)

logger = logging.getLogger(__name__)

ALERT_LOOKAHEAD_DAYS = 5
REVENUE_MONTHS = 6
DEFAULT_PROPERTY_LABEL = "Imóvel"
MONTH_LABELS = (
    "Jan", "Fev", "Mar", "Abr", "Mai", "Jun",
    "Jul", "Ago", "Set", "Out", "Nov", "Dez",
)

AlertType = Literal["overdue", "upcoming"]


@dataclass(frozen=True)
class TenantContract:
    tenant_id: UUID | str
    tenant_name: str
    due_day: int
    rent_amount: Decimal
    property_name: str = DEFAULT_PROPERTY_LABEL
    start_date: date | None = None
    status: TenantStatus = TenantStatus.ativo


@dataclass(frozen=True)
class DueAlert:
    id: str
    tenant_id: UUID | str
    tenant_name: str
    property_name: str
    due_date: int
    type: AlertType
    amount: Decimal


@dataclass(frozen=True)
class DashboardStats:
    total_properties: int
    active_tenants: int
    receipts_generated: int


@dataclass(frozen=True)
class RevenuePoint:
    month: str
    total: Decimal


# ── Alert engine ─────────────────────────────────────────


def _add_months(year: int, month: int, months: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def first_due_month(start_date: date, due_day: int) -> tuple[int, int]:
    """(year, month) of the first charge for a contract starting on ``start_date``.

    A contract that starts after its billing day is first charged the
    following month.
    """
    if start_date.day > due_day:
        return _add_months(start_date.year, start_date.month, 1)
    return start_date.year, start_date.month


def classify_due_day(contract: TenantContract, today: date) -> AlertType | None:
    if contract.start_date is not None:
        first_due = first_due_month(contract.start_date, contract.due_day)
        current = (today.year, today.month)
        if current < first_due:
            return None
        if current == first_due and today.day < contract.due_day:
            return None

    if contract.due_day < today.day:
        return "overdue"
    if contract.due_day <= today.day + ALERT_LOOKAHEAD_DAYS:
        return "upcoming"
    return None


def build_due_alerts(
    contracts: Iterable[TenantContract],
    received_tenant_ids: Collection[UUID | str],
    today: date,
) -> list[DueAlert]:
    """Overdue and upcoming rent reminders, overdue first, then by day of month.

    Tenants already holding a payment receipt for the current month are
    skipped. Ordering compares the bare day number, not a full date.
    """
    received = {str(tenant_id) for tenant_id in received_tenant_ids}
    alerts: list[DueAlert] = []
    for contract in contracts:
        if contract.status != TenantStatus.ativo:
            continue
        if str(contract.tenant_id) in received:
            continue
        alert_type = classify_due_day(contract, today)
        if alert_type is None:
            continue
        alerts.append(
            DueAlert(
                id=f"{alert_type}-{contract.tenant_id}",
                tenant_id=contract.tenant_id,
                tenant_name=contract.tenant_name,
                property_name=contract.property_name,
                due_date=contract.due_day,
                type=alert_type,
                amount=contract.rent_amount,
            )
        )
    alerts.sort(key=lambda alert: (alert.type != "overdue", alert.due_date))
    return alerts


# ── Data loading ─────────────────────────────────────────


class DashboardService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def active_contracts(self, owner_id: UUID) -> list[TenantContract]:
        stmt = (
            select(Tenant, Property)
            .join(Property, Tenant.property_id == Property.id)
            .where(Property.owner_id == owner_id, Tenant.status == TenantStatus.ativo)
        )
        return [
            TenantContract(
                tenant_id=tenant.id,
                tenant_name=tenant.full_name,
                due_day=tenant.due_day,
                rent_amount=tenant.rent_amount,
                property_name=prop.label or DEFAULT_PROPERTY_LABEL,
                start_date=tenant.start_date,
                status=tenant.status,
            )
            for tenant, prop in self.db.execute(stmt).all()
        ]

    def tenants_paid_this_month(self, owner_id: UUID, today: date) -> set[UUID]:
        month_start = today.replace(day=1)
        next_year, next_month = _add_months(today.year, today.month, 1)
        stmt = (
            select(Receipt.tenant_id)
            .join(Property, Receipt.property_id == Property.id)
            .where(
                Property.owner_id == owner_id,
                Receipt.kind == ReceiptKind.pagamento,
                Receipt.reference_month >= month_start,
                Receipt.reference_month < date(next_year, next_month, 1),
            )
        )
        return set(self.db.scalars(stmt).all())

    def due_alerts(self, owner_id: UUID, today: date) -> list[DueAlert]:
        alerts = build_due_alerts(
            self.active_contracts(owner_id),
            self.tenants_paid_this_month(owner_id, today),
            today,
        )
        logger.debug("Computed %d due alerts for owner %s", len(alerts), owner_id)
        return alerts

    def property_count(self, owner_id: UUID) -> int:
        stmt = select(func.count(Property.id)).where(Property.owner_id == owner_id)
        return self.db.scalar(stmt) or 0

    def stats(self, owner_id: UUID) -> DashboardStats:
        active_tenants = self.db.scalar(
            select(func.count(Tenant.id))
            .join(Property, Tenant.property_id == Property.id)
            .where(Property.owner_id == owner_id, Tenant.status == TenantStatus.ativo)
        )
        receipts = self.db.scalar(
            select(func.count(Receipt.id))
            .join(Property, Receipt.property_id == Property.id)
            .where(Property.owner_id == owner_id, Receipt.kind == ReceiptKind.pagamento)
        )
        return DashboardStats(
            total_properties=self.property_count(owner_id),
            active_tenants=active_tenants or 0,
            receipts_generated=receipts or 0,
        )

    def revenue(self, owner_id: UUID, today: date) -> list[RevenuePoint]:
        """Payment-receipt totals for the last six months, oldest first."""
        months = [
            _add_months(today.year, today.month, -offset)
            for offset in range(REVENUE_MONTHS - 1, -1, -1)
        ]
        first_year, first_month = months[0]
        stmt = (
            select(Receipt.reference_month, Receipt.amount)
            .join(Property, Receipt.property_id == Property.id)
            .where(
                Property.owner_id == owner_id,
                Receipt.kind == ReceiptKind.pagamento,
                Receipt.reference_month >= date(first_year, first_month, 1),
            )
        )
        totals: dict[tuple[int, int], Decimal] = {month: Decimal("0") for month in months}
        for reference_month, amount in self.db.execute(stmt).all():
            key = (reference_month.year, reference_month.month)
            if key in totals and amount is not None:
                totals[key] += Decimal(amount)
        return [
            RevenuePoint(
                month=f"{MONTH_LABELS[month - 1]}/{str(year)[-2:]}",
                total=totals[(year, month)],
            )
            for year, month in months
        ]
