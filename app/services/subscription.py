"""Subscription checkout and Asaas webhook reconciliation."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import (
    GatewayError,
    MissingRequiredField,
    ProfileNotFound,
    ReconciliationFailure,
    Unauthorized,
    WebhookMalformed,
)
from app.metrics import CHECKOUT_PAYMENTS, WEBHOOK_EVENTS
from app.models.profile import Profile, SubscriptionStatus
from app.services.asaas import AsaasGateway, asaas_gateway
from app.services.common import coerce_uuid, make_aware, utcnow
from app.services.entitlement import paid_period_expires_at

logger = logging.getLogger(__name__)

PAYMENT_DUE_DAYS = 3

CONFIRMATION_EVENTS = frozenset({"PAYMENT_CONFIRMED", "PAYMENT_RECEIVED"})
OVERDUE_EVENT = "PAYMENT_OVERDUE"
REFUND_EVENT = "PAYMENT_REFUNDED"

# Valid subscription state transitions
VALID_TRANSITIONS: dict[SubscriptionStatus, set[SubscriptionStatus]] = {
    SubscriptionStatus.trial: {SubscriptionStatus.active},
    SubscriptionStatus.active: {
        SubscriptionStatus.active,
        SubscriptionStatus.past_due,
        SubscriptionStatus.canceled,
    },
    SubscriptionStatus.past_due: {SubscriptionStatus.active, SubscriptionStatus.canceled},
    SubscriptionStatus.canceled: {SubscriptionStatus.active},
}


def _validate_transition(current: SubscriptionStatus, target: SubscriptionStatus) -> None:
    allowed = VALID_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise ValueError(f"Cannot transition from {current.value} to {target.value}")


# ── Checkout ─────────────────────────────────────────────


@dataclass(frozen=True)
class PaymentCreated:
    payment_id: str
    pix_code: str | None
    qr_code: str | None
    invoice_url: str | None
    qr_code_error: bool = False
    error_message: str | None = None


class CheckoutService:
    def __init__(self, db: Session, gateway: AsaasGateway | None = None) -> None:
        self.db = db
        self.gateway = gateway or asaas_gateway

    def create_payment(
        self, subscriber_id: UUID | str | None, now: datetime | None = None
    ) -> PaymentCreated:
        """Open a PIX charge for the subscription plan.

        The charge is not stored locally; ``externalReference`` carries the
        subscriber id so the webhook can find the profile again.
        """
        if subscriber_id is None:
            raise Unauthorized()

        profile = self.db.get(Profile, coerce_uuid(subscriber_id))
        if not profile:
            raise ProfileNotFound()
        if not profile.cpf:
            raise MissingRequiredField(
                "cpf", "CPF not registered. Add your CPF in Settings before subscribing."
            )

        customer = self.gateway.get_or_create_customer(
            name=profile.full_name,
            cpf_cnpj=profile.cpf,
            email=profile.email,
            mobile_phone=profile.phone or None,
        )
        if not customer.get("id"):
            raise GatewayError("Asaas returned a customer without an id")

        now = now or utcnow()
        due_date = (now + timedelta(days=PAYMENT_DUE_DAYS)).date()
        payment = self.gateway.create_pix_payment(
            customer=customer["id"],
            value=settings.plan_price,
            due_date=due_date,
            description=settings.plan_name,
            external_reference=str(profile.id),
        )
        if not payment.get("id"):
            raise GatewayError("Asaas returned a payment without an id")

        qr_code_error = bool(payment.get("qrCodeError"))
        CHECKOUT_PAYMENTS.labels("qr_code_error" if qr_code_error else "created").inc()
        logger.info(
            "Checkout payment created",
            extra={"payment_id": payment.get("id"), "subscriber_id": str(profile.id)},
        )
        return PaymentCreated(
            payment_id=payment["id"],
            pix_code=payment.get("pixCode"),
            qr_code=payment.get("qrCode"),
            invoice_url=payment.get("invoiceUrl"),
            qr_code_error=qr_code_error,
            error_message=payment.get("errorMessage"),
        )


# ── Webhook ──────────────────────────────────────────────


@dataclass(frozen=True)
class WebhookOutcome:
    event: str
    action: str  # activated | past_due | canceled | duplicate | ignored | profile_not_found
    subscriber_id: str | None = None
    payment_id: str | None = None


class WebhookReconciler:
    """Applies Asaas payment events to subscriber entitlements."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def handle(self, payload: dict[str, Any], now: datetime | None = None) -> WebhookOutcome:
        event = str(payload.get("event") or "")
        payment = payload.get("payment")
        if not isinstance(payment, dict):
            payment = {}
        now = now or utcnow()

        if event in CONFIRMATION_EVENTS:
            outcome = self._reconcile(event, payment, now, self._activate)
        elif event == OVERDUE_EVENT:
            outcome = self._reconcile(event, payment, now, self._mark_past_due)
        elif event == REFUND_EVENT:
            outcome = self._reconcile(event, payment, now, self._cancel)
        else:
            outcome = WebhookOutcome(event=event, action="ignored")

        WEBHOOK_EVENTS.labels(event or "unknown", outcome.action).inc()
        logger.info(
            "Processed Asaas webhook: %s -> %s",
            event,
            outcome.action,
            extra={
                "event": event,
                "payment_id": outcome.payment_id,
                "subscriber_id": outcome.subscriber_id,
            },
        )
        return outcome

    def _reconcile(
        self,
        event: str,
        payment: dict[str, Any],
        now: datetime,
        apply: Callable[[Profile, str | None, datetime], str],
    ) -> WebhookOutcome:
        subscriber_ref = payment.get("externalReference")
        if not subscriber_ref:
            WEBHOOK_EVENTS.labels(event, "malformed").inc()
            logger.error("Webhook %s without externalReference", event, extra={"event": event})
            raise WebhookMalformed("Missing externalReference")
        try:
            subscriber_id = coerce_uuid(subscriber_ref)
        except ValueError:
            WEBHOOK_EVENTS.labels(event, "malformed").inc()
            logger.error(
                "Webhook %s with invalid externalReference %r", event, subscriber_ref
            )
            raise WebhookMalformed("Invalid externalReference") from None

        payment_id = str(payment["id"]) if payment.get("id") else None
        try:
            profile = self.db.get(Profile, subscriber_id)
            if not profile:
                logger.warning(
                    "No profile found for externalReference %s",
                    subscriber_ref,
                    extra={"event": event, "payment_id": payment_id},
                )
                return WebhookOutcome(event, "profile_not_found", str(subscriber_id), payment_id)

            action = apply(profile, payment_id, now)
            if action != "duplicate" and action != "ignored":
                self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            WEBHOOK_EVENTS.labels(event, "failed").inc()
            logger.exception(
                "Failed to reconcile webhook %s",
                event,
                extra={
                    "event": event,
                    "payment_id": payment_id,
                    "subscriber_id": str(subscriber_id),
                },
            )
            raise ReconciliationFailure() from exc
        return WebhookOutcome(event, action, str(subscriber_id), payment_id)

    def _activate(self, profile: Profile, payment_id: str | None, now: datetime) -> str:
        if payment_id is not None and profile.subscription_id == payment_id:
            # Already applied: redelivery, the CONFIRMED/RECEIVED pair, or a
            # late confirmation of a charge that has since lapsed or been refunded
            return "duplicate"
        _validate_transition(profile.subscription_status, SubscriptionStatus.active)
        profile.subscription_status = SubscriptionStatus.active
        profile.expires_at = paid_period_expires_at(now)
        profile.subscription_id = payment_id
        self.db.flush()
        logger.info("Subscription activated for profile %s", profile.id)
        return "activated"

    def _mark_past_due(self, profile: Profile, payment_id: str | None, now: datetime) -> str:
        expires_at = make_aware(profile.expires_at)
        if profile.subscription_status != SubscriptionStatus.active or (
            expires_at is not None and expires_at >= now
        ):
            return "ignored"
        _validate_transition(profile.subscription_status, SubscriptionStatus.past_due)
        profile.subscription_status = SubscriptionStatus.past_due
        self.db.flush()
        logger.info("Subscription past due for profile %s", profile.id)
        return "past_due"

    def _cancel(self, profile: Profile, payment_id: str | None, now: datetime) -> str:
        if payment_id is None or profile.subscription_id != payment_id:
            return "ignored"
        if profile.subscription_status not in (
            SubscriptionStatus.active,
            SubscriptionStatus.past_due,
        ):
            return "ignored"
        _validate_transition(profile.subscription_status, SubscriptionStatus.canceled)
        profile.subscription_status = SubscriptionStatus.canceled
        profile.expires_at = now
        self.db.flush()
        logger.info("Subscription canceled for profile %s after refund", profile.id)
        return "canceled"
