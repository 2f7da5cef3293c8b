from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.profile import SubscriptionStatus

# ── Checkout ─────────────────────────────────────────────


class PaymentCreatedRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
    payment_id: str = Field(serialization_alias="paymentId")
    pix_code: str | None = Field(default=None, serialization_alias="pixCode")
    qr_code: str | None = Field(default=None, serialization_alias="qrCode")
    invoice_url: str | None = Field(default=None, serialization_alias="invoiceUrl")
    qr_code_error: bool = Field(default=False, serialization_alias="qrCodeError")
    error_message: str | None = Field(default=None, serialization_alias="errorMessage")


# ── Webhook ──────────────────────────────────────────────


class WebhookAck(BaseModel):
    received: bool = True


# ── Entitlement ──────────────────────────────────────────


class EntitlementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, use_enum_values=True)
    status: SubscriptionStatus
    expires_at: datetime | None = Field(default=None, serialization_alias="expiresAt")
    is_expired: bool = Field(serialization_alias="isExpired")
    requires_paywall: bool = Field(serialization_alias="requiresPaywall")
    days_left: int | None = Field(default=None, serialization_alias="daysLeft")
    view: Literal["dashboard", "paywall"]
    can_add_property: bool | None = Field(default=None, serialization_alias="canAddProperty")
