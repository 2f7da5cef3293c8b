"""Asaas checkout and webhook API routes."""

import json
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.deps import get_current_subscriber_id, get_db
from app.errors import Unauthorized, WebhookMalformed, WebhookNotConfigured
from app.schemas.billing import PaymentCreatedRead, WebhookAck
from app.services.asaas import asaas_gateway
from app.services.subscription import CheckoutService, WebhookReconciler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/asaas", tags=["asaas"])

WEBHOOK_TOKEN_HEADER = "asaas-access-token"


@router.post("/create-payment", response_model=PaymentCreatedRead)
def create_payment(
    subscriber_id: UUID | None = Depends(get_current_subscriber_id),
    db: Session = Depends(get_db),
):
    return CheckoutService(db, asaas_gateway).create_payment(subscriber_id)


@router.post("/webhook", response_model=WebhookAck)
async def asaas_webhook(request: Request, db: Session = Depends(get_db)):
    """Payment notifications from Asaas, authenticated by the shared access token."""
    if not asaas_gateway.is_webhook_configured():
        logger.error("Rejected Asaas webhook: ASAAS_WEBHOOK_TOKEN is not configured")
        raise WebhookNotConfigured()

    token = request.headers.get(WEBHOOK_TOKEN_HEADER)
    if not asaas_gateway.validate_webhook_token(token):
        raise Unauthorized("Invalid webhook token")

    body = await request.body()
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        raise WebhookMalformed("Invalid JSON") from None
    if not isinstance(payload, dict):
        raise WebhookMalformed("Invalid JSON")

    WebhookReconciler(db).handle(payload)
    return {"received": True}
