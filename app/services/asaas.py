"""Asaas payment gateway integration (PIX charges)."""

import hmac
import logging
from datetime import date
from typing import Any

import httpx

from app.config import settings
from app.errors import ConfigurationError, GatewayError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Asaas request failed"


def _first_error_description(data: dict[str, Any]) -> str | None:
    errors = data.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, dict) and first.get("description"):
            return str(first["description"])
    return None


class AsaasGateway:
    """Thin wrapper around the Asaas v3 REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        webhook_token: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._api_key = settings.asaas_api_key if api_key is None else api_key
        self._base_url = (base_url or settings.asaas_api_url).rstrip("/")
        self._webhook_token = (
            settings.asaas_webhook_token if webhook_token is None else webhook_token
        )
        self._timeout = timeout or settings.asaas_timeout_seconds

    def _headers(self) -> dict[str, str]:
        return {
            "access_token": self._api_key,
            "Content-Type": "application/json",
        }

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def is_webhook_configured(self) -> bool:
        return bool(self._webhook_token)

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one request and return the decoded JSON body.

        Raises ``ConfigurationError`` before any network call when no API
        key is configured, and ``GatewayError`` for transport failures and
        non-2xx answers (using the first ``errors[].description`` Asaas
        returns, when there is one).
        """
        if not self.is_configured():
            raise ConfigurationError("ASAAS_API_KEY is not configured")
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.request(
                    method,
                    f"{self._base_url}{endpoint}",
                    json=json,
                    params=params,
                    headers=self._headers(),
                )
        except httpx.HTTPError as exc:
            logger.error("Asaas %s %s transport error: %s", method, endpoint, exc)
            raise GatewayError("Payment gateway unavailable") from exc

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"data": data}

        if not 200 <= resp.status_code < 300:
            message = _first_error_description(data) or GENERIC_ERROR_MESSAGE
            logger.error(
                "Asaas %s %s failed (%s): %s", method, endpoint, resp.status_code, data
            )
            raise GatewayError(message)
        return data

    # ── Customers ────────────────────────────────────────

    def get_or_create_customer(
        self,
        name: str,
        cpf_cnpj: str,
        email: str | None = None,
        mobile_phone: str | None = None,
    ) -> dict[str, Any]:
        """Return the first customer registered for ``cpf_cnpj``, creating one if none exists."""
        existing = self.request("/customers", params={"cpfCnpj": cpf_cnpj})
        matches = existing.get("data") or []
        if matches:
            return matches[0]

        payload: dict[str, Any] = {"name": name, "cpfCnpj": cpf_cnpj}
        if email:
            payload["email"] = email
        if mobile_phone:
            payload["mobilePhone"] = mobile_phone
        customer = self.request("/customers", "POST", json=payload)
        logger.info("Created Asaas customer: %s", customer.get("id"))
        return customer

    # ── Payments ─────────────────────────────────────────

    def get_pix_qr_code(self, payment_id: str) -> dict[str, Any]:
        return self.request(f"/payments/{payment_id}/pixQrCode")

    def create_pix_payment(
        self,
        customer: str,
        value: float,
        due_date: date | str,
        description: str,
        external_reference: str | None = None,
        billing_type: str = "PIX",
    ) -> dict[str, Any]:
        """Create a PIX charge and attach its QR code.

        A failed QR-code lookup does not undo the charge: the payment comes
        back with ``qrCodeError`` set so the caller can fall back to the
        hosted invoice URL.
        """
        payload: dict[str, Any] = {
            "customer": customer,
            "billingType": billing_type,
            "value": value,
            "dueDate": due_date.isoformat() if isinstance(due_date, date) else due_date,
            "description": description,
        }
        if external_reference is not None:
            payload["externalReference"] = external_reference
        payment = self.request("/payments", "POST", json=payload)
        logger.info("Created Asaas payment: %s", payment.get("id"))

        try:
            qr_code = self.get_pix_qr_code(payment["id"])
        except GatewayError as exc:
            logger.warning(
                "PIX QR code unavailable for payment %s: %s", payment.get("id"), exc
            )
            return {
                **payment,
                "pixCode": None,
                "qrCode": None,
                "qrCodeError": True,
                "errorMessage": exc.message,
            }

        return {
            **payment,
            "pixCode": qr_code.get("payload"),
            "qrCode": qr_code.get("encodedImage"),
            "qrCodeError": False,
            "errorMessage": None,
        }

    # ── Webhook ──────────────────────────────────────────

    def validate_webhook_token(self, token: str | None) -> bool:
        """Compare the ``asaas-access-token`` header with the configured secret."""
        if not self._webhook_token or not token:
            return False
        return hmac.compare_digest(
            self._webhook_token.encode("utf-8"), token.encode("utf-8")
        )


asaas_gateway = AsaasGateway()
