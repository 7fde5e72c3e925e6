"""
Razorpay Orders API client.

Handles:
    1. Order creation (POST /orders) for a quoted amount in minor units
    2. Error normalisation — Razorpay error bodies become GatewayError with
       the gateway's own `description` and `reason`

Credentials are injected through GatewayConfig at construction time; the
client never reads global settings.
"""
import logging
from dataclasses import dataclass, field

import httpx

from domain.constants import PAYMENT_CANCELLED_REASON

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayConfig:
    key_id: str
    key_secret: str = field(repr=False)
    api_base: str = "https://api.razorpay.com/v1"
    timeout_seconds: float = 15.0

    @classmethod
    def from_settings(cls, settings) -> "GatewayConfig":
        return cls(
            key_id=settings.razorpay_key_id,
            key_secret=settings.razorpay_secret.get_secret_value(),
            api_base=settings.razorpay_api_base,
            timeout_seconds=settings.razorpay_timeout_seconds,
        )


class GatewayError(Exception):
    """Raised when the gateway rejects a request or cannot be reached."""

    def __init__(self, description: str | None, code: str | None = None, reason: str | None = None):
        super().__init__(description or "Payment gateway error")
        self.description = description
        self.code = code
        self.reason = reason

    @property
    def is_cancelled(self) -> bool:
        return self.reason == PAYMENT_CANCELLED_REASON


class RazorpayClient:
    """Thin async wrapper around the Razorpay Orders endpoint."""

    def __init__(self, config: GatewayConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.api_base,
            auth=(self.config.key_id, self.config.key_secret),
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        )

    async def create_order(self, amount_minor: int, currency: str, receipt: str) -> dict:
        """
        Create a gateway order.

        Args:
            amount_minor: Amount in the smallest currency unit (paise)
            currency: ISO currency code, e.g. "INR"
            receipt: Our receipt token for traceability

        Returns:
            dict: The gateway order as returned by Razorpay (id, amount, currency, receipt, status, ...)

        Raises:
            GatewayError on any non-2xx response or transport failure
        """
        if not self.config.key_id or not self.config.key_secret:
            raise GatewayError("Payment gateway is not configured")

        payload = {"amount": amount_minor, "currency": currency, "receipt": receipt}
        try:
            async with self._client() as client:
                response = await client.post("/orders", json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Razorpay request failed: {e.__class__.__name__}: {e}")
            raise GatewayError("Could not reach payment gateway") from e

        if response.is_success:
            order = response.json()
            logger.info(f"Razorpay order created: {order.get('id')} ({amount_minor} {currency}, {receipt})")
            return order

        raise self._error_from_response(response)

    @staticmethod
    def _error_from_response(response: httpx.Response) -> GatewayError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        err = body.get("error") if isinstance(body, dict) else None
        err = err if isinstance(err, dict) else {}

        logger.warning(
            f"Razorpay rejected order: HTTP {response.status_code} "
            f"code={err.get('code')} reason={err.get('reason')}"
        )
        return GatewayError(
            description=err.get("description"),
            code=err.get("code"),
            reason=err.get("reason"),
        )
