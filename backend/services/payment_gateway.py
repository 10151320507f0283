"""
Payment processor boundary.

Services talk to `PaymentGateway`; the Stripe implementation is the only one
that imports the SDK. Tests inject their own gateway through
`get_payment_gateway`.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional
import asyncio
import json

import stripe

from core.config import settings
from core.utils.logging import structured_logger


class PaymentGatewayError(Exception):
    """The processor call failed or the gateway is misconfigured"""


class WebhookSignatureError(Exception):
    """Signature header did not match the raw payload"""


@dataclass(frozen=True)
class CreatedPaymentIntent:
    id: str
    client_secret: str
    amount: int
    currency: str
    status: Optional[str] = None


class PaymentGateway(ABC):

    @property
    @abstractmethod
    def configured(self) -> bool:
        ...

    @abstractmethod
    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
        receipt_email: Optional[str] = None,
        shipping: Optional[Dict[str, Any]] = None,
    ) -> CreatedPaymentIntent:
        ...

    @abstractmethod
    def verify_webhook(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """Authenticate the raw body and return the parsed event."""


class StripePaymentGateway(PaymentGateway):
    """Stripe-backed gateway. SDK calls run in a worker thread."""

    # Signatures older than this many seconds are rejected as replays
    SIGNATURE_TOLERANCE = 300

    def __init__(
        self,
        api_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        timeout: Optional[int] = None,
        max_network_retries: Optional[int] = None,
    ):
        self.api_key = settings.STRIPE_SECRET_KEY if api_key is None else api_key
        self.webhook_secret = settings.STRIPE_WEBHOOK_SECRET if webhook_secret is None else webhook_secret
        self.timeout = timeout or settings.STRIPE_TIMEOUT_SECONDS
        self.max_network_retries = (
            settings.STRIPE_MAX_NETWORK_RETRIES if max_network_retries is None else max_network_retries
        )
        stripe.default_http_client = stripe.RequestsClient(timeout=self.timeout)
        stripe.max_network_retries = self.max_network_retries

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
        receipt_email: Optional[str] = None,
        shipping: Optional[Dict[str, Any]] = None,
    ) -> CreatedPaymentIntent:
        if not self.configured:
            raise PaymentGatewayError("Stripe secret key is not configured")

        params: Dict[str, Any] = {
            "amount": amount,
            "currency": currency,
            "automatic_payment_methods": {"enabled": True},
            "metadata": metadata,
        }
        if receipt_email:
            params["receipt_email"] = receipt_email
        if shipping:
            params["shipping"] = shipping

        try:
            intent = await asyncio.to_thread(self._create_intent, params)
        except stripe.StripeError as e:
            structured_logger.error(
                message="Stripe payment intent creation failed",
                metadata={"amount": amount, "currency": currency, "stripe_code": getattr(e, "code", None)},
                exception=e,
            )
            raise PaymentGatewayError(str(e)) from e

        return CreatedPaymentIntent(
            id=intent.id,
            client_secret=intent.client_secret,
            amount=intent.amount,
            currency=intent.currency,
            status=intent.status,
        )

    def _create_intent(self, params: Dict[str, Any]):
        return stripe.PaymentIntent.create(api_key=self.api_key, **params)

    def verify_webhook(self, payload: bytes, signature: str) -> Dict[str, Any]:
        if not self.webhook_secret:
            raise PaymentGatewayError("Stripe webhook secret is not configured")

        # The signature covers the exact bytes received; decode without touching them.
        try:
            stripe.WebhookSignature.verify_header(
                payload.decode("utf-8"),
                signature,
                self.webhook_secret,
                tolerance=self.SIGNATURE_TOLERANCE,
            )
        except (stripe.SignatureVerificationError, UnicodeDecodeError) as e:
            raise WebhookSignatureError(str(e)) from e

        try:
            event = json.loads(payload)
        except ValueError as e:
            raise WebhookSignatureError("Invalid payload") from e
        if not isinstance(event, dict):
            raise WebhookSignatureError("Invalid payload")
        return event


@lru_cache(maxsize=1)
def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency; overridden in tests."""
    return StripePaymentGateway()
