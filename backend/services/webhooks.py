"""
Webhook Service - Stripe webhook handling with signature verification

Events are verified against the raw request body, then reconciled into
Order.payment_status / Order.status through conditional UPDATEs, so
duplicate and out-of-order deliveries cannot move an order backwards.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from core.exceptions import PaymentConfigurationException, WebhookVerificationException
from core.utils.logging import structured_logger
from models.orders import Order, OrderStatus, PaymentStatus
from services.discounts import DiscountService
from services.payment_gateway import PaymentGateway, PaymentGatewayError, WebhookSignatureError

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"
PAYMENT_CANCELED = "payment_intent.canceled"
CHARGE_REFUNDED = "charge.refunded"


@dataclass(frozen=True)
class PaymentTransition:
    allowed_from: Tuple[str, ...]
    payment_status: str
    status: str


PAYMENT_TRANSITIONS: Dict[str, PaymentTransition] = {
    # A failed attempt can be retried on the same intent and still succeed.
    PAYMENT_SUCCEEDED: PaymentTransition(
        allowed_from=(PaymentStatus.PENDING, PaymentStatus.FAILED),
        payment_status=PaymentStatus.PAID,
        status=OrderStatus.PROCESSING,
    ),
    PAYMENT_FAILED: PaymentTransition(
        allowed_from=(PaymentStatus.PENDING,),
        payment_status=PaymentStatus.FAILED,
        status=OrderStatus.CANCELLED,
    ),
    PAYMENT_CANCELED: PaymentTransition(
        allowed_from=(PaymentStatus.PENDING,),
        payment_status=PaymentStatus.FAILED,
        status=OrderStatus.CANCELLED,
    ),
    # Refunds may arrive before the success event; refunded is terminal.
    CHARGE_REFUNDED: PaymentTransition(
        allowed_from=(PaymentStatus.PAID, PaymentStatus.PENDING),
        payment_status=PaymentStatus.REFUNDED,
        status=OrderStatus.REFUNDED,
    ),
}


def next_payment_state(current_payment_status: str, event_type: str) -> Optional[Tuple[str, str]]:
    """(payment_status, status) the event moves an order to, or None for no change"""
    transition = PAYMENT_TRANSITIONS.get(event_type)
    if transition is None or current_payment_status not in transition.allowed_from:
        return None
    return transition.payment_status, transition.status


def extract_payment_intent_id(event_type: str, data_object: Dict[str, Any]) -> Optional[str]:
    if event_type == CHARGE_REFUNDED:
        intent = data_object.get("payment_intent")
        # Expanded objects carry the id inside
        if isinstance(intent, dict):
            return intent.get("id")
        return intent
    return data_object.get("id")


class WebhookService:
    """
    Verifies processor webhooks and reconciles order payment state
    """

    def __init__(self, db: AsyncSession, gateway: PaymentGateway):
        self.db = db
        self.gateway = gateway
        self.discount_service = DiscountService(db)

    def verify_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """Authenticate the untouched request body. Nothing is read from the DB here."""
        if not signature:
            structured_logger.warning(
                message="Webhook rejected: missing signature header",
                endpoint="/webhooks/payment",
            )
            raise WebhookVerificationException()

        try:
            return self.gateway.verify_webhook(payload, signature)
        except WebhookSignatureError as e:
            structured_logger.warning(
                message="Webhook rejected: signature verification failed",
                endpoint="/webhooks/payment",
                exception=e,
            )
            raise WebhookVerificationException() from e
        except PaymentGatewayError as e:
            structured_logger.error(
                message="Webhook secret is not configured",
                endpoint="/webhooks/payment",
                exception=e,
            )
            raise PaymentConfigurationException() from e

    async def handle_webhook(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        event = self.verify_event(payload, signature)
        await self.process_event(event)
        return {"received": True}

    async def process_event(self, event: Dict[str, Any]) -> bool:
        """Apply one verified event. Returns True when an order changed state."""
        event_id = event.get("id")
        event_type = event.get("type", "")
        data_object = (event.get("data") or {}).get("object") or {}

        transition = PAYMENT_TRANSITIONS.get(event_type)
        if transition is None:
            structured_logger.info(
                message="Unhandled webhook event type",
                metadata={"event_id": event_id, "event_type": event_type},
            )
            return False

        payment_intent_id = extract_payment_intent_id(event_type, data_object)
        if not payment_intent_id:
            structured_logger.info(
                message="Webhook event has no payment intent",
                metadata={"event_id": event_id, "event_type": event_type},
            )
            return False

        applied = await self._apply_transition(payment_intent_id, transition)
        structured_logger.info(
            message="Webhook event applied" if applied else "Webhook event was a no-op",
            metadata={
                "event_id": event_id,
                "event_type": event_type,
                "payment_intent_id": payment_intent_id,
            },
        )

        if applied and event_type == PAYMENT_SUCCEEDED:
            await self._redeem_discount(data_object, payment_intent_id)

        return applied

    async def _apply_transition(self, payment_intent_id: str, transition: PaymentTransition) -> bool:
        result = await self.db.execute(
            update(Order)
            .where(
                Order.payment_intent_id == payment_intent_id,
                Order.payment_status.in_(transition.allowed_from),
            )
            .values(payment_status=transition.payment_status, status=transition.status)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def _redeem_discount(self, data_object: Dict[str, Any], payment_intent_id: str) -> None:
        code = (data_object.get("metadata") or {}).get("discount_code")
        if not code:
            return
        try:
            await self.discount_service.redeem_code(code)
        except Exception as e:
            # The payment already succeeded; a lost redemption must not fail the webhook.
            await self.db.rollback()
            structured_logger.error(
                message="Discount redemption failed",
                metadata={"code": code, "payment_intent_id": payment_intent_id},
                exception=e,
            )
