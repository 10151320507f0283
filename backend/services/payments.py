# Payment service
# Turns a cart snapshot into a processor payment intent

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Dict, Any
from core.config import settings
from core.exceptions import (
    BadRequestException,
    ExternalServiceException,
    PaymentConfigurationException,
)
from core.utils.logging import structured_logger
from schemas.checkout import CreatePaymentIntentRequest, ShippingAddress
from services.discounts import DiscountService
from services.payment_gateway import CreatedPaymentIntent, PaymentGateway, PaymentGatewayError
from services.pricing import ComputedTotals, calculate_subtotal, calculate_totals, round_money


class PaymentService:
    """Checkout payment intents"""

    def __init__(self, db: AsyncSession, gateway: PaymentGateway):
        self.db = db
        self.gateway = gateway
        self.discount_service = DiscountService(db)

    @staticmethod
    def build_metadata(
        request: CreatePaymentIntentRequest,
        totals: ComputedTotals,
        discount_code: Optional[str],
    ) -> Dict[str, str]:
        """Processor metadata values must be strings"""
        address = request.shipping_address
        return {
            "customer_email": address.email or "",
            "customer_name": address.full_name,
            "items_count": str(len(request.items)),
            "subtotal": str(round_money(totals.subtotal)),
            "shipping": str(round_money(totals.shipping_cost)),
            "tax": str(totals.tax),
            "discount": str(round_money(totals.discount_value)),
            "discount_code": discount_code or "",
        }

    @staticmethod
    def build_shipping(address: ShippingAddress) -> Optional[Dict[str, Any]]:
        if not address.full_name or not address.address1:
            return None
        shipping = {
            "name": address.full_name,
            "address": {
                "line1": address.address1,
                "line2": address.address2,
                "city": address.city,
                "state": address.state,
                "postal_code": address.postal_code,
                "country": address.country,
            },
        }
        if address.phone:
            shipping["phone"] = address.phone
        return shipping

    async def create_checkout_intent(self, request: CreatePaymentIntentRequest) -> Dict[str, Any]:
        """
        Price the cart server-side and open a payment intent for the total.

        Returns the client secret the storefront needs to confirm payment.
        """
        if not self.gateway.configured:
            raise PaymentConfigurationException()

        if not request.items:
            raise BadRequestException(message="No items in cart", field="items")

        discount = await self.discount_service.resolve_checkout_discount(
            code=request.discount_code,
            client_amount=request.discount_amount,
            subtotal=calculate_subtotal(request.items),
            shipping_cost=request.shipping_cost,
        )
        totals = calculate_totals(
            request.items,
            shipping_cost=discount.shipping_cost,
            discount_value=discount.amount,
        )
        metadata = self.build_metadata(request, totals, discount.code)

        try:
            intent: CreatedPaymentIntent = await self.gateway.create_payment_intent(
                amount=totals.amount_in_cents,
                currency=settings.CURRENCY,
                metadata=metadata,
                receipt_email=request.shipping_address.email or None,
                shipping=self.build_shipping(request.shipping_address),
            )
        except PaymentGatewayError as e:
            structured_logger.error(
                message="Failed to create payment intent",
                endpoint="/checkout/create-payment-intent",
                metadata={"amount_cents": totals.amount_in_cents, "items_count": metadata["items_count"]},
                exception=e,
            )
            raise ExternalServiceException(
                message="Failed to create payment intent",
                service="stripe",
                status_code=500,
            ) from e

        structured_logger.info(
            message="Payment intent created",
            endpoint="/checkout/create-payment-intent",
            metadata={
                "payment_intent_id": intent.id,
                "amount_cents": totals.amount_in_cents,
                "discount_code": discount.code,
            },
        )

        return {
            "clientSecret": intent.client_secret,
            "paymentIntentId": intent.id,
            "amount": float(round_money(totals.total)),
        }
