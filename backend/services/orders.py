# Order service
# Creation with server-side totals, lookup and admin listing

import secrets
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from models.orders import Order, OrderItem, OrderStatus, PaymentStatus
from schemas.orders import OrderCreate
from services.discounts import DiscountService
from services.pricing import calculate_subtotal, calculate_totals, round_money, to_decimal
from core.config import settings
from core.exceptions import BadRequestException, ConflictException, NotFoundException
from core.utils.logging import structured_logger
from uuid import UUID
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple


class OrderService:
    """Storefront orders. Payment state is owned by webhook reconciliation."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.discount_service = DiscountService(db)

    @staticmethod
    def generate_order_number(now: Optional[datetime] = None) -> str:
        """KK-YYYYMMDD-XXXXXX, six uppercase hex characters of randomness"""
        now = now or datetime.now(timezone.utc)
        return f"{settings.ORDER_NUMBER_PREFIX}-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"

    async def _unique_order_number(self) -> str:
        for _ in range(5):
            candidate = self.generate_order_number()
            result = await self.db.execute(
                select(Order.id).where(Order.order_number == candidate)
            )
            if result.first() is None:
                return candidate
        raise ConflictException(message="Could not allocate an order number")

    async def create_order(self, data: OrderCreate) -> Order:
        if not data.items:
            raise BadRequestException(message="No items in cart", field="items")

        if data.payment_intent_id:
            existing = await self.get_by_payment_intent(data.payment_intent_id)
            if existing:
                raise BadRequestException(
                    message="An order already exists for this payment",
                    field="payment_intent_id",
                )

        subtotal = calculate_subtotal(data.items)
        discount = await self.discount_service.resolve_checkout_discount(
            code=data.discount_code,
            client_amount=data.discount,
            subtotal=subtotal,
            shipping_cost=data.shipping_cost,
        )
        totals = calculate_totals(
            data.items,
            shipping_cost=discount.shipping_cost,
            discount_value=discount.amount,
        )

        order = Order(
            order_number=await self._unique_order_number(),
            customer_email=data.customer_email,
            customer_name=data.customer_name,
            customer_phone=data.customer_phone,
            shipping_address_line1=data.shipping_address_line1,
            shipping_address_line2=data.shipping_address_line2,
            shipping_city=data.shipping_city,
            shipping_state=data.shipping_state,
            shipping_postal_code=data.shipping_postal_code,
            shipping_country=data.shipping_country.upper(),
            subtotal=round_money(totals.subtotal),
            shipping_cost=round_money(totals.shipping_cost),
            tax=totals.tax,
            discount=round_money(totals.discount_value),
            total=round_money(totals.total),
            discount_code=discount.code,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            payment_intent_id=data.payment_intent_id,
            shipping_method=data.shipping_method,
            notes=data.notes,
        )
        order.items = [
            OrderItem(
                product_id=item.product_id,
                variant_id=item.variant_id,
                title=item.title,
                variant_title=item.variant_title,
                quantity=item.quantity,
                price=item.price,
                total=round_money(to_decimal(item.price) * item.quantity),
            )
            for item in data.items
        ]

        self.db.add(order)
        await self.db.commit()
        await self.db.refresh(order)

        structured_logger.info(
            message="Order created",
            metadata={
                "order_number": order.order_number,
                "total": str(order.total),
                "payment_intent_id": order.payment_intent_id,
            },
        )
        return order

    async def get_order(self, identifier: str) -> Order:
        """Fetch by UUID or by order number"""
        query = select(Order)
        try:
            query = query.where(Order.id == UUID(identifier))
        except ValueError:
            query = query.where(Order.order_number == identifier.upper())

        result = await self.db.execute(query)
        order = result.scalars().first()
        if not order:
            raise NotFoundException(message="Order not found", resource="order")
        return order

    async def get_by_payment_intent(self, payment_intent_id: str) -> Optional[Order]:
        result = await self.db.execute(
            select(Order).where(Order.payment_intent_id == payment_intent_id)
        )
        return result.scalars().first()

    async def list_orders(
        self,
        statuses: Sequence[str] = (),
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        query = select(Order)
        count_query = select(func.count(Order.id))
        if statuses:
            query = query.where(Order.status.in_(statuses))
            count_query = count_query.where(Order.status.in_(statuses))

        total = (await self.db.execute(count_query)).scalar_one()
        result = await self.db.execute(
            query.order_by(Order.created_at.desc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all()), total
