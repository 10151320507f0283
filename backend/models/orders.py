"""
Order models
Includes: Order, OrderItem
"""
from sqlalchemy import Column, String, ForeignKey, Integer, Numeric, Text, Index
from sqlalchemy.orm import relationship
from core.database import BaseModel, GUID
from typing import Dict, Any


def _money(value):
    return float(value) if value is not None else None


class OrderStatus:
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus:
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class Order(BaseModel):
    """Storefront order, reconciled against its Stripe payment intent"""
    __tablename__ = "orders"
    __table_args__ = (
        Index('idx_orders_status', 'status'),
        Index('idx_orders_payment_status', 'payment_status'),
        {'extend_existing': True}
    )

    order_number = Column(String(40), unique=True, nullable=False, index=True)

    customer_email = Column(String(255), nullable=False)
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=True)

    shipping_address_line1 = Column(String(255), nullable=False)
    shipping_address_line2 = Column(String(255), nullable=True)
    shipping_city = Column(String(100), nullable=False)
    shipping_state = Column(String(100), nullable=False)
    shipping_postal_code = Column(String(20), nullable=False)
    shipping_country = Column(String(2), nullable=False, default="US")

    subtotal = Column(Numeric(10, 2), nullable=False)
    shipping_cost = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)
    discount_code = Column(String(50), nullable=True)

    # pending, processing, shipped, delivered, cancelled, refunded
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING)
    # pending, paid, failed, refunded. Written only by webhook reconciliation.
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING)
    payment_intent_id = Column(String(255), nullable=True, unique=True, index=True)

    shipping_method = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    items = relationship("OrderItem", back_populates="order",
                         cascade="all, delete-orphan", lazy="selectin")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "order_number": self.order_number,
            "customer_email": self.customer_email,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "shipping_address_line1": self.shipping_address_line1,
            "shipping_address_line2": self.shipping_address_line2,
            "shipping_city": self.shipping_city,
            "shipping_state": self.shipping_state,
            "shipping_postal_code": self.shipping_postal_code,
            "shipping_country": self.shipping_country,
            "subtotal": _money(self.subtotal),
            "shipping_cost": _money(self.shipping_cost),
            "tax": _money(self.tax),
            "discount": _money(self.discount),
            "total": _money(self.total),
            "discount_code": self.discount_code,
            "status": self.status,
            "payment_status": self.payment_status,
            "payment_intent_id": self.payment_intent_id,
            "shipping_method": self.shipping_method,
            "notes": self.notes,
            "items": [item.to_dict() for item in self.items],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class OrderItem(BaseModel):
    """Individual line items within an order"""
    __tablename__ = "order_items"
    __table_args__ = {'extend_existing': True}

    order_id = Column(GUID(), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(255), nullable=False)
    variant_id = Column(String(255), nullable=True)
    title = Column(String(255), nullable=False)
    variant_title = Column(String(255), nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "title": self.title,
            "variant_title": self.variant_title,
            "quantity": self.quantity,
            "price": _money(self.price),
            "total": _money(self.total),
        }
