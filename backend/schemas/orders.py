from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from decimal import Decimal


class OrderItemCreate(BaseModel):
    product_id: str
    variant_id: Optional[str] = None
    title: str
    variant_title: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    customer_email: EmailStr
    customer_name: str = Field(..., min_length=1)
    customer_phone: Optional[str] = None
    shipping_address_line1: str = Field(..., min_length=1)
    shipping_address_line2: Optional[str] = None
    shipping_city: str = Field(..., min_length=1)
    shipping_state: str = Field(..., min_length=1)
    shipping_postal_code: str = Field(..., min_length=1)
    shipping_country: str = Field("US", min_length=2, max_length=2)
    shipping_cost: Decimal = Field(Decimal("0"), ge=0)
    shipping_method: Optional[str] = None
    discount: Decimal = Field(Decimal("0"), ge=0)
    discount_code: Optional[str] = None
    payment_intent_id: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItemCreate] = Field(default_factory=list)


class OrderListParams(BaseModel):
    status: Optional[str] = None
    limit: int = Field(50, ge=1, le=200)
    offset: int = Field(0, ge=0)

    @property
    def statuses(self) -> List[str]:
        if not self.status:
            return []
        return [s.strip() for s in self.status.split(",") if s.strip()]
