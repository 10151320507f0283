from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from decimal import Decimal


class CartItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId")
    variant_id: Optional[str] = Field(None, alias="variantId")
    title: Optional[str] = None
    variant_title: Optional[str] = Field(None, alias="variantTitle")
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class ShippingAddress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = Field(None, alias="postalCode")
    country: Optional[str] = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class ValidateDiscountRequest(BaseModel):
    code: Optional[str] = None
    subtotal: Decimal = Field(Decimal("0"), ge=0)


class ValidateDiscountResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    valid: bool
    code: Optional[str] = None
    type: Optional[str] = None
    value: Optional[float] = None
    discount_value: Optional[float] = Field(None, alias="discountValue")
    message: Optional[str] = None
    error: Optional[str] = None


class CreatePaymentIntentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Defaults to empty so a missing list is reported as "No items in cart" (400)
    items: List[CartItem] = Field(default_factory=list)
    shipping_address: ShippingAddress = Field(default_factory=ShippingAddress, alias="shippingAddress")
    shipping_cost: Decimal = Field(Decimal("0"), ge=0, alias="shippingCost")
    discount_code: Optional[str] = Field(None, alias="discountCode")
    discount_amount: Optional[Decimal] = Field(None, ge=0, alias="discountAmount")


class CreatePaymentIntentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_secret: str = Field(..., alias="clientSecret")
    payment_intent_id: str = Field(..., alias="paymentIntentId")
    amount: float
