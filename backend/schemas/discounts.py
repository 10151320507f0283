from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Literal
from datetime import datetime
from decimal import Decimal

DiscountTypeLiteral = Literal["percentage", "fixed", "free_shipping"]


class DiscountCodeBase(BaseModel):
    @field_validator("code", check_fields=False)
    @classmethod
    def normalize_code(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip().upper()
        if not v:
            raise ValueError("Code is required")
        return v

    @model_validator(mode="after")
    def check_ranges(self):
        if self.type == "percentage" and self.value is not None and self.value > 100:
            raise ValueError("Percentage discounts cannot exceed 100")
        if self.starts_at and self.ends_at and self.ends_at < self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        return self


class DiscountCodeCreate(DiscountCodeBase):
    code: str = Field(..., max_length=50)
    type: DiscountTypeLiteral = "percentage"
    value: Decimal = Field(Decimal("0"), ge=0)
    min_purchase: Optional[Decimal] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, ge=1)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    active: bool = True


class DiscountCodeUpdate(DiscountCodeBase):
    code: Optional[str] = Field(None, max_length=50)
    type: Optional[DiscountTypeLiteral] = None
    value: Optional[Decimal] = Field(None, ge=0)
    min_purchase: Optional[Decimal] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, ge=1)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    active: Optional[bool] = None

    # Omitted means unchanged; these columns have no null state to clear to
    @field_validator("code", "type", "value", "active", mode="before")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v
