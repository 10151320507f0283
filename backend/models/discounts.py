"""
Discount code model
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Numeric, Index
from core.database import BaseModel
from typing import Dict, Any


class DiscountType:
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_SHIPPING = "free_shipping"


class DiscountCode(BaseModel):
    """Promotional codes redeemable at checkout"""
    __tablename__ = "discount_codes"
    __table_args__ = (
        Index('idx_discount_codes_code_active', 'code', 'active'),
        {'extend_existing': True}
    )

    # Always stored uppercase; lookups uppercase the input.
    code = Column(String(50), unique=True, nullable=False, index=True)
    type = Column(String(20), nullable=False, default=DiscountType.PERCENTAGE)
    value = Column(Numeric(10, 2), nullable=False, default=0)
    min_purchase = Column(Numeric(10, 2), nullable=True)
    max_uses = Column(Integer, nullable=True)
    uses = Column(Integer, nullable=False, default=0)
    starts_at = Column(DateTime(timezone=True), nullable=True)
    ends_at = Column(DateTime(timezone=True), nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert discount code to dictionary for API responses"""
        return {
            "id": str(self.id),
            "code": self.code,
            "type": self.type,
            "value": float(self.value) if self.value is not None else None,
            "min_purchase": float(self.min_purchase) if self.min_purchase is not None else None,
            "max_uses": self.max_uses,
            "uses": self.uses,
            "starts_at": self.starts_at.isoformat() if self.starts_at else None,
            "ends_at": self.ends_at.isoformat() if self.ends_at else None,
            "active": self.active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
