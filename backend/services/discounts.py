"""
Discount code evaluation, redemption and admin management
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, or_
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from core.exceptions import BadRequestException, NotFoundException
from core.utils.logging import structured_logger
from models.discounts import DiscountCode, DiscountType
from schemas.discounts import DiscountCodeCreate, DiscountCodeUpdate
from services.pricing import ZERO, to_decimal

INVALID_CODE = "Invalid discount code"
MAX_USES_REACHED = "Discount code maximum uses reached"
NOT_YET_ACTIVE = "This code is not yet active"
EXPIRED = "This code has expired"


@dataclass(frozen=True)
class DiscountValidationResult:
    valid: bool
    code: Optional[str] = None
    type: Optional[str] = None
    value: Optional[Decimal] = None
    discount_value: Optional[Decimal] = None
    message: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def invalid(cls, error: str) -> "DiscountValidationResult":
        return cls(valid=False, error=error)

    @property
    def free_shipping(self) -> bool:
        return self.valid and self.type == DiscountType.FREE_SHIPPING


@dataclass(frozen=True)
class CheckoutDiscount:
    """Discount and shipping figures to feed into calculate_totals"""
    code: Optional[str]
    amount: Decimal
    shipping_cost: Decimal


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; they were written as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _format_number(value: Decimal) -> str:
    if value == value.to_integral_value():
        return str(int(value))
    return format(value.normalize(), "f")


def discount_message(discount: DiscountCode) -> str:
    value = to_decimal(discount.value)
    if discount.type == DiscountType.PERCENTAGE:
        return f"{_format_number(value)}% off your order!"
    if discount.type == DiscountType.FIXED:
        return f"${value:.2f} off your order!"
    if discount.type == DiscountType.FREE_SHIPPING:
        return "Free shipping on your order!"
    return "Discount applied!"


def compute_discount_value(discount_type: str, value: Decimal, subtotal: Decimal) -> Decimal:
    if discount_type == DiscountType.PERCENTAGE:
        amount = subtotal * value / Decimal(100)
        return min(max(amount, ZERO), subtotal)
    if discount_type == DiscountType.FIXED:
        return max(min(value, subtotal), ZERO)
    # free_shipping: shipping is zeroed by the caller, value passes through
    return value


def evaluate_discount(
    discount: Optional[DiscountCode],
    subtotal: Decimal,
    now: Optional[datetime] = None,
) -> DiscountValidationResult:
    """Apply the usability rules to an already-loaded code. No writes."""
    if discount is None or not discount.active:
        return DiscountValidationResult.invalid(INVALID_CODE)

    now = _as_utc(now) or datetime.now(timezone.utc)
    subtotal = to_decimal(subtotal)

    if discount.max_uses is not None and (discount.uses or 0) >= discount.max_uses:
        return DiscountValidationResult.invalid(MAX_USES_REACHED)

    starts_at = _as_utc(discount.starts_at)
    if starts_at is not None and starts_at > now:
        return DiscountValidationResult.invalid(NOT_YET_ACTIVE)

    ends_at = _as_utc(discount.ends_at)
    if ends_at is not None and ends_at < now:
        return DiscountValidationResult.invalid(EXPIRED)

    if discount.min_purchase is not None:
        min_purchase = to_decimal(discount.min_purchase)
        if subtotal < min_purchase:
            return DiscountValidationResult.invalid(
                f"Minimum purchase of ${min_purchase:.2f} required"
            )

    value = to_decimal(discount.value)
    return DiscountValidationResult(
        valid=True,
        code=discount.code,
        type=discount.type,
        value=value,
        discount_value=compute_discount_value(discount.type, value, subtotal),
        message=discount_message(discount),
    )


class DiscountService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_active_by_code(self, code: str) -> Optional[DiscountCode]:
        result = await self.db.execute(
            select(DiscountCode).where(
                DiscountCode.code == normalize_code(code),
                DiscountCode.active.is_(True),
            )
        )
        return result.scalars().first()

    async def validate_code(
        self,
        code: str,
        subtotal: Decimal,
        now: Optional[datetime] = None,
    ) -> DiscountValidationResult:
        """Look up a code and decide whether it applies to this subtotal."""
        normalized = normalize_code(code)
        if not normalized:
            return DiscountValidationResult.invalid("No code provided")

        discount = await self.get_active_by_code(normalized)
        return evaluate_discount(discount, subtotal, now)

    async def resolve_checkout_discount(
        self,
        code: Optional[str],
        client_amount: Optional[Decimal],
        subtotal: Decimal,
        shipping_cost: Decimal,
    ) -> CheckoutDiscount:
        """
        Work out the discount to charge for a cart.

        A submitted code is re-evaluated and its server-side value wins over
        whatever amount the client sent. Without a code the client amount is
        taken as-is, capped at the subtotal.
        """
        subtotal = to_decimal(subtotal)
        shipping_cost = to_decimal(shipping_cost)

        if normalize_code(code):
            result = await self.validate_code(code, subtotal)
            if not result.valid:
                raise BadRequestException(message=result.error, field="discountCode")
            if result.free_shipping:
                return CheckoutDiscount(code=result.code, amount=ZERO, shipping_cost=ZERO)
            return CheckoutDiscount(
                code=result.code,
                amount=result.discount_value,
                shipping_cost=shipping_cost,
            )

        amount = to_decimal(client_amount)
        if amount > ZERO:
            structured_logger.warning(
                message="Discount amount supplied without a code",
                metadata={"discount_amount": str(amount), "subtotal": str(subtotal)},
            )
        return CheckoutDiscount(
            code=None,
            amount=min(max(amount, ZERO), subtotal),
            shipping_cost=shipping_cost,
        )

    async def redeem_code(self, code: str) -> bool:
        """
        Count one use of a code. Single conditional UPDATE, so concurrent
        redemptions of a nearly exhausted code cannot push uses past max_uses.
        """
        normalized = normalize_code(code)
        if not normalized:
            return False

        result = await self.db.execute(
            update(DiscountCode)
            .where(
                DiscountCode.code == normalized,
                or_(
                    DiscountCode.max_uses.is_(None),
                    DiscountCode.uses < DiscountCode.max_uses,
                ),
            )
            .values(uses=DiscountCode.uses + 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        redeemed = result.rowcount == 1
        if not redeemed:
            structured_logger.warning(
                message="Discount code redemption skipped",
                metadata={"code": normalized, "reason": "missing_or_exhausted"},
            )
        return redeemed

    # --- Admin management ---

    async def list_codes(self) -> List[DiscountCode]:
        result = await self.db.execute(
            select(DiscountCode).order_by(DiscountCode.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_code(self, discount_id: UUID) -> DiscountCode:
        result = await self.db.execute(select(DiscountCode).where(DiscountCode.id == discount_id))
        discount = result.scalars().first()
        if not discount:
            raise NotFoundException(message="Discount not found", resource="discount_code")
        return discount

    async def _code_taken(self, code: str, exclude_id: Optional[UUID] = None) -> bool:
        query = select(DiscountCode.id).where(DiscountCode.code == code)
        if exclude_id is not None:
            query = query.where(DiscountCode.id != exclude_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def create_code(self, data: DiscountCodeCreate) -> DiscountCode:
        if await self._code_taken(data.code):
            raise BadRequestException(message="Discount code already exists", field="code")

        discount = DiscountCode(**data.model_dump(), uses=0)
        self.db.add(discount)
        await self.db.commit()
        await self.db.refresh(discount)

        structured_logger.info(
            message="Discount code created",
            metadata={"code": discount.code, "type": discount.type},
        )
        return discount

    async def update_code(self, discount_id: UUID, data: DiscountCodeUpdate) -> DiscountCode:
        discount = await self.get_code(discount_id)
        changes = data.model_dump(exclude_unset=True)

        if "code" in changes and await self._code_taken(changes["code"], exclude_id=discount_id):
            raise BadRequestException(message="Discount code already exists", field="code")

        new_type = changes.get("type", discount.type)
        new_value = to_decimal(changes.get("value", discount.value))
        if new_type == DiscountType.PERCENTAGE and new_value > 100:
            raise BadRequestException(message="Percentage discounts cannot exceed 100", field="value")

        for key, value in changes.items():
            setattr(discount, key, value)

        await self.db.commit()
        await self.db.refresh(discount)
        return discount

    async def delete_code(self, discount_id: UUID) -> None:
        discount = await self.get_code(discount_id)
        await self.db.delete(discount)
        await self.db.commit()
