"""
DiscountService against a real (SQLite) database: lookup, redemption
counting and checkout discount resolution.
"""
import pytest
from decimal import Decimal
from datetime import timedelta

from core.exceptions import BadRequestException
from services.discounts import DiscountService
from conftest import utc


class TestValidateCode:

    async def test_lookup_is_case_insensitive(self, db_session, make_discount):
        await make_discount(code="SAVE10", value="10")

        result = await DiscountService(db_session).validate_code("  save10 ", Decimal("50.00"))

        assert result.valid is True
        assert result.code == "SAVE10"
        assert result.discount_value == Decimal("5.00")

    async def test_unknown_code(self, db_session):
        result = await DiscountService(db_session).validate_code("NOPE", Decimal("50"))
        assert result.valid is False
        assert result.error == "Invalid discount code"

    async def test_inactive_code_is_not_found(self, db_session, make_discount):
        await make_discount(code="OLD", active=False)

        result = await DiscountService(db_session).validate_code("OLD", Decimal("50"))

        assert result.error == "Invalid discount code"

    async def test_empty_code(self, db_session):
        result = await DiscountService(db_session).validate_code("   ", Decimal("50"))
        assert result.valid is False
        assert result.error == "No code provided"

    async def test_schedule_is_checked_against_stored_timestamps(self, db_session, make_discount):
        await make_discount(code="HOLIDAY", starts_at=utc(2024, 12, 1), ends_at=utc(2024, 12, 31))
        service = DiscountService(db_session)

        before = await service.validate_code("HOLIDAY", Decimal("50"), now=utc(2024, 11, 30))
        at_start = await service.validate_code("HOLIDAY", Decimal("50"), now=utc(2024, 12, 1))
        after = await service.validate_code("HOLIDAY", Decimal("50"), now=utc(2025, 1, 1))

        assert before.error == "This code is not yet active"
        assert at_start.valid is True
        assert after.error == "This code has expired"

    async def test_validation_does_not_count_a_use(self, db_session, make_discount, fetch_discount):
        discount = await make_discount(code="SAVE10", max_uses=5)

        await DiscountService(db_session).validate_code("SAVE10", Decimal("50"))

        assert (await fetch_discount(discount.id)).uses == 0


class TestRedeemCode:

    async def test_increments_uses(self, db_session, make_discount, fetch_discount):
        discount = await make_discount(code="SAVE10", max_uses=5, uses=2)

        assert await DiscountService(db_session).redeem_code("save10") is True

        assert (await fetch_discount(discount.id)).uses == 3

    async def test_never_exceeds_cap(self, session_factory, make_discount, fetch_discount):
        discount = await make_discount(code="LIMITED", max_uses=3)

        outcomes = []
        for _ in range(5):
            async with session_factory() as session:
                outcomes.append(await DiscountService(session).redeem_code("LIMITED"))

        assert outcomes == [True, True, True, False, False]
        assert (await fetch_discount(discount.id)).uses == 3

    async def test_unlimited_code(self, db_session, make_discount, fetch_discount):
        discount = await make_discount(code="FOREVER", max_uses=None, uses=41)

        assert await DiscountService(db_session).redeem_code("FOREVER") is True

        assert (await fetch_discount(discount.id)).uses == 42

    async def test_unknown_code(self, db_session):
        assert await DiscountService(db_session).redeem_code("MISSING") is False


class TestResolveCheckoutDiscount:

    async def test_server_value_wins_over_client_amount(self, db_session, make_discount):
        await make_discount(code="SAVE10", value="10")

        discount = await DiscountService(db_session).resolve_checkout_discount(
            code="SAVE10",
            client_amount=Decimal("40.00"),
            subtotal=Decimal("50.00"),
            shipping_cost=Decimal("5.99"),
        )

        assert discount.code == "SAVE10"
        assert discount.amount == Decimal("5.00")
        assert discount.shipping_cost == Decimal("5.99")

    async def test_free_shipping_zeroes_shipping(self, db_session, make_discount):
        await make_discount(code="SHIPFREE", type="free_shipping", value="0")

        discount = await DiscountService(db_session).resolve_checkout_discount(
            code="shipfree",
            client_amount=None,
            subtotal=Decimal("30.00"),
            shipping_cost=Decimal("5.99"),
        )

        assert discount.amount == Decimal("0")
        assert discount.shipping_cost == Decimal("0")

    async def test_invalid_code_is_rejected(self, db_session, make_discount):
        await make_discount(code="BIGSPEND", min_purchase=Decimal("100"))

        with pytest.raises(BadRequestException) as exc_info:
            await DiscountService(db_session).resolve_checkout_discount(
                code="BIGSPEND",
                client_amount=None,
                subtotal=Decimal("30.00"),
                shipping_cost=Decimal("0"),
            )

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Minimum purchase of $100.00 required"

    async def test_without_code_client_amount_is_capped_at_subtotal(self, db_session):
        discount = await DiscountService(db_session).resolve_checkout_discount(
            code=None,
            client_amount=Decimal("80.00"),
            subtotal=Decimal("30.00"),
            shipping_cost=Decimal("4.00"),
        )

        assert discount.code is None
        assert discount.amount == Decimal("30.00")
        assert discount.shipping_cost == Decimal("4.00")
