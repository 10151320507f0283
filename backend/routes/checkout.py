from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import get_db
from core.dependencies import get_configured_payment_gateway
from core.utils.logging import structured_logger
from schemas.checkout import (
    CreatePaymentIntentRequest,
    CreatePaymentIntentResponse,
    ValidateDiscountRequest,
    ValidateDiscountResponse,
)
from services.discounts import DiscountService, normalize_code
from services.payment_gateway import PaymentGateway
from services.payments import PaymentService

router = APIRouter(prefix="/checkout", tags=["Checkout"])


def _discount_response(status_code: int, **fields) -> JSONResponse:
    body = ValidateDiscountResponse(**fields).model_dump(by_alias=True, exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


@router.post("/validate-discount", response_model=ValidateDiscountResponse, response_model_exclude_none=True)
async def validate_discount(
    request: ValidateDiscountRequest,
    db: AsyncSession = Depends(get_db),
):
    """Check a discount code against the cart subtotal. Never counts a use."""
    if not normalize_code(request.code):
        return _discount_response(400, valid=False, error="No code provided")

    try:
        result = await DiscountService(db).validate_code(request.code, request.subtotal)
    except SQLAlchemyError as e:
        structured_logger.error(
            message="Discount validation failed",
            endpoint="/checkout/validate-discount",
            metadata={"code": normalize_code(request.code)},
            exception=e,
        )
        return _discount_response(500, valid=False, error="Failed to validate code")

    if not result.valid:
        return _discount_response(200, valid=False, error=result.error)

    return _discount_response(
        200,
        valid=True,
        code=result.code,
        type=result.type,
        value=float(result.value),
        discount_value=float(result.discount_value),
        message=result.message,
    )


@router.post(
    "/create-payment-intent",
    response_model=CreatePaymentIntentResponse,
    response_model_by_alias=True,
)
async def create_payment_intent(
    request: CreatePaymentIntentRequest,
    gateway: PaymentGateway = Depends(get_configured_payment_gateway),
    db: AsyncSession = Depends(get_db),
):
    """Price the cart server-side and open a payment intent for it."""
    return await PaymentService(db, gateway).create_checkout_intent(request)
