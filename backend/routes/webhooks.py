"""
Webhook Routes - payment processor callbacks

The body is read as raw bytes and handed to verification untouched.
"""
from fastapi import APIRouter, Request, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import get_db
from services.payment_gateway import PaymentGateway, get_payment_gateway
from services.webhooks import WebhookService

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/payment")
@router.post("/stripe", include_in_schema=False)
async def payment_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Handle Stripe webhooks with signature verification.
    Returns {"received": true} whether or not an order changed.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    webhook_service = WebhookService(db, gateway)
    return await webhook_service.handle_webhook(payload, sig_header)
