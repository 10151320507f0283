from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import get_db
from schemas.orders import OrderCreate
from services.orders import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    request: OrderCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a pending order. Totals are recomputed from the line items."""
    order = await OrderService(db).create_order(request)
    return {"order": order.to_dict()}


@router.get("/{order_ref}")
async def get_order(
    order_ref: str,
    db: AsyncSession = Depends(get_db),
):
    """Get an order by id or order number."""
    order = await OrderService(db).get_order(order_ref)
    return {"order": order.to_dict()}
