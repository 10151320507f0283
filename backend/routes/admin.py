from uuid import UUID
from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import get_db
from core.dependencies import require_admin
from schemas.discounts import DiscountCodeCreate, DiscountCodeUpdate
from schemas.orders import OrderListParams
from services.discounts import DiscountService
from services.orders import OrderService

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/orders")
async def list_orders(
    params: Annotated[OrderListParams, Query()],
    db: AsyncSession = Depends(get_db),
):
    """List orders, newest first, optionally filtered by a comma separated status list."""
    orders, total = await OrderService(db).list_orders(
        statuses=params.statuses,
        limit=params.limit,
        offset=params.offset,
    )
    return {
        "orders": [order.to_dict() for order in orders],
        "total": total,
        "limit": params.limit,
        "offset": params.offset,
    }


@router.get("/discounts")
async def list_discounts(db: AsyncSession = Depends(get_db)):
    codes = await DiscountService(db).list_codes()
    return {"discounts": [code.to_dict() for code in codes]}


@router.post("/discounts", status_code=status.HTTP_201_CREATED)
async def create_discount(
    request: DiscountCodeCreate,
    db: AsyncSession = Depends(get_db),
):
    discount = await DiscountService(db).create_code(request)
    return {"discount": discount.to_dict()}


@router.get("/discounts/{discount_id}")
async def get_discount(discount_id: UUID, db: AsyncSession = Depends(get_db)):
    discount = await DiscountService(db).get_code(discount_id)
    return {"discount": discount.to_dict()}


@router.put("/discounts/{discount_id}")
async def update_discount(
    discount_id: UUID,
    request: DiscountCodeUpdate,
    db: AsyncSession = Depends(get_db),
):
    discount = await DiscountService(db).update_code(discount_id, request)
    return {"discount": discount.to_dict()}


@router.delete("/discounts/{discount_id}")
async def delete_discount(discount_id: UUID, db: AsyncSession = Depends(get_db)):
    await DiscountService(db).delete_code(discount_id)
    return {"success": True}
