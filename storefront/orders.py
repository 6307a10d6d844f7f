# storefront/orders.py
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from .db import get_db
from .deps import get_order_service
from .services import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])


class OrderItemIn(BaseModel):
    product_id: int
    quantity: int


class OrderIn(BaseModel):
    user_id: int
    items: List[OrderItemIn] = Field(default_factory=list)


@router.post("", status_code=201)
async def create_order(
    payload: OrderIn,
    db: AsyncSession = Depends(get_db),
    svc: OrderService = Depends(get_order_service),
):
    items = [i.model_dump() for i in payload.items]
    return await svc.create_order(db, payload.user_id, items)

@router.get("")
async def list_orders(
    db: AsyncSession = Depends(get_db),
    svc: OrderService = Depends(get_order_service),
):
    return await svc.list_orders(db)

@router.get("/{order_id}")
async def get_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    svc: OrderService = Depends(get_order_service),
):
    return await svc.get_order(db, order_id)
