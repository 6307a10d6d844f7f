# storefront/products.py
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from .db import get_db
from .deps import get_query_service
from .services import QueryService

router = APIRouter(prefix="/api", tags=["products"])


class ProductIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = None
    image_url: Optional[str] = None


@router.get("/products")
async def list_products(
    category: Optional[str] = Query(None, description="exact category match"),
    q: Optional[str] = Query(None, description="space separated keywords, all must match"),
    db: AsyncSession = Depends(get_db),
    svc: QueryService = Depends(get_query_service),
):
    return await svc.list_products(db, category=category, q=q)

@router.get("/products/{product_id}")
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    svc: QueryService = Depends(get_query_service),
):
    return await svc.get_product(db, product_id)

@router.post("/products", status_code=201)
async def create_product(
    payload: ProductIn,
    db: AsyncSession = Depends(get_db),
    svc: QueryService = Depends(get_query_service),
):
    return await svc.create_product(db, payload.model_dump())

@router.put("/products/{product_id}")
async def update_product(
    product_id: int,
    payload: ProductIn,
    db: AsyncSession = Depends(get_db),
    svc: QueryService = Depends(get_query_service),
):
    return await svc.update_product(db, product_id, payload.model_dump())

@router.delete("/products/{product_id}", status_code=204)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    svc: QueryService = Depends(get_query_service),
):
    await svc.delete_product(db, product_id)
    return Response(status_code=204)

@router.get("/products/{product_id}/suggestions")
async def product_suggestions(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    svc: QueryService = Depends(get_query_service),
):
    return await svc.suggest_for_product(db, product_id)

@router.get("/associations")
async def associations(
    db: AsyncSession = Depends(get_db),
    svc: QueryService = Depends(get_query_service),
):
    return await svc.get_associations(db)

@router.get("/categories")
async def categories(
    db: AsyncSession = Depends(get_db),
    svc: QueryService = Depends(get_query_service),
):
    return await svc.list_categories(db)
