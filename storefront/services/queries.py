"""Product queries, co-purchase suggestions and cached association ranking."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from storefront import crud
from storefront.exceptions import NotFoundError, ValidationError
from storefront.models import OrderItem, Product, ProductAssociation

logger = logging.getLogger(__name__)

ASSOCIATIONS_CACHE_KEY = "associations"
REQUIRED_PRODUCT_FIELDS = ("name", "category", "price")


def _missing(data: Dict, fields) -> List[str]:
    return [f for f in fields if data.get(f) is None or data.get(f) == ""]


class QueryService:
    """Read side of the catalogue plus single-product mutations.

    ``cache`` is any object with async ``get(key)`` / ``set(key, value)``;
    only the association ranking goes through it.
    """

    def __init__(self, cache, suggestion_limit: int = 5, association_limit: int = 10):
        self.cache = cache
        self.suggestion_limit = suggestion_limit
        self.association_limit = association_limit

    # ---------- products ----------
    async def list_products(
        self, db: AsyncSession, category: Optional[str] = None, q: Optional[str] = None
    ) -> List[Dict]:
        flt = crud.ProductFilter.from_query(category=category, q=q)
        rows = await crud.list_products(db, flt)
        return [crud.product_out(p) for p in rows]

    async def list_categories(self, db: AsyncSession) -> List[str]:
        return await crud.list_categories(db)

    async def get_product(self, db: AsyncSession, product_id: int) -> Dict:
        p = await crud.get_product(db, product_id)
        if p is None:
            raise NotFoundError("product", product_id, message="Product not found")
        return crud.product_out(p)

    async def create_product(self, db: AsyncSession, data: Dict) -> Dict:
        missing = _missing(data, REQUIRED_PRODUCT_FIELDS)
        if missing:
            raise ValidationError(
                "Fields name, category, price are required",
                details={"missing": missing},
            )
        p = await crud.create_product(db, data)
        logger.info("Created product %s (%s)", p.id, p.category)
        return crud.product_out(p)

    async def update_product(self, db: AsyncSession, product_id: int, data: Dict) -> Dict:
        p = await crud.replace_product(db, product_id, data)
        if p is None:
            raise NotFoundError("product", product_id, message="Product not found")
        return crud.product_out(p)

    async def delete_product(self, db: AsyncSession, product_id: int) -> None:
        if not await crud.delete_product(db, product_id):
            raise NotFoundError("product", product_id, message="Product not found")
        logger.info("Deleted product %s", product_id)

    # ---------- recommendations ----------
    async def suggest_for_product(self, db: AsyncSession, product_id: int) -> List[Dict]:
        """Products most often bought in the same order as ``product_id``."""
        o1 = aliased(OrderItem)
        o2 = aliased(OrderItem)
        frequency = func.count().label("frequency")
        stmt = (
            select(
                Product.id,
                Product.name,
                Product.image_url,
                frequency,
                func.avg(o2.price).label("avg_price"),
            )
            .select_from(o1)
            .join(o2, o1.order_id == o2.order_id)
            .join(Product, o2.product_id == Product.id)
            .where(o1.product_id == product_id, o2.product_id != product_id)
            .group_by(Product.id, Product.name, Product.image_url)
            .order_by(desc(frequency), Product.id)
            .limit(self.suggestion_limit)
        )
        r = await db.execute(stmt)
        return [
            {
                "id": row.id,
                "name": row.name,
                "image_url": row.image_url,
                "frequency": int(row.frequency),
                "avg_price": None if row.avg_price is None else round(float(row.avg_price), 2),
            }
            for row in r
        ]

    async def get_associations(self, db: AsyncSession) -> List[Dict[str, Any]]:
        cached = await self.cache.get(ASSOCIATIONS_CACHE_KEY)
        if cached is not None:
            logger.debug("associations served from cache")
            return cached

        p1 = aliased(Product)
        p2 = aliased(Product)
        pa = ProductAssociation
        stmt = (
            select(
                p1.name.label("product1"),
                p2.name.label("product2"),
                pa.frequency,
            )
            .select_from(pa)
            .join(p1, pa.product1 == p1.id)
            .join(p2, pa.product2 == p2.id)
            .order_by(pa.frequency.desc(), pa.product1, pa.product2)
            .limit(self.association_limit)
        )
        r = await db.execute(stmt)
        rows = [
            {"product1": row.product1, "product2": row.product2, "frequency": int(row.frequency)}
            for row in r
        ]
        await self.cache.set(ASSOCIATIONS_CACHE_KEY, rows)
        logger.info("associations cache refreshed with %d row(s)", len(rows))
        return rows
