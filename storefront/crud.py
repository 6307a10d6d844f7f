# storefront/crud.py
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Dict, Optional

from sqlalchemy import select, insert, update, delete, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from .models import User, Product

PRODUCT_FIELDS = ("name", "description", "category", "price", "image_url")


def _num(v) -> Optional[float]:
    return None if v is None else float(v)


def user_out(u: User) -> Dict:
    return {"id": u.id, "name": u.name}


def product_out(p: Product) -> Dict:
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description,
        "category": p.category,
        "price": _num(p.price),
        "image_url": p.image_url,
    }


# ---------- users ----------
async def list_users(db: AsyncSession) -> List[User]:
    r = await db.execute(select(User).order_by(User.id))
    return r.scalars().all()

async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    r = await db.execute(select(User).where(User.id == user_id))
    return r.scalar_one_or_none()

async def create_user(db: AsyncSession, name: str) -> User:
    r = await db.execute(insert(User).values(name=name).returning(User))
    user = r.scalar_one()
    await db.commit()
    return user

async def update_user(db: AsyncSession, user_id: int, name: str) -> Optional[User]:
    stmt = update(User).where(User.id == user_id).values(name=name).returning(User)
    r = await db.execute(stmt)
    user = r.scalar_one_or_none()
    await db.commit()
    return user

async def delete_user(db: AsyncSession, user_id: int) -> bool:
    r = await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    return r.rowcount > 0


# ---------- products ----------
@dataclass
class ProductFilter:
    """Search over products.

    Each axis contributes typed clauses; all clauses are ANDed. Keyword terms
    come from splitting the raw query on whitespace, and every term must hit
    name, description or category (case-insensitive substring).
    """
    category: Optional[str] = None
    terms: List[str] = field(default_factory=list)

    @classmethod
    def from_query(cls, category: Optional[str] = None, q: Optional[str] = None) -> "ProductFilter":
        terms = q.split() if q else []
        return cls(category=category or None, terms=terms)

    def clauses(self) -> list:
        out = []
        if self.category is not None:
            out.append(Product.category == self.category)
        for term in self.terms:
            out.append(or_(
                Product.name.icontains(term, autoescape=True),
                Product.description.icontains(term, autoescape=True),
                Product.category.icontains(term, autoescape=True),
            ))
        return out

    def apply(self, stmt):
        conds = self.clauses()
        if conds:
            stmt = stmt.where(and_(*conds))
        return stmt


async def list_products(db: AsyncSession, flt: Optional[ProductFilter] = None) -> List[Product]:
    q = select(Product)
    if flt is not None:
        q = flt.apply(q)
    r = await db.execute(q.order_by(Product.id))
    return r.scalars().all()

async def get_product(db: AsyncSession, product_id: int) -> Optional[Product]:
    r = await db.execute(select(Product).where(Product.id == product_id))
    return r.scalar_one_or_none()

async def get_product_prices(db: AsyncSession, product_ids: List[int]) -> Dict[int, Decimal]:
    if not product_ids:
        return {}
    r = await db.execute(select(Product.id, Product.price).where(Product.id.in_(set(product_ids))))
    return {row.id: row.price for row in r}

async def create_product(db: AsyncSession, data: Dict) -> Product:
    values = {k: data.get(k) for k in PRODUCT_FIELDS}
    r = await db.execute(insert(Product).values(**values).returning(Product))
    product = r.scalar_one()
    await db.commit()
    return product

async def replace_product(db: AsyncSession, product_id: int, data: Dict) -> Optional[Product]:
    # full replacement: fields missing from data are written as NULL
    values = {k: data.get(k) for k in PRODUCT_FIELDS}
    stmt = update(Product).where(Product.id == product_id).values(**values).returning(Product)
    r = await db.execute(stmt)
    product = r.scalar_one_or_none()
    await db.commit()
    return product

async def delete_product(db: AsyncSession, product_id: int) -> bool:
    r = await db.execute(delete(Product).where(Product.id == product_id))
    await db.commit()
    return r.rowcount > 0

async def list_categories(db: AsyncSession) -> List[str]:
    q = select(Product.category).distinct().order_by(Product.category.asc())
    r = await db.execute(q)
    return [c for c in r.scalars().all()]
