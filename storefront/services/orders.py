"""Order placement and order reads.

Placing an order is a single transaction: the order row and every item row
become visible together or not at all. Item prices are snapshotted from
``products.price`` inside the same transaction.
"""

import logging
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront import crud
from storefront.exceptions import NotFoundError, StoreError, ValidationError
from storefront.models import Order, OrderItem

logger = logging.getLogger(__name__)


def _parse_items(items: Sequence[Mapping[str, Any]]) -> List[Tuple[int, int]]:
    if not items:
        raise ValidationError("items must contain at least one entry")
    lines = []
    for idx, item in enumerate(items):
        try:
            product_id = int(item["product_id"])
            quantity = int(item["quantity"])
        except (KeyError, TypeError, ValueError):
            raise ValidationError(
                f"items[{idx}] needs integer product_id and quantity",
                details={"index": idx},
            )
        if quantity <= 0:
            raise ValidationError(
                f"items[{idx}] quantity must be positive",
                details={"index": idx, "quantity": quantity},
            )
        lines.append((product_id, quantity))
    return lines


def order_out(order: Order) -> Dict:
    return {"id": order.id, "user_id": order.user_id, "created_at": order.created_at}


def _orders_with_items():
    # inner join: an order without items never shows up
    return (
        select(Order, OrderItem.product_id, OrderItem.quantity, OrderItem.price)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .order_by(Order.id, OrderItem.id)
    )


def _group_items(rows) -> List[Dict]:
    grouped: Dict[int, Dict] = {}
    for order, product_id, quantity, price in rows:
        out = grouped.get(order.id)
        if out is None:
            out = grouped[order.id] = {**order_out(order), "items": []}
        out["items"].append({
            "product_id": product_id,
            "quantity": quantity,
            "price": None if price is None else float(price),
        })
    return list(grouped.values())


class OrderService:

    async def create_order(self, db: AsyncSession, user_id: int, items: Sequence[Mapping[str, Any]]) -> Dict:
        """Insert an order and its items atomically.

        Raises:
            ValidationError: empty/malformed items, unknown product, or a
                store constraint the request violated (e.g. unknown user).
            StoreError: any other database failure. The transaction is
                rolled back before either error propagates.
        """
        lines = _parse_items(items)
        try:
            async with db.begin():
                prices = await crud.get_product_prices(db, [pid for pid, _ in lines])
                missing = sorted({pid for pid, _ in lines if pid not in prices})
                if missing:
                    raise ValidationError(
                        f"Unknown product id(s): {', '.join(str(m) for m in missing)}",
                        details={"product_ids": missing},
                    )

                r = await db.execute(insert(Order).values(user_id=user_id).returning(Order))
                order = r.scalar_one()
                for product_id, quantity in lines:
                    await db.execute(insert(OrderItem).values(
                        order_id=order.id,
                        product_id=product_id,
                        quantity=quantity,
                        price=prices[product_id],
                    ))
        except IntegrityError as e:
            logger.warning("Order for user %s rejected by constraint: %s", user_id, e.orig)
            raise ValidationError(
                "Order violates a store constraint (check user_id and product ids)",
                details={"error": str(e.orig)},
            )
        except SQLAlchemyError as e:
            logger.error("Order creation for user %s failed", user_id, exc_info=True)
            raise StoreError("create_order", e)

        logger.info("Created order %s for user %s with %d item(s)", order.id, user_id, len(lines))
        return order_out(order)

    async def list_orders(self, db: AsyncSession) -> List[Dict]:
        r = await db.execute(_orders_with_items())
        return _group_items(r.all())

    async def get_order(self, db: AsyncSession, order_id: int) -> Dict:
        r = await db.execute(_orders_with_items().where(Order.id == order_id))
        orders = _group_items(r.all())
        if not orders:
            raise NotFoundError("order", order_id, message="Order not found")
        return orders[0]
