"""Shared fixtures: a throwaway SQLite database per test and an app wired to it."""

import asyncio
from decimal import Decimal

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.pool import NullPool

from storefront.app import create_app
from storefront.config import Settings
from storefront.db import create_tables, make_engine, make_sessionmaker
from storefront.models import Order, OrderItem, Product, ProductAssociation, User
from storefront.services import ResponseCache


class FakeClock:
    """Manually advanced monotonic clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StatementLog:
    """Records every SQL statement an engine sends to the database."""

    def __init__(self, engine):
        self.statements = []
        event.listen(engine.sync_engine, "before_cursor_execute", self._record)

    def _record(self, conn, cursor, statement, parameters, context, executemany):
        self.statements.append(statement)

    def count(self, fragment: str) -> int:
        return sum(1 for s in self.statements if fragment in s)


async def add_rows(engine, *rows) -> None:
    sessions = make_sessionmaker(engine)
    async with sessions() as db:
        async with db.begin():
            for row in rows:
                db.add(row)
                # flush one by one so generated ids follow argument order
                await db.flush()


def seed(engine, *rows) -> None:
    asyncio.run(add_rows(engine, *rows))


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'storefront-test.db'}"


@pytest.fixture
def engine(database_url):
    eng = make_engine(database_url, poolclass=NullPool)
    asyncio.run(create_tables(eng))
    yield eng
    asyncio.run(eng.dispose())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResponseCache(ttl_seconds=3600, namespace="test", clock=clock)


@pytest.fixture
def app(database_url, engine, cache):
    return create_app(Settings(database_url=database_url), engine=engine, cache=cache)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def catalogue_rows():
    """Two users, five products, three orders and a few association rows.

    Baskets:
        order 1 (user 1): shirt x2, jeans x1, socks x3
        order 2 (user 2): shirt x1, jeans x1
        order 3 (user 1): shirt x1, hat x1
    """
    return [
        User(name="Ali"),
        User(name="Mona"),
        Product(name="Red Shirt", description="Cotton shirt, red", category="clothing",
                price=Decimal("20.00"), image_url="/img/shirt.png"),
        Product(name="Blue Jeans", description="Denim trousers", category="clothing",
                price=Decimal("45.50"), image_url="/img/jeans.png"),
        Product(name="Wool Socks", description="Warm red socks", category="accessories",
                price=Decimal("5.00")),
        Product(name="Sun Hat", description="Wide brim hat", category="accessories",
                price=Decimal("15.00")),
        Product(name="Coffee Mug", description="Ceramic mug", category="kitchen",
                price=Decimal("8.25")),
        Order(user_id=1),
        OrderItem(order_id=1, product_id=1, quantity=2, price=Decimal("20.00")),
        OrderItem(order_id=1, product_id=2, quantity=1, price=Decimal("45.50")),
        OrderItem(order_id=1, product_id=3, quantity=3, price=Decimal("5.00")),
        Order(user_id=2),
        OrderItem(order_id=2, product_id=1, quantity=1, price=Decimal("20.00")),
        OrderItem(order_id=2, product_id=2, quantity=1, price=Decimal("41.50")),
        Order(user_id=1),
        OrderItem(order_id=3, product_id=1, quantity=1, price=Decimal("20.00")),
        OrderItem(order_id=3, product_id=4, quantity=1, price=Decimal("15.00")),
        ProductAssociation(product1=1, product2=2, frequency=12),
        ProductAssociation(product1=1, product2=3, frequency=4),
        ProductAssociation(product1=2, product2=4, frequency=7),
    ]


@pytest.fixture
def catalogue(engine):
    seed(engine, *catalogue_rows())
    return engine


@pytest_asyncio.fixture
async def store(database_url):
    """Engine for async service tests, created inside the test's event loop."""
    eng = make_engine(database_url, poolclass=NullPool)
    await create_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def store_sessions(store):
    return make_sessionmaker(store)
