"""
Shared fixtures.

In-memory tests use plain dataclasses; query tests use SQLAlchemy models on
an in-memory aiosqlite database shared through a StaticPool.
"""

from datetime import date, datetime

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from .models import ITEMS, Base, Employee, Item, Person, Product


@pytest.fixture
def products():
    return [Product(index + 1, name, price) for index, (name, price, _) in enumerate(ITEMS)]


@pytest.fixture
def people():
    return [
        Person(1, "Ann", "Lee", "ann@example.com", 31, date(1993, 5, 1), datetime(2024, 1, 5, 8, 0)),
        Person(2, "Bob", "Stone", "bob@example.com", 45, None, datetime(2024, 1, 6, 8, 0)),
        Person(3, "Cara", None, "cara@example.com", 22, date(2002, 1, 5)),
        Person(4, "Dan", "Annis", "dan@example.com", 28),
    ]


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    async with async_sessionmaker(engine, expire_on_commit=False)() as session:
        session.add_all(
            [
                Item(id=index + 1, name=name, price=price, created_at=created)
                for index, (name, price, created) in enumerate(ITEMS)
            ]
        )
        session.add_all(
            [
                Employee(id=1, first_name="Ann", last_name="Lee", hired_on=date(2020, 6, 1)),
                Employee(id=2, first_name="Zoe", last_name="Adams", hired_on=None),
                Employee(id=3, first_name="Ann", last_name="Baker", hired_on=date(2021, 1, 5)),
                Employee(id=4, first_name="Max", last_name=None, hired_on=date(2020, 6, 1)),
            ]
        )
        await session.commit()
        yield session
