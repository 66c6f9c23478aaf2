"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; point them at a throwaway database first.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("GEMINI_API_KEY", "")

import pytest
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from restops.db.base import Base
from restops.db.session import get_db
from restops.main import app
# Import all models to ensure they're registered with Base.metadata
from restops.models import *
from restops.models.inventory import Ingredient, Supplier
from restops.models.menu import MenuItem, MenuRecipeLine
from restops.models.prep import PrepRecipeLine, PrepTask

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Disable rate limiters during tests to avoid flaky failures
    from restops.core.rate_limit import limiter as global_limiter
    global_limiter.enabled = False
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    global_limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def test_supplier(db_session: Session) -> Supplier:
    """Create a test supplier."""
    supplier = Supplier(name="Fresh Farms", category="produce", phone_number="+989121234567")
    db_session.add(supplier)
    db_session.commit()
    db_session.refresh(supplier)
    return supplier


@pytest.fixture
def kitchen(db_session: Session, test_supplier: Supplier) -> dict:
    """A small kitchen: three ingredients, a tomato sauce prep and two dishes.

    - Beef 10 kg @ 600000, Bun 50 @ 10000, Tomato 8 kg @ 40000
    - Tomato Sauce: 500 g tomato per batch of 1 kg, costed at 20000 per kg
    - Burger (180000): 150 g beef, 1 bun, 50 g sauce
    - Salad (90000): 200 g tomato
    """
    beef = Ingredient(name="Beef", unit="kg", current_stock=10, cost_per_unit=600000,
                      min_threshold=2, supplier_id=test_supplier.id)
    bun = Ingredient(name="Bun", unit="number", current_stock=50, cost_per_unit=10000,
                     min_threshold=10)
    tomato = Ingredient(name="Tomato", unit="kg", current_stock=8, cost_per_unit=40000,
                        min_threshold=1)
    db_session.add_all([beef, bun, tomato])
    db_session.flush()

    sauce = PrepTask(item="Tomato Sauce", station="sauce", par_level=5, on_hand=3,
                     unit="kg", batch_size=1, cost_per_unit=20000)
    sauce.recipe = [PrepRecipeLine(item_id=tomato.id, amount=500, unit="gram", position=0)]
    db_session.add(sauce)
    db_session.flush()

    burger = MenuItem(name="Burger", category="main", price=180000)
    burger.recipe = [
        MenuRecipeLine(item_id=beef.id, amount=150, unit="gram", position=0),
        MenuRecipeLine(item_id=bun.id, amount=1, unit="number", position=1),
        MenuRecipeLine(item_id=sauce.id, source="prep", amount=50, unit="gram", position=2),
    ]
    salad = MenuItem(name="Salad", category="starter", price=90000)
    salad.recipe = [MenuRecipeLine(item_id=tomato.id, amount=200, unit="gram", position=0)]
    db_session.add_all([burger, salad])
    db_session.commit()

    return {
        "beef": beef,
        "bun": bun,
        "tomato": tomato,
        "sauce": sauce,
        "burger": burger,
        "salad": salad,
        "db": db_session,
    }
