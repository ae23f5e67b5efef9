from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.core.security import get_current_user
from app.database import get_session
from app.models import Item, Person, Project, Unit
from app.schemas.debt import DebtCreate, DebtLineCreate
from app.schemas.transaction import TransactionCreate
from app.services import debt_service, transaction_service
from app.main import app


@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection of the test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def seed(session):
    """Master data: one project, four persons, two items and a unit."""
    project = Project(title="Edificio Norte")
    other_project = Project(title="Casa Sur")
    ana = Person(name="Ana", last_name="Pérez")
    beto = Person(name="Beto", last_name="Gómez")
    carla = Person(name="Carla", last_name="Ruiz")
    acme = Person(company_name="Acme S.A.", is_legal=True)
    cement = Item(title="Cemento")
    sand = Item(title="Arena")
    bag = Unit(title="Bolsa")

    records = [project, other_project, ana, beto, carla, acme, cement, sand, bag]
    session.add_all(records)
    session.commit()
    for record in records:
        session.refresh(record)

    return SimpleNamespace(
        project=project,
        other_project=other_project,
        ana=ana,
        beto=beto,
        carla=carla,
        acme=acme,
        cement=cement,
        sand=sand,
        bag=bag,
    )


@pytest.fixture
def make_debt(session, seed):
    """Factory: a debt owed by ``person`` with ``lines`` as (item, quantity, unit_price)."""

    def _make(person=None, lines=None, registered_at=None, project=None):
        person = person or seed.ana
        lines = lines or [(seed.cement, "1", "1000000")]
        data = DebtCreate(
            project_id=(project or seed.project).id,
            person_id=person.id,
            due_date=date(2026, 3, 31),
            registered_at=registered_at,
            lines=[
                DebtLineCreate(
                    item_id=item.id,
                    unit_id=seed.bag.id,
                    quantity=Decimal(quantity),
                    unit_price=Decimal(price),
                )
                for item, quantity, price in lines
            ],
        )
        return debt_service.create_debt(session, data)

    return _make


@pytest.fixture
def make_transaction(session, seed):
    """Factory: a payment of ``amount`` from ``payer`` to ``receiver``."""
    counter = {"n": 0}

    def _make(amount, payer=None, receiver=None, code=None, registered_at=None,
              due_date=None, project=None):
        counter["n"] += 1
        data = TransactionCreate(
            project_id=(project or seed.project).id,
            from_person_id=(payer or seed.beto).id,
            to_person_id=(receiver or seed.ana).id,
            code=code or f"TX-{counter['n']:03d}",
            due_date=due_date or date(2026, 3, 1),
            amount_paid=Decimal(amount),
            payment_type="CSH",
            transaction_type="TRN",
            registered_at=registered_at,
        )
        return transaction_service.create_transaction(session, data)

    return _make


@pytest.fixture
def client(session):
    """TestClient bound to the test session, with the auth gate satisfied."""

    def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_user] = lambda: uuid4()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
