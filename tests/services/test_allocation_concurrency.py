"""
Concurrency tests for the allocation engine on a file-backed SQLite database.

Covers:
- Two interleaved allocations against one debt are serialized
- Lock order (debt before transaction) and FOR UPDATE on row-locking stores
"""
import threading
import time
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import event
from sqlalchemy.dialects import postgresql
from sqlmodel import SQLModel, Session, create_engine

from app.core.exceptions import OverAllocation
from app.database import use_immediate_transactions
from app.models import Item, Person, Project, Unit
from app.schemas.debt import DebtCreate, DebtLineCreate
from app.schemas.transaction import TransactionCreate
from app.services import allocation_service, debt_service, transaction_service
from app.utils.coverage_helpers import debt_for_update, get_debt_covered, transaction_for_update


@pytest.fixture
def file_engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'allocations.db'}",
        connect_args={"check_same_thread": False, "timeout": 10},
    )
    use_immediate_transactions(engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def debt_and_payments(file_engine):
    """Debt of 1000 owed by Ana and two payments of 1000 to her."""
    with Session(file_engine) as session:
        project = Project(title="Obra")
        ana = Person(name="Ana", last_name="Pérez")
        beto = Person(name="Beto", last_name="Gómez")
        item = Item(title="Cemento")
        unit = Unit(title="Bolsa")
        session.add_all([project, ana, beto, item, unit])
        session.commit()

        debt = debt_service.create_debt(session, DebtCreate(
            project_id=project.id,
            person_id=ana.id,
            due_date=date(2026, 3, 31),
            lines=[DebtLineCreate(item_id=item.id, unit_id=unit.id, quantity=Decimal("1"), unit_price=Decimal("1000"))],
        ))
        payments = [
            transaction_service.create_transaction(session, TransactionCreate(
                project_id=project.id,
                from_person_id=beto.id,
                to_person_id=ana.id,
                code=f"REC-{n}",
                due_date=date(2026, 3, 1),
                amount_paid=Decimal("1000"),
                payment_type="CSH",
                transaction_type="TRN",
            ))
            for n in (1, 2)
        ]
        return debt.id, payments[0].id, payments[1].id


def test_interleaved_allocations_do_not_over_allocate(file_engine, debt_and_payments, monkeypatch):
    debt_id, first_tx, second_tx = debt_and_payments
    paused = threading.Event()
    release = threading.Event()
    original_save = allocation_service._save

    # La primera asignación se detiene entre las validaciones y la escritura
    def paused_save(session, allocation):
        if threading.current_thread().name == "first":
            paused.set()
            release.wait(timeout=10)
        return original_save(session, allocation)

    monkeypatch.setattr(allocation_service, "_save", paused_save)
    results = {}

    def run(name, transaction_id):
        with Session(file_engine) as session:
            try:
                allocation = allocation_service.allocate(session, debt_id, transaction_id, Decimal("800"))
                results[name] = allocation.covered_amount
            except OverAllocation as exc:
                results[name] = exc

    first = threading.Thread(target=run, args=("first", first_tx), name="first")
    second = threading.Thread(target=run, args=("second", second_tx), name="second")
    first.start()
    assert paused.wait(timeout=10)
    second.start()
    time.sleep(0.3)  # la segunda queda esperando el lock de escritura
    release.set()
    first.join(timeout=15)
    second.join(timeout=15)

    assert results["first"] == Decimal("800")
    assert isinstance(results["second"], OverAllocation)
    assert results["second"].side == "debt"
    assert results["second"].remaining == Decimal("200")
    with Session(file_engine) as session:
        assert get_debt_covered(session, debt_id) == Decimal("800")


def test_allocation_takes_write_lock_then_locks_debt_before_transaction(file_engine, debt_and_payments):
    debt_id, tx_id, _ = debt_and_payments
    statements = []

    @event.listens_for(file_engine, "before_cursor_execute")
    def capture(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    with Session(file_engine) as session:
        allocation_service.allocate(session, debt_id, tx_id, Decimal("100"))

    selects = [i for i, s in enumerate(statements) if s.lstrip().upper().startswith("SELECT")]
    begin = statements.index("BEGIN IMMEDIATE")
    assert begin < selects[0]
    debt_select = statements[selects[0]]
    tx_select = statements[selects[1]]
    assert debt_select.split(" WHERE ")[0].split("FROM")[-1].strip() == "debt"
    assert "transaction" in tx_select.split(" WHERE ")[0].split("FROM")[-1]


def test_lock_statements_use_for_update():
    dialect = postgresql.dialect()

    assert "FOR UPDATE" in str(debt_for_update(1).compile(dialect=dialect))
    assert "FOR UPDATE" in str(transaction_for_update(1).compile(dialect=dialect))
