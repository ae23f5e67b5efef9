"""Tests for ledgers and balances (allocation-independent)."""
from datetime import date, datetime
from decimal import Decimal

import pytest

from app.core.exceptions import InvalidRequest, NotFound
from app.services import allocation_service, report_service


@pytest.fixture
def history(seed, make_transaction):
    """Ana receives 100, pays 30, receives 50; inserted out of order."""
    third = make_transaction(50, payer=seed.carla, receiver=seed.ana,
                             registered_at=datetime(2026, 3, 10, 9), due_date=date(2026, 3, 10))
    first = make_transaction(100, payer=seed.beto, receiver=seed.ana,
                             registered_at=datetime(2026, 3, 1, 9), due_date=date(2026, 3, 1))
    second = make_transaction(30, payer=seed.ana, receiver=seed.beto,
                              registered_at=datetime(2026, 3, 5, 9), due_date=date(2026, 3, 5))
    # Ruido: otro proyecto y una transacción sin Ana
    make_transaction(999, payer=seed.beto, receiver=seed.ana, project=seed.other_project)
    make_transaction(777, payer=seed.beto, receiver=seed.carla)
    return [first, second, third]


def test_ledger_running_balance(session, seed, history):
    rows = report_service.ledger(session, seed.project.id, seed.ana.id)

    assert [r.transaction_id for r in rows] == [t.id for t in history]
    assert [r.delta for r in rows] == [Decimal("100"), Decimal("-30"), Decimal("50")]
    assert [r.running_balance for r in rows] == [Decimal("100"), Decimal("70"), Decimal("120")]


def test_ledger_filters_on_due_date_inclusive(session, seed, history):
    rows = report_service.ledger(
        session, seed.project.id, seed.ana.id, date_from=date(2026, 3, 5), date_to=date(2026, 3, 10)
    )

    assert [r.delta for r in rows] == [Decimal("-30"), Decimal("50")]
    assert [r.running_balance for r in rows] == [Decimal("-30"), Decimal("20")]


def test_ledger_rejects_inverted_range(session, seed):
    with pytest.raises(InvalidRequest):
        report_service.ledger(session, seed.project.id, seed.ana.id,
                              date_from=date(2026, 4, 1), date_to=date(2026, 3, 1))


def test_ledger_ignores_allocations(session, seed, history, make_debt):
    before = report_service.ledger(session, seed.project.id, seed.ana.id)
    debt = make_debt()
    allocation_service.allocate(session, debt.id, history[0].id, Decimal("100"))

    after = report_service.ledger(session, seed.project.id, seed.ana.id)

    assert [r.running_balance for r in after] == [r.running_balance for r in before]


def test_ledger_unknown_person(session, seed):
    with pytest.raises(NotFound):
        report_service.ledger(session, seed.project.id, 404)


def test_person_balance(session, seed, history):
    balance = report_service.person_balance(session, seed.project.id, seed.ana.id)

    assert balance.total_in == Decimal("150")
    assert balance.total_out == Decimal("30")
    assert balance.net == Decimal("120")


def test_person_balance_without_transactions(session, seed):
    balance = report_service.person_balance(session, seed.project.id, seed.acme.id)

    assert balance.total_in == Decimal("0")
    assert balance.total_out == Decimal("0")
    assert balance.net == Decimal("0")


def test_pair_balance(session, seed, history):
    balance = report_service.pair_balance(session, seed.project.id, seed.ana.id, seed.beto.id)

    assert balance.from_to_total == Decimal("30")
    assert balance.to_from_total == Decimal("100")
    assert balance.net == Decimal("-70")


def test_pair_balance_requires_two_persons(session, seed):
    with pytest.raises(InvalidRequest):
        report_service.pair_balance(session, seed.project.id, seed.ana.id, seed.ana.id)
