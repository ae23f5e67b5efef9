# app/utils/coverage_helpers.py

from decimal import Decimal
from typing import Dict, Iterable, List

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.allocation import Allocation
from app.models.debt import Debt, DebtLine
from app.models.transaction import Transaction
from app.utils.amounts import Coverage, as_decimal, debt_total


def debt_for_update(debt_id: int):
    """SELECT de la deuda con bloqueo de fila (FOR UPDATE)."""
    return select(Debt).where(Debt.id == debt_id).with_for_update()


def transaction_for_update(transaction_id: int):
    return select(Transaction).where(Transaction.id == transaction_id).with_for_update()


def get_debt_lines(session: Session, debt_id: int) -> List[DebtLine]:
    return session.exec(
        select(DebtLine).where(DebtLine.debt_id == debt_id).order_by(DebtLine.id)
    ).all()


def get_debt_total(session: Session, debt_id: int) -> Decimal:
    lines = get_debt_lines(session, debt_id)
    return debt_total((line.quantity, line.unit_price) for line in lines)


def get_debt_covered(session: Session, debt_id: int) -> Decimal:
    covered = session.exec(
        select(func.coalesce(func.sum(Allocation.covered_amount), 0))
        .where(Allocation.debt_id == debt_id)
    ).one()
    return as_decimal(covered)


def get_transaction_covered(session: Session, transaction_id: int) -> Decimal:
    covered = session.exec(
        select(func.coalesce(func.sum(Allocation.covered_amount), 0))
        .where(Allocation.transaction_id == transaction_id)
    ).one()
    return as_decimal(covered)


def debt_coverage(session: Session, debt_id: int) -> Coverage:
    return Coverage(
        total=get_debt_total(session, debt_id),
        covered=get_debt_covered(session, debt_id),
    )


def transaction_coverage(session: Session, transaction: Transaction) -> Coverage:
    return Coverage(
        total=as_decimal(transaction.amount_paid),
        covered=get_transaction_covered(session, transaction.id),
    )


def totals_by_debt(session: Session, debt_ids: Iterable[int]) -> Dict[int, Decimal]:
    """Totales de varias deudas con una sola consulta de líneas."""
    ids = list(debt_ids)
    if not ids:
        return {}

    pairs: Dict[int, list] = {debt_id: [] for debt_id in ids}
    lines = session.exec(select(DebtLine).where(DebtLine.debt_id.in_(ids))).all()
    for line in lines:
        pairs[line.debt_id].append((line.quantity, line.unit_price))

    return {debt_id: debt_total(items) for debt_id, items in pairs.items()}


def covered_by_debt(session: Session, debt_ids: Iterable[int]) -> Dict[int, Decimal]:
    ids = list(debt_ids)
    if not ids:
        return {}

    rows = session.exec(
        select(Allocation.debt_id, func.sum(Allocation.covered_amount))
        .where(Allocation.debt_id.in_(ids))
        .group_by(Allocation.debt_id)
    ).all()
    return {debt_id: as_decimal(total) for debt_id, total in rows}


def covered_by_transaction(session: Session, transaction_ids: Iterable[int]) -> Dict[int, Decimal]:
    ids = list(transaction_ids)
    if not ids:
        return {}

    rows = session.exec(
        select(Allocation.transaction_id, func.sum(Allocation.covered_amount))
        .where(Allocation.transaction_id.in_(ids))
        .group_by(Allocation.transaction_id)
    ).all()
    return {tx_id: as_decimal(total) for tx_id, total in rows}


def has_allocations_for_debt(session: Session, debt_id: int) -> bool:
    return session.exec(
        select(Allocation.id).where(Allocation.debt_id == debt_id).limit(1)
    ).first() is not None


def has_allocations_for_transaction(session: Session, transaction_id: int) -> bool:
    return session.exec(
        select(Allocation.id).where(Allocation.transaction_id == transaction_id).limit(1)
    ).first() is not None
