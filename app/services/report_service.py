# app/services/report_service.py
"""
Estados de cuenta y balances por persona dentro de un proyecto.

Solo leen transacciones; no dependen de las asignaciones.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.core.exceptions import InvalidRequest
from app.models.transaction import Transaction
from app.schemas.transaction import LedgerRow, PairBalance, PersonBalance
from app.services.resolvers import PERSON, PROJECT, MasterDataResolver, SqlMasterDataResolver, require
from app.utils.amounts import ZERO, as_decimal

logger = logging.getLogger(__name__)


def _sum_amount(session: Session, *conditions):
    total = session.exec(
        select(func.coalesce(func.sum(Transaction.amount_paid), 0)).where(*conditions)
    ).one()
    return as_decimal(total)


def ledger(
    session: Session,
    project_id: int,
    person_id: int,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    resolver: Optional[MasterDataResolver] = None,
) -> List[LedgerRow]:
    resolver = resolver or SqlMasterDataResolver(session)
    require(resolver, PROJECT, project_id)
    require(resolver, PERSON, person_id)
    if date_from and date_to and date_from > date_to:
        raise InvalidRequest("La fecha inicial no puede ser posterior a la fecha final.")

    query = select(Transaction).where(
        Transaction.project_id == project_id,
        or_(Transaction.from_person_id == person_id, Transaction.to_person_id == person_id),
    )
    if date_from:
        query = query.where(Transaction.due_date >= date_from)
    if date_to:
        query = query.where(Transaction.due_date <= date_to)

    transactions = session.exec(
        query.order_by(Transaction.registered_at.asc(), Transaction.id.asc())
    ).all()

    rows = []
    balance = ZERO
    for tx in transactions:
        amount = as_decimal(tx.amount_paid)
        # from != to: la persona es receptora o pagadora, nunca ambas
        delta = amount if tx.to_person_id == person_id else -amount
        balance += delta
        rows.append(LedgerRow(
            transaction_id=tx.id,
            registered_at=tx.registered_at,
            due_date=tx.due_date,
            code=tx.code,
            from_person_id=tx.from_person_id,
            to_person_id=tx.to_person_id,
            amount=amount,
            delta=delta,
            running_balance=balance,
            note=tx.note,
        ))

    logger.debug("Ledger project=%s person=%s rows=%s balance=%s", project_id, person_id, len(rows), balance)
    return rows


def person_balance(
    session: Session,
    project_id: int,
    person_id: int,
    resolver: Optional[MasterDataResolver] = None,
) -> PersonBalance:
    resolver = resolver or SqlMasterDataResolver(session)
    require(resolver, PROJECT, project_id)
    require(resolver, PERSON, person_id)

    total_in = _sum_amount(
        session,
        Transaction.project_id == project_id,
        Transaction.to_person_id == person_id,
    )
    total_out = _sum_amount(
        session,
        Transaction.project_id == project_id,
        Transaction.from_person_id == person_id,
    )
    return PersonBalance(
        project_id=project_id,
        person_id=person_id,
        total_in=total_in,
        total_out=total_out,
        net=total_in - total_out,
    )


def pair_balance(
    session: Session,
    project_id: int,
    from_person_id: int,
    to_person_id: int,
    resolver: Optional[MasterDataResolver] = None,
) -> PairBalance:
    if from_person_id == to_person_id:
        raise InvalidRequest("Las dos personas del balance deben ser distintas.")

    resolver = resolver or SqlMasterDataResolver(session)
    require(resolver, PROJECT, project_id)
    require(resolver, PERSON, from_person_id)
    require(resolver, PERSON, to_person_id)

    a_to_b = _sum_amount(
        session,
        Transaction.project_id == project_id,
        Transaction.from_person_id == from_person_id,
        Transaction.to_person_id == to_person_id,
    )
    b_to_a = _sum_amount(
        session,
        Transaction.project_id == project_id,
        Transaction.from_person_id == to_person_id,
        Transaction.to_person_id == from_person_id,
    )
    return PairBalance(
        project_id=project_id,
        from_person_id=from_person_id,
        to_person_id=to_person_id,
        from_to_total=a_to_b,
        to_from_total=b_to_a,
        net=a_to_b - b_to_a,
    )
