# app/services/allocation_service.py
"""
Motor de asignaciones entre deudas y transacciones.

Invariantes que se mantienen después de cada operación:

- Suma de montos cubiertos de una deuda <= total de la deuda.
- Suma de montos cubiertos de una transacción <= monto pagado.
- deuda.person_id == transacción.to_person_id (solo quien recibe el pago
  puede saldar la deuda con él).
- A lo sumo una asignación por par (deuda, transacción).

Cada operación de escritura bloquea las filas de deuda y transacción que toca
(SELECT ... FOR UPDATE, siempre en orden deuda -> transacción), recalcula los
saldos con el bloqueo tomado y hace un único commit. Si algo falla la sesión
se revierte y no queda ninguna escritura parcial.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.exceptions import (
    AllocationNotAllowed,
    ConflictingDuplicate,
    DuplicateAllocation,
    InvalidAmount,
    NotFound,
    NotOwned,
    OverAllocation,
)
from app.models.allocation import Allocation
from app.models.debt import Debt
from app.models.transaction import Transaction
from app.schemas.allocation import DebtCandidate, TransactionCandidate
from app.services.resolvers import PERSON, MasterDataResolver, SqlMasterDataResolver
from app.utils.amounts import ZERO, Coverage, as_decimal, is_whole
from app.utils.coverage_helpers import (
    covered_by_debt,
    covered_by_transaction,
    debt_coverage,
    debt_for_update,
    totals_by_debt,
    transaction_coverage,
    transaction_for_update,
)

logger = logging.getLogger(__name__)

DEBT_SIDE = "debt"
TRANSACTION_SIDE = "transaction"


# ---------------- helpers ----------------

def _trim_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _validate_covered_amount(amount) -> Decimal:
    amount = as_decimal(amount)
    if amount <= ZERO:
        raise InvalidAmount("El monto cubierto debe ser mayor a cero.")
    if not is_whole(amount):
        raise InvalidAmount("El monto cubierto debe ser un monto entero.")
    return amount


def _lock_debt(session: Session, debt_id: int) -> Debt:
    debt = session.exec(debt_for_update(debt_id)).first()
    if not debt:
        raise NotFound(f"Deuda no encontrada (id: {debt_id})")
    return debt


def _lock_transaction(session: Session, transaction_id: int) -> Transaction:
    tx = session.exec(transaction_for_update(transaction_id)).first()
    if not tx:
        raise NotFound(f"Transacción no encontrada (id: {transaction_id})")
    return tx


def _get_allocation(session: Session, allocation_id: int, lock: bool = False) -> Allocation:
    statement = select(Allocation).where(Allocation.id == allocation_id)
    if lock:
        statement = statement.with_for_update()
    allocation = session.exec(statement).first()
    if not allocation:
        raise NotFound(f"Asignación no encontrada (id: {allocation_id})")
    return allocation


def _assert_same_person(debt: Debt, tx: Transaction) -> None:
    if debt.person_id != tx.to_person_id:
        raise AllocationNotAllowed(
            "Asignación no permitida: la persona de la deuda y el receptor (to_person) de la transacción deben ser la misma."
        )


def _pair_exists(session: Session, debt_id: int, transaction_id: int) -> bool:
    return session.exec(
        select(Allocation.id).where(
            Allocation.debt_id == debt_id,
            Allocation.transaction_id == transaction_id,
        )
    ).first() is not None


def _check_remaining(side: str, amount: Decimal, remaining: Decimal) -> None:
    if amount > remaining:
        raise OverAllocation(side=side, remaining=remaining)


def _save(session: Session, allocation: Allocation) -> Allocation:
    session.add(allocation)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.warning(
            "Allocation pair (debt=%s, transaction=%s) rejected by storage constraint",
            allocation.debt_id, allocation.transaction_id,
        )
        raise ConflictingDuplicate("La asignación no pudo guardarse (restricción de la base de datos).")
    session.refresh(allocation)
    return allocation


# ---------------- CREATE ----------------

def _create(
    session: Session,
    debt_id: int,
    transaction_id: int,
    covered_amount,
    note: Optional[str],
    primary: str,
) -> Allocation:
    debt = _lock_debt(session, debt_id)
    tx = _lock_transaction(session, transaction_id)

    amount = _validate_covered_amount(covered_amount)
    _assert_same_person(debt, tx)

    if _pair_exists(session, debt_id, transaction_id):
        if primary == DEBT_SIDE:
            raise DuplicateAllocation("Esta transacción ya está asignada a esta deuda.")
        raise DuplicateAllocation("Esta deuda ya está asignada a esta transacción.")

    _check_remaining(DEBT_SIDE, amount, debt_coverage(session, debt_id).remaining)
    _check_remaining(TRANSACTION_SIDE, amount, transaction_coverage(session, tx).remaining)

    allocation = _save(session, Allocation(
        debt_id=debt_id,
        transaction_id=transaction_id,
        covered_amount=amount,
        note=_trim_to_none(note),
    ))
    logger.info(
        "Allocation %s created: debt=%s transaction=%s covered=%s",
        allocation.id, debt_id, transaction_id, amount,
    )
    return allocation


def allocate(session: Session, debt_id: int, transaction_id: int, covered_amount, note: Optional[str] = None) -> Allocation:
    """Crea una asignación desde la deuda."""
    return _create(session, debt_id, transaction_id, covered_amount, note, primary=DEBT_SIDE)


def allocate_from_transaction(
    session: Session, transaction_id: int, debt_id: int, covered_amount, note: Optional[str] = None
) -> Allocation:
    """Crea una asignación desde la transacción; mismas reglas que allocate()."""
    return _create(session, debt_id, transaction_id, covered_amount, note, primary=TRANSACTION_SIDE)


# ---------------- UPDATE ----------------

def _apply_update(
    session: Session,
    allocation: Allocation,
    debt: Debt,
    tx: Transaction,
    covered_amount,
    note: Optional[str],
    primary: str,
) -> Allocation:
    amount = _validate_covered_amount(covered_amount)
    _assert_same_person(debt, tx)

    same_debt = allocation.debt_id == debt.id
    same_tx = allocation.transaction_id == tx.id
    if not (same_debt and same_tx) and _pair_exists(session, debt.id, tx.id):
        raise DuplicateAllocation("Ya existe una asignación para esta deuda y esta transacción.")

    # La contribución previa solo se descuenta del lado cuya entidad no cambia
    old_amount = as_decimal(allocation.covered_amount)
    debt_cov = debt_coverage(session, debt.id)
    tx_cov = transaction_coverage(session, tx)
    debt_remaining = debt_cov.remaining_excluding(old_amount) if same_debt else debt_cov.remaining
    tx_remaining = tx_cov.remaining_excluding(old_amount) if same_tx else tx_cov.remaining

    checks = [(DEBT_SIDE, debt_remaining), (TRANSACTION_SIDE, tx_remaining)]
    if primary == TRANSACTION_SIDE:
        checks.reverse()
    for side, remaining in checks:
        _check_remaining(side, amount, remaining)

    allocation.debt_id = debt.id
    allocation.transaction_id = tx.id
    allocation.covered_amount = amount
    allocation.note = _trim_to_none(note)

    allocation = _save(session, allocation)
    logger.info(
        "Allocation %s updated: debt=%s transaction=%s covered=%s (was %s)",
        allocation.id, debt.id, tx.id, amount, old_amount,
    )
    return allocation


def update_from_debt(
    session: Session,
    debt_id: int,
    allocation_id: int,
    transaction_id: int,
    covered_amount,
    note: Optional[str] = None,
) -> Allocation:
    allocation = _get_allocation(session, allocation_id, lock=True)
    if allocation.debt_id != debt_id:
        raise NotOwned("La asignación no pertenece a esta deuda.")

    debt = _lock_debt(session, debt_id)
    tx = _lock_transaction(session, transaction_id)
    return _apply_update(session, allocation, debt, tx, covered_amount, note, primary=DEBT_SIDE)


def update_from_transaction(
    session: Session,
    transaction_id: int,
    allocation_id: int,
    debt_id: int,
    covered_amount,
    note: Optional[str] = None,
) -> Allocation:
    allocation = _get_allocation(session, allocation_id, lock=True)
    if allocation.transaction_id != transaction_id:
        raise NotOwned("La asignación no pertenece a esta transacción.")

    debt = _lock_debt(session, debt_id)
    tx = _lock_transaction(session, transaction_id)
    return _apply_update(session, allocation, debt, tx, covered_amount, note, primary=TRANSACTION_SIDE)


# ---------------- DELETE ----------------

def delete_from_debt(session: Session, debt_id: int, allocation_id: int) -> None:
    allocation = _get_allocation(session, allocation_id, lock=True)
    if allocation.debt_id != debt_id:
        raise NotOwned("La asignación no pertenece a esta deuda.")

    session.delete(allocation)
    session.commit()
    logger.info("Allocation %s deleted from debt %s", allocation_id, debt_id)


def delete_from_transaction(session: Session, transaction_id: int, allocation_id: int) -> None:
    allocation = _get_allocation(session, allocation_id, lock=True)
    if allocation.transaction_id != transaction_id:
        raise NotOwned("La asignación no pertenece a esta transacción.")

    session.delete(allocation)
    session.commit()
    logger.info("Allocation %s deleted from transaction %s", allocation_id, transaction_id)


# ---------------- LIST ----------------

def list_by_debt(session: Session, debt_id: int) -> List[Allocation]:
    return session.exec(
        select(Allocation).where(Allocation.debt_id == debt_id).order_by(Allocation.id.desc())
    ).all()


def list_by_transaction(session: Session, transaction_id: int) -> List[Allocation]:
    return session.exec(
        select(Allocation).where(Allocation.transaction_id == transaction_id).order_by(Allocation.id.desc())
    ).all()


# ---------------- CANDIDATES ----------------

def transaction_candidates_for_debt(
    session: Session, debt_id: int, allocation_id: Optional[int] = None
) -> List[TransactionCandidate]:
    """
    Todas las transacciones cuyo receptor es la persona de la deuda, incluidas
    las que ya no tienen saldo. Si se está editando ``allocation_id``, su monto
    previo se suma al saldo editable de la transacción enlazada.
    """
    debt = session.get(Debt, debt_id)
    if not debt:
        raise NotFound(f"Deuda no encontrada (id: {debt_id})")

    editing_tx_id = None
    editing_amount = ZERO
    if allocation_id is not None:
        allocation = _get_allocation(session, allocation_id)
        if allocation.debt_id != debt_id:
            raise NotOwned("La asignación no pertenece a esta deuda.")
        editing_tx_id = allocation.transaction_id
        editing_amount = as_decimal(allocation.covered_amount)

    transactions = session.exec(
        select(Transaction)
        .where(Transaction.to_person_id == debt.person_id)
        .order_by(Transaction.registered_at.desc(), Transaction.id.desc())
    ).all()
    covered = covered_by_transaction(session, [t.id for t in transactions])

    candidates = []
    for tx in transactions:
        cov = Coverage(total=as_decimal(tx.amount_paid), covered=covered.get(tx.id, ZERO))
        editable = cov.remaining + editing_amount if tx.id == editing_tx_id else cov.remaining
        candidates.append(TransactionCandidate(
            id=tx.id,
            code=tx.code,
            registered_at=tx.registered_at,
            amount_paid=cov.total,
            allocated_amount=cov.covered,
            remaining_amount=cov.remaining,
            editable_remaining_amount=editable,
        ))
    return candidates


def debt_candidates_for_transaction(
    session: Session,
    transaction_id: int,
    allocation_id: Optional[int] = None,
    resolver: Optional[MasterDataResolver] = None,
) -> List[DebtCandidate]:
    """Simétrico de transaction_candidates_for_debt()."""
    resolver = resolver or SqlMasterDataResolver(session)

    tx = session.get(Transaction, transaction_id)
    if not tx:
        raise NotFound(f"Transacción no encontrada (id: {transaction_id})")

    editing_debt_id = None
    editing_amount = ZERO
    if allocation_id is not None:
        allocation = _get_allocation(session, allocation_id)
        if allocation.transaction_id != transaction_id:
            raise NotOwned("La asignación no pertenece a esta transacción.")
        editing_debt_id = allocation.debt_id
        editing_amount = as_decimal(allocation.covered_amount)

    debts = session.exec(
        select(Debt)
        .where(Debt.person_id == tx.to_person_id)
        .order_by(Debt.registered_at.desc(), Debt.id.desc())
    ).all()
    debt_ids = [d.id for d in debts]
    totals = totals_by_debt(session, debt_ids)
    covered = covered_by_debt(session, debt_ids)
    person_title = resolver.get(PERSON, tx.to_person_id).title if debts else ""

    candidates = []
    for debt in debts:
        cov = Coverage(total=totals.get(debt.id, ZERO), covered=covered.get(debt.id, ZERO))
        editable = cov.remaining + editing_amount if debt.id == editing_debt_id else cov.remaining
        candidates.append(DebtCandidate(
            id=debt.id,
            person_title=person_title,
            registered_at=debt.registered_at,
            total_amount=cov.total,
            allocated_amount=cov.covered,
            remaining_amount=cov.remaining,
            editable_remaining_amount=editable,
        ))
    return candidates
