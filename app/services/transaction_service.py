# app/services/transaction_service.py

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.exceptions import (
    AllocationExists,
    AllocationNotAllowed,
    ConflictingDuplicate,
    DuplicateCode,
    HasAttachments,
    InvalidAmount,
    InvalidRequest,
    NotFound,
)
from app.models.enums import AttachmentOwner
from app.models.transaction import Transaction
from app.schemas.transaction import TransactionCreate, TransactionRead, TransactionUpdate
from app.services.resolvers import (
    PERSON,
    PROJECT,
    AttachmentCounter,
    MasterDataResolver,
    SqlAttachmentCounter,
    SqlMasterDataResolver,
    require,
)
from app.utils.amounts import ZERO, Coverage, as_decimal, is_whole
from app.utils.coverage_helpers import (
    covered_by_transaction,
    get_transaction_covered,
    has_allocations_for_transaction,
    transaction_for_update,
)

logger = logging.getLogger(__name__)


def _trim_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def to_read(tx: Transaction, allocated=ZERO) -> TransactionRead:
    coverage = Coverage(total=as_decimal(tx.amount_paid), covered=as_decimal(allocated))
    read = TransactionRead.model_validate(tx, from_attributes=True)
    read.allocated_amount = coverage.covered
    read.remaining_amount = coverage.remaining
    return read


def _validate(
    session: Session,
    data: TransactionCreate,
    resolver: MasterDataResolver,
    current_id: Optional[int] = None,
) -> str:
    """Valida la transacción y devuelve el código normalizado."""
    if data.from_person_id == data.to_person_id:
        raise InvalidRequest("El pagador y el receptor no pueden ser la misma persona.")

    # Se guarda en mayúsculas: la unicidad no depende de LOWER() de la base de datos
    code = (data.code or "").strip().upper()
    if not code:
        raise InvalidRequest("El código de la transacción es obligatorio.")

    amount = as_decimal(data.amount_paid)
    if amount <= ZERO:
        raise InvalidAmount("El monto pagado debe ser mayor a cero.")
    if not is_whole(amount):
        raise InvalidAmount("El monto pagado debe ser un monto entero.")

    require(resolver, PROJECT, data.project_id)
    require(resolver, PERSON, data.from_person_id)
    require(resolver, PERSON, data.to_person_id)

    existing_id = session.exec(
        select(Transaction.id).where(Transaction.code == code)
    ).first()
    if existing_id is not None and existing_id != current_id:
        raise DuplicateCode(f"Este código de transacción ya está registrado: {code}")

    return code


def _apply(tx: Transaction, data: TransactionCreate, code: str) -> None:
    tx.project_id = data.project_id
    tx.from_person_id = data.from_person_id
    tx.to_person_id = data.to_person_id
    tx.code = code
    tx.due_date = data.due_date
    tx.amount_paid = as_decimal(data.amount_paid)
    tx.payment_type = data.payment_type
    tx.transaction_type = data.transaction_type
    tx.note = _trim_to_none(data.note)


def _commit(session: Session) -> None:
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictingDuplicate("La transacción no pudo guardarse (código duplicado o restricción de la base de datos).")


def _lock_transaction(session: Session, transaction_id: int) -> Transaction:
    tx = session.exec(transaction_for_update(transaction_id)).first()
    if not tx:
        raise NotFound(f"Transacción no encontrada (id: {transaction_id})")
    return tx


def create_transaction(
    session: Session,
    data: TransactionCreate,
    resolver: Optional[MasterDataResolver] = None,
) -> TransactionRead:
    resolver = resolver or SqlMasterDataResolver(session)
    code = _validate(session, data, resolver)

    tx = Transaction(registered_at=data.registered_at or datetime.utcnow())
    _apply(tx, data, code)
    session.add(tx)
    _commit(session)
    session.refresh(tx)

    logger.info("Transaction %s (%s) created: %s -> %s amount=%s",
                tx.id, tx.code, tx.from_person_id, tx.to_person_id, tx.amount_paid)
    return to_read(tx)


def get_transaction(session: Session, transaction_id: int) -> TransactionRead:
    tx = session.get(Transaction, transaction_id)
    if not tx:
        raise NotFound(f"Transacción no encontrada (id: {transaction_id})")
    return to_read(tx, get_transaction_covered(session, transaction_id))


def list_transactions(session: Session, project_id: Optional[int] = None) -> List[TransactionRead]:
    query = select(Transaction)
    if project_id is not None:
        query = query.where(Transaction.project_id == project_id)
    transactions = session.exec(
        query.order_by(Transaction.registered_at.desc(), Transaction.id.desc())
    ).all()

    covered = covered_by_transaction(session, [t.id for t in transactions])
    return [to_read(t, covered.get(t.id, ZERO)) for t in transactions]


def update_transaction(
    session: Session,
    transaction_id: int,
    data: TransactionUpdate,
    resolver: Optional[MasterDataResolver] = None,
) -> TransactionRead:
    resolver = resolver or SqlMasterDataResolver(session)
    tx = _lock_transaction(session, transaction_id)
    code = _validate(session, data, resolver, current_id=transaction_id)

    # Editar no puede romper las asignaciones existentes
    covered = get_transaction_covered(session, transaction_id)
    if as_decimal(data.amount_paid) < covered:
        raise InvalidAmount(
            f"El monto pagado no puede ser menor al monto ya asignado ({covered})."
        )
    if data.to_person_id != tx.to_person_id and covered > ZERO:
        raise AllocationNotAllowed("No puedes cambiar el receptor: la transacción tiene asignaciones.")

    _apply(tx, data, code)
    if data.registered_at is not None:
        tx.registered_at = data.registered_at
    session.add(tx)
    _commit(session)
    session.refresh(tx)

    logger.info("Transaction %s updated, amount=%s covered=%s", tx.id, tx.amount_paid, covered)
    return to_read(tx, covered)


def delete_transaction(
    session: Session,
    transaction_id: int,
    attachments: Optional[AttachmentCounter] = None,
) -> None:
    attachments = attachments or SqlAttachmentCounter(session)
    tx = _lock_transaction(session, transaction_id)

    if has_allocations_for_transaction(session, transaction_id):
        raise AllocationExists("No puedes eliminar esta transacción porque tiene asignaciones registradas.")
    if attachments.count_attachments(AttachmentOwner.transaction, transaction_id) > 0:
        raise HasAttachments("No puedes eliminar esta transacción porque tiene documentos adjuntos.")

    session.delete(tx)
    session.commit()
    logger.info("Transaction %s deleted", transaction_id)
