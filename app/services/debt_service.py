# app/services/debt_service.py

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.exceptions import (
    AllocationExists,
    AllocationNotAllowed,
    ConflictingDuplicate,
    HasAttachments,
    InvalidAmount,
    InvalidRequest,
    NotFound,
)
from app.models.allocation import Allocation
from app.models.debt import Debt, DebtLine
from app.models.enums import AttachmentOwner
from app.models.transaction import Transaction
from app.schemas.debt import (
    DebtAllocationView,
    DebtCreate,
    DebtLineCreate,
    DebtLineView,
    DebtRead,
    DebtSummary,
    DebtUpdate,
    DebtView,
)
from app.services.resolvers import (
    ITEM,
    PERSON,
    PROJECT,
    UNIT,
    AttachmentCounter,
    MasterDataResolver,
    SqlAttachmentCounter,
    SqlMasterDataResolver,
    require,
)
from app.utils.amounts import ZERO, Coverage, as_decimal, debt_total, has_max_places, is_whole, line_total
from app.utils.coverage_helpers import (
    covered_by_debt,
    debt_for_update,
    get_debt_covered,
    get_debt_lines,
    has_allocations_for_debt,
    totals_by_debt,
)

logger = logging.getLogger(__name__)


def _trim_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _validate_lines(lines: List[DebtLineCreate], resolver: MasterDataResolver) -> None:
    if not lines:
        raise InvalidRequest("Se requiere al menos una línea para la deuda.")

    item_ids = set()
    for line in lines:
        if line.item_id in item_ids:
            raise InvalidRequest(f"El ítem está repetido en las líneas de la deuda (id: {line.item_id}).")
        item_ids.add(line.item_id)

        quantity = as_decimal(line.quantity)
        unit_price = as_decimal(line.unit_price)
        if quantity <= ZERO:
            raise InvalidAmount("La cantidad debe ser mayor a cero.")
        if not has_max_places(quantity, 3):
            raise InvalidAmount("La cantidad admite como máximo 3 decimales.")
        if unit_price < ZERO:
            raise InvalidAmount("El precio unitario no puede ser negativo.")
        if not is_whole(unit_price):
            raise InvalidAmount("El precio unitario debe ser un monto entero.")

    for line in lines:
        require(resolver, ITEM, line.item_id)
        require(resolver, UNIT, line.unit_id)


def _validate_header(data: DebtCreate, resolver: MasterDataResolver) -> None:
    require(resolver, PROJECT, data.project_id)
    require(resolver, PERSON, data.person_id)


def _lines_total(lines: List[DebtLineCreate]):
    return debt_total((line.quantity, line.unit_price) for line in lines)


def _add_lines(session: Session, debt_id: int, lines: List[DebtLineCreate]) -> None:
    for line in lines:
        session.add(DebtLine(
            debt_id=debt_id,
            item_id=line.item_id,
            unit_id=line.unit_id,
            quantity=as_decimal(line.quantity),
            unit_price=as_decimal(line.unit_price),
            note=_trim_to_none(line.note),
        ))


def _lock_debt(session: Session, debt_id: int) -> Debt:
    debt = session.exec(debt_for_update(debt_id)).first()
    if not debt:
        raise NotFound(f"Deuda no encontrada (id: {debt_id})")
    return debt


def _commit(session: Session, message: str) -> None:
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictingDuplicate(message)


# ---------------- CRUD ----------------

def create_debt(session: Session, data: DebtCreate, resolver: Optional[MasterDataResolver] = None) -> Debt:
    resolver = resolver or SqlMasterDataResolver(session)
    _validate_header(data, resolver)
    _validate_lines(data.lines, resolver)

    debt = Debt(
        project_id=data.project_id,
        person_id=data.person_id,
        due_date=data.due_date,
        registered_at=data.registered_at or datetime.utcnow(),
        note=_trim_to_none(data.note),
    )
    session.add(debt)
    session.flush()  # necesitamos el id para las líneas
    _add_lines(session, debt.id, data.lines)

    _commit(session, "No se pudo registrar la deuda (datos duplicados o restricción de la base de datos).")
    session.refresh(debt)
    logger.info("Debt %s created with %s lines, total=%s", debt.id, len(data.lines), _lines_total(data.lines))
    return debt


def get_debt(session: Session, debt_id: int) -> Debt:
    debt = session.get(Debt, debt_id)
    if not debt:
        raise NotFound(f"Deuda no encontrada (id: {debt_id})")
    return debt


def update_debt(
    session: Session,
    debt_id: int,
    data: DebtUpdate,
    resolver: Optional[MasterDataResolver] = None,
) -> Debt:
    """
    Reemplaza cabecera y líneas. Las líneas existentes se borran y se insertan
    las nuevas; el nuevo total no puede quedar por debajo de lo ya asignado.
    """
    resolver = resolver or SqlMasterDataResolver(session)
    debt = _lock_debt(session, debt_id)
    _validate_header(data, resolver)
    _validate_lines(data.lines, resolver)

    covered = get_debt_covered(session, debt_id)
    new_total = _lines_total(data.lines)
    if new_total < covered:
        raise InvalidAmount(
            f"El nuevo total de la deuda ({new_total}) no puede ser menor al monto ya asignado ({covered})."
        )
    if data.person_id != debt.person_id and covered > ZERO:
        raise AllocationNotAllowed("No puedes cambiar la persona: la deuda tiene asignaciones.")

    debt.project_id = data.project_id
    debt.person_id = data.person_id
    debt.due_date = data.due_date
    if data.registered_at is not None:
        debt.registered_at = data.registered_at
    debt.note = _trim_to_none(data.note)
    session.add(debt)

    for line in get_debt_lines(session, debt_id):
        session.delete(line)
    session.flush()  # borrar antes de insertar: (debt_id, item_id) es único
    _add_lines(session, debt_id, data.lines)

    _commit(session, "No se pudo actualizar la deuda (datos duplicados o restricción de la base de datos).")
    session.refresh(debt)
    logger.info("Debt %s updated, total=%s covered=%s", debt_id, new_total, covered)
    return debt


def delete_debt(
    session: Session,
    debt_id: int,
    attachments: Optional[AttachmentCounter] = None,
) -> None:
    attachments = attachments or SqlAttachmentCounter(session)
    debt = _lock_debt(session, debt_id)

    if has_allocations_for_debt(session, debt_id):
        raise AllocationExists("No puedes eliminar esta deuda porque tiene asignaciones registradas.")
    if attachments.count_attachments(AttachmentOwner.debt, debt_id) > 0:
        raise HasAttachments("No puedes eliminar esta deuda porque tiene documentos adjuntos.")

    for line in get_debt_lines(session, debt_id):
        session.delete(line)
    session.flush()
    session.delete(debt)
    session.commit()
    logger.info("Debt %s deleted", debt_id)


# ---------------- VIEW ----------------

def view_debt(session: Session, debt_id: int, resolver: Optional[MasterDataResolver] = None) -> DebtView:
    resolver = resolver or SqlMasterDataResolver(session)
    debt = get_debt(session, debt_id)

    lines = []
    for line in get_debt_lines(session, debt_id):
        lines.append(DebtLineView(
            id=line.id,
            item_id=line.item_id,
            item_title=resolver.get(ITEM, line.item_id).title,
            unit_id=line.unit_id,
            unit_title=resolver.get(UNIT, line.unit_id).title,
            quantity=as_decimal(line.quantity),
            unit_price=as_decimal(line.unit_price),
            line_total=line_total(line.quantity, line.unit_price),
            note=line.note,
        ))

    rows = session.exec(
        select(Allocation, Transaction)
        .join(Transaction, Allocation.transaction_id == Transaction.id)
        .where(Allocation.debt_id == debt_id)
        .order_by(Allocation.id.desc())
    ).all()
    allocations = [
        DebtAllocationView(
            allocation_id=allocation.id,
            transaction_id=tx.id,
            transaction_code=tx.code,
            transaction_registered_at=tx.registered_at,
            transaction_amount_paid=as_decimal(tx.amount_paid),
            covered_amount=as_decimal(allocation.covered_amount),
            note=allocation.note,
        )
        for allocation, tx in rows
    ]

    coverage = Coverage(
        total=debt_total((line.quantity, line.unit_price) for line in lines),
        covered=get_debt_covered(session, debt_id),
    )
    return DebtView(
        header=DebtRead.model_validate(debt, from_attributes=True),
        lines=lines,
        allocations=allocations,
        total_amount=coverage.total,
        covered_amount=coverage.covered,
        remaining_amount=coverage.remaining,
    )


# ---------------- LISTADOS ----------------

def _summaries(session: Session, debts: List[Debt]) -> List[DebtSummary]:
    debt_ids = [d.id for d in debts]
    totals = totals_by_debt(session, debt_ids)
    covered = covered_by_debt(session, debt_ids)

    result = []
    for debt in debts:
        cov = Coverage(total=totals.get(debt.id, ZERO), covered=covered.get(debt.id, ZERO))
        result.append(DebtSummary(
            debt_id=debt.id,
            project_id=debt.project_id,
            person_id=debt.person_id,
            due_date=debt.due_date,
            registered_at=debt.registered_at,
            total_amount=cov.total,
            covered_amount=cov.covered,
            remaining_amount=cov.remaining,
        ))
    return result


def list_debts(session: Session, project_id: Optional[int] = None) -> List[DebtSummary]:
    query = select(Debt)
    if project_id is not None:
        query = query.where(Debt.project_id == project_id)
    debts = session.exec(query.order_by(Debt.registered_at.desc(), Debt.id.desc())).all()
    return _summaries(session, debts)


def open_debts(
    session: Session,
    project_id: int,
    person_id: Optional[int] = None,
    resolver: Optional[MasterDataResolver] = None,
) -> List[DebtSummary]:
    """Deudas del proyecto (opcionalmente de una persona) con saldo pendiente."""
    resolver = resolver or SqlMasterDataResolver(session)
    require(resolver, PROJECT, project_id)
    if person_id is not None:
        require(resolver, PERSON, person_id)

    query = select(Debt).where(Debt.project_id == project_id)
    if person_id is not None:
        query = query.where(Debt.person_id == person_id)
    debts = session.exec(query.order_by(Debt.registered_at.desc(), Debt.id.desc())).all()

    return [row for row in _summaries(session, debts) if row.remaining_amount > ZERO]
