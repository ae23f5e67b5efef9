from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from uuid import UUID
from typing import List, Optional

from app.core.security import get_current_user
from app.database import get_session
from app.schemas.allocation import (
    AllocationCreate,
    AllocationFromTransactionCreate,
    AllocationFromTransactionUpdate,
    AllocationRead,
    AllocationUpdate,
    DebtCandidate,
    TransactionCandidate,
)
from app.services import allocation_service

# Las asignaciones se gestionan desde ambos lados: deuda y transacción
debt_router = APIRouter(prefix="/debts", tags=["allocations"])
transaction_router = APIRouter(prefix="/transactions", tags=["allocations"])


# ---------------- Desde la deuda ----------------

@debt_router.post("/{debt_id}/allocations", response_model=AllocationRead, status_code=201)
def create_debt_allocation(
    debt_id: int,
    data: AllocationCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return allocation_service.allocate(
        session, debt_id, data.transaction_id, data.covered_amount, note=data.note
    )


@debt_router.get("/{debt_id}/allocations", response_model=List[AllocationRead])
def list_debt_allocations(
    debt_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return allocation_service.list_by_debt(session, debt_id)


@debt_router.put("/{debt_id}/allocations/{allocation_id}", response_model=AllocationRead)
def update_debt_allocation(
    debt_id: int,
    allocation_id: int,
    data: AllocationUpdate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return allocation_service.update_from_debt(
        session, debt_id, allocation_id, data.transaction_id, data.covered_amount, note=data.note
    )


@debt_router.delete("/{debt_id}/allocations/{allocation_id}", status_code=204)
def delete_debt_allocation(
    debt_id: int,
    allocation_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    allocation_service.delete_from_debt(session, debt_id, allocation_id)


@debt_router.get(
    "/{debt_id}/allocation-candidates/transactions",
    response_model=List[TransactionCandidate],
)
def transaction_candidates(
    debt_id: int,
    allocation_id: Optional[int] = Query(None),
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return allocation_service.transaction_candidates_for_debt(session, debt_id, allocation_id=allocation_id)


# ---------------- Desde la transacción ----------------

@transaction_router.post("/{transaction_id}/allocations", response_model=AllocationRead, status_code=201)
def create_transaction_allocation(
    transaction_id: int,
    data: AllocationFromTransactionCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return allocation_service.allocate_from_transaction(
        session, transaction_id, data.debt_id, data.covered_amount, note=data.note
    )


@transaction_router.get("/{transaction_id}/allocations", response_model=List[AllocationRead])
def list_transaction_allocations(
    transaction_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return allocation_service.list_by_transaction(session, transaction_id)


@transaction_router.put("/{transaction_id}/allocations/{allocation_id}", response_model=AllocationRead)
def update_transaction_allocation(
    transaction_id: int,
    allocation_id: int,
    data: AllocationFromTransactionUpdate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return allocation_service.update_from_transaction(
        session, transaction_id, allocation_id, data.debt_id, data.covered_amount, note=data.note
    )


@transaction_router.delete("/{transaction_id}/allocations/{allocation_id}", status_code=204)
def delete_transaction_allocation(
    transaction_id: int,
    allocation_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    allocation_service.delete_from_transaction(session, transaction_id, allocation_id)


@transaction_router.get(
    "/{transaction_id}/allocation-candidates/debts",
    response_model=List[DebtCandidate],
)
def debt_candidates(
    transaction_id: int,
    allocation_id: Optional[int] = Query(None),
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return allocation_service.debt_candidates_for_transaction(
        session, transaction_id, allocation_id=allocation_id
    )
