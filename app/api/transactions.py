import datetime as dt
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from uuid import UUID
from typing import List, Optional

from app.core.security import get_current_user
from app.database import get_session
from app.schemas.transaction import (
    LedgerRow,
    PairBalance,
    PersonBalance,
    TransactionCreate,
    TransactionRead,
    TransactionUpdate,
)
from app.services import report_service, transaction_service

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("", response_model=TransactionRead, status_code=201)
@router.post("/", response_model=TransactionRead, status_code=201)
def create_transaction(
    transaction_data: TransactionCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return transaction_service.create_transaction(session, transaction_data)


@router.get("", response_model=List[TransactionRead])
@router.get("/", response_model=List[TransactionRead])
def list_transactions(
    project_id: Optional[int] = Query(None),
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return transaction_service.list_transactions(session, project_id=project_id)


# ---------------- Reportes (antes de /{transaction_id}) ----------------

@router.get("/ledger", response_model=List[LedgerRow])
def get_ledger(
    project_id: int = Query(...),
    person_id: int = Query(...),
    date_from: Optional[dt.date] = Query(None, alias="from"),
    date_to: Optional[dt.date] = Query(None, alias="to"),
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return report_service.ledger(session, project_id, person_id, date_from=date_from, date_to=date_to)


@router.get("/balance/person", response_model=PersonBalance)
def get_person_balance(
    project_id: int = Query(...),
    person_id: int = Query(...),
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return report_service.person_balance(session, project_id, person_id)


@router.get("/balance/pair", response_model=PairBalance)
def get_pair_balance(
    project_id: int = Query(...),
    from_person_id: int = Query(...),
    to_person_id: int = Query(...),
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return report_service.pair_balance(session, project_id, from_person_id, to_person_id)


# ---------------- CRUD por id ----------------

@router.get("/{transaction_id}", response_model=TransactionRead)
def get_transaction(
    transaction_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return transaction_service.get_transaction(session, transaction_id)


@router.put("/{transaction_id}", response_model=TransactionRead)
def update_transaction(
    transaction_id: int,
    transaction_data: TransactionUpdate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return transaction_service.update_transaction(session, transaction_id, transaction_data)


@router.delete("/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    transaction_service.delete_transaction(session, transaction_id)
