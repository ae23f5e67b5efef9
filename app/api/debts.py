from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from uuid import UUID
from typing import List, Optional

from app.core.security import get_current_user
from app.database import get_session
from app.schemas.debt import DebtCreate, DebtRead, DebtSummary, DebtUpdate, DebtView
from app.services import debt_service

router = APIRouter(prefix="/debts", tags=["debts"])


@router.post("", response_model=DebtView, status_code=201)
@router.post("/", response_model=DebtView, status_code=201)
def create_debt(
    debt_data: DebtCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    debt = debt_service.create_debt(session, debt_data)
    return debt_service.view_debt(session, debt.id)


@router.get("", response_model=List[DebtSummary])
@router.get("/", response_model=List[DebtSummary])
def list_debts(
    project_id: Optional[int] = Query(None),
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return debt_service.list_debts(session, project_id=project_id)


# Debe declararse antes de /{debt_id}
@router.get("/open", response_model=List[DebtSummary])
def list_open_debts(
    project_id: int = Query(...),
    person_id: Optional[int] = Query(None),
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return debt_service.open_debts(session, project_id, person_id=person_id)


@router.get("/{debt_id}", response_model=DebtRead)
def get_debt(
    debt_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return debt_service.get_debt(session, debt_id)


@router.get("/{debt_id}/view", response_model=DebtView)
def view_debt(
    debt_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return debt_service.view_debt(session, debt_id)


@router.put("/{debt_id}", response_model=DebtView)
def update_debt(
    debt_id: int,
    debt_data: DebtUpdate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    debt_service.update_debt(session, debt_id, debt_data)
    return debt_service.view_debt(session, debt_id)


@router.delete("/{debt_id}", status_code=204)
def delete_debt(
    debt_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    debt_service.delete_debt(session, debt_id)
