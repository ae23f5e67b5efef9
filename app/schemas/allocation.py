# app/schemas/allocation.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.schemas.amounts import Money

class AllocationCreate(BaseModel):
    """Asignación creada desde la deuda: indica la transacción."""
    transaction_id: int
    covered_amount: Money
    note: Optional[str] = Field(default=None, max_length=5000)

class AllocationFromTransactionCreate(BaseModel):
    """Asignación creada desde la transacción: indica la deuda."""
    debt_id: int
    covered_amount: Money
    note: Optional[str] = Field(default=None, max_length=5000)

class AllocationUpdate(AllocationCreate):
    pass

class AllocationFromTransactionUpdate(AllocationFromTransactionCreate):
    pass

class AllocationRead(BaseModel):
    id: int
    debt_id: int
    transaction_id: int
    covered_amount: Decimal
    note: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class TransactionCandidate(BaseModel):
    id: int
    code: str
    registered_at: datetime
    amount_paid: Decimal
    allocated_amount: Decimal
    remaining_amount: Decimal
    editable_remaining_amount: Decimal

class DebtCandidate(BaseModel):
    id: int
    person_title: str
    registered_at: datetime
    total_amount: Decimal
    allocated_amount: Decimal
    remaining_amount: Decimal
    editable_remaining_amount: Decimal
