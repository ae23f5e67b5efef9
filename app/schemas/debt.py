# app/schemas/debt.py

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

from app.schemas.amounts import Money, Quantity

class DebtLineCreate(BaseModel):
    item_id: int
    unit_id: int
    quantity: Quantity
    unit_price: Money
    note: Optional[str] = Field(default=None, max_length=4000)

class DebtCreate(BaseModel):
    project_id: int
    person_id: int
    due_date: date
    registered_at: Optional[datetime] = None
    note: Optional[str] = Field(default=None, max_length=4000)
    lines: List[DebtLineCreate]

class DebtUpdate(DebtCreate):
    pass

class DebtRead(BaseModel):
    id: int
    project_id: int
    person_id: int
    due_date: date
    registered_at: datetime
    note: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class DebtLineView(BaseModel):
    id: int
    item_id: int
    item_title: str
    unit_id: int
    unit_title: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal
    note: Optional[str] = None

class DebtAllocationView(BaseModel):
    allocation_id: int
    transaction_id: int
    transaction_code: str
    transaction_registered_at: datetime
    transaction_amount_paid: Decimal
    covered_amount: Decimal
    note: Optional[str] = None

class DebtView(BaseModel):
    header: DebtRead
    lines: List[DebtLineView]
    allocations: List[DebtAllocationView]
    total_amount: Decimal
    covered_amount: Decimal
    remaining_amount: Decimal

class DebtSummary(BaseModel):
    debt_id: int
    project_id: int
    person_id: int
    due_date: date
    registered_at: datetime
    total_amount: Decimal
    covered_amount: Decimal
    remaining_amount: Decimal
