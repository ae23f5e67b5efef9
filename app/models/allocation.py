# app/models/allocation.py

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from typing import Optional
from decimal import Decimal

class Allocation(SQLModel, table=True):
    """Cuánto de una transacción se aplica para saldar una deuda."""

    __table_args__ = (
        UniqueConstraint("debt_id", "transaction_id", name="uq_allocation_debt_transaction"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    debt_id: int = Field(foreign_key="debt.id", index=True)
    transaction_id: int = Field(foreign_key="transaction.id", index=True)
    covered_amount: Decimal = Field(max_digits=18, decimal_places=0)
    note: Optional[str] = Field(default=None, max_length=5000)
