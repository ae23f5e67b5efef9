# app/models/debt.py

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

class Debt(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="project.id", index=True)
    person_id: int = Field(foreign_key="person.id", index=True)  # quien debe
    due_date: date
    registered_at: datetime = Field(default_factory=datetime.utcnow)
    note: Optional[str] = Field(default=None, max_length=4000)

class DebtLine(SQLModel, table=True):
    __tablename__ = "debt_line"
    __table_args__ = (
        UniqueConstraint("debt_id", "item_id", name="uq_debt_line_debt_item"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    debt_id: int = Field(foreign_key="debt.id", index=True)
    item_id: int = Field(foreign_key="item.id")
    unit_id: int = Field(foreign_key="unit.id")
    quantity: Decimal = Field(max_digits=18, decimal_places=3)
    unit_price: Decimal = Field(max_digits=18, decimal_places=0)
    note: Optional[str] = Field(default=None, max_length=4000)
