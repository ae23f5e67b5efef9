from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

from app.models.enums import PaymentType, TransactionType

class Transaction(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("code", name="uq_transaction_code"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="project.id", index=True)
    from_person_id: int = Field(foreign_key="person.id", index=True)  # quien paga
    to_person_id: int = Field(foreign_key="person.id", index=True)    # quien recibe
    code: str = Field(max_length=50)
    due_date: date
    amount_paid: Decimal = Field(max_digits=18, decimal_places=0)
    payment_type: PaymentType
    transaction_type: TransactionType
    registered_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    note: Optional[str] = Field(default=None, max_length=4000)
