from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

from app.models.enums import PaymentType, TransactionType
from app.schemas.amounts import Money

class TransactionCreate(BaseModel):
    project_id: int
    from_person_id: int
    to_person_id: int
    code: str = Field(max_length=50)
    due_date: date
    amount_paid: Money
    payment_type: PaymentType
    transaction_type: TransactionType
    registered_at: Optional[datetime] = None
    note: Optional[str] = Field(default=None, max_length=4000)

    @field_validator("payment_type", "transaction_type", mode="before")
    @classmethod
    def normalize_type_code(cls, value):
        # Los códigos son de 3 letras; se aceptan en minúscula o con espacios
        if isinstance(value, str):
            return value.strip().upper()
        return value

class TransactionUpdate(TransactionCreate):
    pass

class TransactionRead(BaseModel):
    id: int
    project_id: int
    from_person_id: int
    to_person_id: int
    code: str
    due_date: date
    amount_paid: Decimal
    payment_type: PaymentType
    transaction_type: TransactionType
    registered_at: datetime
    note: Optional[str] = None
    allocated_amount: Decimal = Decimal("0")
    remaining_amount: Decimal = Decimal("0")

    model_config = ConfigDict(from_attributes=True)

class LedgerRow(BaseModel):
    transaction_id: int
    registered_at: datetime
    due_date: date
    code: str
    from_person_id: int
    to_person_id: int
    amount: Decimal
    delta: Decimal
    running_balance: Decimal
    note: Optional[str] = None

class PersonBalance(BaseModel):
    project_id: int
    person_id: int
    total_in: Decimal
    total_out: Decimal
    net: Decimal

class PairBalance(BaseModel):
    project_id: int
    from_person_id: int
    to_person_id: int
    from_to_total: Decimal
    to_from_total: Decimal
    net: Decimal
