# app/models/document.py

from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

class DebtDocument(SQLModel, table=True):
    __tablename__ = "debt_document"

    id: Optional[int] = Field(default=None, primary_key=True)
    debt_id: int = Field(foreign_key="debt.id", index=True)
    file_name: str
    content_type: Optional[str] = None
    uploaded_at: datetime = Field(default_factory=datetime.utcnow)

class TransactionDocument(SQLModel, table=True):
    __tablename__ = "transaction_document"

    id: Optional[int] = Field(default=None, primary_key=True)
    transaction_id: int = Field(foreign_key="transaction.id", index=True)
    file_name: str
    content_type: Optional[str] = None
    uploaded_at: datetime = Field(default_factory=datetime.utcnow)
