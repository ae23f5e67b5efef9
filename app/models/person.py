# app/models/person.py

from sqlmodel import SQLModel, Field
from typing import Optional

class Person(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None
    is_legal: bool = Field(default=False)  # persona jurídica

    @property
    def display_name(self) -> str:
        if self.is_legal:
            return (self.company_name or "").strip()
        return f"{self.name or ''} {self.last_name or ''}".strip()
