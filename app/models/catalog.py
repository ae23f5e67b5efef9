# app/models/catalog.py

from sqlmodel import SQLModel, Field
from typing import Optional

class Item(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str

class Unit(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
