from sqlmodel import SQLModel, Field
from uuid import uuid4, UUID
from datetime import datetime

class User(SQLModel, table=True):
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(index=True, unique=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    role: str = Field(default="user")
    is_active: bool = Field(default=True)
