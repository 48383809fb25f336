import uuid
from datetime import datetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from .expense import utc_now


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    username: str = Field(index=True, unique=True, max_length=50)
    hashed_password: str

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
