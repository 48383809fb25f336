import datetime as dt
import uuid
from typing import Optional

from pydantic import field_validator
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


REQUIRED_FIELDS = ("title", "amount", "category")
UPDATABLE_FIELDS = ("title", "amount", "category", "description", "date")


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Expense(SQLModel, table=True):
    __tablename__ = "expenses"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    title: str
    amount: float
    category: str
    description: Optional[str] = None
    date: Optional[dt.date] = Field(default=None)

    # Null only for rows created through the public (unscoped) routes
    user: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", index=True)

    created_at: dt.datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: dt.datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


# ─────────────────────────────
#   SCHEMAS (Pydantic/SQLModel)
# ─────────────────────────────

class ExpenseBase(SQLModel):
    title: str = Field(min_length=1)
    amount: float
    category: str = Field(min_length=1)
    description: Optional[str] = None
    date: Optional[dt.date] = None


class ExpenseCreate(ExpenseBase):
    pass


class ExpenseUpdate(SQLModel):
    title: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[float] = None
    category: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    date: Optional[dt.date] = None

    @field_validator("title", "amount", "category")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("field may not be null")
        return value


class ExpenseRead(ExpenseBase):
    id: uuid.UUID
    user: Optional[uuid.UUID] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class MessageRead(SQLModel):
    message: str
