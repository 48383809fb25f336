import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from ..models.expense import Expense


class StoreError(RuntimeError):
    """Raised when the underlying store rejects or fails an operation."""


class ExpenseRepository:
    """Single-row operations on the ``expenses`` table.

    Every mutating call commits its own transaction. Filters are plain
    SQLAlchemy criteria combined with AND; callers add ownership criteria
    themselves.
    """

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def id_matches(raw_id: Any):
        try:
            expense_id = raw_id if isinstance(raw_id, uuid.UUID) else uuid.UUID(str(raw_id))
        except ValueError as exc:
            raise StoreError(f'Cast to UUID failed for value "{raw_id}" at path "id"') from exc
        return col(Expense.id) == expense_id

    def insert(self, data: Dict[str, Any]) -> Expense:
        expense = Expense(**data)
        return self._commit(expense)

    def find_many(self, *criteria) -> List[Expense]:
        try:
            return list(self.session.exec(select(Expense).where(*criteria)).all())
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def find_one(self, *criteria) -> Optional[Expense]:
        try:
            return self.session.exec(select(Expense).where(*criteria)).first()
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def update_one(self, changes: Dict[str, Any], *criteria) -> Optional[Expense]:
        expense = self.find_one(*criteria)
        if expense is None:
            return None
        for field, value in changes.items():
            setattr(expense, field, value)
        expense.updated_at = datetime.now(timezone.utc)
        return self._commit(expense)

    def delete_one(self, *criteria) -> Optional[Expense]:
        expense = self.find_one(*criteria)
        if expense is None:
            return None
        try:
            self.session.delete(expense)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(str(exc)) from exc
        return expense

    def _commit(self, expense: Expense) -> Expense:
        try:
            self.session.add(expense)
            self.session.commit()
            self.session.refresh(expense)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(str(exc)) from exc
        return expense
