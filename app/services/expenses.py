import logging
import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as SchemaError
from sqlmodel import col, or_

from ..core.errors import InternalError, NotFound, ValidationError, describe_errors
from ..models.expense import (
    REQUIRED_FIELDS,
    UPDATABLE_FIELDS,
    Expense,
    ExpenseCreate,
    ExpenseUpdate,
)
from ..repositories.expenses import ExpenseRepository, StoreError


logger = logging.getLogger(__name__)


class OwnerScoped:
    """Restrict every read and write to expenses owned by ``owner_id``."""

    def __init__(self, owner_id: uuid.UUID):
        self.owner_id = owner_id

    def criteria(self) -> list:
        return [col(Expense.user) == self.owner_id]

    def stamp(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {**data, "user": self.owner_id}

    def __repr__(self):
        return f"user {self.owner_id}"


class Unscoped:
    """No ownership restriction; used by the public route set."""

    def criteria(self) -> list:
        return []

    def stamp(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return data

    def __repr__(self):
        return "anonymous"


class ExpenseService:
    def __init__(self, repository: ExpenseRepository, policy):
        self.repository = repository
        self.policy = policy

    def create(self, body: Dict[str, Any]) -> Expense:
        logger.info("Received request to create expense for %r", self.policy)
        missing = [field for field in REQUIRED_FIELDS if not body.get(field)]
        if missing:
            logger.warning("Missing required fields: %s", ", ".join(missing))
            raise ValidationError(f"{', '.join(missing)} is required")

        try:
            expense_in = ExpenseCreate.model_validate(body)
            expense = self.repository.insert(self.policy.stamp(expense_in.model_dump()))
        except SchemaError as exc:
            message = describe_errors(exc.errors(), prefix="Expense validation failed")
            logger.warning(message)
            raise ValidationError(message, body_key="error") from exc
        except StoreError as exc:
            logger.exception("Error creating expense")
            raise ValidationError(str(exc), body_key="error") from exc

        logger.info("Expense %s created successfully", expense.id)
        return expense

    def list(self) -> List[Expense]:
        logger.info("Received request to fetch all expenses for %r", self.policy)
        return self._find_many()

    def get(self, expense_id: str) -> Expense:
        logger.info("Received request to fetch expense with ID: %s", expense_id)
        try:
            expense = self.repository.find_one(
                self.repository.id_matches(expense_id), *self.policy.criteria()
            )
        except StoreError as exc:
            logger.exception("Error retrieving expense")
            raise InternalError(str(exc)) from exc

        if expense is None:
            logger.warning("Expense not found for ID: %s", expense_id)
            raise NotFound()
        return expense

    def update(self, expense_id: str, body: Dict[str, Any]) -> Expense:
        logger.info("Received request to update expense with ID: %s", expense_id)
        updates = list(body)
        if not updates or any(field not in UPDATABLE_FIELDS for field in updates):
            logger.warning("Invalid update parameters for expense with ID: %s", expense_id)
            raise ValidationError("Invalid update parameters")

        try:
            changes = ExpenseUpdate.model_validate(body).model_dump(exclude_unset=True)
            expense = self.repository.update_one(
                changes, self.repository.id_matches(expense_id), *self.policy.criteria()
            )
        except SchemaError as exc:
            message = describe_errors(exc.errors(), prefix="Expense validation failed")
            logger.warning(message)
            raise ValidationError(message, body_key="error") from exc
        except StoreError as exc:
            logger.exception("Error updating expense")
            raise ValidationError(str(exc), body_key="error") from exc

        if expense is None:
            logger.warning("Expense not found for ID: %s", expense_id)
            raise NotFound()
        logger.info("Expense with ID: %s updated successfully", expense_id)
        return expense

    def delete(self, expense_id: str) -> Dict[str, str]:
        logger.info("Received request to delete expense with ID: %s", expense_id)
        try:
            expense = self.repository.delete_one(
                self.repository.id_matches(expense_id), *self.policy.criteria()
            )
        except StoreError as exc:
            logger.exception("Error deleting expense")
            raise InternalError(str(exc)) from exc

        if expense is None:
            logger.warning("Expense not found for ID: %s", expense_id)
            raise NotFound()
        logger.info("Expense with ID: %s deleted successfully", expense_id)
        return {"message": "Expense deleted successfully"}

    def search(self, query: Optional[str] = None) -> List[Expense]:
        logger.info("Received request to search expenses with query: %r", query)
        if query is None or not query.strip():
            return self._find_many()

        # Literal, case-insensitive substring match on title or category
        matches = or_(
            col(Expense.title).icontains(query, autoescape=True),
            col(Expense.category).icontains(query, autoescape=True),
        )
        return self._find_many(matches)

    def _find_many(self, *criteria) -> List[Expense]:
        try:
            expenses = self.repository.find_many(*criteria, *self.policy.criteria())
        except StoreError as exc:
            logger.exception("Error retrieving expenses")
            raise InternalError(str(exc)) from exc
        logger.info("Retrieved %d expenses", len(expenses))
        return expenses
