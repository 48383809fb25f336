from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlmodel import Session

from ..core.security import AuthenticatedUser, get_current_user
from ..database import get_session
from ..models.expense import ExpenseRead, MessageRead
from ..repositories.expenses import ExpenseRepository
from ..services.expenses import ExpenseService, OwnerScoped

router = APIRouter(
    prefix="/expenses",
    tags=["expenses"],
)


def get_expense_service(
    session: Session = Depends(get_session),
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> ExpenseService:
    return ExpenseService(ExpenseRepository(session), OwnerScoped(current_user.id))


# ─────────────────────────────
#   ENDPOINTS
# ─────────────────────────────

@router.post(
    "",
    response_model=ExpenseRead,
    status_code=status.HTTP_201_CREATED,
)
def create_expense(
    body: Dict[str, Any] = Body(default={}),
    service: ExpenseService = Depends(get_expense_service),
):
    """
    Create an expense for the authenticated user.

    - `title`, `amount` and `category` are required.
    - The owner is taken from the bearer token, never from the body.
    """
    return service.create(body)


@router.get(
    "",
    response_model=List[ExpenseRead],
)
def list_expenses(service: ExpenseService = Depends(get_expense_service)):
    """List the authenticated user's expenses."""
    return service.list()


@router.get(
    "/search",
    response_model=List[ExpenseRead],
)
def search_expenses(
    query: Optional[str] = Query(default=None, description="Text matched against title or category"),
    service: ExpenseService = Depends(get_expense_service),
):
    """
    Search the authenticated user's expenses by title or category.

    Matching is a case-insensitive substring match; a blank query returns
    every expense.
    """
    return service.search(query)


@router.get(
    "/{expense_id}",
    response_model=ExpenseRead,
)
def get_expense(expense_id: str, service: ExpenseService = Depends(get_expense_service)):
    return service.get(expense_id)


@router.put(
    "/{expense_id}",
    response_model=ExpenseRead,
)
def update_expense(
    expense_id: str,
    body: Dict[str, Any] = Body(default={}),
    service: ExpenseService = Depends(get_expense_service),
):
    """Partially update an expense; only title, amount, category, description and date may change."""
    return service.update(expense_id, body)


@router.delete(
    "/{expense_id}",
    response_model=MessageRead,
)
def delete_expense(expense_id: str, service: ExpenseService = Depends(get_expense_service)):
    return service.delete(expense_id)
