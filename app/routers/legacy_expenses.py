from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, status
from sqlmodel import Session

from ..database import get_session
from ..models.expense import ExpenseRead, MessageRead
from ..repositories.expenses import ExpenseRepository
from ..services.expenses import ExpenseService, Unscoped

# Public route set: no bearer token and no ownership scoping.
router = APIRouter(
    prefix="/public/expenses",
    tags=["public expenses"],
)


def get_public_expense_service(session: Session = Depends(get_session)) -> ExpenseService:
    return ExpenseService(ExpenseRepository(session), Unscoped())


@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense(
    body: Dict[str, Any] = Body(default={}),
    service: ExpenseService = Depends(get_public_expense_service),
):
    return service.create(body)


@router.get("", response_model=List[ExpenseRead])
def list_expenses(service: ExpenseService = Depends(get_public_expense_service)):
    return service.list()


@router.get("/search", response_model=List[ExpenseRead])
def search_all_expenses(service: ExpenseService = Depends(get_public_expense_service)):
    return service.search(None)


@router.get("/search/{query}", response_model=List[ExpenseRead])
def search_expenses(query: str, service: ExpenseService = Depends(get_public_expense_service)):
    return service.search(query)


@router.get("/{expense_id}", response_model=ExpenseRead)
def get_expense(expense_id: str, service: ExpenseService = Depends(get_public_expense_service)):
    return service.get(expense_id)


@router.put("/{expense_id}", response_model=ExpenseRead)
def update_expense(
    expense_id: str,
    body: Dict[str, Any] = Body(default={}),
    service: ExpenseService = Depends(get_public_expense_service),
):
    return service.update(expense_id, body)


@router.delete("/{expense_id}", response_model=MessageRead)
def delete_expense(expense_id: str, service: ExpenseService = Depends(get_public_expense_service)):
    return service.delete(expense_id)
