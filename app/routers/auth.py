import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import field_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import SQLModel, Field, Session, select

from ..core.errors import Conflict, InvalidCredential, ValidationError
from ..core.jwt import create_access_token
from ..core.security import AuthenticatedUser, get_current_user, hash_password, verify_password
from ..database import get_session
from ..models.user import User


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


class RegisterIn(SQLModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)

    @field_validator("username", mode="before")
    @classmethod
    def normalize_username(cls, value):
        # Length limits apply to the normalized name
        return value.strip().lower() if isinstance(value, str) else value


class UserRead(SQLModel):
    id: uuid.UUID
    username: str
    created_at: datetime
    updated_at: datetime


class LoginIn(SQLModel):
    username: str
    password: str


class TokenOut(SQLModel):
    access_token: str
    token_type: str


def _reject_whitespace(password: str) -> None:
    if any(c.isspace() for c in password):
        raise ValidationError("Password must not contain whitespace")


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
)
def register_user(
    payload: RegisterIn,
    session: Session = Depends(get_session),
):
    _reject_whitespace(payload.password)
    username = payload.username
    existing = session.exec(select(User).where(User.username == username)).first()
    if existing is not None:
        raise Conflict("Username already registered")

    user = User(username=username, hashed_password=hash_password(payload.password))
    session.add(user)
    try:
        session.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration of the same name
        session.rollback()
        raise Conflict("Username already registered") from exc
    session.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


@router.post(
    "/login",
    response_model=TokenOut,
    status_code=status.HTTP_200_OK,
)
def login(payload: LoginIn, session: Session = Depends(get_session)):
    username = payload.username.strip().lower()
    user = session.exec(select(User).where(User.username == username)).first()
    if user is None or not verify_password(payload.password, user.hashed_password):
        logger.warning("Failed login for %r", username)
        raise InvalidCredential("Invalid username or password")

    token = create_access_token({"sub": str(user.id), "username": user.username})
    return TokenOut(access_token=token, token_type="bearer")


@router.get(
    "/me",
    response_model=AuthenticatedUser,
    status_code=status.HTTP_200_OK,
)
def me(current_user: AuthenticatedUser = Depends(get_current_user)):
    return current_user
