import hashlib
import hmac
import logging
import os
from typing import Optional
import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import BaseModel

from .errors import InvalidCredential, Unauthenticated
from .jwt import decode_access_token


logger = logging.getLogger(__name__)

ALGORITHM = "pbkdf2_sha256"
ITERATIONS = 100_000
SALT_BYTES = 16


def _pbkdf2_hash(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, ITERATIONS)


def hash_password(password: str) -> str:
    salt = os.urandom(SALT_BYTES)
    digest = _pbkdf2_hash(password, salt)
    return f"{ALGORITHM}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        algorithm, salt_hex, hash_hex = stored.strip().split("$")
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    if algorithm != ALGORITHM:
        return False
    return hmac.compare_digest(_pbkdf2_hash(password, salt), expected)


class AuthenticatedUser(BaseModel):
    """Identity claims carried by a verified bearer token."""

    id: uuid.UUID
    username: Optional[str] = None


def identity_from_token(token: str) -> AuthenticatedUser:
    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise InvalidCredential() from exc

    sub = payload.get("sub")
    try:
        user_id = uuid.UUID(str(sub))
    except ValueError as exc:
        logger.warning("Rejected bearer token with subject %r", sub)
        raise InvalidCredential() from exc

    return AuthenticatedUser(id=user_id, username=payload.get("username"))


bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    # Anything other than "Authorization: Bearer <token>" counts as absent
    if credentials is None:
        logger.warning("Missing bearer token on %s %s", request.method, request.url.path)
        raise Unauthenticated()

    user = identity_from_token(credentials.credentials)
    request.state.user = user
    return user
