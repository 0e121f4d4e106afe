# surveyhub/auth.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from . import config
from .crud import crud_user
from .database import get_db_session
from .models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
ALGORITHM = "HS256"


def create_access_token(subject: str, expires_minutes: Optional[int] = None) -> str:
    expire_delta = expires_minutes or config.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {
        "sub": subject,
        "exp": datetime.now(tz=timezone.utc) + timedelta(minutes=expire_delta),
    }
    return jwt.encode(payload, config.SECRET_KEY, algorithm=ALGORITHM)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """Resolves the ``Authorization: Bearer <token>`` header to a user."""
    if authorization is None:
        raise _unauthorized("Not authenticated.")

    parts = authorization.split()
    # Erwartetes Format: "Bearer <token>"
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.info("Rejected malformed Authorization header")
        raise _unauthorized("Invalid token format. Expected: 'Bearer <token>'")

    try:
        payload = jwt.decode(parts[1], config.SECRET_KEY, algorithms=[ALGORITHM])
        user_id = int(payload["sub"])
    except (JWTError, KeyError, ValueError):
        raise _unauthorized("Invalid or expired token.")

    user = await crud_user.get_user(db, user_id)
    if user is None:
        raise _unauthorized("Invalid or expired token.")
    return user
