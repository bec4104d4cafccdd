import hmac
import hashlib
import time
from typing import Optional

from fastapi import Depends, Header
from passlib.context import CryptContext
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import AuthenticationError
from core.logger import logger
from db.session import get_db
from models.user import User

ROLE_USER = "user"
ROLE_ADMIN = "admin"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class Principal(BaseModel):
    """The authenticated requester, passed explicitly into every service call."""
    id: int
    role: str = ROLE_USER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


# Password hashing
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _sign(data: str) -> str:
    return hmac.new(settings.SECRET_KEY.encode(), data.encode(), hashlib.sha256).hexdigest()


def create_token(user_id: int, timestamp: Optional[int] = None) -> str:
    """Format: {user_id}:{timestamp}:{signature}"""
    timestamp = int(time.time()) if timestamp is None else timestamp
    data = f"{user_id}:{timestamp}"
    return f"{data}:{_sign(data)}"


def verify_token(token: str) -> Optional[int]:
    """Return the user id of a valid, unexpired token, otherwise None."""
    if not token:
        return None

    parts = token.split(':')
    if len(parts) != 3:
        return None

    user_id_str, timestamp_str, signature = parts
    try:
        user_id = int(user_id_str)
        timestamp = int(timestamp_str)
    except ValueError:
        return None

    if int(time.time()) - timestamp > settings.TOKEN_TTL_SECONDS:
        logger.warning("Token expired", user_id=user_id)
        return None

    if not hmac.compare_digest(_sign(f"{user_id_str}:{timestamp_str}"), signature):
        logger.warning("Token signature mismatch", user_id=user_id)
        return None

    return user_id


async def get_current_user(
    authorization: str = Header(None),
    x_auth_token: str = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    elif x_auth_token:
        token = x_auth_token

    if not token:
        raise AuthenticationError("Not authorized to access this route")

    user_id = verify_token(token)
    if user_id is None:
        raise AuthenticationError("Invalid token")

    user = await db.get(User, user_id)
    if not user:
        raise AuthenticationError("User no longer exists")
    return user


async def get_current_principal(user: User = Depends(get_current_user)) -> Principal:
    return Principal(id=user.id, role=user.role)
