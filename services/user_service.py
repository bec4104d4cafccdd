from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from models.user import User
from models.attempt import Attempt
from core.exceptions import NotFoundError, InvalidRequestError, AuthenticationError
from core.security import hash_password, verify_password
from core.logger import logger

class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).filter(User.email == email))
        return result.scalar_one_or_none()

    async def _ensure_unique(self, username: Optional[str], email: Optional[str], exclude_id: Optional[int] = None):
        conditions = []
        if username:
            conditions.append(User.username == username)
        if email:
            conditions.append(User.email == email)
        if not conditions:
            return

        query = select(User).filter(or_(*conditions))
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        result = await self.db.execute(query)
        existing = result.scalars().first()
        if existing:
            if email and existing.email == email:
                raise InvalidRequestError("That email is already registered")
            raise InvalidRequestError("That username is already taken")

    async def register(self, username: str, email: str, password: str, bio: Optional[str] = None) -> User:
        await self._ensure_unique(username, email)

        user = User(
            username=username,
            email=email,
            hashed_password=hash_password(password),
            bio=bio,
            avatar=f"https://robohash.org/{username}?set=set3",
            last_login=datetime.utcnow(),
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("New user registered", user_id=user.id, username=username)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid credentials")

        user.last_login = datetime.utcnow()
        await self.db.commit()
        return user

    async def update_profile(self, user_id: int, **kwargs) -> User:
        user = await self.get_user(user_id)
        await self._ensure_unique(kwargs.get("username"), kwargs.get("email"), exclude_id=user.id)

        for key, value in kwargs.items():
            if value is not None and key in ("username", "email", "bio", "avatar"):
                setattr(user, key, value)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("User updated", user_id=user_id, fields=[k for k, v in kwargs.items() if v is not None])
        return user

    async def change_password(self, user_id: int, current_password: str, new_password: str) -> User:
        user = await self.get_user(user_id)
        if not verify_password(current_password, user.hashed_password):
            raise AuthenticationError("Current password is incorrect")

        user.hashed_password = hash_password(new_password)
        await self.db.commit()
        logger.info("Password changed", user_id=user_id)
        return user

    async def get_user_attempts(self, user_id: int) -> List[Attempt]:
        result = await self.db.execute(
            select(Attempt).filter(Attempt.user_id == user_id).order_by(Attempt.created_at.desc(), Attempt.id.desc())
        )
        return list(result.scalars().all())
