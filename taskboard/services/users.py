import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.errors import AuthenticationError, Conflict
from taskboard.core.security import create_access_token, get_password_hash, verify_password
from taskboard.models.user import User
from taskboard.schemas.auth import ProfileUpdate, UserRegister

logger = logging.getLogger(__name__)


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "email": user.email})


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str, exclude_id: Optional[int] = None) -> Optional[User]:
        query = select(User).where(User.email == email)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def register(self, user_in: UserRegister) -> User:
        if await self.get_by_email(user_in.email):
            raise Conflict("Email already registered")

        user = User(
            name=user_in.name,
            email=user_in.email,
            hashed_password=get_password_hash(user_in.password),
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("user event=registered user_id=%s", user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid credentials")
        return user

    async def update_profile(self, user: User, profile_update: ProfileUpdate) -> User:
        if profile_update.email and profile_update.email != user.email:
            if await self.get_by_email(profile_update.email, exclude_id=user.id):
                raise Conflict("Email already in use")
            user.email = profile_update.email

        if profile_update.name:
            user.name = profile_update.name

        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def email_available(self, email: str) -> bool:
        return await self.get_by_email(email) is None
