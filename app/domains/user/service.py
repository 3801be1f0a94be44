# app/domains/user/service.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
from uuid import UUID

from app.core.security import user_type_from_claims
from models import User


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_clerk_id(self, clerk_user_id: str) -> Optional[User]:
        """Get a user by Clerk user ID."""
        result = await self.db.execute(select(User).where(User.clerk_user_id == clerk_user_id))
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def create_user(
        self, clerk_user_id: str, email: str = None, username: str = None, user_type: str = "staff"
    ) -> User:
        """Create a new user."""
        user = User(clerk_user_id=clerk_user_id, email=email, username=username, user_type=user_type)

        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
            return user
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise e

    async def get_or_create_user(self, clerk_user_id: str, clerk_payload: dict) -> User:
        """Get existing user or create new one from Clerk payload.

        The role claim is re-read on every call so a role change in Clerk
        takes effect on the next request.
        """
        user_type = user_type_from_claims(clerk_payload)
        user = await self.get_user_by_clerk_id(clerk_user_id)
        if not user:
            return await self.create_user(
                clerk_user_id=clerk_user_id,
                email=clerk_payload.get("email"),
                username=clerk_payload.get("username"),
                user_type=user_type,
            )

        if user.user_type != user_type:
            try:
                user.user_type = user_type
                await self.db.commit()
                await self.db.refresh(user)
            except SQLAlchemyError as e:
                await self.db.rollback()
                raise e
        return user
