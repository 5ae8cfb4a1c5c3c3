"""UserDAO — users table operations."""

import uuid
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from customer_records.dao.base import BaseDAO
from customer_records.models.user import User


class UserDAO(BaseDAO[User]):
    model = User

    async def get_by_email(self, session: AsyncSession, email: str) -> User | None:
        """Look up a user by email (login flow)."""
        return await self.get_by_field(session, email=email)

    async def upsert(
        self,
        session: AsyncSession,
        *,
        email: str,
        password_hash: str,
        claims: list[str],
    ) -> User | None:
        """Insert a user or do nothing if the email already exists.

        Used at startup to ensure the initial admin account exists.
        Returns the user row, fetching the existing one on conflict.
        """
        stmt = (
            insert(User)
            .values(
                email=email,
                password_hash=password_hash,
                claims=claims,
            )
            .on_conflict_do_nothing(index_elements=["email"])
            .returning(User)
        )
        result = await session.execute(stmt)
        row = result.scalars().first()
        if row is None:
            # Conflict — user already existed, fetch it
            return await self.get_by_field(session, email=email)
        return row

    async def record_failed_login(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        *,
        failed_count: int,
        lockout_end: datetime | None,
    ) -> None:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(failed_login_count=failed_count, lockout_end=lockout_end)
            .execution_options(synchronize_session=False)
        )
        await session.execute(stmt)

    async def reset_failed_logins(self, session: AsyncSession, user_id: uuid.UUID) -> None:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(failed_login_count=0, lockout_end=None)
            .execution_options(synchronize_session=False)
        )
        await session.execute(stmt)
