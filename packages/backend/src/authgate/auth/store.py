"""User store — the lookups the strategies depend on.

Learn: The strategies only need two reads (by email, by id), so they
depend on the UserStore protocol rather than on a database session.
SqlUserStore is the production implementation; MemoryUserStore backs
tests and local experiments.

Both return None when a user is absent and let real failures
(connection errors, bad ids) propagate as exceptions.
"""

import uuid
from typing import Optional, Protocol, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authgate.auth.password import DEFAULT_ROUNDS, ahash_password
from authgate.db.models import User

UserId = Union[str, uuid.UUID]


class EmailTakenError(Exception):
    """Raised when signing up with an email that already has an account."""


class UserStore(Protocol):
    async def find_by_email(self, email: str) -> Optional[User]: ...

    async def find_by_id(self, user_id: UserId) -> Optional[User]: ...

    async def create(self, email: str, password: str) -> User: ...


def _as_uuid(user_id: UserId) -> uuid.UUID:
    return user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))


class SqlUserStore:
    """UserStore over async SQLAlchemy. One session per call."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ):
        self.session_factory = session_factory
        self.bcrypt_rounds = bcrypt_rounds

    async def find_by_email(self, email: str) -> Optional[User]:
        async with self.session_factory() as session:
            result = await session.execute(select(User).where(User.email == email))
            return result.scalars().first()

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        # A subject that is not a UUID raises ValueError here; the strategy
        # reports it as an error rather than "no such user".
        async with self.session_factory() as session:
            return await session.get(User, _as_uuid(user_id))

    async def create(self, email: str, password: str) -> User:
        password_hash = await ahash_password(password, self.bcrypt_rounds)
        user = User(email=email, password_hash=password_hash)
        async with self.session_factory() as session:
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise EmailTakenError(email) from e
            await session.refresh(user)
        return user


class MemoryUserStore:
    """In-process UserStore keyed by id. Not shared across processes."""

    def __init__(self, bcrypt_rounds: int = DEFAULT_ROUNDS):
        self.bcrypt_rounds = bcrypt_rounds
        self._users: dict[uuid.UUID, User] = {}

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        return self._users.get(_as_uuid(user_id))

    async def create(self, email: str, password: str) -> User:
        password_hash = await ahash_password(password, self.bcrypt_rounds)
        # Checked after hashing so two concurrent sign-ups can't both pass.
        if await self.find_by_email(email) is not None:
            raise EmailTakenError(email)
        user = User(id=uuid.uuid4(), email=email, password_hash=password_hash)
        self._users[user.id] = user
        return user

    def delete(self, user_id: UserId) -> None:
        self._users.pop(_as_uuid(user_id), None)
