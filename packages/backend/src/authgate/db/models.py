"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Uses the generic Uuid type so the same models run on PostgreSQL and SQLite.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from authgate.auth.password import averify_password


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class User(Base):
    """A user who can sign in with email/password and then use tokens.

    Learn: The email doubles as the username. password_hash is nullable
    so accounts provisioned elsewhere simply never match a password.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), default=utcnow
    )

    async def compare_password(self, candidate: str) -> bool:
        """Check a candidate password against the stored hash."""
        if not self.password_hash:
            return False
        return await averify_password(candidate, self.password_hash)

    def __repr__(self) -> str:
        return f"<User {self.email}>"
