"""Declarative base and shared mixins."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from dynidp.core.crypto import decrypt, encrypt


class Base(DeclarativeBase):
    """Shared declarative base for all models."""
    pass


class TimestampMixin:
    """Adds created / updated columns.

    Both are stamped by the registry service: `created` once on insert,
    `updated` on every mutation (NULL until the first one).
    """

    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class UUIDPrimaryKeyMixin:
    """Adds a UUID primary key column (dialect-agnostic)."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )


class EncryptedText(TypeDecorator):
    """Text column stored Fernet-encrypted, exposed as plaintext on the model."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return encrypt(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return decrypt(value)
