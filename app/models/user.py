"""
User Model
==========

SQLAlchemy model for user accounts.
"""

from typing import TYPE_CHECKING
import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin
from app.utils.helpers import format_datetime

if TYPE_CHECKING:
    from app.models.task import Task


class User(Base, TimestampMixin):
    """
    User account model.

    Emails are stored lower-cased so the unique index is case-insensitive.
    """

    __tablename__ = "users"

    # Primary Key
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Account fields
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Relationships (tasks are always queried through the task service)
    tasks: Mapped[list["Task"]] = relationship(
        "Task",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id}, email={self.email})>"

    def to_api_dict(self) -> dict:
        """Public representation; never includes the password hash."""
        return {
            "id": str(self.user_id),
            "name": self.name,
            "email": self.email,
            "createdAt": format_datetime(self.created_at),
        }
