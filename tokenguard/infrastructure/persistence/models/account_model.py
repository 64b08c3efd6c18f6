"""Account ORM model - infrastructure layer SQLAlchemy mapping."""

from datetime import datetime

from sqlalchemy import JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column

from tokenguard.domain.entities.account import AccountSnapshot, AccountStatus
from tokenguard.infrastructure.persistence.database import Base


class AccountModel(Base):
    """
    SQLAlchemy ORM model for the accounts table of the reference account store.

    The token core never sees this class; it only receives CredentialCheck
    and AccountSnapshot values built from it.
    """

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Stable id carried in tokens as "sub"
    subject_id: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)

    # Normalized login identifier
    identifier: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=AccountStatus.ACTIVE.value)
    roles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        insert_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        insert_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"AccountModel(subject_id={self.subject_id!r}, identifier={self.identifier!r}, status={self.status!r})"

    def to_snapshot(self) -> AccountSnapshot:
        """Map the row to the view handed to the token core."""
        return AccountSnapshot(
            subject_id=self.subject_id,
            status=AccountStatus(self.status),
            roles=tuple(self.roles or ()),
        )
