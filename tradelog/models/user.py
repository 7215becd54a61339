"""User and credential models for authentication."""
import enum

from sqlalchemy import Column, Enum, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from tradelog.models.base import Base


class CredentialProvider(enum.Enum):
    """Kinds of linked authentication methods."""
    PASSWORD = "PASSWORD"


class User(Base):
    """A journal owner. Email is stored normalized (trimmed, lower-cased)."""

    __tablename__ = "users"

    email = Column(
        String(255),
        unique=True,
        nullable=False,
        index=True
    )

    name = Column(String(255), nullable=True)

    credentials = relationship(
        "AuthCredential",
        back_populates="user",
        cascade="all, delete-orphan"
    )
    trades = relationship(
        "Trade",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User(email={self.email})>"


class AuthCredential(Base):
    """An authentication method linked to one user.

    ``provider_user_id`` is the provider-specific lookup key; for
    ``PASSWORD`` credentials it is the normalized email and
    ``password_hash`` holds the bcrypt hash. Other provider kinds would
    leave ``password_hash`` empty.
    """

    __tablename__ = "auth_credentials"
    __table_args__ = (
        UniqueConstraint("provider", "provider_user_id", name="uq_auth_credentials_provider_user"),
    )

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    provider = Column(
        Enum(CredentialProvider, name="credentialprovider"),
        nullable=False,
        default=CredentialProvider.PASSWORD
    )
    provider_user_id = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=True)

    user = relationship("User", back_populates="credentials")

    def __repr__(self) -> str:
        return f"<AuthCredential(provider={self.provider.value}, id={self.provider_user_id})>"
