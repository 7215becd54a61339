"""Persistence for users, credentials and trades."""
import logging
from decimal import Decimal
from typing import Any, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from tradelog.models import AuthCredential, CredentialProvider, Trade, User

logger = logging.getLogger(__name__)


class DuplicateCredentialError(Exception):
    """A credential with the same (provider, provider_user_id) already exists."""


class UserRepository:
    """Users and their linked credentials."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_credential(
        self,
        provider: CredentialProvider,
        provider_user_id: str
    ) -> Optional[AuthCredential]:
        """Resolve the credential for a (provider, identifier) pair, with its user."""
        result = await self.session.execute(
            select(AuthCredential)
            .options(joinedload(AuthCredential.user))
            .where(
                AuthCredential.provider == provider,
                AuthCredential.provider_user_id == provider_user_id
            )
        )
        return result.scalar_one_or_none()

    async def create_with_password(
        self,
        email: str,
        password_hash: str,
        name: Optional[str] = None
    ) -> User:
        """Create a user and its password credential in a single transaction."""
        user = User(email=email, name=name)
        user.credentials.append(
            AuthCredential(
                provider=CredentialProvider.PASSWORD,
                provider_user_id=email,
                password_hash=password_hash
            )
        )
        self.session.add(user)

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.info(f"Duplicate signup rejected by constraint for {email}")
            raise DuplicateCredentialError(email) from e

        await self.session.refresh(user)
        return user


class TradeRepository:
    """Per-user trade records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, user_id: UUID, **fields: Any) -> Trade:
        trade = Trade(user_id=user_id, **fields)
        self.session.add(trade)
        await self.session.commit()
        await self.session.refresh(trade)
        return trade

    async def list_for_user(self, user_id: UUID) -> List[Trade]:
        """All trades of one user, most recent trade date first."""
        result = await self.session.execute(
            select(Trade)
            .where(Trade.user_id == user_id)
            .order_by(Trade.trade_date.desc(), Trade.created_at.desc())
        )
        return list(result.scalars().all())

    async def aggregate_for_user(self, user_id: UUID) -> Tuple[int, Decimal, int]:
        """Return (trade count, summed pnl, count of trades with pnl >= 0).

        Summed in Python over the stored Decimals so the total stays exact
        on backends without a native decimal type.
        """
        result = await self.session.execute(
            select(Trade.pnl).where(Trade.user_id == user_id)
        )
        pnls = list(result.scalars().all())
        wins = sum(1 for pnl in pnls if pnl >= 0)
        return len(pnls), sum(pnls, Decimal(0)), wins
