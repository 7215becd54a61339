"""Repository tests against the in-memory SQLite database."""
from datetime import datetime, UTC
from decimal import Decimal

import pytest
from sqlalchemy import func, select, text

from tradelog.db.repositories import DuplicateCredentialError, TradeRepository, UserRepository
from tradelog.models import AuthCredential, Trade, TradeSource, User


def trade_fields(**overrides):
    fields = {
        "symbol": "AAPL",
        "entry_price": Decimal("100"),
        "exit_price": Decimal("110"),
        "quantity": 10,
        "pnl": Decimal("95.5"),
        "trade_date": datetime(2024, 1, 5, tzinfo=UTC),
        "source": TradeSource.MANUAL,
    }
    fields.update(overrides)
    return fields


@pytest.mark.asyncio
async def test_duplicate_signup_is_rejected_by_constraint(db_session):
    users = UserRepository(db_session)
    first = await users.create_with_password("dup@example.com", "hash-one", name="First")
    first_id = first.id

    with pytest.raises(DuplicateCredentialError):
        await users.create_with_password("dup@example.com", "hash-two")

    assert await db_session.scalar(select(func.count()).select_from(User)) == 1
    assert await db_session.scalar(select(func.count()).select_from(AuthCredential)) == 1

    credential = await db_session.scalar(select(AuthCredential))
    assert credential.user_id == first_id
    assert credential.password_hash == "hash-one"


@pytest.mark.asyncio
async def test_prices_are_stored_exactly(db_session):
    user = await UserRepository(db_session).create_with_password("exact@example.com", "hash")
    trades = TradeRepository(db_session)
    precise = Decimal("12345678901234567890.12345678")

    await trades.add(user.id, **trade_fields(entry_price=precise, exit_price=Decimal("0.00000001"),
                                             pnl=Decimal("-0.1")))
    db_session.expunge_all()

    raw = (await db_session.execute(text("SELECT entry_price, exit_price, pnl FROM trades"))).one()
    assert tuple(raw) == ("12345678901234567890.12345678", "0.00000001", "-0.1")

    stored = await db_session.scalar(select(Trade))
    assert stored.entry_price == precise
    assert stored.exit_price == Decimal("0.00000001")
    assert stored.pnl == Decimal("-0.1")


@pytest.mark.asyncio
async def test_aggregate_sums_exactly(db_session):
    user = await UserRepository(db_session).create_with_password("sum@example.com", "hash")
    user_id = user.id
    trades = TradeRepository(db_session)
    for pnl in ("0.1", "0.2", "-0.3", "0"):
        await trades.add(user_id, **trade_fields(pnl=Decimal(pnl)))

    count, total, wins = await trades.aggregate_for_user(user_id)

    assert count == 4
    assert total == Decimal("0")
    assert wins == 3
