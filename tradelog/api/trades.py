"""Trade journal API endpoints."""
from datetime import datetime, UTC
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from tradelog.auth.dependencies import (
    current_user_id, get_current_user, get_trade_service, read_json_body
)
from tradelog.models import Trade
from tradelog.services.auth_service import PublicUser
from tradelog.services.trade_service import TradeService, TradeSummary

router = APIRouter(prefix="/trades", tags=["trades"])


def _as_number(value: Decimal) -> float:
    """Decimal to JSON number.

    Exact for stored trade values, which never exceed 15 significant
    digits. Summary aggregates can carry more and get the nearest double.
    """
    return float(value)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TradeResponse(CamelModel):
    """Trade as sent over the wire."""
    id: str
    symbol: str
    entry_price: float
    exit_price: float
    quantity: int
    pnl: float
    trade_date: datetime
    good_notes: Optional[str] = None
    bad_notes: Optional[str] = None
    source: str
    broker: Optional[str] = None
    external_id: Optional[str] = None

    @classmethod
    def from_trade(cls, trade: Trade) -> "TradeResponse":
        trade_date = trade.trade_date
        if trade_date.tzinfo is None:
            # SQLite hands back naive values; everything is stored as UTC
            trade_date = trade_date.replace(tzinfo=UTC)

        return cls(
            id=str(trade.id),
            symbol=trade.symbol,
            entry_price=_as_number(trade.entry_price),
            exit_price=_as_number(trade.exit_price),
            quantity=trade.quantity,
            pnl=_as_number(trade.pnl),
            trade_date=trade_date,
            good_notes=trade.good_notes,
            bad_notes=trade.bad_notes,
            source=trade.source.value,
            broker=trade.broker,
            external_id=trade.external_id,
        )


class TradeEnvelope(BaseModel):
    trade: TradeResponse


class TradeListResponse(BaseModel):
    trades: List[TradeResponse]


class SummaryResponse(CamelModel):
    total_trades: int
    total_pnl: float
    average_pnl: float
    win_rate: float

    @classmethod
    def from_summary(cls, summary: TradeSummary) -> "SummaryResponse":
        return cls(
            total_trades=summary.total_trades,
            total_pnl=_as_number(summary.total_pnl),
            average_pnl=_as_number(summary.average_pnl),
            win_rate=_as_number(summary.win_rate),
        )


class SummaryEnvelope(BaseModel):
    summary: SummaryResponse


@router.get("", response_model=TradeListResponse)
async def list_trades(
    current_user: PublicUser = Depends(get_current_user),
    trade_service: TradeService = Depends(get_trade_service)
):
    """List the caller's trades, most recent first."""
    trades = await trade_service.list_trades(current_user_id(current_user))
    return TradeListResponse(trades=[TradeResponse.from_trade(t) for t in trades])


@router.post("", response_model=TradeEnvelope, status_code=status.HTTP_201_CREATED)
async def create_trade(
    request: Request,
    current_user: PublicUser = Depends(get_current_user),
    trade_service: TradeService = Depends(get_trade_service)
):
    """Record a trade for the caller."""
    payload = await read_json_body(request)
    trade = await trade_service.create_trade(current_user_id(current_user), payload)
    return TradeEnvelope(trade=TradeResponse.from_trade(trade))


@router.get("/summary", response_model=SummaryEnvelope)
async def trade_summary(
    current_user: PublicUser = Depends(get_current_user),
    trade_service: TradeService = Depends(get_trade_service)
):
    """Aggregate P&L and win rate over all of the caller's trades."""
    summary = await trade_service.summarize(current_user_id(current_user))
    return SummaryEnvelope(summary=SummaryResponse.from_summary(summary))
