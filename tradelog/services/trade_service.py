"""Trade payload validation and the per-user trade journal."""
import math
from dataclasses import asdict, dataclass
from datetime import datetime, UTC
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional
from uuid import UUID

from tradelog.db.repositories import TradeRepository
from tradelog.exceptions import TradeValidationError
from tradelog.models import Trade, TradeSource
from tradelog.models.trade import PRICE_SCALE
from tradelog.monitoring.logger import get_business_logger

PRICE_QUANTUM = Decimal(1).scaleb(-PRICE_SCALE)
MAX_MAGNITUDE = Decimal(10) ** 20
MAX_QUANTITY = Decimal(2) ** 63
# Shortest float repr reproduces any decimal of up to 15 significant digits
MAX_SIGNIFICANT_DIGITS = 15
MAX_SYMBOL_LENGTH = 32
MAX_BROKER_LENGTH = 100
MAX_EXTERNAL_ID_LENGTH = 255


@dataclass(frozen=True)
class ParsedTrade:
    """A validated trade payload, ready to be stored."""
    symbol: str
    entry_price: Decimal
    exit_price: Decimal
    quantity: int
    pnl: Decimal
    trade_date: datetime
    good_notes: Optional[str]
    bad_notes: Optional[str]
    source: TradeSource
    broker: Optional[str]
    external_id: Optional[str]


@dataclass(frozen=True)
class TradeSummary:
    """Aggregate performance over all of a user's trades."""
    total_trades: int
    total_pnl: Decimal
    average_pnl: Decimal
    win_rate: Decimal


def _to_decimal(value: Any) -> Optional[Decimal]:
    """Coerce a JSON number or numeric string, or return None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        # repr gives the shortest string that round-trips the float
        return Decimal(repr(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
        return number if number.is_finite() else None
    return None


def _parse_number(value: Any, label: str, field: str, limit: Decimal = MAX_MAGNITUDE) -> Decimal:
    number = _to_decimal(value)
    if number is None:
        raise TradeValidationError(f"{label} must be a valid number.", field=field)
    if abs(number) >= limit:
        raise TradeValidationError(f"{label} is out of range.", field=field)
    return number


def _parse_price(value: Any, label: str, field: str) -> Decimal:
    """Prices and P&L keep exactly the value submitted, or are rejected.

    Responses carry them as JSON numbers (binary doubles); up to
    ``MAX_SIGNIFICANT_DIGITS`` significant digits survive that
    conversion unchanged.
    """
    number = _parse_number(value, label, field)
    normalized = number.normalize()
    if normalized.as_tuple().exponent < -PRICE_SCALE:
        raise TradeValidationError(f"{label} has too many decimal places.", field=field)
    if len(normalized.as_tuple().digits) > MAX_SIGNIFICANT_DIGITS:
        raise TradeValidationError(f"{label} has too many significant digits.", field=field)
    # Exact: only fixes the stored scale
    return number.quantize(PRICE_QUANTUM)


def _parse_trade_date(value: Any) -> datetime:
    """Accept ISO-8601 dates/date-times or epoch milliseconds; return UTC."""
    parsed = None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            parsed = None
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            parsed = None

    if parsed is None:
        raise TradeValidationError("Trade date is invalid.", field="tradeDate")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _optional_text(value: Any, label: Optional[str] = None, field: Optional[str] = None,
                   max_length: Optional[int] = None) -> Optional[str]:
    if not value:
        return None
    text = str(value).strip()
    if max_length is not None and len(text) > max_length:
        raise TradeValidationError(f"{label} must be at most {max_length} characters.", field=field)
    return text or None


def validate_trade_input(payload: Any) -> ParsedTrade:
    """Validate a raw trade payload field by field.

    Pure: depends on nothing but ``payload``. Raises TradeValidationError
    naming the first offending field.
    """
    if not isinstance(payload, Mapping):
        raise TradeValidationError("Invalid trade payload.")

    raw_symbol = payload.get("symbol")
    symbol = str(raw_symbol).strip().upper() if raw_symbol is not None else ""
    if not symbol:
        raise TradeValidationError("Symbol is required.", field="symbol")
    if len(symbol) > MAX_SYMBOL_LENGTH:
        raise TradeValidationError(f"Symbol must be at most {MAX_SYMBOL_LENGTH} characters.", field="symbol")

    entry_price = _parse_price(payload.get("entryPrice"), "Entry price", "entryPrice")
    exit_price = _parse_price(payload.get("exitPrice"), "Exit price", "exitPrice")
    quantity = _parse_number(payload.get("quantity"), "Quantity", "quantity", limit=MAX_QUANTITY)
    pnl = _parse_price(payload.get("pnl"), "PnL", "pnl")
    trade_date = _parse_trade_date(payload.get("tradeDate"))

    # Anything but the exact literal falls back to MANUAL
    source = TradeSource.BROKER if payload.get("source") == "BROKER" else TradeSource.MANUAL

    return ParsedTrade(
        symbol=symbol,
        entry_price=entry_price,
        exit_price=exit_price,
        quantity=int(quantity),
        pnl=pnl,
        trade_date=trade_date,
        good_notes=_optional_text(payload.get("goodNotes")),
        bad_notes=_optional_text(payload.get("badNotes")),
        source=source,
        broker=_optional_text(payload.get("broker"), "Broker", "broker", MAX_BROKER_LENGTH),
        external_id=_optional_text(
            payload.get("externalId"), "External id", "externalId", MAX_EXTERNAL_ID_LENGTH
        ),
    )


class TradeService:
    """Create and read trades on behalf of one authenticated user."""

    def __init__(self, trades: TradeRepository):
        self.trades = trades
        self.business_logger = get_business_logger()

    async def create_trade(self, user_id: UUID, payload: Any) -> Trade:
        parsed = validate_trade_input(payload)
        trade = await self.trades.add(user_id, **asdict(parsed))

        self.business_logger.log_trade_recorded(
            user_id=str(user_id),
            trade_id=str(trade.id),
            symbol=trade.symbol,
            quantity=trade.quantity,
            pnl=parsed.pnl,
            source=parsed.source.value
        )
        return trade

    async def list_trades(self, user_id: UUID) -> List[Trade]:
        return await self.trades.list_for_user(user_id)

    async def summarize(self, user_id: UUID) -> TradeSummary:
        count, total_pnl, wins = await self.trades.aggregate_for_user(user_id)
        if count == 0:
            zero = Decimal(0)
            return TradeSummary(total_trades=0, total_pnl=zero, average_pnl=zero, win_rate=zero)

        return TradeSummary(
            total_trades=count,
            total_pnl=total_pnl,
            average_pnl=(total_pnl / count).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_EVEN),
            win_rate=(Decimal(wins) * 100 / count).quantize(Decimal("0.01"), rounding=ROUND_HALF_EVEN),
        )
