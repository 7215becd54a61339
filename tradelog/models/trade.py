"""Journal trade model."""
import enum
from decimal import Decimal

from sqlalchemy import BigInteger, Column, DateTime, Enum, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.types import TypeDecorator

from tradelog.models.base import Base

# Fixed-point storage for prices and P&L
PRICE_PRECISION = 28
PRICE_SCALE = 8


class DecimalString(TypeDecorator):
    """Decimal kept as its exact text form.

    SQLite has no native decimal and SQLAlchemy stores ``Numeric`` there
    as a binary float. The column is declared as VARCHAR so SQLite gives
    it text affinity and never coerces the value.
    """

    impl = String(PRICE_PRECISION + 2)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return format(Decimal(value), "f")

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


def price_column_type():
    return Numeric(PRICE_PRECISION, PRICE_SCALE, asdecimal=True).with_variant(DecimalString(), "sqlite")


class TradeSource(enum.Enum):
    """Where a trade entry came from."""
    MANUAL = "MANUAL"
    BROKER = "BROKER"


class Trade(Base):
    """A single logged round trip, owned by exactly one user."""

    __tablename__ = "trades"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    symbol = Column(String(32), nullable=False, index=True)
    entry_price = Column(price_column_type(), nullable=False)
    exit_price = Column(price_column_type(), nullable=False)
    quantity = Column(BigInteger, nullable=False)
    pnl = Column(price_column_type(), nullable=False)
    trade_date = Column(DateTime(timezone=True), nullable=False, index=True)

    # Reflection
    good_notes = Column(Text, nullable=True)
    bad_notes = Column(Text, nullable=True)

    # Broker linkage (stored only, no integration)
    source = Column(
        Enum(TradeSource, name="tradesource"),
        nullable=False,
        default=TradeSource.MANUAL
    )
    broker = Column(String(100), nullable=True)
    external_id = Column(String(255), nullable=True)

    user = relationship("User", back_populates="trades")

    def __repr__(self):
        return f"<Trade {self.quantity} {self.symbol} pnl={self.pnl}>"
