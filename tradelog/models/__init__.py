"""Database models package."""

from tradelog.models.base import Base
from tradelog.models.user import AuthCredential, CredentialProvider, User
from tradelog.models.trade import Trade, TradeSource

__all__ = ["Base", "User", "AuthCredential", "CredentialProvider", "Trade", "TradeSource"]
