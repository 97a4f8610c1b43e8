"""数据模型."""

from feedvault.models.account import Account
from feedvault.models.category import Category
from feedvault.models.database import get_session, init_db
from feedvault.models.feed import Feed
from feedvault.models.incoming import Enclosure, IncomingMessage
from feedvault.models.message import Message

__all__ = [
    "Account",
    "Category",
    "Enclosure",
    "Feed",
    "IncomingMessage",
    "Message",
    "get_session",
    "init_db",
]
