"""SQLAlchemy models."""

from src.models.offer import Offer
from src.models.user import User
from src.models.wish import Wish

__all__ = [
    "User",
    "Offer",
    "Wish",
]
