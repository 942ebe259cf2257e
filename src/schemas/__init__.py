"""Pydantic schemas for API requests and responses."""

from src.schemas.advertisement import (
    InactiveAdvertisementsView,
    OfferBrowseView,
    OfferReadView,
    WishBrowseView,
    WishReadView,
)
from src.schemas.auth import AuthResponse, UserLogin
from src.schemas.user import (
    PasswordChange,
    UserBrowseView,
    UserCreate,
    UserDetailView,
    UserOffersView,
    UserReadView,
    UserUpdate,
)

__all__ = [
    "UserLogin",
    "AuthResponse",
    "UserCreate",
    "UserUpdate",
    "PasswordChange",
    "UserBrowseView",
    "UserReadView",
    "UserDetailView",
    "UserOffersView",
    "OfferBrowseView",
    "OfferReadView",
    "WishBrowseView",
    "WishReadView",
    "InactiveAdvertisementsView",
]
