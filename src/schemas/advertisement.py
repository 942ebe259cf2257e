"""Offer and wish schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class OfferBrowseView(BaseModel):
    """Offer as shown on someone's public profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None
    picture: str | None
    created_at: datetime


class WishBrowseView(BaseModel):
    """Wish as shown on someone's public profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None
    created_at: datetime


class OfferReadView(BaseModel):
    """Offer as shown to its owner."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None
    picture: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class WishReadView(BaseModel):
    """Wish as shown to its owner."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class InactiveAdvertisementsView(BaseModel):
    """The owner's deactivated wishes and offers."""

    wishes: list[WishReadView]
    offers: list[OfferReadView]
