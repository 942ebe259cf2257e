"""User schemas.

Request payloads and the named views a user is rendered through. Each view
is an allow-list: a field only reaches a response if it is declared here.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.schemas.advertisement import OfferBrowseView, WishBrowseView

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128

JsonScalar = str | int | float | bool | None


class UserCreate(BaseModel):
    """Registration payload."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    name: str | None = Field(None, max_length=255)


class UserUpdate(BaseModel):
    """Profile edit payload. The password has its own endpoint."""

    model_config = ConfigDict(extra="forbid")

    # Not Optional: the field may be omitted but an explicit null is rejected
    email: EmailStr = Field(None, max_length=255)
    name: str | None = Field(None, max_length=255)


class PasswordChange(BaseModel):
    """Password change payload. Missing keys are read as null.

    Values may be any JSON scalar. The new password is only required to be
    text after the confirmation has been compared.
    """

    currentpassword: JsonScalar = None
    newpassword: JsonScalar = None
    passwordconfirmation: JsonScalar = None

    def confirmation_matches(self) -> bool:
        """Strict comparison: ``1`` and ``"1"`` or ``true`` do not match."""
        return type(self.newpassword) is type(self.passwordconfirmation) and (
            self.newpassword == self.passwordconfirmation
        )


class UserBrowseView(BaseModel):
    """Public listing of users."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    picture: str


class UserReadView(BaseModel):
    """Full profile, only ever shown to its owner."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None
    picture: str
    created_at: datetime
    updated_at: datetime


class UserDetailView(BaseModel):
    """Single user with their active offers and wishes."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    picture: str
    created_at: datetime
    offers: list[OfferBrowseView] = []
    wishes: list[WishBrowseView] = []


class UserOffersView(BaseModel):
    """A user's active offers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    picture: str
    offers: list[OfferBrowseView] = []
