"""User API endpoints."""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.api.dependencies import (
    USER_NOT_FOUND,
    get_current_user,
    get_current_user_or_404,
    get_target_user,
)
from src.api.errors import (
    ConfirmationMismatch,
    DeletionFailed,
    InvalidCredentials,
    NotFound,
    StorageFailure,
    ValidationFailed,
    parse_body,
)
from src.config import get_settings
from src.database import get_db
from src.models.user import User
from src.schemas.advertisement import (
    InactiveAdvertisementsView,
    OfferBrowseView,
    OfferReadView,
    WishBrowseView,
    WishReadView,
)
from src.schemas.user import (
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    PasswordChange,
    UserBrowseView,
    UserCreate,
    UserDetailView,
    UserOffersView,
    UserReadView,
    UserUpdate,
)
from src.services import repository
from src.services.auth import get_password_hash, verify_password
from src.services.storage import (
    ALLOWED_PICTURE_TYPES,
    PictureStorage,
    PictureStorageError,
    get_picture_storage,
    read_upload_file,
    verify_picture,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

REQUEST_NOT_FOUND = "request not found."
EMAIL_TAKEN = "email: this email address is already used."


def user_detail_view(db: Session, user: User) -> UserDetailView:
    """Render a user with their active offers and wishes."""
    return UserDetailView(
        id=user.id,
        name=user.name,
        picture=user.picture,
        created_at=user.created_at,
        offers=[
            OfferBrowseView.model_validate(offer)
            for offer in repository.find_user_active_offers(db, user.id)
        ],
        wishes=[
            WishBrowseView.model_validate(wish)
            for wish in repository.find_user_active_wishes(db, user.id)
        ],
    )


def user_offers_view(db: Session, user: User) -> UserOffersView:
    """Render a user with their active offers."""
    return UserOffersView(
        id=user.id,
        name=user.name,
        picture=user.picture,
        offers=[
            OfferBrowseView.model_validate(offer)
            for offer in repository.find_user_active_offers(db, user.id)
        ],
    )


def discard_picture(storage: PictureStorage, key: str) -> None:
    """Remove a stored picture; failures are logged and otherwise ignored."""
    try:
        storage.delete(key)
    except OSError as e:
        logger.warning(f"Failed to remove picture {key}: {e}")


# --- Current user's advertisements ---


@router.get("/current/offers", response_model=list[OfferReadView])
async def get_current_offers(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get the current user's active offers."""
    return repository.find_user_active_offers(db, current_user.id)


@router.get("/current/wishes", response_model=list[WishReadView])
async def get_current_wishes(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get the current user's active wishes."""
    return repository.find_user_active_wishes(db, current_user.id)


@router.get("/current/advertisements", response_model=InactiveAdvertisementsView)
async def get_current_inactive_ads(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get the current user's inactive wishes and offers."""
    wishes = repository.find_user_inactive_wishes(db, current_user.id)
    offers = repository.find_user_inactive_offers(db, current_user.id)
    return InactiveAdvertisementsView(
        wishes=[WishReadView.model_validate(wish) for wish in wishes],
        offers=[OfferReadView.model_validate(offer) for offer in offers],
    )


@router.get("/{user_id:int}/offers", response_model=UserOffersView)
async def browse_user_offers(
    user: Annotated[User | None, Depends(get_target_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a user's offers."""
    if user is None:
        raise NotFound(REQUEST_NOT_FOUND)
    return user_offers_view(db, user)


# --- Accounts ---


@router.post("", response_model=UserReadView, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Register a new user."""
    if repository.email_taken(db, user_data.email):
        raise ValidationFailed(EMAIL_TAKEN)

    user = User(
        email=user_data.email,
        name=user_data.name,
        password_hash=get_password_hash(user_data.password),
        picture=get_settings().default_picture_url,
        picture_key=None,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationFailed(EMAIL_TAKEN) from e
    db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return user


@router.get("/{user_id:int}", response_model=UserDetailView)
async def read_user(
    user: Annotated[User | None, Depends(get_target_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a user with their active offers and wishes."""
    if user is None:
        raise NotFound(USER_NOT_FOUND)
    return user_detail_view(db, user)


@router.get("/current/profile", response_model=UserReadView)
async def get_current_profile(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get the current user's full profile."""
    return current_user


@router.get("", response_model=list[UserBrowseView])
async def browse_users(
    db: Annotated[Session, Depends(get_db)],
):
    """Get all users."""
    return repository.get_all_users(db)


@router.api_route(
    "/current",
    methods=["PUT", "PATCH"],
    response_model=UserReadView,
    status_code=status.HTTP_206_PARTIAL_CONTENT,
)
async def edit_current_user(
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Edit the current user's profile. Fields left out of the payload are kept."""
    user_data = await parse_body(request, UserUpdate)
    changes = user_data.model_dump(exclude_unset=True)

    if "email" in changes and repository.email_taken(
        db, changes["email"], exclude_user_id=current_user.id
    ):
        raise ValidationFailed(EMAIL_TAKEN)

    for field, value in changes.items():
        setattr(current_user, field, value)
    current_user.updated_at = datetime.now(UTC)

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationFailed(EMAIL_TAKEN) from e
    db.refresh(current_user)

    logger.info(f"User {current_user.id} edited {sorted(changes)}")
    return current_user


@router.api_route(
    "/current/password",
    methods=["PUT", "PATCH"],
    status_code=status.HTTP_206_PARTIAL_CONTENT,
)
async def edit_current_password(
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Change the current user's password."""
    password_data = await parse_body(request, PasswordChange)
    if not password_data.confirmation_matches():
        raise ConfirmationMismatch()

    if not verify_password(password_data.currentpassword, current_user.password_hash):
        logger.info(f"Wrong current password for user {current_user.id}")
        raise InvalidCredentials()

    new_password = password_data.newpassword
    if not isinstance(new_password, str) or not (
        PASSWORD_MIN_LENGTH <= len(new_password) <= PASSWORD_MAX_LENGTH
    ):
        raise ValidationFailed(
            f"newpassword: must be a string between {PASSWORD_MIN_LENGTH} "
            f"and {PASSWORD_MAX_LENGTH} characters."
        )

    current_user.password_hash = get_password_hash(new_password)
    current_user.updated_at = datetime.now(UTC)
    db.commit()

    logger.info(f"User {current_user.id} changed their password")
    return {"Validation": "your password has been changed."}


@router.post("/current/pictures")
async def upload_current_picture(
    current_user: Annotated[User, Depends(get_current_user_or_404)],
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[PictureStorage, Depends(get_picture_storage)],
    file: Annotated[
        UploadFile | None, File(description="Picture (JPEG, PNG, GIF or WebP)")
    ] = None,
):
    """Upload a new profile picture for the current user.

    The new file is saved and committed before the previous one is removed,
    so a failure at any step leaves the user with a working picture.

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    if file is None:
        raise StorageFailure()
    if file.content_type not in ALLOWED_PICTURE_TYPES:
        logger.info(f"Rejected picture of type {file.content_type} for user {current_user.id}")
        raise StorageFailure()

    try:
        data = await read_upload_file(file, get_settings().max_picture_bytes)
        await asyncio.to_thread(verify_picture, data)
    except ValueError as e:
        logger.info(f"Rejected picture for user {current_user.id}: {e}")
        raise StorageFailure() from e

    try:
        new_key = storage.save(file.filename, data)
    except PictureStorageError as e:
        logger.error(f"Picture upload failed for user {current_user.id}: {e}")
        raise StorageFailure() from e

    previous_key = current_user.picture_key
    current_user.picture = storage.url_for(new_key)
    current_user.picture_key = new_key
    current_user.updated_at = datetime.now(UTC)

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        discard_picture(storage, new_key)
        logger.error(f"Could not record picture for user {current_user.id}: {e}")
        raise StorageFailure() from e

    if previous_key:
        discard_picture(storage, previous_key)

    return {"success": "image imported."}


@router.delete("/current")
async def delete_current_user(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[PictureStorage, Depends(get_picture_storage)],
):
    """Delete the current user's account along with their offers and wishes."""
    user_id = current_user.id
    picture_key = current_user.picture_key

    try:
        db.delete(current_user)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not delete user {user_id}: {e}")
        raise DeletionFailed() from e

    if picture_key:
        discard_picture(storage, picture_key)

    logger.info(f"Deleted user {user_id}")
    return {"success": "user deleted."}
