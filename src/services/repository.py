"""Read-only queries over users and their advertisements."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from src.models.offer import Offer
from src.models.user import User
from src.models.wish import Wish


def get_user(db: Session, user_id: int) -> User | None:
    """Get a user by id."""
    return db.get(User, user_id)


def get_all_users(db: Session) -> list[User]:
    """Get every user, oldest account first."""
    return db.query(User).order_by(User.id).all()


def email_taken(db: Session, email: str, exclude_user_id: int | None = None) -> bool:
    """Check whether another account already uses this email, ignoring case."""
    query = db.query(User.id).filter(func.lower(User.email) == email.lower())
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def find_user_offers(db: Session, owner_id: int, active: bool) -> list[Offer]:
    """Get a user's offers in the given activity state, newest first."""
    return (
        db.query(Offer)
        .filter(Offer.owner_id == owner_id, Offer.is_active == active)
        .order_by(Offer.created_at.desc(), Offer.id.desc())
        .all()
    )


def find_user_wishes(db: Session, owner_id: int, active: bool) -> list[Wish]:
    """Get a user's wishes in the given activity state, newest first."""
    return (
        db.query(Wish)
        .filter(Wish.owner_id == owner_id, Wish.is_active == active)
        .order_by(Wish.created_at.desc(), Wish.id.desc())
        .all()
    )


def find_user_active_offers(db: Session, owner_id: int) -> list[Offer]:
    return find_user_offers(db, owner_id, active=True)


def find_user_active_wishes(db: Session, owner_id: int) -> list[Wish]:
    return find_user_wishes(db, owner_id, active=True)


def find_user_inactive_offers(db: Session, owner_id: int) -> list[Offer]:
    return find_user_offers(db, owner_id, active=False)


def find_user_inactive_wishes(db: Session, owner_id: int) -> list[Wish]:
    return find_user_wishes(db, owner_id, active=False)
