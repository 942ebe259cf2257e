"""User model."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User account: owns offers and wishes."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    picture = Column(String(500), nullable=False)
    # Storage key of a platform-hosted picture; NULL for the default image
    picture_key = Column(String(255), nullable=True)

    # Relationships
    offers = relationship("Offer", back_populates="owner", cascade="all, delete-orphan")
    wishes = relationship("Wish", back_populates="owner", cascade="all, delete-orphan")
