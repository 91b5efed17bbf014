"""User model for authentication and channel identity."""

from sqlalchemy import Column, String, DateTime, Text, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from clipnest.database import Base


class User(Base):
    """User account model. Every user is also a channel other users can subscribe to."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(100), nullable=False)
    hashed_password = Column(String(255), nullable=False)

    # Media hosted on Cloudinary; public ids are kept so assets can be destroyed later
    avatar = Column(String(500), nullable=False)
    avatar_public_id = Column(String(255))
    cover_image = Column(String(500), default="")
    cover_image_public_id = Column(String(255))

    refresh_token = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    videos = relationship("Video", back_populates="owner", cascade="all, delete-orphan")
    tweets = relationship("Tweet", back_populates="owner", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="owner", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, email={self.email})>"
