"""Video model."""

from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, Float, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from clipnest.database import Base


class Video(Base):
    """A video hosted on Cloudinary and owned by one user."""
    __tablename__ = "videos"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Remote assets
    video_file = Column(String(500), nullable=False)
    video_public_id = Column(String(255))
    thumbnail = Column(String(500), nullable=False)
    thumbnail_public_id = Column(String(255))

    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, default="")
    duration = Column(Float, default=0)

    # Counters
    views = Column(Integer, default=0, nullable=False)
    likes = Column(Integer, default=0, nullable=False)

    is_published = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="videos")
    comments = relationship("Comment", back_populates="video", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Video(title='{self.title}', views={self.views}, likes={self.likes})>"
