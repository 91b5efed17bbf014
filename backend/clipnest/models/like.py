"""Like model."""

from sqlalchemy import Column, DateTime, ForeignKey, Uuid, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
import uuid

from clipnest.database import Base


class LikeSubject(str, enum.Enum):
    """Kinds of entities that can be liked."""
    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"


class Like(Base):
    """
    A user's like on a video, comment or tweet.

    The row existing is the liked state; removing it is the only way to unlike.
    """
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("subject_type", "subject_id", "liked_by_id", name="uq_like_subject_actor"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    subject_type = Column(Enum(LikeSubject, name="like_subject"), nullable=False)
    subject_id = Column(Uuid, nullable=False, index=True)
    liked_by_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    liked_by = relationship("User")

    def __repr__(self):
        return f"<Like({self.subject_type.value}={self.subject_id}, by={self.liked_by_id})>"
