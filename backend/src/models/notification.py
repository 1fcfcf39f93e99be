"""Notification SQLAlchemy model"""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class Notification(Base):
    """In-app notification delivered to a user.

    For deadline notices the row doubles as the idempotency record: at most
    one row exists per (recipient, type, task, offset_hours).
    """
    __tablename__ = "notifications"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "type", "task_id", "offset_hours",
            name="uq_notifications_dedup_key",
        ),
        Index("ix_notifications_user_id_read_at", "user_id", "read_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(Text, nullable=False)
    # Not a foreign key: the notice outlives the task when it is erased
    task_id = Column(Integer, nullable=True)
    offset_hours = Column(Integer, nullable=True)
    data = Column(JSON, nullable=False, default=dict)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    recipient = relationship("User", back_populates="notifications")

    def to_dict(self):
        """Convert notification to dictionary representation"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "task_id": self.task_id,
            "offset_hours": self.offset_hours,
            "data": self.data,
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "created_at": self.created_at.isoformat(),
        }
