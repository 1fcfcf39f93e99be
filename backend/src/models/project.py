"""Project model - root of the project/list/task hierarchy"""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship, validates

from .base import Base
from .soft_deletes import SoftDeletes


class Project(SoftDeletes, Base):
    """Kanban project owned by a single user.

    Permanently deleting a project removes its lists and tasks with it.
    """
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    owner = relationship("User", back_populates="projects")
    lists = relationship(
        "TaskList",
        back_populates="project",
        cascade="all, delete",
        order_by="TaskList.position",
    )
    tasks = relationship("Task", back_populates="project", cascade="all, delete")

    @validates('name')
    def validate_name(self, key, value):
        if not value or not value.strip():
            raise ValueError("Project name cannot be empty")
        return value.strip()

    def __repr__(self):
        return f"<Project(id={self.id}, name='{self.name}')>"
