"""TaskList model - a Kanban column inside a project"""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from .base import Base
from .soft_deletes import SoftDeletes


class TaskList(SoftDeletes, Base):
    __tablename__ = "lists"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    project = relationship("Project", back_populates="lists")
    tasks = relationship("Task", back_populates="task_list", cascade="all, delete")

    def __repr__(self):
        return f"<TaskList(id={self.id}, name='{self.name}')>"
