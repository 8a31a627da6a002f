# models/notification.py
"""
Notification model - in-app notification feed.

Rows are written by the in-app delivery channel after a lifecycle
transition has committed; the lifecycle transaction never writes here.
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, func
from .base import Base


class Notification(Base):
     __tablename__ = "notifications"

     id = Column(Integer, primary_key=True, autoincrement=True)
     recipient_id = Column(Integer, nullable=False, index=True)
     actor_id = Column(Integer, nullable=True)
     type = Column(String(50), nullable=False)
     message = Column(Text, nullable=False)
     link = Column(String(255), nullable=True)
     is_read = Column(Boolean, default=False, nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<Notification(id={self.id}, recipient_id={self.recipient_id}, type='{self.type}')>"
