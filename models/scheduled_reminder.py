# models/scheduled_reminder.py
from sqlalchemy import Column, Integer, Date, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base


class ScheduledReminder(Base):
     """
     Advance billing reminder for a lease.

     send_date is the next due date minus the reminder lead time; the
     reminder job picks up unsent rows once send_date is reached.
     """
     __tablename__ = "scheduled_reminders"

     id = Column(Integer, primary_key=True, autoincrement=True)
     lease_id = Column(
          Integer,
          ForeignKey("leases.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     send_date = Column(Date, nullable=False, index=True)
     sent = Column(Boolean, default=False, nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     lease = relationship("Lease", back_populates="reminders")

     def __repr__(self):
          return f"<ScheduledReminder(id={self.id}, lease_id={self.lease_id}, send_date={self.send_date}, sent={self.sent})>"
