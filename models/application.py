# models/application.py
from sqlalchemy import Column, Integer, String, ForeignKey
from .base import Base, TimestampMixin


class Application(TimestampMixin, Base):
     """
     Rental application - an accepted application is the candidate for
     tenant assignment; it is completed when the resulting lease ends.
     """
     __tablename__ = "applications"

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
     status = Column(String(50), default="pending", nullable=False)  # pending, accepted, rejected, completed

     def __repr__(self):
          return f"<Application(id={self.id}, tenant_id={self.tenant_id}, status='{self.status}')>"
