# models/booking.py
from sqlalchemy import Column, Integer, String, ForeignKey
from .base import Base, TimestampMixin


class Booking(TimestampMixin, Base):
     """
     Viewing booking made by a tenant for a property.

     The lifecycle engine only closes these out (status=completed) when the
     tenant's occupancy of the property ends.
     """
     __tablename__ = "bookings"

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
     status = Column(String(50), default="pending", nullable=False)  # pending, pending_approval, approved, accepted, cancelled, rejected, completed

     def __repr__(self):
          return f"<Booking(id={self.id}, tenant_id={self.tenant_id}, status='{self.status}')>"
