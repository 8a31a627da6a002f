# models/property.py
import enum
from sqlalchemy import Column, Integer, String, Numeric, Text, Enum
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin


class PropertyStatus(str, enum.Enum):
     """Availability of a rental property."""
     AVAILABLE = "available"
     OCCUPIED = "occupied"


class Property(TimestampMixin, Base):
     """
     Property model - a rental listing owned by a single landlord.

     Only the columns the billing lifecycle needs are mapped: the current
     monthly rent (`price`) and the availability flag.
     """
     __tablename__ = "properties"

     id = Column(Integer, primary_key=True, autoincrement=True)
     landlord_id = Column(Integer, nullable=False, index=True)
     title = Column(String(255), nullable=False)
     address = Column(Text, nullable=True)

     # Current monthly rent
     price = Column(Numeric(12, 2), nullable=True)
     status = Column(
          Enum(PropertyStatus, name="property_status", values_callable=lambda e: [m.value for m in e]),
          default=PropertyStatus.AVAILABLE,
          nullable=False,
     )

     # Relationships
     leases = relationship("Lease", back_populates="property")
     
     def __repr__(self):
          return f"<Property(id={self.id}, title='{self.title}', status='{self.status}')>"

     def mark_occupied(self) -> None:
          self.status = PropertyStatus.OCCUPIED

     def mark_available(self) -> None:
          self.status = PropertyStatus.AVAILABLE
