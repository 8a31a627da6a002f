# models/tenant.py
from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin


class Tenant(TimestampMixin, Base):
     """
     Tenant model - profile of a renter.
     Maps to existing 'tenants' table in the database.
     """
     __tablename__ = "tenants"

     id = Column(Integer, primary_key=True, autoincrement=True)
     
     # Personal info
     first_name = Column(String(100), nullable=False)
     last_name = Column(String(100), nullable=False)
     email = Column(String(255), nullable=True)
     phone = Column(String(50), nullable=True)
     
     # ID verification (required before a lease can be assigned)
     id_verified = Column(Boolean, default=False, nullable=False)

     # Relationships
     leases = relationship("Lease", back_populates="tenant")
     bills = relationship("Bill", back_populates="tenant")
     
     def __repr__(self):
          return f"<Tenant(id={self.id}, name='{self.full_name}')>"

     @property
     def full_name(self) -> str:
          return f"{self.first_name} {self.last_name}".strip()
