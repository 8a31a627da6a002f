# models/lease.py
import enum
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Boolean, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin


def _values(enum_cls):
     return [member.value for member in enum_cls]


class LeaseStatus(str, enum.Enum):
     """Lifecycle state of an occupancy."""
     ACTIVE = "active"
     PENDING_END = "pending_end"
     ENDED = "ended"


class RequestStatus(str, enum.Enum):
     """State of a tenant request (renewal or end of occupancy)."""
     NONE = "none"
     PENDING = "pending"
     APPROVED = "approved"
     REJECTED = "rejected"


class Lease(TimestampMixin, Base):
     """
     Lease (occupancy) model - a tenant occupying a property under one landlord.

     Created on tenant assignment, extended on renewal approval and closed
     (status=ended) when the contract is terminated. A lease owns its bills.
     """
     __tablename__ = "leases"

     id = Column(Integer, primary_key=True, autoincrement=True)
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
     tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
     landlord_id = Column(Integer, nullable=False, index=True)
     application_id = Column(Integer, ForeignKey("applications.id"), nullable=True)

     status = Column(
          Enum(LeaseStatus, name="lease_status", values_callable=_values),
          default=LeaseStatus.ACTIVE,
          nullable=False,
          index=True,
     )

     # Lease period
     start_date = Column(Date, nullable=False)
     contract_end_date = Column(Date, nullable=True)
     end_date = Column(Date, nullable=True)  # Set when the lease is ended

     # Terms
     security_deposit = Column(Numeric(12, 2), nullable=False, default=0)
     security_deposit_used = Column(Numeric(12, 2), nullable=False, default=0)
     late_payment_fee = Column(Numeric(12, 2), nullable=False, default=0)
     wifi_due_day = Column(Integer, nullable=True)
     contract_url = Column(String(500), nullable=True)

     # Renewal
     renewal_requested = Column(Boolean, default=False, nullable=False)
     renewal_status = Column(
          Enum(RequestStatus, name="renewal_status", values_callable=_values),
          default=RequestStatus.NONE,
          nullable=False,
     )
     renewal_signing_date = Column(Date, nullable=True)

     # End of occupancy
     end_request_status = Column(
          Enum(RequestStatus, name="end_request_status", values_callable=_values),
          default=RequestStatus.NONE,
          nullable=False,
     )
     end_requested_at = Column(DateTime, nullable=True)
     end_request_date = Column(Date, nullable=True)
     end_request_reason = Column(Text, nullable=True)
     termination_reason = Column(Text, nullable=True)

     def __repr__(self):
          return f"<Lease(id={self.id}, tenant_id={self.tenant_id}, property_id={self.property_id}, status='{self.status}')>"

     # Defined before the `property` relationship, which shadows the builtin in this class body
     @property
     def is_open(self) -> bool:
          """Active or awaiting an end decision; the property is still occupied."""
          return self.status in (LeaseStatus.ACTIVE, LeaseStatus.PENDING_END)

     # Relationships
     property = relationship("Property", back_populates="leases")
     tenant = relationship("Tenant", back_populates="leases")
     bills = relationship("Bill", back_populates="lease", order_by="Bill.due_date")
     reminders = relationship("ScheduledReminder", back_populates="lease")
