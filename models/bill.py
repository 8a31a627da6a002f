# models/bill.py
import enum
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Boolean, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from .base import Base


class BillStatus(str, enum.Enum):
     """Enumeration for bill payment status."""
     PENDING = "pending"
     PENDING_CONFIRMATION = "pending_confirmation"
     PAID = "paid"


OPEN_BILL_STATUSES = (BillStatus.PENDING, BillStatus.PENDING_CONFIRMATION)


class Bill(Base):
     """
     Bill (payment request) model - one billing cycle's invoice for a lease.
     
     rent_amount and advance_amount together determine how many months of
     occupancy the bill discharges once paid. Bills are never deleted.
     """
     __tablename__ = "bills"

     id = Column(Integer, primary_key=True, autoincrement=True)
     
     # Foreign keys
     lease_id = Column(
          Integer, 
          ForeignKey("leases.id", ondelete="CASCADE"), 
          nullable=False,
          index=True
     )
     tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=False)
     landlord_id = Column(Integer, nullable=False, index=True)
     
     # Bill details
     due_date = Column(Date, nullable=False, index=True)
     status = Column(
          Enum(BillStatus, name="bill_status", create_constraint=True,
               values_callable=lambda e: [m.value for m in e]),
          default=BillStatus.PENDING,
          nullable=False,
          index=True
     )
     bills_description = Column(String(255), nullable=True)

     # Line items
     rent_amount = Column(Numeric(12, 2), nullable=False, default=0)
     advance_amount = Column(Numeric(12, 2), nullable=False, default=0)
     security_deposit_amount = Column(Numeric(12, 2), nullable=False, default=0)
     water_bill = Column(Numeric(12, 2), nullable=False, default=0)
     electrical_bill = Column(Numeric(12, 2), nullable=False, default=0)
     wifi_bill = Column(Numeric(12, 2), nullable=False, default=0)
     other_bills = Column(Numeric(12, 2), nullable=False, default=0)

     # Payment (written by the payment confirmation flow)
     paid_at = Column(DateTime, nullable=True)
     amount_paid = Column(Numeric(12, 2), nullable=True)

     is_move_in_payment = Column(Boolean, default=False, nullable=False)
     is_renewal_payment = Column(Boolean, default=False, nullable=False)
     
     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     
     # Relationships
     tenant = relationship("Tenant", back_populates="bills")
     lease = relationship("Lease", back_populates="bills")
     
     def __repr__(self):
          return f"<Bill(id={self.id}, lease_id={self.lease_id}, status='{self.status}', due_date={self.due_date})>"

     @property
     def total_amount(self) -> Decimal:
          """Sum of every line item."""
          items = (
               self.rent_amount,
               self.advance_amount,
               self.security_deposit_amount,
               self.water_bill,
               self.electrical_bill,
               self.wifi_bill,
               self.other_bills,
          )
          return sum((Decimal(item or 0) for item in items), Decimal("0"))

     @property
     def is_open(self) -> bool:
          """Awaiting payment or landlord confirmation."""
          return self.status in OPEN_BILL_STATUSES
     
     def mark_as_paid(self, amount_paid=None, paid_at=None) -> None:
          """Mark the bill as paid."""
          self.status = BillStatus.PAID
          self.paid_at = paid_at or datetime.now(timezone.utc)
          self.amount_paid = amount_paid if amount_paid is not None else self.total_amount
