# services/lease_status.py
"""
Billing status of a lease, derived from its cycle projection.
"""
import enum
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from models.bill import BillStatus
from services.billing_cycle import CycleProjection

# Reminders go out this many days before a due date
REMINDER_LEAD_DAYS = 3

OVERDUE_NOTE = "Tenant has unpaid bills"
CONTRACT_ENDING_NOTE = "Contract ends before next expected cycle"


class BillingStatus(str, enum.Enum):
     OVERDUE = "Overdue"
     CONFIRMING = "Confirming"
     PENDING = "Pending"
     SCHEDULED = "Scheduled"
     CONTRACT_ENDING = "Contract Ending"


@dataclass(frozen=True)
class LeaseStatusResult:
     status: BillingStatus
     send_date: date
     note: Optional[str] = None


def reminder_send_date(due_date: date) -> date:
     return due_date - timedelta(days=REMINDER_LEAD_DAYS)


def classify(
     projection: CycleProjection,
     contract_end_date: Optional[date],
     today: Optional[date] = None,
) -> LeaseStatusResult:
     """
     Label a projected cycle.

     An open bill is reported as it stands (Confirming, Overdue or Pending)
     even when it falls near or past the contract end. Only a projected
     cycle with no open bill behind it can become Contract Ending, and only
     when it lands strictly after the contract end date.
     """
     today = today or date.today()
     send_date = reminder_send_date(projection.next_due_date)

     if projection.has_open_bill:
          if projection.source_bill.status == BillStatus.PENDING_CONFIRMATION:
               return LeaseStatusResult(BillingStatus.CONFIRMING, send_date)
          if projection.next_due_date < today:
               return LeaseStatusResult(BillingStatus.OVERDUE, send_date, OVERDUE_NOTE)
          return LeaseStatusResult(BillingStatus.PENDING, send_date)

     if contract_end_date is not None and projection.next_due_date > contract_end_date:
          return LeaseStatusResult(BillingStatus.CONTRACT_ENDING, send_date, CONTRACT_ENDING_NOTE)
     return LeaseStatusResult(BillingStatus.SCHEDULED, send_date)
