# services/billing_cycle.py
"""
Billing cycle projection.

Given a lease and its bill history, work out when the next billing cycle
is due. Everything here is pure: no queries, no writes.

Projection rules:
1. The earliest open bill (pending / pending_confirmation) is the next cycle.
2. Otherwise the most recent paid bill with rent is projected forward by
   the number of months it covered (1 + whole months of advance).
3. With no usable history the cycle starts on the lease start date.
"""
from calendar import monthrange
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from models.bill import Bill, BillStatus
from models.lease import Lease

# Every status a raised rent bill can be in
RENT_BILL_STATUSES = (BillStatus.PAID, BillStatus.PENDING_CONFIRMATION, BillStatus.PENDING)


@dataclass(frozen=True)
class CycleProjection:
     """Result of projecting a lease's next billing cycle."""
     next_due_date: date
     source_bill: Optional[Bill] = None
     is_overdue: bool = False
     months_covered: int = 0
     covered_from: Optional[date] = None

     @property
     def has_open_bill(self) -> bool:
          return self.source_bill is not None and self.source_bill.is_open


def add_months(value: date, months: int) -> date:
     """
     Advance a date by whole calendar months, keeping the day of month and
     clamping to the last day of shorter months (Jan 31 + 1 -> Feb 28/29).
     """
     month_index = value.month - 1 + months
     year = value.year + month_index // 12
     month = month_index % 12 + 1
     day = min(value.day, monthrange(year, month)[1])
     return date(year, month, day)


def months_covered(bill: Bill) -> int:
     """
     Number of months a paid bill discharges: one for the rent itself plus
     one per full month of advance at the bill's rent rate.
     """
     rent = Decimal(bill.rent_amount or 0)
     advance = Decimal(bill.advance_amount or 0)
     if rent > 0 and advance > 0:
          return 1 + int(advance // rent)
     return 1


def _ordered(bills: Iterable[Bill]) -> list[Bill]:
     return sorted(bills, key=lambda b: (b.due_date, b.id or 0))


def earliest_open_bill(bills: Iterable[Bill]) -> Optional[Bill]:
     """Earliest bill still awaiting payment or confirmation."""
     for bill in _ordered(bills):
          if bill.is_open:
               return bill
     return None


def latest_rent_bill(bills: Iterable[Bill], statuses: Sequence[BillStatus] = (BillStatus.PAID,)) -> Optional[Bill]:
     """Most recent bill in one of `statuses` that carries rent."""
     for bill in reversed(_ordered(bills)):
          if bill.status in statuses and Decimal(bill.rent_amount or 0) > 0:
               return bill
     return None


def project_next_cycle(lease: Lease, bills: Iterable[Bill], today: Optional[date] = None) -> CycleProjection:
     """
     Project the next billing cycle for a lease.

     Args:
          lease: The lease being projected
          bills: The lease's bills, in any order
          today: Reference date for the overdue check (defaults to today)

     Returns:
          CycleProjection with the next due date and the bill it came from
     """
     today = today or date.today()
     bills = list(bills)

     pending = earliest_open_bill(bills)
     if pending is not None:
          return CycleProjection(
               next_due_date=pending.due_date,
               source_bill=pending,
               is_overdue=pending.due_date < today,
          )

     last_paid = latest_rent_bill(bills)
     if last_paid is not None:
          covered = months_covered(last_paid)
          return CycleProjection(
               next_due_date=add_months(last_paid.due_date, covered),
               source_bill=last_paid,
               months_covered=covered,
               covered_from=last_paid.due_date,
          )

     return CycleProjection(next_due_date=lease.start_date)


def renewal_due_date(lease: Lease, bills: Iterable[Bill]) -> date:
     """
     Due date of the first bill of a renewed term.

     Continues after the latest rent bill already raised, whether paid,
     awaiting confirmation or still outstanding, so no cycle is skipped or
     billed twice; falls back to the current contract end date when the
     lease has no rent bill.
     """
     last = latest_rent_bill(bills, statuses=RENT_BILL_STATUSES)
     if last is not None:
          return add_months(last.due_date, months_covered(last))
     return lease.contract_end_date or lease.start_date
