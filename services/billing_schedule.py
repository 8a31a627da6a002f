# services/billing_schedule.py
"""
Billing schedule for a landlord's dashboard.

Projects and classifies the next billing cycle of every active lease the
landlord owns. Read-only: leases and bills are never modified here.
"""
from collections import defaultdict
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from models import Bill, Lease, LeaseStatus
from schemas.billing import BillingScheduleEntry
from services.billing_cycle import project_next_cycle
from services.lease_status import classify


def schedule_entry(lease: Lease, bills: list, today: Optional[date] = None) -> BillingScheduleEntry:
     """Project and classify a single lease."""
     projection = project_next_cycle(lease, bills, today)
     result = classify(projection, lease.contract_end_date, today)
     last_bill = max(bills, key=lambda b: (b.due_date, b.id or 0)) if bills else None
     return BillingScheduleEntry(
          lease_id=lease.id,
          tenant_name=lease.tenant.full_name if lease.tenant else None,
          property_title=lease.property.title if lease.property else None,
          next_due_date=projection.next_due_date,
          send_date=result.send_date,
          status=result.status.value,
          note=result.note,
          last_bill_id=last_bill.id if last_bill else None,
          contract_end_date=lease.contract_end_date,
     )


def build_billing_schedule(db: Session, landlord_id: int, today: Optional[date] = None) -> list[BillingScheduleEntry]:
     """
     Billing schedule for all of a landlord's active leases.

     Returns:
          Entries sorted by next due date (earliest first); empty when the
          landlord has no active leases
     """
     leases = (
          db.query(Lease)
          .options(joinedload(Lease.tenant), joinedload(Lease.property))
          .filter(Lease.landlord_id == landlord_id, Lease.status == LeaseStatus.ACTIVE)
          .all()
     )
     if not leases:
          return []

     bills = (
          db.query(Bill)
          .filter(Bill.landlord_id == landlord_id)
          .order_by(Bill.due_date.asc(), Bill.id.asc())
          .all()
     )
     bills_by_lease = defaultdict(list)
     for bill in bills:
          bills_by_lease[bill.lease_id].append(bill)

     entries = [schedule_entry(lease, bills_by_lease[lease.id], today) for lease in leases]
     entries.sort(key=lambda e: (e.next_due_date, e.lease_id))
     return entries
