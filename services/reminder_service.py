# services/reminder_service.py
"""
Advance billing reminders and monthly rent bills.

Lifecycle transitions schedule a reminder for `due date - 3 days`. The
reminder job (`process_due_reminders`, triggered externally on a timer)
picks up reminders that have come due and either reminds the tenant of
the bill already open for the lease or issues the next monthly rent bill,
then schedules the reminder for the cycle after it.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import Bill, BillStatus, Lease, LeaseStatus, ScheduledReminder
from services.bill_composer import BillEvent, compose_bill
from services.billing_cycle import add_months, months_covered, project_next_cycle
from services.exceptions import LeaseConflictError, LeaseStateError, LifecycleError
from services.lease_status import reminder_send_date
from services.notification_service import NotificationDispatcher, NotificationMessage
from utils.formatting import long_date, month_label, peso

logger = logging.getLogger(__name__)


def schedule_reminder(db: Session, lease_id: int, send_date: date) -> ScheduledReminder:
     """
     Queue an advance reminder for a lease.

     An unsent reminder for the same lease and date is reused.
     """
     existing = (
          db.query(ScheduledReminder)
          .filter(
               ScheduledReminder.lease_id == lease_id,
               ScheduledReminder.send_date == send_date,
               ScheduledReminder.sent.is_(False),
          )
          .first()
     )
     if existing:
          return existing

     reminder = ScheduledReminder(lease_id=lease_id, send_date=send_date, sent=False)
     db.add(reminder)
     db.flush()
     return reminder


def issue_next_rent_bill(db: Session, lease: Lease, today: Optional[date] = None) -> Bill:
     """
     Create the monthly rent bill for a lease's next cycle.

     Raises:
          LeaseStateError: Lease is not active or the cycle falls after the contract end
          LeaseConflictError: A bill is already open for the lease
          BillCompositionError: The property has no valid rent
     """
     if lease.status != LeaseStatus.ACTIVE:
          raise LeaseStateError(f"Lease {lease.id} is not active")

     projection = project_next_cycle(lease, lease.bills, today)
     if projection.has_open_bill:
          raise LeaseConflictError(
               f"A pending bill already exists for {month_label(projection.next_due_date)}"
          )
     due_date = projection.next_due_date
     if lease.contract_end_date is not None and due_date > lease.contract_end_date:
          raise LeaseStateError("Contract ends before next expected cycle")

     composition = compose_bill(BillEvent.MONTHLY, lease.property.price)
     fields = composition.as_bill_fields()
     fields["bills_description"] = f"Monthly Rent for {month_label(due_date)}"
     bill = Bill(
          lease_id=lease.id,
          tenant_id=lease.tenant_id,
          landlord_id=lease.landlord_id,
          property_id=lease.property_id,
          due_date=due_date,
          status=BillStatus.PENDING,
          **fields,
     )
     lease.bills.append(bill)
     db.flush()
     return bill


def rent_reminder_message(lease: Lease, bill: Bill) -> NotificationMessage:
     title = lease.property.title if lease.property else "your property"
     message = (
          f'Rent Bill: Your payment of {peso(bill.total_amount)} for "{title}" '
          f"is due on {long_date(bill.due_date)}."
     )
     if lease.late_payment_fee and lease.late_payment_fee > 0:
          message += f" Late payment fee: {peso(lease.late_payment_fee)}."
     message += " Please check your Payments page."
     return NotificationMessage(
          recipient_id=lease.tenant_id,
          actor_id=lease.landlord_id,
          type="rent_bill_reminder",
          message=message,
          link="/payments",
          recipient_email=lease.tenant.email if lease.tenant else None,
          subject="Rent Bill Reminder",
     )


def _remind_or_issue(db: Session, lease: Lease, today: date) -> Bill:
     projection = project_next_cycle(lease, lease.bills, today)
     if projection.has_open_bill:
          return projection.source_bill
     return issue_next_rent_bill(db, lease, today)


def next_reminder_due_date(bill: Bill, today: date) -> date:
     """
     Due date the following reminder is built around.

     Normally the cycle right after `bill`. When that cycle's send date has
     already passed (the bill is still unpaid, or was issued late), step
     forward whole months from the bill's due date until it is in the future.
     """
     months = months_covered(bill)
     next_due = add_months(bill.due_date, months)
     while reminder_send_date(next_due) <= today:
          months += 1
          next_due = add_months(bill.due_date, months)
     return next_due


def process_due_reminders(
     db: Session,
     dispatcher: NotificationDispatcher,
     today: Optional[date] = None,
) -> list[Bill]:
     """
     Run every unsent reminder whose send date has been reached.

     Each reminder is committed on its own; one failing lease does not stop
     the others. A tenant is reminded about a given bill once per run even
     when several of their reminders have come due.

     Returns:
          Bills the tenants were reminded about (open or newly issued)
     """
     today = today or date.today()
     due = (
          db.query(ScheduledReminder)
          .filter(ScheduledReminder.sent.is_(False), ScheduledReminder.send_date <= today)
          .order_by(ScheduledReminder.send_date, ScheduledReminder.id)
          .all()
     )

     reminded = []
     messages = []
     seen = set()
     for reminder in due:
          lease = reminder.lease
          try:
               reminder.sent = True
               db.flush()
               if lease is None or lease.status != LeaseStatus.ACTIVE:
                    db.commit()
                    continue

               bill = _remind_or_issue(db, lease, today)
               next_due = next_reminder_due_date(bill, today)
               if lease.contract_end_date is None or next_due <= lease.contract_end_date:
                    schedule_reminder(db, lease.id, reminder_send_date(next_due))
               db.commit()
          except LifecycleError as e:
               # Reminder stays consumed; the lease needs a landlord decision
               db.commit()
               logger.warning("Reminder %s for lease %s skipped: %s", reminder.id, reminder.lease_id, e)
               continue
          except SQLAlchemyError:
               db.rollback()
               logger.exception("Reminder %s for lease %s failed", reminder.id, reminder.lease_id)
               continue

          if bill.id in seen:
               continue
          seen.add(bill.id)
          reminded.append(bill)
          messages.append(rent_reminder_message(lease, bill))

     dispatcher.dispatch(messages)
     logger.info("Processed %d due reminders, %d tenants reminded", len(due), len(reminded))
     return reminded
