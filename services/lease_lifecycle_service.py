# services/lease_lifecycle_service.py
"""
Lease Lifecycle Service - state transitions of an occupancy.

Each transition validates its input, writes every row it touches in a
single transaction and only then schedules reminders and dispatches
notifications:

     assign_tenant          none        -> active         (+ move-in bill)
     request_renewal        active      -> active, renewal pending
     approve_renewal        renewal pending -> contract extended (+ renewal bill)
     reject_renewal         renewal pending -> renewal cleared
     request_end            active      -> pending_end
     approve_end            pending_end -> ended          (property freed)
     reject_end             pending_end -> active
     terminate              active / pending_end -> ended (landlord initiated)

A transition that fails to persist raises LeasePersistenceError and has not
notified anyone. Notification or reminder failures after the commit are
logged and do not fail the transition.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import config
from models import (
     Application,
     Bill,
     BillStatus,
     Booking,
     Lease,
     LeaseStatus,
     Property,
     RequestStatus,
     Tenant,
)
from services.bill_composer import BillComposition, BillEvent, compose_bill
from services.billing_cycle import add_months, renewal_due_date
from services.exceptions import (
     LeaseConflictError,
     LeaseNotFoundError,
     LeasePersistenceError,
     LeaseStateError,
     LeaseValidationError,
)
from services.lease_status import reminder_send_date
from services.notification_service import NotificationDispatcher, NotificationMessage
from services.reminder_service import schedule_reminder
from utils.formatting import long_date, peso

logger = logging.getLogger(__name__)

# Booking states closed out when an occupancy ends
OPEN_BOOKING_STATUSES = ("pending", "pending_approval", "approved", "accepted", "cancelled")
COMPLETED = "completed"


@dataclass
class AssignTenantCommand:
     """Everything the landlord submits when assigning a tenant to a property."""
     landlord_id: int
     tenant_id: int
     property_id: int
     start_date: Optional[date]
     contract_end_date: Optional[date]
     wifi_due_day: Optional[int]
     late_payment_fee: Optional[Decimal]
     contract_url: Optional[str]
     application_id: Optional[int] = None


@dataclass
class LifecycleResult:
     """Outcome of a committed transition."""
     lease: Lease
     bill: Optional[Bill] = None
     notifications: List[NotificationMessage] = field(default_factory=list)


class LeaseLifecycleService:
     """Runs lease lifecycle transitions against one database session."""

     def __init__(
          self,
          db: Session,
          dispatcher: Optional[NotificationDispatcher] = None,
          min_contract_months: int = config.MIN_CONTRACT_MONTHS,
          include_advance_on_assign: bool = config.INCLUDE_ADVANCE_ON_ASSIGN,
     ):
          self.db = db
          self.dispatcher = dispatcher or NotificationDispatcher()
          self.min_contract_months = min_contract_months
          self.include_advance_on_assign = include_advance_on_assign

     # ------------------------------------------------------------------
     # Assignment
     # ------------------------------------------------------------------

     def assign_tenant(self, command: AssignTenantCommand) -> LifecycleResult:
          """
          Create an active lease, occupy the property and raise the move-in bill.

          Raises:
               LeaseValidationError: A precondition on the submitted terms failed
               LeaseNotFoundError: Tenant or property does not exist
               LeaseConflictError: The property already has an open lease
               BillCompositionError: The property has no valid rent
               LeasePersistenceError: Nothing was written
          """
          late_fee = self._validate_assignment(command)

          tenant = self.db.get(Tenant, command.tenant_id)
          if tenant is None:
               raise LeaseNotFoundError(f"Tenant with ID {command.tenant_id} not found")
          if not tenant.id_verified:
               raise LeaseValidationError("tenant_id", "Tenant identity has not been verified")

          prop = self.db.get(Property, command.property_id)
          if prop is None:
               raise LeaseNotFoundError(f"Property with ID {command.property_id} not found")
          if prop.landlord_id != command.landlord_id:
               raise LeaseValidationError("property_id", "Property does not belong to this landlord")

          open_lease = (
               self.db.query(Lease)
               .filter(
                    Lease.property_id == prop.id,
                    Lease.status.in_([LeaseStatus.ACTIVE, LeaseStatus.PENDING_END]),
               )
               .first()
          )
          if open_lease is not None:
               raise LeaseConflictError(f"Property {prop.id} already has an active lease (ID {open_lease.id})")

          composition = compose_bill(
               BillEvent.MOVE_IN, prop.price, include_advance=self.include_advance_on_assign
          )

          with self._transaction("assign tenant"):
               lease = Lease(
                    property_id=prop.id,
                    tenant_id=tenant.id,
                    landlord_id=command.landlord_id,
                    application_id=command.application_id,
                    status=LeaseStatus.ACTIVE,
                    start_date=command.start_date,
                    contract_end_date=command.contract_end_date,
                    security_deposit=composition.security_deposit_amount,
                    security_deposit_used=Decimal("0"),
                    late_payment_fee=late_fee,
                    wifi_due_day=command.wifi_due_day,
                    contract_url=command.contract_url,
                    renewal_requested=False,
                    renewal_status=RequestStatus.NONE,
                    end_request_status=RequestStatus.NONE,
               )
               self.db.add(lease)
               self.db.flush()

               prop.mark_occupied()
               bill = self._new_bill(lease, composition, command.start_date)

          logger.info("Assigned tenant %s to property %s (lease %s)", tenant.id, prop.id, lease.id)

          message = (
               f'You have been assigned to occupy "{prop.title}" from {long_date(lease.start_date)} '
               f"to {long_date(lease.contract_end_date)}. "
               f"Security deposit: {peso(lease.security_deposit)}."
          )
          if late_fee > 0:
               message += f" Late payment fee: {peso(late_fee)}."
          message += (
               f"\n\nMove-in payment bill: {_bill_breakdown(composition)}. "
               f"Due: {long_date(bill.due_date)}"
          )

          notes = [self._tenant_note(lease, "occupancy_assigned", message, "/payments", "Occupancy Assigned")]
          self._after_commit(lease, notes, reminder_for=bill.due_date)
          return LifecycleResult(lease=lease, bill=bill, notifications=notes)

     def _validate_assignment(self, command: AssignTenantCommand) -> Decimal:
          if command.start_date is None:
               raise LeaseValidationError("start_date", "Please select a start date")
          if command.contract_end_date is None:
               raise LeaseValidationError("contract_end_date", "Please select a contract end date")

          earliest_end = add_months(command.start_date, self.min_contract_months)
          if command.contract_end_date < earliest_end:
               raise LeaseValidationError(
                    "contract_end_date",
                    f"Contract must run at least {self.min_contract_months} months "
                    f"(end on or after {earliest_end.isoformat()})",
               )

          if command.wifi_due_day is None or not 1 <= command.wifi_due_day <= 31:
               raise LeaseValidationError("wifi_due_day", "Please enter a valid Wifi Due Day (1-31)")

          try:
               late_fee = Decimal(str(command.late_payment_fee))
          except (InvalidOperation, ValueError):
               late_fee = None
          if late_fee is None or not late_fee.is_finite() or late_fee <= 0:
               raise LeaseValidationError("late_payment_fee", "Please enter a Late Payment Fee")

          if not command.contract_url:
               raise LeaseValidationError("contract_url", "Please upload a contract PDF file")

          return late_fee

     # ------------------------------------------------------------------
     # Renewal
     # ------------------------------------------------------------------

     def request_renewal(self, lease_id: int) -> LifecycleResult:
          """Tenant asks to extend the contract."""
          lease = self._get_lease(lease_id)
          if lease.status != LeaseStatus.ACTIVE:
               raise LeaseStateError("Only active leases can be renewed")
          if lease.renewal_requested:
               raise LeaseStateError("A renewal request is already pending")

          with self._transaction("request renewal"):
               lease.renewal_requested = True
               lease.renewal_status = RequestStatus.PENDING

          notes = [
               NotificationMessage(
                    recipient_id=lease.landlord_id,
                    actor_id=lease.tenant_id,
                    type="renewal_request",
                    message=f'{_tenant_name(lease)} requested to renew the contract for "{_title(lease)}".',
                    link="/dashboard",
               )
          ]
          self._after_commit(lease, notes)
          return LifecycleResult(lease=lease, notifications=notes)

     def approve_renewal(
          self,
          lease_id: int,
          signing_date: Optional[date],
          new_end_date: Optional[date],
     ) -> LifecycleResult:
          """
          Extend the contract and raise the renewal bill.

          The bill's due date continues from the tenant's last paid rent as
          it stood before the extension, falling back to the old contract
          end date.
          """
          lease = self._get_lease(lease_id)
          if lease.status != LeaseStatus.ACTIVE:
               raise LeaseStateError("Only active leases can be renewed")
          if not lease.renewal_requested:
               raise LeaseStateError("No renewal request is pending for this lease")
          if signing_date is None:
               raise LeaseValidationError("signing_date", "Please select the contract signing date")
          if new_end_date is None:
               raise LeaseValidationError("new_end_date", "Please select the new contract end date")
          if lease.contract_end_date is not None and new_end_date <= lease.contract_end_date:
               raise LeaseValidationError(
                    "new_end_date", "New end date must be after the current contract end date"
               )

          due_date = renewal_due_date(lease, lease.bills)
          composition = compose_bill(BillEvent.RENEWAL, lease.property.price)

          with self._transaction("approve renewal"):
               lease.contract_end_date = new_end_date
               lease.renewal_requested = False
               lease.renewal_status = RequestStatus.APPROVED
               lease.renewal_signing_date = signing_date
               bill = self._new_bill(lease, composition, due_date)

          logger.info("Renewed lease %s until %s", lease.id, new_end_date)

          message = (
               f'Your renewal request for "{_title(lease)}" has been approved. '
               f"New contract end date: {long_date(new_end_date)}.\n\n"
               f"Renewal payment bill: {_bill_breakdown(composition)}. "
               f"Due: {long_date(bill.due_date)}"
          )
          notes = [self._tenant_note(lease, "renewal_approved", message, "/payments", "Renewal Approved")]
          self._after_commit(lease, notes, reminder_for=bill.due_date)
          return LifecycleResult(lease=lease, bill=bill, notifications=notes)

     def reject_renewal(self, lease_id: int) -> LifecycleResult:
          lease = self._get_lease(lease_id)
          if not lease.renewal_requested:
               raise LeaseStateError("No renewal request is pending for this lease")

          with self._transaction("reject renewal"):
               lease.renewal_requested = False
               lease.renewal_status = RequestStatus.REJECTED

          notes = [
               self._tenant_note(
                    lease,
                    "renewal_rejected",
                    f'Your renewal request for "{_title(lease)}" has been rejected.',
                    "/dashboard",
                    "Renewal Rejected",
               )
          ]
          self._after_commit(lease, notes)
          return LifecycleResult(lease=lease, notifications=notes)

     # ------------------------------------------------------------------
     # End of occupancy
     # ------------------------------------------------------------------

     def request_end(self, lease_id: int, end_date: Optional[date], reason: Optional[str]) -> LifecycleResult:
          """Tenant asks to end the occupancy on `end_date`."""
          if end_date is None or not (reason or "").strip():
               raise LeaseValidationError(
                    "end_date" if end_date is None else "reason",
                    "Please fill in both Date and Reason",
               )
          lease = self._get_lease(lease_id)
          if lease.status != LeaseStatus.ACTIVE:
               raise LeaseStateError("Only active leases can request an end of occupancy")

          with self._transaction("request end of occupancy"):
               lease.status = LeaseStatus.PENDING_END
               lease.end_requested_at = datetime.now(timezone.utc)
               lease.end_request_date = end_date
               lease.end_request_reason = reason.strip()
               lease.end_request_status = RequestStatus.PENDING

          notes = [
               NotificationMessage(
                    recipient_id=lease.landlord_id,
                    actor_id=lease.tenant_id,
                    type="end_occupancy_request",
                    message=f"{_tenant_name(lease)} requested to end occupancy on {long_date(end_date)}.",
                    link="/dashboard",
               )
          ]
          self._after_commit(lease, notes)
          return LifecycleResult(lease=lease, notifications=notes)

     def approve_end(self, lease_id: int, today: Optional[date] = None) -> LifecycleResult:
          """Landlord accepts the tenant's end request; the property is freed."""
          lease = self._get_lease(lease_id)
          if lease.status != LeaseStatus.PENDING_END:
               raise LeaseStateError("No end of occupancy request is pending for this lease")

          end_date = lease.end_request_date or today or date.today()
          with self._transaction("approve end of occupancy"):
               lease.end_request_status = RequestStatus.APPROVED
               self._close_lease(lease, end_date)

          notes = [
               self._tenant_note(
                    lease,
                    "end_request_approved",
                    f'End occupancy request for "{_title(lease)}" approved.',
                    "/dashboard",
                    "End of Occupancy Approved",
               )
          ]
          self._after_commit(lease, notes)
          return LifecycleResult(lease=lease, notifications=notes)

     def reject_end(self, lease_id: int) -> LifecycleResult:
          lease = self._get_lease(lease_id)
          if lease.status != LeaseStatus.PENDING_END:
               raise LeaseStateError("No end of occupancy request is pending for this lease")

          with self._transaction("reject end of occupancy"):
               lease.status = LeaseStatus.ACTIVE
               lease.end_request_status = RequestStatus.REJECTED
               lease.end_requested_at = None
               lease.end_request_date = None
               lease.end_request_reason = None

          notes = [
               self._tenant_note(
                    lease,
                    "end_request_rejected",
                    f'End occupancy request for "{_title(lease)}" rejected.',
                    "/dashboard",
                    "End of Occupancy Rejected",
               )
          ]
          self._after_commit(lease, notes)
          return LifecycleResult(lease=lease, notifications=notes)

     def terminate(self, lease_id: int, end_date: Optional[date], reason: Optional[str]) -> LifecycleResult:
          """Landlord ends the contract without a tenant request."""
          if end_date is None:
               raise LeaseValidationError("end_date", "Please select an end date")
          if not (reason or "").strip():
               raise LeaseValidationError("reason", "Please enter a reason")

          lease = self._get_lease(lease_id)
          if not lease.is_open:
               raise LeaseStateError("Lease has already ended")

          with self._transaction("terminate lease"):
               lease.termination_reason = reason.strip()
               self._close_lease(lease, end_date)

          message = (
               f'Your contract for "{_title(lease)}" has been ended by the landlord.\n\n'
               f"End Date: {long_date(end_date)}\n"
               f"Reason: {lease.termination_reason}\n\n"
               "Please vacate the premises by the end date."
          )
          notes = [self._tenant_note(lease, "occupancy_ended", message, "/dashboard", "Contract Ended")]
          self._after_commit(lease, notes)
          return LifecycleResult(lease=lease, notifications=notes)

     def _close_lease(self, lease: Lease, end_date: date) -> None:
          """Mark the lease ended, free the property and complete related records."""
          lease.status = LeaseStatus.ENDED
          lease.end_date = end_date
          if lease.property is not None:
               lease.property.mark_available()

          bookings = (
               self.db.query(Booking)
               .filter(
                    Booking.tenant_id == lease.tenant_id,
                    Booking.property_id == lease.property_id,
                    Booking.status.in_(OPEN_BOOKING_STATUSES),
               )
               .all()
          )
          for booking in bookings:
               booking.status = COMPLETED

          applications = (
               self.db.query(Application)
               .filter(
                    Application.tenant_id == lease.tenant_id,
                    Application.property_id == lease.property_id,
                    Application.status == "accepted",
               )
               .all()
          )
          for application in applications:
               application.status = COMPLETED

          logger.info(
               "Ended lease %s on %s (%d bookings, %d applications completed)",
               lease.id, end_date, len(bookings), len(applications),
          )

     # ------------------------------------------------------------------
     # Helpers
     # ------------------------------------------------------------------

     def _get_lease(self, lease_id: int) -> Lease:
          lease = self.db.get(Lease, lease_id)
          if lease is None:
               raise LeaseNotFoundError(f"Lease with ID {lease_id} not found")
          return lease

     def _new_bill(self, lease: Lease, composition: BillComposition, due_date: date) -> Bill:
          bill = Bill(
               lease_id=lease.id,
               tenant_id=lease.tenant_id,
               landlord_id=lease.landlord_id,
               property_id=lease.property_id,
               due_date=due_date,
               status=BillStatus.PENDING,
               **composition.as_bill_fields(),
          )
          lease.bills.append(bill)
          self.db.flush()
          return bill

     @contextmanager
     def _transaction(self, action: str) -> Iterator[None]:
          """Commit the enclosed writes together or roll all of them back."""
          try:
               yield
               self.db.commit()
          except SQLAlchemyError as e:
               self.db.rollback()
               logger.exception("Failed to %s", action)
               raise LeasePersistenceError(f"Failed to {action}") from e

     def _after_commit(
          self,
          lease: Lease,
          notes: List[NotificationMessage],
          reminder_for: Optional[date] = None,
     ) -> None:
          if reminder_for is not None:
               try:
                    schedule_reminder(self.db, lease.id, reminder_send_date(reminder_for))
                    self.db.commit()
               except SQLAlchemyError:
                    self.db.rollback()
                    logger.exception("Failed to schedule reminder for lease %s", lease.id)

          try:
               self.dispatcher.dispatch(notes)
          except Exception:
               logger.exception("Failed to dispatch notifications for lease %s", lease.id)

     def _tenant_note(self, lease: Lease, type_: str, message: str, link: str, subject: str) -> NotificationMessage:
          return NotificationMessage(
               recipient_id=lease.tenant_id,
               actor_id=lease.landlord_id,
               type=type_,
               message=message,
               link=link,
               recipient_email=lease.tenant.email if lease.tenant else None,
               subject=subject,
          )


def _title(lease: Lease) -> str:
     return lease.property.title if lease.property else "your property"


def _tenant_name(lease: Lease) -> str:
     return lease.tenant.full_name if lease.tenant else "Tenant"


def _bill_breakdown(composition: BillComposition) -> str:
     parts = [f"{peso(composition.rent_amount)} (Rent)"]
     if composition.advance_amount > 0:
          parts.append(f"{peso(composition.advance_amount)} (Advance)")
     if composition.security_deposit_amount > 0:
          parts.append(f"{peso(composition.security_deposit_amount)} (Security Deposit)")
     return " + ".join(parts) + f" = {peso(composition.total)} Total"
