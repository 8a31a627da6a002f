from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from models import (
     Application,
     Bill,
     BillStatus,
     Booking,
     Lease,
     LeaseStatus,
     Notification,
     Property,
     PropertyStatus,
     RequestStatus,
     ScheduledReminder,
)
from services.exceptions import (
     BillCompositionError,
     LeaseConflictError,
     LeaseNotFoundError,
     LeasePersistenceError,
     LeaseStateError,
     LeaseValidationError,
)
from services.lease_lifecycle_service import AssignTenantCommand, LeaseLifecycleService
from services.notification_service import InAppChannel, NotificationDispatcher, NotificationMessage
from tests.conftest import LANDLORD_ID, make_bill, make_lease, make_property, make_tenant

CONTRACT_URL = "https://example.blob.core.windows.net/contracts/1_1_1735689600000.pdf"


class BrokenChannel:
     name = "broken"

     def send(self, note):
          raise RuntimeError("smtp down")


def assign_command(tenant, prop, **overrides):
     fields = dict(
          landlord_id=LANDLORD_ID,
          tenant_id=tenant.id,
          property_id=prop.id,
          start_date=date(2025, 1, 2),
          contract_end_date=date(2025, 7, 2),
          wifi_due_day=5,
          late_payment_fee=Decimal("500"),
          contract_url=CONTRACT_URL,
     )
     fields.update(overrides)
     return AssignTenantCommand(**fields)


@pytest.fixture
def service(db, dispatcher):
     return LeaseLifecycleService(db, dispatcher, min_contract_months=3, include_advance_on_assign=True)


class TestAssignTenant:
     def test_creates_lease_bill_and_reminder(self, db, service, recorder):
          tenant = make_tenant(db)
          prop = make_property(db)

          result = service.assign_tenant(assign_command(tenant, prop))

          lease = result.lease
          assert lease.status == LeaseStatus.ACTIVE
          assert lease.security_deposit == Decimal("20000")
          assert lease.late_payment_fee == Decimal("500")

          bill = result.bill
          assert bill.due_date == date(2025, 1, 2)
          assert bill.status == BillStatus.PENDING
          assert bill.rent_amount == Decimal("20000")
          assert bill.advance_amount == Decimal("20000")
          assert bill.security_deposit_amount == Decimal("20000")
          assert bill.total_amount == Decimal("60000")
          assert bill.is_move_in_payment is True

          db.refresh(prop)
          assert prop.status == PropertyStatus.OCCUPIED

          reminder = db.query(ScheduledReminder).one()
          assert reminder.lease_id == lease.id
          assert reminder.send_date == date(2024, 12, 30)

          [note] = recorder.sent
          assert note.type == "occupancy_assigned"
          assert note.recipient_id == tenant.id
          assert "from January 2, 2025 to July 2, 2025" in note.message
          assert "Late payment fee: ₱500.00" in note.message
          assert "₱60,000.00 Total" in note.message
          assert "Due: January 2, 2025" in note.message

     def test_advance_can_be_left_off_the_move_in_bill(self, db, dispatcher):
          service = LeaseLifecycleService(db, dispatcher, include_advance_on_assign=False)
          result = service.assign_tenant(assign_command(make_tenant(db), make_property(db)))
          assert result.bill.advance_amount == Decimal("0")
          assert result.bill.total_amount == Decimal("40000")

     @pytest.mark.parametrize(
          "overrides, field",
          [
               ({"start_date": None}, "start_date"),
               ({"contract_end_date": None}, "contract_end_date"),
               ({"contract_end_date": date(2025, 3, 1)}, "contract_end_date"),
               ({"wifi_due_day": None}, "wifi_due_day"),
               ({"wifi_due_day": 0}, "wifi_due_day"),
               ({"wifi_due_day": 32}, "wifi_due_day"),
               ({"late_payment_fee": None}, "late_payment_fee"),
               ({"late_payment_fee": Decimal("0")}, "late_payment_fee"),
               ({"contract_url": None}, "contract_url"),
          ],
     )
     def test_rejects_invalid_terms(self, db, service, recorder, overrides, field):
          tenant = make_tenant(db)
          prop = make_property(db)

          with pytest.raises(LeaseValidationError) as exc:
               service.assign_tenant(assign_command(tenant, prop, **overrides))

          assert exc.value.field == field
          assert db.query(Lease).count() == 0
          assert db.query(Bill).count() == 0
          assert recorder.sent == []

     def test_minimum_term_boundary_is_accepted(self, db, service):
          result = service.assign_tenant(
               assign_command(make_tenant(db), make_property(db), contract_end_date=date(2025, 4, 2))
          )
          assert result.lease.contract_end_date == date(2025, 4, 2)

     def test_unverified_tenant_is_rejected(self, db, service):
          tenant = make_tenant(db, verified=False)
          with pytest.raises(LeaseValidationError) as exc:
               service.assign_tenant(assign_command(tenant, make_property(db)))
          assert exc.value.field == "tenant_id"

     def test_property_of_another_landlord_is_rejected(self, db, service):
          prop = make_property(db, landlord_id=99)
          with pytest.raises(LeaseValidationError) as exc:
               service.assign_tenant(assign_command(make_tenant(db), prop))
          assert exc.value.field == "property_id"

     def test_unknown_tenant(self, db, service):
          prop = make_property(db)
          with pytest.raises(LeaseNotFoundError):
               service.assign_tenant(
                    AssignTenantCommand(
                         landlord_id=LANDLORD_ID,
                         tenant_id=404,
                         property_id=prop.id,
                         start_date=date(2025, 1, 2),
                         contract_end_date=date(2025, 7, 2),
                         wifi_due_day=5,
                         late_payment_fee=Decimal("500"),
                         contract_url=CONTRACT_URL,
                    )
               )

     def test_occupied_property_is_a_conflict(self, db, service):
          prop = make_property(db)
          make_lease(db, make_tenant(db, email="first@example.com"), prop)

          with pytest.raises(LeaseConflictError):
               service.assign_tenant(assign_command(make_tenant(db, email="second@example.com"), prop))
          assert db.query(Lease).count() == 1

     def test_property_without_rent_writes_nothing(self, db, service, recorder):
          prop = make_property(db, price=None)
          with pytest.raises(BillCompositionError):
               service.assign_tenant(assign_command(make_tenant(db), prop))
          assert db.query(Lease).count() == 0
          assert recorder.sent == []

     def test_failed_bill_insert_rolls_back_everything(self, db, service, recorder):
          tenant = make_tenant(db)
          prop = make_property(db)

          def fail_insert(mapper, connection, target):
               raise OperationalError("INSERT INTO bills", {}, Exception("database is locked"))

          event.listen(Bill, "before_insert", fail_insert)
          try:
               with pytest.raises(LeasePersistenceError):
                    service.assign_tenant(assign_command(tenant, prop))
          finally:
               event.remove(Bill, "before_insert", fail_insert)

          assert db.query(Lease).count() == 0
          assert db.query(Bill).count() == 0
          assert db.query(ScheduledReminder).count() == 0
          assert db.get(Property, prop.id).status == PropertyStatus.AVAILABLE
          assert recorder.sent == []

     def test_broken_channel_does_not_fail_the_transition(self, db, recorder):
          service = LeaseLifecycleService(db, NotificationDispatcher(channels=[BrokenChannel(), recorder]))
          result = service.assign_tenant(assign_command(make_tenant(db), make_property(db)))

          assert result.lease.id is not None
          assert len(recorder.sent) == 1

     def test_deferred_delivery_runs_after_the_call(self, db, recorder):
          deferred = []
          dispatcher = NotificationDispatcher(
               channels=[recorder], defer=lambda fn, *args: deferred.append((fn, args))
          )
          LeaseLifecycleService(db, dispatcher).assign_tenant(assign_command(make_tenant(db), make_property(db)))

          assert recorder.sent == []
          for fn, args in deferred:
               fn(*args)
          assert len(recorder.sent) == 1


class TestRenewal:
     def make_renewable(self, db, **extra):
          tenant = make_tenant(db)
          prop = make_property(db)
          return make_lease(
               db, tenant, prop,
               contract_end_date=date(2025, 4, 2),
               renewal_requested=True,
               renewal_status=RequestStatus.PENDING,
               **extra,
          )

     def test_request_notifies_landlord(self, db, service, recorder):
          lease = make_lease(db, make_tenant(db), make_property(db))

          result = service.request_renewal(lease.id)

          assert result.lease.renewal_requested is True
          assert result.lease.renewal_status == RequestStatus.PENDING
          assert recorder.sent[0].type == "renewal_request"
          assert recorder.sent[0].recipient_id == LANDLORD_ID

     def test_duplicate_request_is_rejected(self, db, service):
          lease = self.make_renewable(db)
          with pytest.raises(LeaseStateError):
               service.request_renewal(lease.id)

     def test_approve_continues_from_last_paid_rent(self, db, service, recorder):
          lease = self.make_renewable(db)
          make_bill(db, lease, date(2025, 1, 2), rent=Decimal("20000"), advance=Decimal("20000"),
                    deposit=Decimal("20000"))
          make_bill(db, lease, date(2025, 3, 2))

          result = service.approve_renewal(lease.id, date(2025, 3, 20), date(2025, 10, 2))

          bill = result.bill
          assert bill.due_date == date(2025, 4, 2)
          assert bill.rent_amount == Decimal("20000")
          assert bill.advance_amount == Decimal("20000")
          assert bill.security_deposit_amount == Decimal("0")
          assert bill.total_amount == Decimal("40000")
          assert bill.is_renewal_payment is True

          lease = result.lease
          assert lease.contract_end_date == date(2025, 10, 2)
          assert lease.renewal_requested is False
          assert lease.renewal_status == RequestStatus.APPROVED
          assert lease.renewal_signing_date == date(2025, 3, 20)

          assert db.query(ScheduledReminder).one().send_date == date(2025, 3, 30)
          assert len(recorder.sent) == 1
          assert recorder.sent[0].type == "renewal_approved"
          assert "₱40,000.00 Total" in recorder.sent[0].message

     def test_approve_with_outstanding_bill_bills_the_following_cycle(self, db, service):
          lease = self.make_renewable(db)
          make_bill(db, lease, date(2025, 1, 2), advance=Decimal("20000"), deposit=Decimal("20000"))
          make_bill(db, lease, date(2025, 3, 2), status=BillStatus.PENDING)

          result = service.approve_renewal(lease.id, date(2025, 3, 20), date(2025, 10, 2))

          assert result.bill.due_date == date(2025, 4, 2)
          due_dates = [b.due_date for b in db.query(Bill).all()]
          assert len(due_dates) == len(set(due_dates))
          assert result.bill in result.lease.bills

     def test_approve_without_history_falls_back_to_contract_end(self, db, service):
          lease = self.make_renewable(db)
          result = service.approve_renewal(lease.id, date(2025, 3, 20), date(2025, 10, 2))
          assert result.bill.due_date == date(2025, 4, 2)

     def test_approve_requires_a_later_end_date(self, db, service):
          lease = self.make_renewable(db)
          with pytest.raises(LeaseValidationError) as exc:
               service.approve_renewal(lease.id, date(2025, 3, 20), date(2025, 4, 2))
          assert exc.value.field == "new_end_date"
          assert db.query(Bill).count() == 0

     def test_approve_without_pending_request(self, db, service):
          lease = make_lease(db, make_tenant(db), make_property(db))
          with pytest.raises(LeaseStateError):
               service.approve_renewal(lease.id, date(2025, 3, 20), date(2025, 10, 2))

     def test_reject_clears_the_request(self, db, service, recorder):
          lease = self.make_renewable(db)

          result = service.reject_renewal(lease.id)

          assert result.lease.renewal_requested is False
          assert result.lease.renewal_status == RequestStatus.REJECTED
          assert result.bill is None
          assert recorder.sent[0].type == "renewal_rejected"


class TestEndOfOccupancy:
     def test_request_moves_lease_to_pending_end(self, db, service, recorder):
          lease = make_lease(db, make_tenant(db), make_property(db))

          result = service.request_end(lease.id, date(2025, 5, 31), "  Relocating for work ")

          assert result.lease.status == LeaseStatus.PENDING_END
          assert result.lease.end_request_date == date(2025, 5, 31)
          assert result.lease.end_request_reason == "Relocating for work"
          assert result.lease.end_request_status == RequestStatus.PENDING
          assert result.lease.end_requested_at is not None
          assert recorder.sent[0].type == "end_occupancy_request"
          assert recorder.sent[0].recipient_id == LANDLORD_ID

     @pytest.mark.parametrize("end_date, reason", [(None, "Moving out"), (date(2025, 5, 31), "   ")])
     def test_request_needs_date_and_reason(self, db, service, end_date, reason):
          lease = make_lease(db, make_tenant(db), make_property(db))
          with pytest.raises(LeaseValidationError) as exc:
               service.request_end(lease.id, end_date, reason)
          assert exc.value.reason == "Please fill in both Date and Reason"

     def test_approve_ends_lease_and_completes_related_records(self, db, service, recorder):
          tenant = make_tenant(db)
          prop = make_property(db)
          booking = Booking(tenant_id=tenant.id, property_id=prop.id, status="approved")
          application = Application(tenant_id=tenant.id, property_id=prop.id, status="accepted")
          rejected = Booking(tenant_id=tenant.id, property_id=prop.id, status="rejected")
          db.add_all([booking, application, rejected])
          db.commit()
          lease = make_lease(db, tenant, prop)
          service.request_end(lease.id, date(2025, 5, 31), "Relocating")

          result = service.approve_end(lease.id)

          assert result.lease.status == LeaseStatus.ENDED
          assert result.lease.end_date == date(2025, 5, 31)
          assert result.lease.end_request_status == RequestStatus.APPROVED
          assert db.get(Property, prop.id).status == PropertyStatus.AVAILABLE
          assert db.get(Booking, booking.id).status == "completed"
          assert db.get(Booking, rejected.id).status == "rejected"
          assert db.get(Application, application.id).status == "completed"
          assert recorder.sent[-1].type == "end_request_approved"

     def test_reject_returns_lease_to_active(self, db, service, recorder):
          lease = make_lease(db, make_tenant(db), make_property(db))
          service.request_end(lease.id, date(2025, 5, 31), "Relocating")

          result = service.reject_end(lease.id)

          assert result.lease.status == LeaseStatus.ACTIVE
          assert result.lease.end_request_status == RequestStatus.REJECTED
          assert result.lease.end_request_date is None
          assert result.lease.end_request_reason is None
          assert recorder.sent[-1].type == "end_request_rejected"

     def test_approve_without_request(self, db, service):
          lease = make_lease(db, make_tenant(db), make_property(db))
          with pytest.raises(LeaseStateError):
               service.approve_end(lease.id)

     def test_unknown_lease(self, service):
          with pytest.raises(LeaseNotFoundError):
               service.approve_end(999)


class TestTerminate:
     def test_ends_lease_and_frees_property(self, db, service, recorder):
          prop = make_property(db)
          lease = make_lease(db, make_tenant(db), prop)

          result = service.terminate(lease.id, date(2025, 4, 30), " Non-payment ")

          assert result.lease.status == LeaseStatus.ENDED
          assert result.lease.end_date == date(2025, 4, 30)
          assert result.lease.termination_reason == "Non-payment"
          assert db.get(Property, prop.id).status == PropertyStatus.AVAILABLE

          note = recorder.sent[0]
          assert note.type == "occupancy_ended"
          assert "End Date: April 30, 2025" in note.message
          assert "Reason: Non-payment" in note.message

     def test_pending_end_lease_can_be_terminated(self, db, service):
          lease = make_lease(db, make_tenant(db), make_property(db), status=LeaseStatus.PENDING_END)
          result = service.terminate(lease.id, date(2025, 4, 30), "Early move out")
          assert result.lease.status == LeaseStatus.ENDED

     @pytest.mark.parametrize(
          "end_date, reason, field",
          [(None, "Non-payment", "end_date"), (date(2025, 4, 30), "", "reason"), (date(2025, 4, 30), None, "reason")],
     )
     def test_requires_date_and_reason(self, db, service, end_date, reason, field):
          lease = make_lease(db, make_tenant(db), make_property(db))
          with pytest.raises(LeaseValidationError) as exc:
               service.terminate(lease.id, end_date, reason)
          assert exc.value.field == field
          assert db.get(Lease, lease.id).status == LeaseStatus.ACTIVE

     def test_ended_lease_cannot_be_terminated_again(self, db, service):
          lease = make_lease(db, make_tenant(db), make_property(db), status=LeaseStatus.ENDED)
          with pytest.raises(LeaseStateError):
               service.terminate(lease.id, date(2025, 4, 30), "Non-payment")


def test_in_app_channel_stores_notification(db, session_context):
     InAppChannel(session_factory=session_context).send(
          NotificationMessage(recipient_id=7, actor_id=1, type="renewal_rejected", message="Rejected", link="/dashboard")
     )

     stored = db.query(Notification).one()
     assert stored.recipient_id == 7
     assert stored.type == "renewal_rejected"
     assert stored.is_read is False
