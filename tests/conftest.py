import os

# Settings are read at import time; point them at test values first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BREVO_API_KEY"] = ""

from contextlib import contextmanager
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import (
     Base,
     Bill,
     BillStatus,
     Lease,
     LeaseStatus,
     Property,
     PropertyStatus,
     RequestStatus,
     Tenant,
)
from services.notification_service import NotificationDispatcher

LANDLORD_ID = 1


class RecordingChannel:
     name = "recording"

     def __init__(self):
          self.sent = []

     def send(self, note):
          self.sent.append(note)


@pytest.fixture
def engine():
     engine = create_engine(
          "sqlite://",
          connect_args={"check_same_thread": False},
          poolclass=StaticPool,
     )
     Base.metadata.create_all(engine)
     yield engine
     engine.dispose()


@pytest.fixture
def session_factory(engine):
     return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
     session = session_factory()
     yield session
     session.close()


@pytest.fixture
def recorder():
     return RecordingChannel()


@pytest.fixture
def dispatcher(recorder):
     return NotificationDispatcher(channels=[recorder])


@pytest.fixture
def session_context(session_factory):
     @contextmanager
     def factory():
          session = session_factory()
          try:
               yield session
               session.commit()
          except Exception:
               session.rollback()
               raise
          finally:
               session.close()
     return factory


def make_tenant(db, first_name="Juan", last_name="Dela Cruz", verified=True, email="juan@example.com"):
     tenant = Tenant(first_name=first_name, last_name=last_name, email=email, phone="09171234567", id_verified=verified)
     db.add(tenant)
     db.commit()
     return tenant


def make_property(db, landlord_id=LANDLORD_ID, price=Decimal("20000"), title="Unit 4B Sunrise Residences",
                  status=PropertyStatus.AVAILABLE):
     prop = Property(landlord_id=landlord_id, title=title, price=price, status=status)
     db.add(prop)
     db.commit()
     return prop


def make_lease(db, tenant, prop, start_date=date(2025, 1, 2), contract_end_date=date(2025, 7, 2),
               status=LeaseStatus.ACTIVE, **extra):
     fields = dict(
          property_id=prop.id,
          tenant_id=tenant.id,
          landlord_id=prop.landlord_id,
          status=status,
          start_date=start_date,
          contract_end_date=contract_end_date,
          security_deposit=prop.price or Decimal("0"),
          security_deposit_used=Decimal("0"),
          late_payment_fee=Decimal("500"),
          wifi_due_day=5,
          contract_url="https://example.blob.core.windows.net/contracts/c.pdf",
          renewal_requested=False,
          renewal_status=RequestStatus.NONE,
          end_request_status=RequestStatus.NONE,
     )
     fields.update(extra)
     lease = Lease(**fields)
     db.add(lease)
     if status != LeaseStatus.ENDED:
          prop.status = PropertyStatus.OCCUPIED
     db.commit()
     return lease


def make_bill(db, lease, due_date, status=BillStatus.PAID, rent=Decimal("20000"), advance=Decimal("0"),
              deposit=Decimal("0"), **extra):
     bill = Bill(
          lease_id=lease.id,
          tenant_id=lease.tenant_id,
          landlord_id=lease.landlord_id,
          property_id=lease.property_id,
          due_date=due_date,
          status=status,
          rent_amount=rent,
          advance_amount=advance,
          security_deposit_amount=deposit,
          **extra,
     )
     db.add(bill)
     db.commit()
     db.expire(lease, ["bills"])
     return bill
