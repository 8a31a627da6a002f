# models/__init__.py
from .base import Base
from .tenant import Tenant
from .property import Property, PropertyStatus
from .application import Application
from .booking import Booking
from .lease import Lease, LeaseStatus, RequestStatus
from .bill import Bill, BillStatus, OPEN_BILL_STATUSES
from .notification import Notification
from .scheduled_reminder import ScheduledReminder

__all__ = [
     "Base",
     "Tenant",
     "Property",
     "PropertyStatus",
     "Application",
     "Booking",
     "Lease",
     "LeaseStatus",
     "RequestStatus",
     "Bill",
     "BillStatus",
     "OPEN_BILL_STATUSES",
     "Notification",
     "ScheduledReminder",
]
