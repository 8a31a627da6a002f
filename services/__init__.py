# services/__init__.py
from .bill_composer import BillComposition, BillEvent, compose_bill
from .billing_cycle import CycleProjection, add_months, months_covered, project_next_cycle, renewal_due_date
from .billing_schedule import build_billing_schedule
from .lease_lifecycle_service import AssignTenantCommand, LeaseLifecycleService, LifecycleResult
from .lease_status import BillingStatus, LeaseStatusResult, classify

__all__ = [
     "BillComposition",
     "BillEvent",
     "compose_bill",
     "CycleProjection",
     "add_months",
     "months_covered",
     "project_next_cycle",
     "renewal_due_date",
     "build_billing_schedule",
     "AssignTenantCommand",
     "LeaseLifecycleService",
     "LifecycleResult",
     "BillingStatus",
     "LeaseStatusResult",
     "classify",
]
