# schemas/__init__.py
from .billing import (
     BillingScheduleEntry,
     BillingScheduleResponse,
     BillResponse,
     NextCycleResponse,
     ReminderRunResponse,
)
from .lease import (
     RenewalApproveRequest,
     EndRequestCreate,
     TerminateRequest,
     LeaseResponse,
     LifecycleResponse,
)

__all__ = [
     "BillingScheduleEntry",
     "BillingScheduleResponse",
     "BillResponse",
     "NextCycleResponse",
     "ReminderRunResponse",
     "RenewalApproveRequest",
     "EndRequestCreate",
     "TerminateRequest",
     "LeaseResponse",
     "LifecycleResponse",
]
