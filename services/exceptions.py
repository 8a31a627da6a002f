# services/exceptions.py
"""
Domain errors raised by the lease billing services.

Routers translate these into HTTP responses; services never raise
HTTPException themselves.
"""


class LifecycleError(Exception):
     """Base class for lease lifecycle and billing errors."""


class LeaseValidationError(LifecycleError):
     """Invalid or missing input, rejected before anything is written."""

     def __init__(self, field: str, reason: str):
          self.field = field
          self.reason = reason
          super().__init__(f"{field}: {reason}")


class LeaseNotFoundError(LifecycleError):
     """The referenced lease, tenant or property does not exist."""


class LeaseStateError(LifecycleError):
     """The lease is not in a state that allows the requested transition."""


class LeaseConflictError(LifecycleError):
     """The transition would break a uniqueness rule (open lease, duplicate bill)."""


class BillCompositionError(LifecycleError):
     """A bill cannot be composed; zero-value bills are never produced."""


class LeasePersistenceError(LifecycleError):
     """A write failed and the transition was rolled back."""
