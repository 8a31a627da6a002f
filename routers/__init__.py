# routers/__init__.py
from .billing import router as billing_router
from .leases import router as leases_router

__all__ = ["billing_router", "leases_router"]
