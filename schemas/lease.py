# schemas/lease.py
"""
Pydantic schemas for lease lifecycle requests and responses.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from models.lease import LeaseStatus, RequestStatus
from schemas.billing import BillResponse


class RenewalApproveRequest(BaseModel):
     """Landlord approval of a pending renewal request."""
     signing_date: date = Field(..., description="Date the renewed contract was signed")
     new_end_date: date = Field(..., description="New contract end date")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "signing_date": "2025-11-20",
                    "new_end_date": "2026-12-02"
               }
          }
     )


class EndRequestCreate(BaseModel):
     """Tenant request to end an occupancy."""
     end_date: date
     reason: str = Field(..., min_length=1, max_length=1000)


class TerminateRequest(BaseModel):
     """Landlord-initiated termination; both fields are mandatory."""
     end_date: date
     reason: str = Field(..., min_length=1, max_length=1000)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "end_date": "2025-06-30",
                    "reason": "Repeated non-payment of rent"
               }
          }
     )


class LeaseResponse(BaseModel):
     """Schema for lease response."""
     id: int
     property_id: int
     tenant_id: int
     landlord_id: int
     status: LeaseStatus
     start_date: date
     contract_end_date: Optional[date] = None
     end_date: Optional[date] = None
     security_deposit: Decimal
     security_deposit_used: Decimal
     late_payment_fee: Decimal
     wifi_due_day: Optional[int] = None
     contract_url: Optional[str] = None
     renewal_requested: bool
     renewal_status: RequestStatus
     renewal_signing_date: Optional[date] = None
     end_request_status: RequestStatus
     end_requested_at: Optional[datetime] = None
     end_request_date: Optional[date] = None
     end_request_reason: Optional[str] = None
     termination_reason: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class LifecycleResponse(BaseModel):
     """Lease after a transition, with the bill it raised (if any)."""
     message: str
     lease: LeaseResponse
     bill: Optional[BillResponse] = None
