# schemas/billing.py
"""
Pydantic schemas for billing schedule and bill responses.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from models.bill import BillStatus


class BillingScheduleEntry(BaseModel):
     """One lease's next billing cycle, as shown on the landlord dashboard."""
     lease_id: int
     tenant_name: Optional[str] = None
     property_title: Optional[str] = None
     next_due_date: date
     send_date: date = Field(..., description="Reminder date (next due date - 3 days)")
     status: str = Field(..., description="Overdue, Confirming, Pending, Scheduled or Contract Ending")
     note: Optional[str] = None
     last_bill_id: Optional[int] = None
     contract_end_date: Optional[date] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "lease_id": 1,
                    "tenant_name": "Juan Dela Cruz",
                    "property_title": "Unit 4B Sunrise Residences",
                    "next_due_date": "2025-03-02",
                    "send_date": "2025-02-27",
                    "status": "Scheduled",
                    "note": None,
                    "last_bill_id": 12,
                    "contract_end_date": "2025-12-02"
               }
          }
     )


class BillingScheduleResponse(BaseModel):
     landlord_id: int
     entries: List[BillingScheduleEntry]
     total: int


class BillResponse(BaseModel):
     """Schema for bill response."""
     id: int
     lease_id: int
     tenant_id: int
     landlord_id: int
     property_id: int
     due_date: date
     status: BillStatus
     bills_description: Optional[str] = None
     rent_amount: Decimal
     advance_amount: Decimal
     security_deposit_amount: Decimal
     water_bill: Decimal
     electrical_bill: Decimal
     wifi_bill: Decimal
     other_bills: Decimal
     total_amount: Decimal
     amount_paid: Optional[Decimal] = None
     paid_at: Optional[datetime] = None
     is_move_in_payment: bool
     is_renewal_payment: bool

     model_config = ConfigDict(from_attributes=True)


class NextCycleResponse(BaseModel):
     """Projection of a single lease's next billing cycle."""
     lease_id: int
     next_due_date: date
     send_date: date
     status: str
     note: Optional[str] = None
     is_overdue: bool
     months_covered: int = Field(0, description="Months discharged by the last paid bill (0 when an open bill exists)")
     source_bill_id: Optional[int] = None


class ReminderRunResponse(BaseModel):
     reminded: int
     bills: List[BillResponse]
