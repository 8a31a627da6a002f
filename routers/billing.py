# routers/billing.py
"""
Billing API routes: landlord billing schedule and the reminder job trigger.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_dispatcher, require_role, verify_token
from schemas.billing import BillingScheduleResponse, BillResponse, ReminderRunResponse
from services.billing_schedule import build_billing_schedule
from services.notification_service import NotificationDispatcher
from services.reminder_service import process_due_reminders

router = APIRouter(prefix="/api/billing", tags=["billing"])


@router.get(
     "/schedule",
     response_model=BillingScheduleResponse,
     summary="Billing schedule for a landlord's active leases"
)
def get_billing_schedule(
     landlord_id: Optional[int] = Query(None, description="Landlord to report on (admins only)"),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     """
     Next billing cycle of every active lease, earliest due date first.

     **Role-based access:**
     - **Landlord**: own leases only (landlord_id is ignored).
     - **Admin**: any landlord; landlord_id is required.
     """
     role = token.get("role")
     if role == "admin":
          if landlord_id is None:
               raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="landlord_id is required"
               )
     else:
          require_role(token, "landlord")
          landlord_id = token.get("id")

     entries = build_billing_schedule(db, landlord_id)
     return BillingScheduleResponse(landlord_id=landlord_id, entries=entries, total=len(entries))


@router.post(
     "/reminders/process",
     response_model=ReminderRunResponse,
     summary="Run due advance billing reminders"
)
def run_due_reminders(
     run_date: Optional[date] = Query(None, description="Reference date (defaults to today)"),
     db: Session = Depends(get_session),
     dispatcher: NotificationDispatcher = Depends(get_dispatcher),
     token: dict = Depends(verify_token),
):
     """
     Trigger for the external scheduler (cron): reminds tenants of open
     bills and issues the next monthly rent bill where none is open.
     """
     require_role(token, "admin")
     bills = process_due_reminders(db, dispatcher, run_date)
     return ReminderRunResponse(
          reminded=len(bills),
          bills=[BillResponse.model_validate(b) for b in bills],
     )
