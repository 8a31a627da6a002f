# routers/leases.py
"""
Lease lifecycle API routes.

Landlord actions: assign tenant, approve/reject renewal, approve/reject end
request, terminate. Tenant actions: request renewal, request end of
occupancy. Notifications are delivered in the background once the
transition has committed.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from azure_blob import delete_from_blob, upload_contract
from database import get_session
from dependencies import get_dispatcher, require_role, verify_token
from models import Lease
from schemas.billing import BillResponse, NextCycleResponse
from schemas.lease import (
     EndRequestCreate,
     LeaseResponse,
     LifecycleResponse,
     RenewalApproveRequest,
     TerminateRequest,
)
from services.billing_cycle import project_next_cycle
from services.exceptions import (
     BillCompositionError,
     LeaseConflictError,
     LeaseNotFoundError,
     LeasePersistenceError,
     LeaseStateError,
     LeaseValidationError,
     LifecycleError,
)
from services.lease_lifecycle_service import AssignTenantCommand, LeaseLifecycleService, LifecycleResult
from services.lease_status import classify
from services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leases", tags=["leases"])


def lifecycle_error_to_http(error: LifecycleError) -> HTTPException:
     """Map a service error onto the HTTP status the client should see."""
     if isinstance(error, LeaseValidationError):
          return HTTPException(
               status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
               detail={"field": error.field, "reason": error.reason},
          )
     if isinstance(error, BillCompositionError):
          return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(error))
     if isinstance(error, LeaseNotFoundError):
          return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
     if isinstance(error, (LeaseStateError, LeaseConflictError)):
          return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
     if isinstance(error, LeasePersistenceError):
          return HTTPException(
               status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
               detail="The operation could not be saved. Please try again.",
          )
     return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


def _load_lease(db: Session, lease_id: int) -> Lease:
     lease = db.get(Lease, lease_id)
     if not lease:
          raise HTTPException(
               status_code=status.HTTP_404_NOT_FOUND,
               detail=f"Lease with ID {lease_id} not found"
          )
     return lease


def _ensure_landlord(lease: Lease, token: dict) -> None:
     if token.get("role") == "admin":
          return
     require_role(token, "landlord")
     if lease.landlord_id != token.get("id"):
          raise HTTPException(
               status_code=status.HTTP_403_FORBIDDEN,
               detail="You do not manage this lease"
          )


def _ensure_tenant(lease: Lease, token: dict) -> None:
     require_role(token, "tenant")
     if lease.tenant_id != token.get("id"):
          raise HTTPException(
               status_code=status.HTTP_403_FORBIDDEN,
               detail="This lease does not belong to you"
          )


def _respond(result: LifecycleResult, message: str) -> LifecycleResponse:
     return LifecycleResponse(
          message=message,
          lease=LeaseResponse.model_validate(result.lease),
          bill=BillResponse.model_validate(result.bill) if result.bill is not None else None,
     )


@router.post(
     "/assign",
     response_model=LifecycleResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Assign a tenant to a property"
)
def assign_tenant(
     property_id: int = Form(...),
     tenant_id: int = Form(...),
     start_date: Optional[date] = Form(None),
     contract_end_date: Optional[date] = Form(None),
     wifi_due_day: Optional[int] = Form(None),
     late_payment_fee: Optional[Decimal] = Form(None),
     application_id: Optional[int] = Form(None),
     contract: Optional[UploadFile] = File(None),
     db: Session = Depends(get_session),
     dispatcher: NotificationDispatcher = Depends(get_dispatcher),
     token: dict = Depends(verify_token),
):
     """
     Create an active lease and send the move-in bill.

     - **contract**: signed contract (PDF), stored before the lease is created
     - **contract_end_date**: at least the configured minimum months after start
     - **wifi_due_day**: day of month (1-31)
     - **late_payment_fee**: must be positive
     """
     require_role(token, "landlord")

     contract_url = None
     if contract is not None and contract.filename:
          try:
               contract_url = upload_contract(contract, property_id, tenant_id)
          except Exception:
               logger.exception("Contract upload failed for property %s", property_id)
               raise HTTPException(
                    status_code=status.HTTP_502_BAD_GATEWAY,
                    detail="Failed to upload contract. Please try again."
               )

     command = AssignTenantCommand(
          landlord_id=token.get("id"),
          tenant_id=tenant_id,
          property_id=property_id,
          start_date=start_date,
          contract_end_date=contract_end_date,
          wifi_due_day=wifi_due_day,
          late_payment_fee=late_payment_fee,
          contract_url=contract_url,
          application_id=application_id,
     )
     service = LeaseLifecycleService(db, dispatcher)
     try:
          result = service.assign_tenant(command)
     except LifecycleError as e:
          if contract_url:
               try:
                    delete_from_blob(contract_url)
               except Exception:
                    logger.exception("Failed to remove orphaned contract %s", contract_url)
          raise lifecycle_error_to_http(e)

     return _respond(result, "Tenant assigned! Move-in payment bill sent automatically.")


@router.post(
     "/{lease_id}/renewal/request",
     response_model=LifecycleResponse,
     summary="Request a contract renewal"
)
def request_renewal(
     lease_id: int,
     db: Session = Depends(get_session),
     dispatcher: NotificationDispatcher = Depends(get_dispatcher),
     token: dict = Depends(verify_token),
):
     _ensure_tenant(_load_lease(db, lease_id), token)
     try:
          result = LeaseLifecycleService(db, dispatcher).request_renewal(lease_id)
     except LifecycleError as e:
          raise lifecycle_error_to_http(e)
     return _respond(result, "Renewal request submitted")


@router.post(
     "/{lease_id}/renewal/approve",
     response_model=LifecycleResponse,
     summary="Approve a renewal request"
)
def approve_renewal(
     lease_id: int,
     body: RenewalApproveRequest,
     db: Session = Depends(get_session),
     dispatcher: NotificationDispatcher = Depends(get_dispatcher),
     token: dict = Depends(verify_token),
):
     """
     Extend the contract to **new_end_date** and send the renewal bill
     (rent + advance, no new security deposit).
     """
     _ensure_landlord(_load_lease(db, lease_id), token)
     try:
          result = LeaseLifecycleService(db, dispatcher).approve_renewal(
               lease_id, body.signing_date, body.new_end_date
          )
     except LifecycleError as e:
          raise lifecycle_error_to_http(e)
     return _respond(result, "Renewal approved. Renewal payment bill sent.")


@router.post(
     "/{lease_id}/renewal/reject",
     response_model=LifecycleResponse,
     summary="Reject a renewal request"
)
def reject_renewal(
     lease_id: int,
     db: Session = Depends(get_session),
     dispatcher: NotificationDispatcher = Depends(get_dispatcher),
     token: dict = Depends(verify_token),
):
     _ensure_landlord(_load_lease(db, lease_id), token)
     try:
          result = LeaseLifecycleService(db, dispatcher).reject_renewal(lease_id)
     except LifecycleError as e:
          raise lifecycle_error_to_http(e)
     return _respond(result, "Renewal rejected")


@router.post(
     "/{lease_id}/end-request",
     response_model=LifecycleResponse,
     summary="Request to end an occupancy"
)
def request_end(
     lease_id: int,
     body: EndRequestCreate,
     db: Session = Depends(get_session),
     dispatcher: NotificationDispatcher = Depends(get_dispatcher),
     token: dict = Depends(verify_token),
):
     _ensure_tenant(_load_lease(db, lease_id), token)
     try:
          result = LeaseLifecycleService(db, dispatcher).request_end(lease_id, body.end_date, body.reason)
     except LifecycleError as e:
          raise lifecycle_error_to_http(e)
     return _respond(result, "Request submitted")


@router.post(
     "/{lease_id}/end-request/approve",
     response_model=LifecycleResponse,
     summary="Approve an end of occupancy request"
)
def approve_end(
     lease_id: int,
     db: Session = Depends(get_session),
     dispatcher: NotificationDispatcher = Depends(get_dispatcher),
     token: dict = Depends(verify_token),
):
     _ensure_landlord(_load_lease(db, lease_id), token)
     try:
          result = LeaseLifecycleService(db, dispatcher).approve_end(lease_id)
     except LifecycleError as e:
          raise lifecycle_error_to_http(e)
     return _respond(result, "Approved")


@router.post(
     "/{lease_id}/end-request/reject",
     response_model=LifecycleResponse,
     summary="Reject an end of occupancy request"
)
def reject_end(
     lease_id: int,
     db: Session = Depends(get_session),
     dispatcher: NotificationDispatcher = Depends(get_dispatcher),
     token: dict = Depends(verify_token),
):
     _ensure_landlord(_load_lease(db, lease_id), token)
     try:
          result = LeaseLifecycleService(db, dispatcher).reject_end(lease_id)
     except LifecycleError as e:
          raise lifecycle_error_to_http(e)
     return _respond(result, "Rejected")


@router.post(
     "/{lease_id}/terminate",
     response_model=LifecycleResponse,
     summary="End a contract (landlord initiated)"
)
def terminate_lease(
     lease_id: int,
     body: TerminateRequest,
     db: Session = Depends(get_session),
     dispatcher: NotificationDispatcher = Depends(get_dispatcher),
     token: dict = Depends(verify_token),
):
     """
     End the contract on **end_date** for the given **reason**, free the
     property and complete the tenant's bookings and applications.
     """
     _ensure_landlord(_load_lease(db, lease_id), token)
     try:
          result = LeaseLifecycleService(db, dispatcher).terminate(lease_id, body.end_date, body.reason)
     except LifecycleError as e:
          raise lifecycle_error_to_http(e)
     return _respond(result, "Contract ended successfully")


@router.get(
     "/{lease_id}/next-cycle",
     response_model=NextCycleResponse,
     summary="Project a lease's next billing cycle"
)
def get_next_cycle(
     lease_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token),
):
     lease = _load_lease(db, lease_id)
     if token.get("role") == "tenant":
          _ensure_tenant(lease, token)
     else:
          _ensure_landlord(lease, token)

     projection = project_next_cycle(lease, lease.bills)
     result = classify(projection, lease.contract_end_date)
     return NextCycleResponse(
          lease_id=lease.id,
          next_due_date=projection.next_due_date,
          send_date=result.send_date,
          status=result.status.value,
          note=result.note,
          is_overdue=projection.is_overdue,
          months_covered=projection.months_covered,
          source_bill_id=projection.source_bill.id if projection.source_bill else None,
     )
