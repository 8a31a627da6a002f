# services/bill_composer.py
"""
Line items for the bills raised by lifecycle events.

Move-in:  rent + advance + security deposit (3x monthly rent)
Renewal:  rent + advance, the original deposit carries forward (2x monthly rent)
Monthly:  rent only
"""
import enum
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from services.exceptions import BillCompositionError

ZERO = Decimal("0")


class BillEvent(str, enum.Enum):
     MOVE_IN = "move_in"
     RENEWAL = "renewal"
     MONTHLY = "monthly"


@dataclass(frozen=True)
class BillComposition:
     """Monetary content of a bill, before it is tied to a lease and due date."""
     event: BillEvent
     rent_amount: Decimal
     advance_amount: Decimal = ZERO
     security_deposit_amount: Decimal = ZERO
     water_bill: Decimal = ZERO
     electrical_bill: Decimal = ZERO
     wifi_bill: Decimal = ZERO
     other_bills: Decimal = ZERO
     description: str = ""

     @property
     def total(self) -> Decimal:
          return (
               self.rent_amount
               + self.advance_amount
               + self.security_deposit_amount
               + self.water_bill
               + self.electrical_bill
               + self.wifi_bill
               + self.other_bills
          )

     @property
     def is_move_in(self) -> bool:
          return self.event == BillEvent.MOVE_IN

     @property
     def is_renewal(self) -> bool:
          return self.event == BillEvent.RENEWAL

     def as_bill_fields(self) -> dict:
          """Column values for a models.Bill row."""
          return {
               "rent_amount": self.rent_amount,
               "advance_amount": self.advance_amount,
               "security_deposit_amount": self.security_deposit_amount,
               "water_bill": self.water_bill,
               "electrical_bill": self.electrical_bill,
               "wifi_bill": self.wifi_bill,
               "other_bills": self.other_bills,
               "bills_description": self.description,
               "is_move_in_payment": self.is_move_in,
               "is_renewal_payment": self.is_renewal,
          }


def _monthly_rent(value) -> Decimal:
     if value is None:
          raise BillCompositionError("Property has no rent amount")
     try:
          rent = Decimal(str(value))
     except (InvalidOperation, ValueError):
          raise BillCompositionError(f"Invalid rent amount: {value!r}")
     if not rent.is_finite() or rent <= 0:
          raise BillCompositionError(f"Rent amount must be positive, got {value}")
     return rent


def compose_bill(event, monthly_rent, include_advance: bool = True) -> BillComposition:
     """
     Build the line items for a lifecycle bill.

     Args:
          event: BillEvent (or its string value)
          monthly_rent: Property's current monthly rent
          include_advance: Charge one month of advance on move-in

     Raises:
          BillCompositionError: Rent is missing or not positive, or the
               event is unknown
     """
     try:
          event = BillEvent(event)
     except ValueError:
          raise BillCompositionError(f"Unknown billing event: {event!r}")

     rent = _monthly_rent(monthly_rent)

     if event == BillEvent.MOVE_IN:
          advance = rent if include_advance else ZERO
          description = (
               "Move-in Payment (Rent + Advance + Security Deposit)"
               if include_advance
               else "Move-in Payment (Rent + Security Deposit)"
          )
          return BillComposition(
               event=event,
               rent_amount=rent,
               advance_amount=advance,
               security_deposit_amount=rent,
               description=description,
          )

     if event == BillEvent.RENEWAL:
          return BillComposition(
               event=event,
               rent_amount=rent,
               advance_amount=rent,
               description="Renewal Payment (Rent + Advance)",
          )

     return BillComposition(event=event, rent_amount=rent, description="Monthly Rent")
