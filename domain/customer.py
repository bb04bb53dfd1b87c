"""
Domain: Customer (sales lead) entity and pipeline lifecycle.

Rules implemented here:
- A Customer is created in `enquiry` status with its estimated value looked up
  once from the installation price table; the value is never recomputed.
- BUS grant eligibility is derived at creation from the existing heating system.
- Status only moves forward through the pipeline:
    enquiry -> qualified -> booked -> visited -> sold -> installed
  with `not_sold` as the disqualification branch off the pre-sale stages.
  Nothing leads back from `sold` or `installed` to an earlier stage.
- Customers are never deleted; every transition returns a new instance.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional
from uuid import UUID

from .errors import InvalidTransitionError, ValidationError
from .estimation import estimated_value
from .staleness import ContactAge, StalenessBucket
from .time import require_utc_timestamp


class CustomerStatus(str, Enum):
    ENQUIRY = "enquiry"
    QUALIFIED = "qualified"
    BOOKED = "booked"
    VISITED = "visited"
    SOLD = "sold"
    NOT_SOLD = "not_sold"
    INSTALLED = "installed"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def is_pre_sale(self) -> bool:
        return self in PRE_SALE_STATUSES


_STATUS_LABELS = {
    CustomerStatus.ENQUIRY: "Initial Enquiry",
    CustomerStatus.QUALIFIED: "Qualified",
    CustomerStatus.BOOKED: "Survey Booked",
    CustomerStatus.VISITED: "Visited",
    CustomerStatus.SOLD: "Sold",
    CustomerStatus.NOT_SOLD: "Not Sold",
    CustomerStatus.INSTALLED: "Installed",
}

# Ordered: a pre-sale customer may only move to a later entry.
_PRE_SALE_ORDER = (
    CustomerStatus.ENQUIRY,
    CustomerStatus.QUALIFIED,
    CustomerStatus.BOOKED,
    CustomerStatus.VISITED,
)
PRE_SALE_STATUSES: FrozenSet[CustomerStatus] = frozenset(_PRE_SALE_ORDER)

# Statuses excluded from pipeline value: the deal is either closed or lost.
CLOSED_STATUSES: FrozenSet[CustomerStatus] = frozenset({CustomerStatus.SOLD, CustomerStatus.NOT_SOLD})

BUS_GRANT_HEATING_SYSTEMS: FrozenSet[str] = frozenset({"gas_boiler", "oil_boiler"})


def is_bus_grant_eligible(heating_system: Optional[str]) -> bool:
    return heating_system in BUS_GRANT_HEATING_SYSTEMS


def check_transition(current: CustomerStatus, target: CustomerStatus) -> None:
    """
    Raise InvalidTransitionError unless `current -> target` is a pipeline move.

    - pre-sale stages advance only forward
    - not_sold only from a pre-sale stage
    - sold from a pre-sale stage or not_sold
    - installed from anything but installed
    """

    if target in PRE_SALE_STATUSES:
        allowed = current in PRE_SALE_STATUSES and _PRE_SALE_ORDER.index(target) > _PRE_SALE_ORDER.index(current)
    elif target is CustomerStatus.NOT_SOLD:
        allowed = current in PRE_SALE_STATUSES
    elif target is CustomerStatus.SOLD:
        allowed = current in PRE_SALE_STATUSES or current is CustomerStatus.NOT_SOLD
    else:
        allowed = current is not CustomerStatus.INSTALLED

    if not allowed:
        raise InvalidTransitionError(f"Cannot move customer from '{current.value}' to '{target.value}'")


@dataclass(frozen=True, slots=True)
class NewCustomer:
    """Fields a user supplies when registering an enquiry."""

    name: str
    email: str
    mobile: str
    postcode: str
    address: str = ""
    property_type: str = ""
    heating_system: str = ""
    installation_type: str = ""
    notes: str = ""

    def validate(self) -> None:
        missing = [
            label
            for label, value in (
                ("name", self.name),
                ("email", self.email),
                ("mobile", self.mobile),
                ("postcode", self.postcode),
            )
            if not (value or "").strip()
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")


@dataclass(frozen=True, slots=True)
class Customer:
    """
    Pure domain entity for a Customer.

    Immutability:
    - The entity is frozen; lifecycle methods return updated copies so that
      `estimated_value` can never be silently recomputed.
    """

    customer_id: UUID
    name: str
    email: str
    mobile: str
    postcode: str
    address: str
    property_type: str
    heating_system: str
    installation_type: str
    estimated_value: Decimal
    status: CustomerStatus
    bus_grant_eligible: bool
    created_at: datetime

    notes: str = ""
    created_by: Optional[str] = None
    assigned_rep_id: Optional[str] = None
    assigned_rep_name: Optional[str] = None
    last_contacted: Optional[datetime] = None

    deposit_received: bool = False
    deposit_amount: Optional[Decimal] = None
    deposit_received_date: Optional[datetime] = None
    installation_completed_date: Optional[datetime] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)
        if self.last_contacted is not None:
            require_utc_timestamp("last_contacted", self.last_contacted)
        if self.deposit_received_date is not None:
            require_utc_timestamp("deposit_received_date", self.deposit_received_date)
        if self.installation_completed_date is not None:
            require_utc_timestamp("installation_completed_date", self.installation_completed_date)

    @staticmethod
    def register(
        *,
        customer_id: UUID,
        fields: NewCustomer,
        created_at: datetime,
        created_by: Optional[str] = None,
        rep_id: Optional[str] = None,
        rep_name: Optional[str] = None,
    ) -> "Customer":
        """Build a new enquiry from validated form fields."""

        fields.validate()
        return Customer(
            customer_id=customer_id,
            name=fields.name.strip(),
            email=fields.email.strip(),
            mobile=fields.mobile.strip(),
            postcode=fields.postcode.strip(),
            address=(fields.address or "").strip(),
            property_type=fields.property_type or "",
            heating_system=fields.heating_system or "",
            installation_type=fields.installation_type or "",
            estimated_value=estimated_value(fields.installation_type),
            status=CustomerStatus.ENQUIRY,
            bus_grant_eligible=is_bus_grant_eligible(fields.heating_system),
            created_at=created_at,
            notes=(fields.notes or "").strip(),
            created_by=created_by,
            assigned_rep_id=rep_id or None,
            assigned_rep_name=rep_name if rep_id else None,
            last_contacted=created_at,
        )

    def staleness(self, as_of: datetime) -> StalenessBucket:
        return ContactAge(created_at=self.created_at, last_contacted=self.last_contacted, as_of=as_of).bucket()

    def sold(self, deposit_amount: Decimal, at: datetime) -> "Customer":
        check_transition(self.status, CustomerStatus.SOLD)
        require_utc_timestamp("at", at)
        return replace(
            self,
            status=CustomerStatus.SOLD,
            deposit_received=True,
            deposit_amount=deposit_amount,
            deposit_received_date=at,
        )

    def installed(self, at: datetime) -> "Customer":
        check_transition(self.status, CustomerStatus.INSTALLED)
        require_utc_timestamp("at", at)
        return replace(self, status=CustomerStatus.INSTALLED, installation_completed_date=at)

    def advanced(self, status: CustomerStatus) -> "Customer":
        if status not in PRE_SALE_STATUSES and status is not CustomerStatus.NOT_SOLD:
            raise ValidationError(f"Use the sale or installation operations to set '{status.value}'")
        check_transition(self.status, status)
        return replace(self, status=status)

    def contacted(self, at: datetime) -> "Customer":
        require_utc_timestamp("at", at)
        return replace(self, last_contacted=at)

    def reassigned(self, rep_id: str, rep_name: Optional[str]) -> "Customer":
        return replace(self, assigned_rep_id=rep_id, assigned_rep_name=rep_name)


@dataclass(frozen=True, slots=True)
class CustomerFilter:
    """
    Read-side search over a customer list.

    - search: case-insensitive substring of name or email, or substring of mobile
    - status: exact status match
    Empty criteria match everything.
    """

    search: str = ""
    status: Optional[CustomerStatus] = None

    def matches(self, customer: Customer) -> bool:
        term = (self.search or "").strip().lower()
        if term and not (
            term in customer.name.lower()
            or term in customer.email.lower()
            or term in customer.mobile
        ):
            return False
        if self.status is not None and customer.status is not self.status:
            return False
        return True


def filter_customers(customers: Iterable[Customer], criteria: CustomerFilter) -> List[Customer]:
    return [c for c in customers if criteria.matches(c)]


__all__ = [
    "CustomerStatus",
    "PRE_SALE_STATUSES",
    "CLOSED_STATUSES",
    "BUS_GRANT_HEATING_SYSTEMS",
    "is_bus_grant_eligible",
    "check_transition",
    "NewCustomer",
    "Customer",
    "CustomerFilter",
    "filter_customers",
]
