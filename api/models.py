"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
Required-field rules are enforced by the core, not here, so that the API can
never build a record the core would reject.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from domain.activity import Activity
from domain.commission import Commission, CommissionRollup
from domain.customer import Customer
from domain.metrics import DashboardMetrics
from domain.money import to_pennies
from domain.rep import Rep
from domain.task import Task


# ============================================================================
# Customer Models
# ============================================================================

class CustomerCreateRequest(BaseModel):
    """Request to register a new enquiry."""
    name: str = ""
    email: str = ""
    mobile: str = ""
    postcode: str = ""
    address: str = ""
    property_type: str = ""
    heating_system: str = ""
    installation_type: str = ""
    notes: str = ""
    rep_id: Optional[str] = Field(None, description="Rep to assign; a welcome-call task is created for them")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Jane Smith",
                "email": "jane@example.com",
                "mobile": "07700900123",
                "postcode": "BS1 4DJ",
                "heating_system": "gas_boiler",
                "installation_type": "heat_pump_solar",
                "rep_id": "rep-123",
            }
        }


class DepositRequest(BaseModel):
    """Deposit received for a customer; the amount is the total sale price."""
    amount: Decimal


class StatusChangeRequest(BaseModel):
    status: str = Field(..., description="qualified, booked, visited or not_sold")


class AssignRepRequest(BaseModel):
    rep_id: str


class CustomerResponse(BaseModel):
    id: UUID
    name: str
    email: str
    mobile: str
    postcode: str
    address: str
    property_type: str
    heating_system: str
    installation_type: str
    estimated_value: Decimal
    status: str
    status_label: str
    bus_grant_eligible: bool
    assigned_rep_id: Optional[str] = None
    assigned_rep_name: Optional[str] = None
    created_at: datetime
    last_contacted: Optional[datetime] = None
    staleness: str
    deposit_received: bool
    deposit_amount: Optional[Decimal] = None
    deposit_received_date: Optional[datetime] = None
    installation_completed_date: Optional[datetime] = None

    @staticmethod
    def from_domain(customer: Customer, as_of: datetime) -> "CustomerResponse":
        return CustomerResponse(
            id=customer.customer_id,
            name=customer.name,
            email=customer.email,
            mobile=customer.mobile,
            postcode=customer.postcode,
            address=customer.address,
            property_type=customer.property_type,
            heating_system=customer.heating_system,
            installation_type=customer.installation_type,
            estimated_value=customer.estimated_value,
            status=customer.status.value,
            status_label=customer.status.label,
            bus_grant_eligible=customer.bus_grant_eligible,
            assigned_rep_id=customer.assigned_rep_id,
            assigned_rep_name=customer.assigned_rep_name,
            created_at=customer.created_at,
            last_contacted=customer.last_contacted,
            staleness=customer.staleness(max(as_of, customer.last_contacted or customer.created_at)).value,
            deposit_received=customer.deposit_received,
            deposit_amount=customer.deposit_amount,
            deposit_received_date=customer.deposit_received_date,
            installation_completed_date=customer.installation_completed_date,
        )


class CustomerListResponse(BaseModel):
    items: List[CustomerResponse]
    total_count: int
    filters_applied: dict


# ============================================================================
# Task Models
# ============================================================================

class TaskCreateRequest(BaseModel):
    customer_id: Optional[UUID] = None
    type: Optional[str] = None
    due_date: Optional[datetime] = None
    rep_id: Optional[str] = None
    description: str = ""


class TaskResponse(BaseModel):
    id: UUID
    customer_id: UUID
    assigned_rep_id: str
    type: str
    title: str
    description: str
    status: str
    due_date: datetime
    created_at: datetime
    completed_at: Optional[datetime] = None
    urgency: str

    @staticmethod
    def from_domain(task: Task, now: datetime) -> "TaskResponse":
        return TaskResponse(
            id=task.task_id,
            customer_id=task.customer_id,
            assigned_rep_id=task.assigned_rep_id,
            type=task.type.value,
            title=task.title,
            description=task.description,
            status=task.status.value,
            due_date=task.due_date,
            created_at=task.created_at,
            completed_at=task.completed_at,
            urgency=task.urgency(now).value,
        )


# ============================================================================
# Commission Models
# ============================================================================

class CommissionResponse(BaseModel):
    id: UUID
    customer_id: UUID
    rep_id: Optional[str] = None
    total_sale_price: Decimal
    commission_amount: Decimal
    deposit_commission: Decimal
    final_commission: Decimal
    deposit_paid: bool
    deposit_paid_date: Optional[datetime] = None
    final_paid: bool
    final_paid_date: Optional[datetime] = None
    created_at: datetime
    stage: str

    @staticmethod
    def from_domain(commission: Commission) -> "CommissionResponse":
        return CommissionResponse(
            id=commission.commission_id,
            customer_id=commission.customer_id,
            rep_id=commission.rep_id,
            total_sale_price=to_pennies(commission.total_sale_price),
            commission_amount=to_pennies(commission.commission_amount),
            deposit_commission=to_pennies(commission.deposit_commission),
            final_commission=to_pennies(commission.final_commission),
            deposit_paid=commission.deposit_paid,
            deposit_paid_date=commission.deposit_paid_date,
            final_paid=commission.final_paid,
            final_paid_date=commission.final_paid_date,
            created_at=commission.created_at,
            stage=commission.stage.value,
        )


class CommissionTotalsResponse(BaseModel):
    total: Decimal
    pending: Decimal
    completed: Decimal

    @staticmethod
    def from_domain(totals: CommissionRollup) -> "CommissionTotalsResponse":
        return CommissionTotalsResponse(
            total=to_pennies(totals.total),
            pending=to_pennies(totals.pending),
            completed=to_pennies(totals.completed),
        )


class CommissionStatementResponse(BaseModel):
    items: List[CommissionResponse]
    totals: CommissionTotalsResponse


class InstallationResponse(BaseModel):
    customer: CustomerResponse
    released: List[CommissionResponse]


# ============================================================================
# Dashboard / Activity / Rep Models
# ============================================================================

class DashboardResponse(BaseModel):
    total_customers: int
    my_customers: int
    pipeline_value: Decimal
    conversion_rate: int

    @staticmethod
    def from_domain(metrics: DashboardMetrics) -> "DashboardResponse":
        return DashboardResponse(
            total_customers=metrics.total_customers,
            my_customers=metrics.my_customers,
            pipeline_value=metrics.pipeline_value,
            conversion_rate=metrics.conversion_rate,
        )


class ActivityResponse(BaseModel):
    id: UUID
    title: str
    description: str
    created_at: datetime
    created_by: str

    @staticmethod
    def from_domain(activity: Activity) -> "ActivityResponse":
        return ActivityResponse(
            id=activity.activity_id,
            title=activity.title,
            description=activity.description,
            created_at=activity.created_at,
            created_by=activity.created_by,
        )


class RepCreateRequest(BaseModel):
    rep_id: str = Field("", description="Identity-provider account id of the new rep")
    name: str = ""
    email: str = ""
    mobile: str = ""
    region: str = ""
    postcodes: str = Field("", description="Comma-separated service postcodes")
    max_travel_time: str = "0"
    max_travel_miles: str = "0"
    calendar_id: Optional[str] = None


class RepResponse(BaseModel):
    id: str
    name: str
    email: str
    mobile: str
    region: str
    role: str
    status: str
    postcodes: List[str]

    @staticmethod
    def from_domain(rep: Rep) -> "RepResponse":
        return RepResponse(
            id=rep.rep_id,
            name=rep.name,
            email=rep.email,
            mobile=rep.mobile,
            region=rep.region,
            role=rep.role.value,
            status=rep.status,
            postcodes=list(rep.postcodes),
        )
