"""
Customers API Endpoints.

Endpoints for registering enquiries, moving customers through the pipeline,
recording deposits and signing off installations.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from api.dependencies import get_context, get_dispatcher, get_store, run_effects
from api.models import (
    AssignRepRequest,
    CommissionResponse,
    CustomerCreateRequest,
    CustomerListResponse,
    CustomerResponse,
    DepositRequest,
    InstallationResponse,
    StatusChangeRequest,
)
from domain.context import OperationContext
from domain.customer import CustomerFilter, CustomerStatus, NewCustomer
from repositories.store import DocumentStore
from services import customer_service
from services.notification_service import EffectDispatcher

router = APIRouter()


def _parse_status(value: str) -> CustomerStatus:
    try:
        return CustomerStatus(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid status. Got '{value}'")


@router.get(
    "/customers",
    response_model=CustomerListResponse,
    summary="List Customers",
    description="Customers visible to the caller, optionally filtered by search term and status.",
)
def list_customers(
    search: Optional[str] = Query(None, description="Case-insensitive match on name or email, or part of the mobile"),
    status: Optional[str] = Query(None, description="Exact pipeline status (e.g. 'sold')"),
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
):
    """
    List customers.

    Admins and owners see every customer; reps see the customers assigned to them.

    **Example usage:**
    - `GET /api/v1/customers?search=smith&status=sold`
    """
    criteria = CustomerFilter(search=search or "", status=_parse_status(status) if status else None)
    customers = customer_service.search_customers(store, ctx, criteria)
    now = ctx.now()

    filters_applied = {}
    if search:
        filters_applied["search"] = search
    if status:
        filters_applied["status"] = status

    return CustomerListResponse(
        items=[CustomerResponse.from_domain(c, now) for c in customers],
        total_count=len(customers),
        filters_applied=filters_applied,
    )


@router.post("/customers", response_model=CustomerResponse, status_code=201, summary="Register Enquiry")
def create_customer(
    request: CustomerCreateRequest,
    background_tasks: BackgroundTasks,
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
    dispatcher: EffectDispatcher = Depends(get_dispatcher),
):
    fields = NewCustomer(
        name=request.name,
        email=request.email,
        mobile=request.mobile,
        postcode=request.postcode,
        address=request.address,
        property_type=request.property_type,
        heating_system=request.heating_system,
        installation_type=request.installation_type,
        notes=request.notes,
    )
    outcome = customer_service.create_customer(store, ctx, fields, rep_id=request.rep_id)
    run_effects(dispatcher, ctx, outcome, background_tasks)
    return CustomerResponse.from_domain(outcome.value, ctx.now())


@router.get("/customers/{customer_id}", response_model=CustomerResponse, summary="Customer Detail")
def get_customer(
    customer_id: UUID,
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
):
    return CustomerResponse.from_domain(customer_service.get_customer(store, customer_id), ctx.now())


@router.post(
    "/customers/{customer_id}/deposit",
    response_model=CommissionResponse,
    summary="Record Deposit",
    description="Mark the customer sold and create the two-stage commission in one commit.",
)
def record_deposit(
    customer_id: UUID,
    request: DepositRequest,
    background_tasks: BackgroundTasks,
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
    dispatcher: EffectDispatcher = Depends(get_dispatcher),
):
    """
    Record a deposit.

    **Success response:**
    ```json
    {
      "total_sale_price": "20000.00",
      "commission_amount": "1000.00",
      "deposit_commission": "500.00",
      "final_commission": "500.00",
      "deposit_paid": true,
      "final_paid": false,
      "stage": "Awaiting Installation"
    }
    ```
    """
    outcome = customer_service.mark_sold(store, ctx, customer_id, request.amount)
    run_effects(dispatcher, ctx, outcome, background_tasks)
    return CommissionResponse.from_domain(outcome.value)


@router.post(
    "/customers/{customer_id}/installation",
    response_model=InstallationResponse,
    summary="Sign Off Installation",
    description="Mark the customer installed and release the final commission half.",
)
def complete_installation(
    customer_id: UUID,
    background_tasks: BackgroundTasks,
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
    dispatcher: EffectDispatcher = Depends(get_dispatcher),
):
    outcome = customer_service.mark_installed(store, ctx, customer_id)
    run_effects(dispatcher, ctx, outcome, background_tasks)
    customer = customer_service.get_customer(store, customer_id)
    return InstallationResponse(
        customer=CustomerResponse.from_domain(customer, ctx.now()),
        released=[CommissionResponse.from_domain(c) for c in outcome.value],
    )


@router.post("/customers/{customer_id}/status", response_model=CustomerResponse, summary="Advance Pipeline Status")
def change_status(
    customer_id: UUID,
    request: StatusChangeRequest,
    background_tasks: BackgroundTasks,
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
    dispatcher: EffectDispatcher = Depends(get_dispatcher),
):
    outcome = customer_service.advance_status(store, ctx, customer_id, _parse_status(request.status))
    run_effects(dispatcher, ctx, outcome, background_tasks)
    return CustomerResponse.from_domain(outcome.value, ctx.now())


@router.post("/customers/{customer_id}/contact", response_model=CustomerResponse, summary="Record Contact")
def record_contact(
    customer_id: UUID,
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
):
    return CustomerResponse.from_domain(customer_service.record_contact(store, ctx, customer_id), ctx.now())


@router.post("/customers/{customer_id}/assign", response_model=CustomerResponse, summary="Reassign Customer")
def assign_rep(
    customer_id: UUID,
    request: AssignRepRequest,
    background_tasks: BackgroundTasks,
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
    dispatcher: EffectDispatcher = Depends(get_dispatcher),
):
    outcome = customer_service.assign_rep(store, ctx, customer_id, request.rep_id)
    run_effects(dispatcher, ctx, outcome, background_tasks)
    return CustomerResponse.from_domain(outcome.value, ctx.now())
