"""
Commissions API Endpoints.

Commission statement for the caller: every commission for admins, own
commissions for reps, with rolled-up totals.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_context, get_store
from api.models import CommissionResponse, CommissionStatementResponse, CommissionTotalsResponse
from domain.context import OperationContext
from repositories.store import DocumentStore
from services.commission_service import commission_statement

router = APIRouter()


@router.get(
    "/commissions",
    response_model=CommissionStatementResponse,
    summary="Commission Statement",
    description="Commissions with their stage and totals (total, pending final halves, completed).",
)
def get_commissions(
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
):
    statement = commission_statement(store, ctx)
    return CommissionStatementResponse(
        items=[CommissionResponse.from_domain(c) for c in statement.commissions],
        totals=CommissionTotalsResponse.from_domain(statement.totals),
    )
