"""pf_investment REST API — purchases, SIP processing, withdrawals."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.database import get_db_session
from src.pf_common.enums import InvestmentStatus
from src.pf_common.response import ApiResponse, success_response
from src.pf_gateway.auth.dependencies import get_current_user_id
from src.pf_investment.application.schemas import (
    CreateInvestmentRequest,
    ProcessSipRequest,
    UpdateInvestmentRequest,
    WithdrawRequest,
)
from src.pf_investment.application.service import InvestmentService
from src.pf_investment.application.withdrawal import WithdrawalService
from src.pf_investment.domain.models import InvestmentFilter

router = APIRouter(prefix="/investments", tags=["investments"])

_service = InvestmentService()
_withdrawals = WithdrawalService()


@router.post("", status_code=201)
async def create_investment(
    body: CreateInvestmentRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create(db, user_id, body)
    return success_response(data.model_dump(mode="json"), request)


@router.get("")
async def list_investments(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    investment_type_id: UUID | None = Query(None),
    account_id: UUID | None = Query(None),
    status: InvestmentStatus | None = Query(None),
    is_sip: bool | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    filters = InvestmentFilter(
        start_date=start_date,
        end_date=end_date,
        investment_type_id=str(investment_type_id) if investment_type_id else None,
        account_id=str(account_id) if account_id else None,
        status=status.value if status else None,
        is_sip=is_sip,
    )
    data = await _service.list_investments(db, user_id, filters, limit, offset)
    return success_response(data.model_dump(mode="json"), request)


# Must be declared before /{investment_id}.
@router.get("/types")
async def list_investment_types(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_types(db)
    return success_response([t.model_dump(mode="json") for t in data], request)


@router.get("/{investment_id}")
async def get_investment(
    investment_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get(db, user_id, str(investment_id))
    return success_response(data.model_dump(mode="json"), request)


@router.put("/{investment_id}")
async def update_investment(
    investment_id: UUID,
    body: UpdateInvestmentRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update(db, user_id, str(investment_id), body)
    return success_response(data.model_dump(mode="json"), request)


@router.delete("/{investment_id}")
async def delete_investment(
    investment_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    await _service.delete(db, user_id, str(investment_id))
    return success_response(None, request, message="Investment deleted")


@router.post("/{investment_id}/process-sip")
async def process_sip(
    investment_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: ProcessSipRequest | None = None,
) -> ApiResponse:
    on_date = body.transaction_date if body else None
    data = await _service.process_sip(db, user_id, str(investment_id), on_date)
    message = "SIP installment processed" if data.processed else "SIP installment skipped"
    return success_response(data.model_dump(mode="json"), request, message=message)


@router.post("/{investment_id}/withdraw")
async def withdraw_investment(
    investment_id: UUID,
    body: WithdrawRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _withdrawals.withdraw(db, user_id, str(investment_id), body)
    message = (
        "Investment withdrawn" if data.full_withdrawal else "Partial withdrawal processed"
    )
    return success_response(data.model_dump(mode="json"), request, message=message)
