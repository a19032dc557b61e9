"""pf_account REST API — all endpoints require a Bearer token."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.application.schemas import CreateAccountRequest, UpdateAccountRequest
from src.pf_account.application.service import AccountApplicationService
from src.pf_common.database import get_db_session
from src.pf_common.response import ApiResponse, success_response
from src.pf_gateway.auth.dependencies import get_current_user_id

router = APIRouter(prefix="/accounts", tags=["accounts"])

_service = AccountApplicationService()


@router.post("", status_code=201)
async def create_account(
    body: CreateAccountRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_account(db, user_id, body)
    return success_response(data.model_dump(mode="json"), request)


@router.get("")
async def list_accounts(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    type: str | None = Query(None, description="Filter by AccountType"),
    is_active: bool | None = Query(None),
) -> ApiResponse:
    data = await _service.list_accounts(db, user_id, type, is_active)
    return success_response(data.model_dump(mode="json"), request)


# Must be declared before /{account_id} or "summary" is captured as an id.
@router.get("/summary")
async def balance_summary(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.balance_summary(db, user_id)
    return success_response(data.model_dump(mode="json"), request)


@router.get("/{account_id}")
async def get_account(
    account_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_account(db, user_id, str(account_id))
    return success_response(data.model_dump(mode="json"), request)


@router.put("/{account_id}")
async def update_account(
    account_id: UUID,
    body: UpdateAccountRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_account(db, user_id, str(account_id), body)
    return success_response(data.model_dump(mode="json"), request)


# Deactivates rather than deleting: ledger rows keep pointing at the account.
@router.delete("/{account_id}")
async def deactivate_account(
    account_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.deactivate_account(db, user_id, str(account_id))
    return success_response(data.model_dump(mode="json"), request)


@router.post("/{account_id}/reactivate")
async def reactivate_account(
    account_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.reactivate_account(db, user_id, str(account_id))
    return success_response(data.model_dump(mode="json"), request)
