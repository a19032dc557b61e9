"""pf_ledger REST API — read-only journal for an account."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.database import get_db_session
from src.pf_common.response import ApiResponse, success_response
from src.pf_gateway.auth.dependencies import get_current_user_id
from src.pf_ledger.application.service import LedgerApplicationService

router = APIRouter(prefix="/accounts", tags=["ledger"])

_service = LedgerApplicationService()


@router.get("/{account_id}/ledger")
async def list_ledger(
    account_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_ledger(db, user_id, str(account_id), cursor, limit)
    return success_response(data.model_dump(mode="json"), request)
