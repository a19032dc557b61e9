"""pf_transaction REST API — /expenses and /incomes, identical shapes.

Both routers are built from one factory; only the TransactionKind differs.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.database import get_db_session
from src.pf_common.enums import TransactionKind
from src.pf_common.response import ApiResponse, success_response
from src.pf_gateway.auth.dependencies import get_current_user_id
from src.pf_transaction.application.schemas import (
    CreateTransactionRequest,
    UpdateTransactionRequest,
)
from src.pf_transaction.application.service import TransactionService
from src.pf_transaction.domain.models import TransactionFilter

_service = TransactionService()


def _build_router(kind: TransactionKind, prefix: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[prefix.strip("/")])

    @router.post("", status_code=201)
    async def create(
        body: CreateTransactionRequest,
        user_id: Annotated[str, Depends(get_current_user_id)],
        db: Annotated[AsyncSession, Depends(get_db_session)],
        request: Request,
    ) -> ApiResponse:
        data = await _service.create(db, user_id, kind, body)
        return success_response(data.model_dump(mode="json"), request)

    @router.get("")
    async def list_all(
        user_id: Annotated[str, Depends(get_current_user_id)],
        db: Annotated[AsyncSession, Depends(get_db_session)],
        request: Request,
        start_date: date | None = Query(None),
        end_date: date | None = Query(None),
        category_id: UUID | None = Query(None),
        account_id: UUID | None = Query(None),
        limit: int = Query(50, ge=1, le=200),
        offset: int = Query(0, ge=0),
    ) -> ApiResponse:
        filters = TransactionFilter(
            start_date=start_date,
            end_date=end_date,
            category_id=str(category_id) if category_id else None,
            account_id=str(account_id) if account_id else None,
        )
        data = await _service.list_transactions(db, user_id, kind, filters, limit, offset)
        return success_response(data.model_dump(mode="json"), request)

    @router.get("/{transaction_id}")
    async def get_one(
        transaction_id: UUID,
        user_id: Annotated[str, Depends(get_current_user_id)],
        db: Annotated[AsyncSession, Depends(get_db_session)],
        request: Request,
    ) -> ApiResponse:
        data = await _service.get(db, user_id, kind, str(transaction_id))
        return success_response(data.model_dump(mode="json"), request)

    @router.put("/{transaction_id}")
    async def update(
        transaction_id: UUID,
        body: UpdateTransactionRequest,
        user_id: Annotated[str, Depends(get_current_user_id)],
        db: Annotated[AsyncSession, Depends(get_db_session)],
        request: Request,
    ) -> ApiResponse:
        data = await _service.update(db, user_id, kind, str(transaction_id), body)
        return success_response(data.model_dump(mode="json"), request)

    @router.delete("/{transaction_id}")
    async def delete(
        transaction_id: UUID,
        user_id: Annotated[str, Depends(get_current_user_id)],
        db: Annotated[AsyncSession, Depends(get_db_session)],
        request: Request,
    ) -> ApiResponse:
        await _service.delete(db, user_id, kind, str(transaction_id))
        return success_response(None, request, message=f"{kind.value.capitalize()} deleted")

    return router


expense_router = _build_router(TransactionKind.EXPENSE, "/expenses")
income_router = _build_router(TransactionKind.INCOME, "/incomes")
