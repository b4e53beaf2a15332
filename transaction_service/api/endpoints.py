# endpoints.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request

from transaction_service.services.transaction_service import TransactionService

router = APIRouter()


def get_transaction_service(request: Request) -> TransactionService:
    return request.app.state.transaction_service


@router.post("/transactions", status_code=201)
async def create_transaction(
    transaction_data: Dict[str, Any] = Body(...),
    service: TransactionService = Depends(get_transaction_service),
):
    transaction = await service.create(transaction_data)
    return transaction.to_response()


@router.get("/transactions")
async def list_transactions(
    user_id: Optional[str] = None,
    service: TransactionService = Depends(get_transaction_service),
):
    transactions = await service.list_by_user(user_id)
    return {"transactions": [tx.to_response() for tx in transactions]}


@router.get("/transactions/{transaction_id}")
async def get_transaction(
    transaction_id: str,
    service: TransactionService = Depends(get_transaction_service),
):
    transaction = await service.get_by_id(transaction_id)
    return transaction.to_response()


@router.put("/transactions/{transaction_id}")
async def update_transaction_status(
    transaction_id: str,
    data: Dict[str, Any] = Body(...),
    service: TransactionService = Depends(get_transaction_service),
):
    transaction = await service.update_status(transaction_id, data)
    return transaction.to_response()
