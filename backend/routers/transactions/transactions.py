from fastapi import APIRouter, Depends, HTTPException, status, Query
from dependencies.rbac import require_transactions_read
from dependencies.store import get_store
from routers.payments.schemas import TransactionResponse
from services.order_status import TransactionStatus
from store.base import Store
from utils.response_helpers import safe_model_validate_list
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("/", response_model=List[TransactionResponse])
async def list_transactions(
    status_filter: Optional[TransactionStatus] = Query(None, alias="status"),
    store: Store = Depends(get_store),
    _: bool = Depends(require_transactions_read)
):
    """Admin only: payment ledger, newest first"""
    try:
        transactions = await store.list_transactions(status_filter.value if status_filter else None)
        return safe_model_validate_list(TransactionResponse, transactions)

    except Exception as e:
        logger.error(f"Error listing transactions: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch transactions"
        )


@router.get("/unmatched", response_model=List[TransactionResponse])
async def list_unmatched_transactions(
    store: Store = Depends(get_store),
    _: bool = Depends(require_transactions_read)
):
    """Admin only: payments that did not match any pending order"""
    try:
        transactions = await store.list_transactions(TransactionStatus.UNMATCHED.value)
        return safe_model_validate_list(TransactionResponse, transactions)

    except Exception as e:
        logger.error(f"Error listing unmatched transactions: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch unmatched transactions"
        )
