from fastapi import APIRouter, Depends, HTTPException, status
from dependencies.current_user import get_current_user
from dependencies.rbac import require_payment_write
from dependencies.store import get_store
from services.payment_matcher import PaymentMatcher, PaymentNotification
from services.sms_parser import parse_sms_text
from store.base import Store
from .schemas import ParseSmsRequest, ParseSmsResponse, ProcessSmsRequest, ProcessSmsResponse
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/parse-sms", response_model=ParseSmsResponse)
async def parse_sms(
    request: ParseSmsRequest,
    _: bool = Depends(require_payment_write)
):
    """Extract amount and phone from a bank credit SMS"""
    notice = parse_sms_text(request.sms_text)
    if notice is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Could not extract amount and phone. Expected 'Rs.<amount> Credited ... by <10-digit phone>'"
        )
    return ParseSmsResponse(amount=notice.amount, phone=notice.phone)


@router.post("/process-sms", response_model=ProcessSmsResponse)
async def process_sms(
    request: ProcessSmsRequest,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
    _: bool = Depends(require_payment_write)
):
    """
    Match a payment against the oldest Pending order with the same total and
    phone. An unmatched payment is a normal outcome: it is recorded and
    reported with success=false, still as 200.
    """
    try:
        result = await PaymentMatcher(store).process(
            PaymentNotification(
                amount=request.amount,
                phone=request.phone,
                sms_text=request.sms_text,
                sender_id=current_user["telegram_id"],
                upi_id=request.upi_id,
                transaction_id=request.transaction_id,
            )
        )

        return ProcessSmsResponse(
            success=result.success,
            message=result.message,
            order_id=result.order_id,
            transaction_id=result.transaction.id
        )

    except Exception as e:
        logger.error(f"Error processing payment SMS: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process payment"
        )
