from fastapi import APIRouter, Depends, HTTPException, status, Query
from dataclasses import asdict
from dependencies.current_user import get_current_user
from dependencies.rbac import require_order_read, require_order_write
from dependencies.store import get_store
from services.errors import KaamDhenuError
from services.order_intake import OrderIntake, OrderSubmission
from services.order_parser import parse_order_text
from services.order_status import PaymentStatus, apply_order_update
from services.permissions import scoped_district
from store.base import Store
from utils.response_helpers import http_error_for, safe_model_validate, safe_model_validate_list
from .schemas import (
    OrderCreate, OrderUpdate, OrderResponse, OrderListResponse,
    ParseOrderTextRequest, ParsedOrderResponse
)
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("/", response_model=OrderListResponse)
async def list_orders(
    district: Optional[str] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None),
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
    _: bool = Depends(require_order_read)
):
    """List orders, newest first, defaulting district heads to their own district"""
    try:
        district = district or scoped_district(current_user["roles"], current_user["role_districts"])
        orders = await store.list_orders(
            district=district,
            payment_status=payment_status.value if payment_status else None
        )

        return OrderListResponse(
            orders=safe_model_validate_list(OrderResponse, orders),
            total=len(orders)
        )

    except Exception as e:
        logger.error(f"Error listing orders: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch orders"
        )


@router.get("/pending", response_model=OrderListResponse)
async def list_pending_orders(
    store: Store = Depends(get_store),
    _: bool = Depends(require_order_read)
):
    """Orders still waiting for payment"""
    try:
        orders = await store.list_orders(payment_status=PaymentStatus.PENDING.value)
        return OrderListResponse(
            orders=safe_model_validate_list(OrderResponse, orders),
            total=len(orders)
        )

    except Exception as e:
        logger.error(f"Error listing pending orders: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch pending orders"
        )


@router.post("/parse-text", response_model=Optional[ParsedOrderResponse])
async def parse_text(
    request: ParseOrderTextRequest,
    _: bool = Depends(require_order_read)
):
    """Preview how an order form will be read, without touching stock; null when unreadable"""
    parsed = parse_order_text(request.order_text)
    if parsed is None:
        return None

    return ParsedOrderResponse(
        name=parsed.name,
        address=parsed.address,
        items=[asdict(item) for item in parsed.items]
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    store: Store = Depends(get_store),
    _: bool = Depends(require_order_read)
):
    """Get a single order"""
    try:
        order = await store.get_order(order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found"
            )
        return safe_model_validate(OrderResponse, order)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting order {order_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch order"
        )


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
    _: bool = Depends(require_order_write)
):
    """
    Place an order from free text. Every item line must resolve to a product
    with enough stock, otherwise nothing is deducted and nothing is saved.
    """
    try:
        submission = OrderSubmission(
            telegram_id=order_data.telegram_id or current_user["telegram_id"],
            name=order_data.name,
            address=order_data.address,
            phone=order_data.phone,
            district=order_data.district,
            order_details=order_data.order_details,
        )
        order = await OrderIntake(store).place_order(submission)
        return safe_model_validate(OrderResponse, order)

    except KaamDhenuError as e:
        logger.warning(f"Order rejected: {e.message}")
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Error creating order: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create order"
        )


@router.put("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: int,
    order_data: OrderUpdate,
    store: Store = Depends(get_store),
    _: bool = Depends(require_order_write)
):
    """Partial update; status changes must follow the order/payment lifecycle"""
    try:
        changes = order_data.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        order = await apply_order_update(store, order_id, changes)
        return safe_model_validate(OrderResponse, order)

    except KaamDhenuError as e:
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Error updating order {order_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update order"
        )
