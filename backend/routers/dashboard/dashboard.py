from fastapi import APIRouter, Depends, HTTPException, status
from dataclasses import asdict
from dependencies.rbac import require_dashboard_read
from dependencies.store import get_store
from services.dashboard import DashboardAggregator
from store.base import Store
from .schemas import DashboardStatsResponse
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    store: Store = Depends(get_store),
    _: bool = Depends(require_dashboard_read)
):
    """Product count, pending orders, low-stock count and confirmed revenue"""
    try:
        stats = await DashboardAggregator(store).stats()
        return DashboardStatsResponse(**asdict(stats))

    except Exception as e:
        logger.error(f"Error getting dashboard stats: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch dashboard stats"
        )
