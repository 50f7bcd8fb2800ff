from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.exc import IntegrityError
from dependencies.current_user import get_current_user
from dependencies.rbac import require_product_read, require_product_write, require_product_delete
from dependencies.store import get_store
from services.permissions import can_manage_product, scoped_district
from store.base import Store
from utils.response_helpers import safe_model_validate, safe_model_validate_list
from .schemas import ProductCreate, ProductUpdate, ProductResponse, ProductListResponse, StockHistoryResponse
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


async def _get_managed_product(store: Store, product_id: int, current_user: dict):
    product = await store.get_product(product_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    if not can_manage_product(current_user["roles"], current_user["telegram_id"], product.added_by):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins or the user who added this product can change it"
        )
    return product


@router.get("/", response_model=ProductListResponse)
async def list_products(
    district: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
    _: bool = Depends(require_product_read)
):
    """List products, defaulting district heads to their own district"""
    try:
        district = district or scoped_district(current_user["roles"], current_user["role_districts"])
        products = await store.list_products(district)

        return ProductListResponse(
            products=safe_model_validate_list(ProductResponse, products),
            total=len(products)
        )

    except Exception as e:
        logger.error(f"Error listing products: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get products"
        )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    store: Store = Depends(get_store),
    _: bool = Depends(require_product_read)
):
    """Get a single product"""
    try:
        product = await store.get_product(product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found"
            )
        return safe_model_validate(ProductResponse, product)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting product {product_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get product"
        )


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
    _: bool = Depends(require_product_write)
):
    """Add a product; its unique number is the next free one for name + district"""
    try:
        data = product_data.model_dump()
        data["added_by"] = current_user["telegram_id"]

        product = await store.create_product(data)
        await store.commit()

        return safe_model_validate(ProductResponse, product)

    except IntegrityError as e:
        logger.warning(f"Product identity conflict: {str(e)}")
        await store.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Another product with this name and district was added at the same time, please retry"
        )
    except Exception as e:
        logger.error(f"Error creating product: {str(e)}")
        await store.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create product"
        )


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
    _: bool = Depends(require_product_write)
):
    """Update a product (admin or the user who added it)"""
    try:
        await _get_managed_product(store, product_id, current_user)

        product = await store.update_product(product_id, product_data.model_dump(exclude_unset=True))
        await store.commit()

        return safe_model_validate(ProductResponse, product)

    except HTTPException:
        raise
    except IntegrityError as e:
        logger.warning(f"Product identity conflict on update {product_id}: {str(e)}")
        await store.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product identity conflict, please retry"
        )
    except Exception as e:
        logger.error(f"Error updating product {product_id}: {str(e)}")
        await store.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update product"
        )


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    current_user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
    _: bool = Depends(require_product_delete)
):
    """Delete a product (admin or the user who added it)"""
    try:
        await _get_managed_product(store, product_id, current_user)

        await store.delete_product(product_id)
        await store.commit()

        return {"message": "Product deleted successfully"}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting product {product_id}: {str(e)}")
        await store.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete product"
        )


@router.get("/{product_id}/stock-history", response_model=List[StockHistoryResponse])
async def get_stock_history(
    product_id: int,
    store: Store = Depends(get_store),
    _: bool = Depends(require_product_read)
):
    """Stock audit trail for a product, newest first"""
    try:
        history = await store.list_stock_history(product_id)
        return safe_model_validate_list(StockHistoryResponse, history)

    except Exception as e:
        logger.error(f"Error getting stock history for {product_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get stock history"
        )
