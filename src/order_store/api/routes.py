"""
FastAPI routes for the order record store
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from order_store.db.database import get_db
from order_store.errors import ValidationError
from order_store.services.order_store import OrderStore
from order_store.models.schemas import (
    OrderCreate,
    OrderUpdate,
    OrderStatusUpdate,
    PaymentUpdate,
    OrderResponse,
    OrderListResponse
)
from order_store.models.order import Order, OrderStatus
from order_store.config import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["orders"])


def _bad_request(e: ValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


def _not_found(order_id: str) -> HTTPException:
    logger.warning(f"Order {order_id} not found")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Order with id {order_id} not found"
    )


def _page(orders, total: int, skip: int, limit: int) -> OrderListResponse:
    return OrderListResponse(
        total=total,
        orders=[OrderResponse.model_validate(order) for order in orders],
        page=skip // limit + 1,
        page_size=limit
    )


@router.get("/orders", response_model=OrderListResponse)
def list_orders(
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Max items to return"),
    buyer: Optional[str] = Query(None, description="Filter by buyer id"),
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db)
):
    """
    List all orders, newest first

    - **skip**: Number of orders to skip (for pagination)
    - **limit**: Maximum number of orders to return
    - **buyer**: Filter by buyer id (optional)
    - **status**: Filter by order status (optional)
    """
    logger.info(f"Listing orders: skip={skip}, limit={limit}, buyer={buyer}, status={status}")

    try:
        orders, total = OrderStore.get_orders(db=db, skip=skip, limit=limit, buyer=buyer, status=status)
    except ValidationError as e:
        raise _bad_request(e)

    return _page(orders, total, skip, limit)


@router.get("/orders/buyer/{buyer_id}", response_model=OrderListResponse)
def get_buyer_orders(
    buyer_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db)
):
    """
    Get all orders placed by one buyer

    - **buyer_id**: User id of the buyer
    """
    logger.info(f"Getting orders for buyer {buyer_id}")

    try:
        orders, total = OrderStore.get_buyer_orders(db, buyer_id, skip=skip, limit=limit)
    except ValidationError as e:
        raise _bad_request(e)

    return _page(orders, total, skip, limit)


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, db: Session = Depends(get_db)):
    """Get a specific order by ID"""
    try:
        order = OrderStore.get_order(db, order_id)
    except ValidationError as e:
        raise _bad_request(e)

    if not order:
        raise _not_found(order_id)
    return order


@router.post(
    "/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED
)
def create_order(order: OrderCreate, db: Session = Depends(get_db)):
    """
    Create a new order (checkout submission)

    - **products**: Product ids, may be empty
    - **payment**: Payment record, stored as given
    - **buyer**: User id of the buyer
    - **status**: Defaults to "Not Process"
    """
    logger.info(f"Creating order for buyer {order.buyer} with {len(order.products)} products")

    try:
        new_order: Order = OrderStore.create_order(db, order)
    except ValidationError as e:
        raise _bad_request(e)

    return new_order


@router.patch("/orders/{order_id}", response_model=OrderResponse)
def update_order(order_id: str, order: OrderUpdate, db: Session = Depends(get_db)):
    """Update the supplied fields of an order"""
    try:
        updated = OrderStore.update_order(db, order_id, order)
    except ValidationError as e:
        raise _bad_request(e)

    if not updated:
        raise _not_found(order_id)
    return updated


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: str,
    status_update: OrderStatusUpdate,
    db: Session = Depends(get_db)
):
    """
    Update order status

    Available statuses:
    - Not Process
    - Processing
    - Shipped
    - delivered
    - cancel
    """
    logger.info(f"Updating order {order_id} status to {status_update.status.value}")

    try:
        updated = OrderStore.update_order_status(db, order_id, status_update.status)
    except ValidationError as e:
        raise _bad_request(e)

    if not updated:
        raise _not_found(order_id)
    return updated


@router.put("/orders/{order_id}/payment", response_model=OrderResponse)
def record_payment(
    order_id: str,
    payment_update: PaymentUpdate,
    db: Session = Depends(get_db)
):
    """Record the payment result for an order"""
    try:
        updated = OrderStore.record_payment(db, order_id, payment_update.payment)
    except ValidationError as e:
        raise _bad_request(e)

    if not updated:
        raise _not_found(order_id)
    return updated
