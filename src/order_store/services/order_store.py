"""
Order record store: validation and persistence of orders
"""
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session
from order_store.errors import ValidationError
from order_store.models.object_id import parse_object_id
from order_store.models.order import Order, OrderProduct, OrderStatus, utcnow
from order_store.models.schemas import OrderCreate, OrderFilter, OrderUpdate
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar, Union
from opentelemetry import trace
import pydantic
import logging

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

SchemaT = TypeVar("SchemaT", bound=pydantic.BaseModel)


def _validate(schema: Type[SchemaT], data: Union[Mapping[str, Any], SchemaT, None], subject: str) -> SchemaT:
    """Parse input into a schema, converting pydantic failures into ValidationError"""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(dict(data or {}))
    except pydantic.ValidationError as e:
        error = ValidationError.from_pydantic(e, subject)
        logger.warning(error.message)
        raise error from e


def _order_id(order_id: Any) -> str:
    try:
        return parse_object_id(order_id)
    except ValueError as e:
        raise ValidationError(f"Invalid order id: {e}") from e


def _filtered(query, order_filter: OrderFilter):
    if order_filter.buyer is not None:
        query = query.where(Order.buyer == order_filter.buyer)
    if order_filter.status is not None:
        query = query.where(Order.status == order_filter.status)
    return query


class OrderStore:
    """Single source of truth for what a valid order is"""

    @staticmethod
    def create_order(db: Session, fields: Union[Mapping[str, Any], OrderCreate, None] = None) -> Order:
        """
        Validate and persist a new order

        Absent status defaults to "Not Process"; createdAt and updatedAt are
        set here. Raises ValidationError before anything is written.
        """
        with tracer.start_as_current_span("order_store.create_order") as span:
            order_data = _validate(OrderCreate, fields, "order")
            span.set_attribute("order.products.count", len(order_data.products))
            span.set_attribute("order.status", order_data.status.value)

            now = utcnow()
            order = Order(
                buyer=order_data.buyer,
                status=order_data.status,
                payment=order_data.payment,
                created_at=now,
                updated_at=now
            )
            order.products = order_data.products

            try:
                db.add(order)
                db.commit()
            except Exception:
                db.rollback()
                raise
            db.refresh(order)

            span.set_attribute("order.id", order.id)
            logger.info(f"Order {order.id} created with {len(order_data.products)} products, status {order.status.value}")

            return order

    @staticmethod
    def get_order(db: Session, order_id: str) -> Optional[Order]:
        """Get order by ID"""
        with tracer.start_as_current_span("order_store.get_order") as span:
            order_id = _order_id(order_id)
            span.set_attribute("order.id", order_id)
            return db.get(Order, order_id)

    @staticmethod
    def get_orders(
        db: Session,
        skip: int = 0,
        limit: int = 100,
        buyer: Optional[str] = None,
        status: Optional[OrderStatus] = None
    ) -> Tuple[List[Order], int]:
        """Get orders newest first, optionally filtered by buyer and status"""
        with tracer.start_as_current_span("order_store.get_orders") as span:
            order_filter = _validate(OrderFilter, {"buyer": buyer, "status": status}, "order filter")
            if order_filter.buyer:
                span.set_attribute("filter.buyer", order_filter.buyer)
            if order_filter.status:
                span.set_attribute("filter.status", order_filter.status.value)

            total = OrderStore.count_orders(db, order_filter)
            query = _filtered(select(Order), order_filter)
            query = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip).limit(limit)
            orders = list(db.scalars(query).all())

            span.set_attribute("orders.total", total)
            span.set_attribute("orders.returned", len(orders))

            return orders, total

    @staticmethod
    def get_buyer_orders(db: Session, buyer: str, skip: int = 0, limit: int = 100) -> Tuple[List[Order], int]:
        """Orders placed by one buyer"""
        return OrderStore.get_orders(db, skip=skip, limit=limit, buyer=buyer)

    @staticmethod
    def update_order(
        db: Session,
        order_id: str,
        fields: Union[Mapping[str, Any], OrderUpdate]
    ) -> Optional[Order]:
        """Apply a partial update; only the fields supplied are changed"""
        with tracer.start_as_current_span("order_store.update_order") as span:
            order_id = _order_id(order_id)
            span.set_attribute("order.id", order_id)

            update_data = _validate(OrderUpdate, fields, "order update").model_dump(exclude_unset=True)

            order = db.get(Order, order_id)
            if not order:
                return None

            for field, value in update_data.items():
                setattr(order, field, value)
            order.updated_at = utcnow()

            try:
                db.commit()
            except Exception:
                db.rollback()
                raise
            db.refresh(order)

            logger.info(f"Order {order_id} updated: {sorted(update_data)}")
            return order

    @staticmethod
    def update_order_status(
        db: Session,
        order_id: str,
        status: Union[OrderStatus, str]
    ) -> Optional[Order]:
        """Update order status; any status may follow any other"""
        with tracer.start_as_current_span("order_store.update_status") as span:
            try:
                status = OrderStatus(status)
            except ValueError as e:
                logger.warning(f"Rejected status {status!r} for order {order_id}")
                raise ValidationError(f"Invalid order: status: {e}") from e
            span.set_attribute("status.new", status.value)

            order = OrderStore.get_order(db, order_id)
            if not order:
                return None

            old_status = order.status
            order.status = status
            order.updated_at = utcnow()

            try:
                db.commit()
            except Exception:
                db.rollback()
                raise
            db.refresh(order)

            span.set_attribute("order.id", order.id)
            span.set_attribute("status.old", old_status.value)
            logger.info(f"Order {order.id} status updated: {old_status.value} -> {status.value}")

            return order

    @staticmethod
    def record_payment(db: Session, order_id: str, payment: Dict[str, Any]) -> Optional[Order]:
        """Store a payment record verbatim"""
        if not isinstance(payment, Mapping):
            raise ValidationError("Invalid order: payment: must be an object")
        return OrderStore.update_order(db, order_id, {"payment": dict(payment)})

    @staticmethod
    def count_orders(db: Session, order_filter: Union[Mapping[str, Any], OrderFilter, None] = None) -> int:
        """Number of orders matching a filter"""
        with tracer.start_as_current_span("order_store.count_orders") as span:
            order_filter = _validate(OrderFilter, order_filter, "order filter")
            total = db.scalar(_filtered(select(func.count(Order.id)), order_filter))
            span.set_attribute("orders.total", total)
            return total

    @staticmethod
    def delete_orders(db: Session, order_filter: Union[Mapping[str, Any], OrderFilter, None] = None) -> int:
        """
        Remove every order matching the filter and return how many went

        An empty filter removes all orders. Used to reset state between test runs.
        """
        with tracer.start_as_current_span("order_store.delete_orders") as span:
            order_filter = _validate(OrderFilter, order_filter, "order filter")

            order_ids = list(db.scalars(_filtered(select(Order.id), order_filter)).all())
            if order_ids:
                try:
                    db.execute(delete(OrderProduct).where(OrderProduct.order_id.in_(order_ids)))
                    db.execute(delete(Order).where(Order.id.in_(order_ids)))
                    db.commit()
                except Exception:
                    db.rollback()
                    raise
                db.expire_all()

            span.set_attribute("orders.deleted", len(order_ids))
            logger.info(f"Deleted {len(order_ids)} orders")
            return len(order_ids)
