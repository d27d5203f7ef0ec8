"""
Order database models
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON, Enum as SQLEnum, ForeignKey
from sqlalchemy.orm import relationship
from order_store.db.database import Base
from order_store.models.object_id import new_object_id
from datetime import datetime, timezone
import enum


def utcnow() -> datetime:
    # Stored as naive UTC so values compare the same on every backend
    return datetime.now(timezone.utc).replace(tzinfo=None)


class OrderStatus(str, enum.Enum):
    """Order status enum"""
    NOT_PROCESS = "Not Process"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "delivered"
    CANCEL = "cancel"


class Order(Base):
    """Order model"""
    __tablename__ = "orders"

    id = Column(String(24), primary_key=True, default=new_object_id)
    buyer = Column(String(24), nullable=True, index=True)
    status = Column(
        SQLEnum(
            OrderStatus,
            name="order_status",
            values_callable=lambda statuses: [s.value for s in statuses],
            validate_strings=True,
        ),
        default=OrderStatus.NOT_PROCESS,
        nullable=False,
        index=True
    )
    payment = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    items = relationship(
        "OrderProduct",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderProduct.position",
        lazy="selectin"
    )

    @property
    def products(self):
        """Product ids in the order they were placed"""
        return [item.product_id for item in self.items]

    @products.setter
    def products(self, product_ids):
        self.items = [
            OrderProduct(position=position, product_id=product_id)
            for position, product_id in enumerate(product_ids)
        ]

    def __repr__(self):
        return f"<Order(id={self.id}, status={self.status}, products={len(self.items)})>"


class OrderProduct(Base):
    """One product reference within an order"""
    __tablename__ = "order_products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(24), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    product_id = Column(String(24), nullable=False, index=True)

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderProduct(order_id={self.order_id}, position={self.position}, product_id={self.product_id})>"
