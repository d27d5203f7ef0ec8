"""
Pydantic schemas for the order record store
"""
from pydantic import BaseModel, Field, ConfigDict, field_serializer
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from order_store.models.object_id import ObjectIdStr
from order_store.models.order import OrderStatus


class OrderCreate(BaseModel):
    """Schema for creating an order (checkout submission)"""
    products: List[ObjectIdStr] = Field(default_factory=list, description="Product ids, in order")
    payment: Optional[Dict[str, Any]] = Field(None, description="Payment record, stored verbatim")
    buyer: Optional[ObjectIdStr] = Field(None, description="User id of the buyer")
    # Defaults are not validated, so only an absent status becomes NOT_PROCESS
    status: OrderStatus = Field(OrderStatus.NOT_PROCESS, description="Fulfillment status")

    model_config = ConfigDict(extra="ignore")


class OrderUpdate(BaseModel):
    """Schema for a partial order update; unset fields are left alone"""
    products: List[ObjectIdStr] = Field(None)
    payment: Optional[Dict[str, Any]] = None
    buyer: Optional[ObjectIdStr] = None
    status: OrderStatus = Field(None)

    model_config = ConfigDict(extra="ignore")


class OrderStatusUpdate(BaseModel):
    """Schema for updating order status"""
    status: OrderStatus


class PaymentUpdate(BaseModel):
    """Schema for recording a payment"""
    payment: Dict[str, Any]


class OrderFilter(BaseModel):
    """Selection used by count and bulk delete; empty matches every order"""
    buyer: Optional[ObjectIdStr] = None
    status: Optional[OrderStatus] = None

    model_config = ConfigDict(extra="forbid")


class OrderResponse(BaseModel):
    """Schema for order response"""
    id: str
    products: List[str]
    payment: Optional[Dict[str, Any]] = None
    buyer: Optional[str] = None
    status: OrderStatus
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, value: datetime) -> str:
        # Stored as naive UTC; sent as ISO 8601 with a Z suffix
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class OrderListResponse(BaseModel):
    """Schema for list of orders"""
    total: int
    orders: List[OrderResponse]
    page: int
    page_size: int


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    version: str
    timestamp: datetime
