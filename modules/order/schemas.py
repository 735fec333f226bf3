"""
Order Module - Request Schemas
================================
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from modules.order.models import OrderStatus


class OrderLineRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId")
    quantity: int = Field(..., ge=1)


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    items: List[OrderLineRequest] = Field(..., min_length=1)
    address: str = Field(..., min_length=1, max_length=500)


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus
