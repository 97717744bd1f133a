from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from devgad.models.order import OrderStatus, SenderType

class CheckoutForm(BaseModel):
    name: str = ""
    phone: str = ""
    address: str = ""
    pincode: str = ""
    notes: str = ""

class CustomerOut(BaseModel):
    name: str
    email: Optional[str] = None
    phone: str
    address: str
    pincode: str
    notes: Optional[str] = None

class OrderItemOut(BaseModel):
    id: str
    name: str
    name_marathi: Optional[str] = None
    price: float
    quantity: int
    weight: Optional[str] = None

class OrderMessageOut(BaseModel):
    timestamp: str
    sender_type: SenderType
    message: str

class OrderOut(BaseModel):
    id: str
    short_code: str
    user_id: str
    customer: CustomerOut
    items: List[OrderItemOut]
    total_price: float
    status: OrderStatus
    messages: List[OrderMessageOut] = []
    created_at: datetime

    class Config:
        from_attributes = True

class CheckoutResult(BaseModel):
    order_id: str
    short_code: str
    status: OrderStatus
    message: str = "Your order is pending. Admin will confirm shortly."

class MessageCreate(BaseModel):
    message: str

class AdminOrdersOut(BaseModel):
    pending: List[OrderOut]
    confirmed: List[OrderOut]
    rejected: List[OrderOut]
