from pydantic import BaseModel
from typing import List, Optional, Literal


OrderStatus = Literal["pending", "confirmed", "processing", "shipped", "out-for-delivery", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "completed", "failed", "refunded"]


class ShippingAddress(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None


class TrackingEvent(BaseModel):
    status: str
    date: Optional[str] = None
    note: Optional[str] = None


class OrderItemOut(BaseModel):
    productId: Optional[int] = None
    name: str
    image: Optional[str] = None
    size: Optional[str] = None
    quantity: int
    price: float
    isGiftSet: bool = False


class OrderTrackingOut(BaseModel):
    orderNumber: str
    trackingNumber: Optional[str] = None
    orderStatus: str
    paymentStatus: str
    paymentMethod: Optional[str] = None
    totalPrice: float
    shippingAddress: Optional[ShippingAddress] = None
    trackingHistory: List[TrackingEvent] = []
    orderItems: List[OrderItemOut] = []
    createdAt: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    orderStatus: OrderStatus
    note: Optional[str] = None
    trackingNumber: Optional[str] = None


class OrderPaymentStatusUpdate(BaseModel):
    paymentStatus: PaymentStatus
