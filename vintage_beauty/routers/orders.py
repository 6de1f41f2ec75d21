import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vintage_beauty.models.user import get_db
from vintage_beauty.models.order import Order
from vintage_beauty.schemas.order import (
    OrderTrackingOut,
    OrderItemOut,
    OrderStatusUpdate,
    OrderPaymentStatusUpdate,
)
from vintage_beauty.utils.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()

FINAL_STATUSES = ("delivered", "cancelled")


def map_order_to_out(order: Order) -> OrderTrackingOut:
    items = [
        OrderItemOut(
            productId=i.product_id,
            name=i.name,
            image=i.image,
            size=i.size,
            quantity=i.quantity,
            price=float(i.price or 0),
            isGiftSet=bool(i.is_gift_set),
        )
        for i in order.items
    ]
    return OrderTrackingOut(
        orderNumber=order.order_number,
        trackingNumber=order.tracking_number,
        orderStatus=order.order_status or "pending",
        paymentStatus=order.payment_status or "pending",
        paymentMethod=order.payment_method,
        totalPrice=float(order.total_price or 0),
        shippingAddress=order.shipping_address or None,  # type: ignore
        trackingHistory=order.tracking_history or [],  # type: ignore
        orderItems=items,
        createdAt=order.created_at.isoformat() if order.created_at else None,
    )


def _get_or_404(db: Session, id: int) -> Order:
    order = db.get(Order, id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


# Public lookup by order number or courier tracking number
@router.get("/track/{number}", response_model=OrderTrackingOut)
def track_order(number: str, db: Session = Depends(get_db)):
    number = number.strip()
    order = (
        db.query(Order)
        .filter(or_(Order.order_number == number, Order.tracking_number == number))
        .first()
    )
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return map_order_to_out(order)


@router.put("/admin/{id}/status", response_model=OrderTrackingOut)
def admin_update_order_status(
    id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    admin: str = Depends(require_admin),
):
    order = _get_or_404(db, id)
    if order.order_status in FINAL_STATUSES and payload.orderStatus != order.order_status:
        raise HTTPException(status_code=400, detail=f"Order is already {order.order_status}")

    if payload.trackingNumber:
        order.tracking_number = payload.trackingNumber.strip()
    if payload.orderStatus != order.order_status or payload.note:
        event = {"status": payload.orderStatus, "date": datetime.utcnow().isoformat(), "note": payload.note}
        # Reassign so the JSON column is flagged dirty
        order.tracking_history = [*(order.tracking_history or []), event]
    order.order_status = payload.orderStatus
    order.updated_at = datetime.utcnow()
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Tracking number already assigned to another order")
    db.refresh(order)
    logger.info("Order %s moved to %s by %s", order.order_number, order.order_status, admin)
    return map_order_to_out(order)


@router.put("/admin/{id}/payment-status", response_model=OrderTrackingOut)
def admin_update_payment_status(
    id: int,
    payload: OrderPaymentStatusUpdate,
    db: Session = Depends(get_db),
    admin: str = Depends(require_admin),
):
    order = _get_or_404(db, id)
    order.payment_status = payload.paymentStatus
    order.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(order)
    logger.info("Order %s payment marked %s by %s", order.order_number, order.payment_status, admin)
    return map_order_to_out(order)
