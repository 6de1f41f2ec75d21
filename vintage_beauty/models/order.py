from sqlalchemy import Column, Integer, String, Numeric, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from vintage_beauty.models.user import Base, JSONType


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(40), unique=True, index=True, nullable=False)
    tracking_number = Column(String(100), unique=True, index=True, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    # {name, phone, address, city, state, pincode}
    shipping_address = Column(JSONType, nullable=True)
    payment_method = Column(String(50))
    total_price = Column(Numeric(10, 2), nullable=False, default=0)
    order_status = Column(String(30), default="pending")  # pending, confirmed, processing, shipped, out-for-delivery, delivered, cancelled
    payment_status = Column(String(20), default="pending")  # pending, completed, failed, refunded
    # Append-only list of {status, date, note}
    tracking_history = Column(JSONType, default=list)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    # Products can be deleted later; the item keeps its own name, image and price
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    image = Column(String(500), nullable=True)
    size = Column(String(50), nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)  # unit price at time of order
    is_gift_set = Column(Boolean, default=False)

    order = relationship("Order", back_populates="items")
