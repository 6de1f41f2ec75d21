from sqlalchemy import Column, Integer, String, Text, Float, Numeric, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from vintage_beauty.models.user import Base, JSONType
from vintage_beauty.models.category import Category  # noqa: F401  relationship target


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    # Derived from name + category_name on save; collisions are rejected, never suffixed
    slug = Column(String(300), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    category_name = Column(String(150), nullable=False, index=True)

    price = Column(Numeric(10, 2), default=0)
    regular_price = Column(Numeric(10, 2), default=0)
    sizes = Column(JSONType)  # e.g. [{"size": "50ml", "price": 300.0}, ...]
    stock = Column(Integer, nullable=False, default=0)
    in_stock = Column(Boolean, default=True)

    images = Column(JSONType)  # List of URLs or /media paths, first one is the main image
    rating = Column(Float, default=0.0)
    reviews = Column(Integer, default=0)
    is_featured = Column(Boolean, default=False)
    is_best_seller = Column(Boolean, default=False)
    is_most_loved = Column(Boolean, default=False)

    brand_name = Column(String(100), default="VINTAGE BEAUTY")
    type = Column(String(100))
    material = Column(String(255))
    colour = Column(String(100))
    gender = Column(String(10))  # men, women, unisex
    top_notes = Column(JSONType)
    heart_notes = Column(JSONType)
    base_notes = Column(JSONType)
    scent_profile = Column(String(255))
    performance = Column(JSONType)  # {"longevity", "projection", "note", "warning", "recommendation"}
    tags = Column(JSONType)
    utility = Column(Text)
    care = Column(Text)

    # Gift sets bundle other products; the totals below are recomputed only when the set itself is saved
    is_gift_set = Column(Boolean, default=False)
    gift_set_items = Column(JSONType)  # e.g. [{"product": 12, "quantity": 2, "selected_size": "50ml"}]
    gift_set_discount = Column(Float, default=0)
    gift_set_total_price = Column(Numeric(10, 2), default=0)
    gift_set_discounted_price = Column(Numeric(10, 2), default=0)
    gift_set_manual_price = Column(Numeric(10, 2))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("Category", back_populates="products")

    def __repr__(self):
        return f"<Product {self.slug}>"
