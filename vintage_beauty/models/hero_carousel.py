from sqlalchemy import Column, Integer, String, Boolean, DateTime
from datetime import datetime
from vintage_beauty.models.user import Base


class HeroCarouselItem(Base):
    __tablename__ = "hero_carousel_items"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    subtitle = Column(String(500), nullable=True)
    description = Column(String(1000), nullable=True)
    # Exactly one of image / video is shown; setting one clears the other
    image = Column(String(500), nullable=True)
    video = Column(String(500), nullable=True)
    link = Column(String(500), nullable=True)
    button_text = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True)
    is_mobile = Column(Boolean, default=False)
    order = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
