from pydantic import BaseModel
from typing import Optional


class HeroCarouselItemOut(BaseModel):
    id: int
    title: str
    subtitle: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    video: Optional[str] = None
    mediaType: str = "image"
    link: Optional[str] = None
    buttonText: Optional[str] = None
    isActive: bool = True
    isMobile: bool = False
    order: int = 0
