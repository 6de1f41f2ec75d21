import re
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Literal, Optional

Gender = Literal["men", "women", "unisex"]

_SLUG_CHARACTER = re.compile(r"[a-z0-9]")


def _check_sluggable(name: Optional[str]) -> Optional[str]:
    # The slug keeps only a-z and 0-9; a name without any would leave it empty
    if name is not None and not _SLUG_CHARACTER.search(name.lower()):
        raise ValueError("Name must contain at least one letter or digit")
    return name


class SizeOption(BaseModel):
    size: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)


class GiftSetItem(BaseModel):
    product: int
    quantity: int = Field(1, ge=1)
    selected_size: Optional[str] = None


class Performance(BaseModel):
    longevity: Optional[str] = None
    projection: Optional[str] = None
    note: Optional[str] = None
    warning: Optional[str] = None
    recommendation: Optional[str] = None


class ProductCreate(BaseModel):
    """Admin product draft. Derived fields (slug, in_stock, gift set totals) are computed on save."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category_id: int
    # Denormalized; copied from the category when omitted
    category_name: Optional[str] = None
    images: List[str] = Field(..., min_length=1)
    stock: int = Field(0, ge=0)
    # Accepted for compatibility with older clients, always recomputed from stock
    in_stock: Optional[bool] = None

    price: float = Field(0, ge=0)
    regular_price: float = Field(0, ge=0)
    sizes: List[SizeOption] = Field(default_factory=list)

    rating: float = Field(0, ge=0, le=5)
    reviews: int = Field(0, ge=0)
    is_featured: bool = False
    is_best_seller: bool = False
    is_most_loved: bool = False

    brand_name: str = "VINTAGE BEAUTY"
    type: Optional[str] = None
    material: Optional[str] = None
    colour: Optional[str] = None
    gender: Optional[Gender] = None
    top_notes: List[str] = Field(default_factory=list)
    heart_notes: List[str] = Field(default_factory=list)
    base_notes: List[str] = Field(default_factory=list)
    scent_profile: Optional[str] = None
    performance: Optional[Performance] = None
    tags: List[str] = Field(default_factory=list)
    utility: Optional[str] = None
    care: Optional[str] = None

    is_gift_set: Optional[bool] = None
    gift_set_items: List[GiftSetItem] = Field(default_factory=list)
    gift_set_discount: float = Field(0, ge=0, le=100)
    gift_set_manual_price: Optional[float] = Field(None, ge=0)

    check_name_sluggable = field_validator("name")(_check_sluggable)


class ProductUpdate(BaseModel):
    """Partial update; only fields present in the request are applied."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    images: Optional[List[str]] = Field(None, min_length=1)
    stock: Optional[int] = Field(None, ge=0)
    in_stock: Optional[bool] = None

    price: Optional[float] = Field(None, ge=0)
    regular_price: Optional[float] = Field(None, ge=0)
    sizes: Optional[List[SizeOption]] = None

    rating: Optional[float] = Field(None, ge=0, le=5)
    reviews: Optional[int] = Field(None, ge=0)
    is_featured: Optional[bool] = None
    is_best_seller: Optional[bool] = None
    is_most_loved: Optional[bool] = None

    brand_name: Optional[str] = None
    type: Optional[str] = None
    material: Optional[str] = None
    colour: Optional[str] = None
    gender: Optional[Gender] = None
    top_notes: Optional[List[str]] = None
    heart_notes: Optional[List[str]] = None
    base_notes: Optional[List[str]] = None
    scent_profile: Optional[str] = None
    performance: Optional[Performance] = None
    tags: Optional[List[str]] = None
    utility: Optional[str] = None
    care: Optional[str] = None

    is_gift_set: Optional[bool] = None
    gift_set_items: Optional[List[GiftSetItem]] = None
    gift_set_discount: Optional[float] = Field(None, ge=0, le=100)
    gift_set_manual_price: Optional[float] = Field(None, ge=0)

    check_name_sluggable = field_validator("name")(_check_sluggable)

    @model_validator(mode="after")
    def _required_fields_not_cleared(self):
        required = ("name", "description", "category_id", "images", "stock")
        cleared = [f for f in required if f in self.model_fields_set and getattr(self, f) is None]
        if cleared:
            raise ValueError(f"Required fields cannot be cleared: {', '.join(cleared)}")
        return self


class ProductOut(BaseModel):
    id: int
    name: str
    slug: str
    description: str
    category_id: int
    category_name: str
    price: float
    regular_price: float
    sizes: List[SizeOption] = []
    stock: int
    in_stock: bool
    images: List[str] = []
    rating: float = 0.0
    reviews: int = 0
    is_featured: bool = False
    is_best_seller: bool = False
    is_most_loved: bool = False
    brand_name: Optional[str] = None
    type: Optional[str] = None
    material: Optional[str] = None
    colour: Optional[str] = None
    gender: Optional[Gender] = None
    top_notes: List[str] = []
    heart_notes: List[str] = []
    base_notes: List[str] = []
    scent_profile: Optional[str] = None
    performance: Optional[Performance] = None
    tags: List[str] = []
    utility: Optional[str] = None
    care: Optional[str] = None
    is_gift_set: bool = False
    gift_set_items: List[GiftSetItem] = []
    gift_set_discount: float = 0
    gift_set_total_price: float = 0
    gift_set_discounted_price: float = 0
    gift_set_manual_price: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Pydantic v2 config
    model_config = ConfigDict(from_attributes=True)

    @field_validator(
        "sizes", "images", "top_notes", "heart_notes", "base_notes", "tags", "gift_set_items", mode="before"
    )
    @classmethod
    def _null_json_as_empty(cls, value):
        return value or []


class ProductPage(BaseModel):
    items: List[ProductOut]
    total: int
    page: int
    size: int


class GiftSetComponentOut(BaseModel):
    product: int
    quantity: int
    selected_size: Optional[str] = None
    available: bool
    name: Optional[str] = None
    slug: Optional[str] = None
    image: Optional[str] = None
    unit_price: float = 0
    line_total: float = 0
