"""Derived product fields: slug, availability, gift set flag and gift set pricing.

Everything here is pure. The write path resolves the products referenced by a
gift set beforehand and passes them in as ``components``; nothing in this
module touches the database.

The steps run in a fixed order on every save:

1. slug, regenerated only when name or category changed
2. ``in_stock = stock > 0``
3. ``is_gift_set`` inferred from the presence of bundle items
4. gift set totals and the resulting ``price`` / ``regular_price``
"""
import logging
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field

from vintage_beauty.schemas.product import GiftSetItem, SizeOption

logger = logging.getLogger(__name__)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")
_CENT = Decimal("0.01")
ZERO = Decimal("0")

# A change to any of these regenerates the slug
SLUG_SOURCE_FIELDS = ("name", "category_id", "category_name")


class BundleComponent(BaseModel):
    """Pricing view of a product referenced by a gift set."""

    id: int
    price: Optional[Decimal] = None
    sizes: List[SizeOption] = Field(default_factory=list)


class GiftSetPricing(BaseModel):
    total: Decimal
    discounted: Decimal
    price: Decimal


class DerivedFields(BaseModel):
    slug: str
    in_stock: bool
    is_gift_set: bool
    price: Decimal
    regular_price: Decimal
    gift_set_total_price: Decimal
    gift_set_discounted_price: Decimal


def to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def slugify(text: Optional[str]) -> str:
    return _NON_SLUG_CHARS.sub("-", (text or "").lower()).strip("-")


def build_slug(name: str, category_name: Optional[str] = None) -> str:
    name_slug = slugify(name)
    if category_name:
        return f"{name_slug}-{slugify(category_name)}"
    return name_slug


def slug_is_stale(state: Mapping[str, Any], current: Optional[Mapping[str, Any]]) -> bool:
    """True on create, when no slug was stored yet, or when a slug source field changed."""
    if current is None or not current.get("slug"):
        return True
    return any(state.get(f) != current.get(f) for f in SLUG_SOURCE_FIELDS)


def is_available(stock: Optional[int]) -> bool:
    return (stock or 0) > 0


def infer_gift_set(items: Optional[list], requested: Optional[bool], persisted: Optional[bool] = False) -> bool:
    """Turn the gift set flag on when bundle items are present.

    An explicit ``False`` in the current write always wins. The inference never
    turns the flag off: with no items and nothing requested the persisted value
    is kept.
    """
    if requested is False:
        return False
    if items:
        return True
    if requested is not None:
        return requested
    return bool(persisted)


def resolve_unit_price(item: GiftSetItem, component: BundleComponent) -> Decimal:
    if item.selected_size:
        for option in component.sizes:
            if option.size == item.selected_size:
                return to_decimal(option.price)
    if component.price:
        return to_decimal(component.price)
    return ZERO


def aggregate_gift_set(
    items: Iterable[Any],
    components: Mapping[int, BundleComponent],
    discount: Any = 0,
    manual_price: Any = None,
) -> GiftSetPricing:
    """Sum the bundle and apply the discount or the manual override.

    Items whose product cannot be resolved contribute 0. Any other error while
    walking the items is logged and the partial total computed so far is used;
    the save is never rejected from here.
    """
    total = ZERO
    try:
        for raw in items:
            item = raw if isinstance(raw, GiftSetItem) else GiftSetItem.model_validate(raw)
            component = components.get(item.product)
            if component is None:
                logger.warning("Gift set item references missing product %s, counting it as 0", item.product)
                continue
            total += resolve_unit_price(item, component) * item.quantity
    except Exception:
        logger.exception("Error calculating gift set prices, keeping partial total %s", total)

    discounted = total * (1 - to_decimal(discount) / 100)
    manual = to_decimal(manual_price)
    final = manual if manual > 0 else discounted
    return GiftSetPricing(total=to_money(total), discounted=to_money(discounted), price=to_money(final))


def derive(
    state: Mapping[str, Any],
    components: Mapping[int, BundleComponent],
    *,
    current: Optional[Mapping[str, Any]] = None,
    requested_gift_set: Optional[bool] = None,
) -> DerivedFields:
    """Compute every derived field for the product ``state`` about to be persisted.

    ``state`` is the persisted row merged with the incoming changes, ``current``
    the persisted row alone (``None`` on create) and ``requested_gift_set`` the
    ``is_gift_set`` value sent in this write, if any.
    """
    if slug_is_stale(state, current):
        slug = build_slug(state.get("name") or "", state.get("category_name"))
    else:
        slug = current["slug"]

    in_stock = is_available(state.get("stock"))

    items = state.get("gift_set_items") or []
    persisted_flag = (current or {}).get("is_gift_set", False)
    is_gift_set = infer_gift_set(items, requested_gift_set, persisted_flag)

    derived: Dict[str, Any] = {
        "slug": slug,
        "in_stock": in_stock,
        "is_gift_set": is_gift_set,
        "price": to_decimal(state.get("price")),
        "regular_price": to_decimal(state.get("regular_price")),
        "gift_set_total_price": to_decimal(state.get("gift_set_total_price")),
        "gift_set_discounted_price": to_decimal(state.get("gift_set_discounted_price")),
    }

    if is_gift_set and items:
        pricing = aggregate_gift_set(
            items,
            components,
            discount=state.get("gift_set_discount"),
            manual_price=state.get("gift_set_manual_price"),
        )
        derived.update(
            gift_set_total_price=pricing.total,
            gift_set_discounted_price=pricing.discounted,
            price=pricing.price,
            regular_price=pricing.total,
        )

    return DerivedFields(**derived)
