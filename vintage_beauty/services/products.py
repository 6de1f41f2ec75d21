import logging
from typing import Any, Dict, Iterable, Optional, Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from vintage_beauty.models.category import Category
from vintage_beauty.models.product import Product
from vintage_beauty.schemas.product import ProductCreate, ProductUpdate
from vintage_beauty.services.pricing import BundleComponent, derive

logger = logging.getLogger(__name__)

# Row fields the derivation reads besides the incoming changes
_STATE_FIELDS = (
    "name",
    "slug",
    "category_id",
    "category_name",
    "price",
    "regular_price",
    "stock",
    "is_gift_set",
    "gift_set_items",
    "gift_set_discount",
    "gift_set_total_price",
    "gift_set_discounted_price",
    "gift_set_manual_price",
)


class ProductValidationError(Exception):
    """The draft is well formed but references something that does not exist."""


class SlugConflictError(Exception):
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"A product with slug '{slug}' already exists")


def _row_state(product: Product) -> Dict[str, Any]:
    return {f: getattr(product, f) for f in _STATE_FIELDS}


def load_components(db: Session, items: Iterable[Any]) -> Dict[int, BundleComponent]:
    """Fetch the products a gift set references. Ids that do not resolve are simply absent.

    A failed lookup is logged and yields no components, so every item counts as 0.
    """
    ids = set()
    for item in items or []:
        product_id = item.get("product") if isinstance(item, dict) else getattr(item, "product", None)
        if product_id is not None:
            ids.add(product_id)
    if not ids:
        return {}
    try:
        rows = db.query(Product).filter(Product.id.in_(ids)).all()
    except SQLAlchemyError:
        logger.exception("Gift set component lookup failed for products %s", sorted(ids))
        db.rollback()
        return {}
    return {
        p.id: BundleComponent(id=p.id, price=p.price, sizes=p.sizes or [])
        for p in rows
    }


def save_product(
    db: Session,
    draft: Union[ProductCreate, ProductUpdate],
    product: Optional[Product] = None,
) -> Product:
    """Create (``product is None``) or update a product, running the derivation pipeline before commit.

    Raises ProductValidationError for an unknown category and SlugConflictError
    when another product already owns the derived slug.
    """
    creating = product is None
    changes = draft.model_dump(exclude_unset=not creating)
    # Always derived from stock
    changes.pop("in_stock", None)
    requested_gift_set = draft.is_gift_set if "is_gift_set" in draft.model_fields_set else None
    if requested_gift_set is None:
        changes.pop("is_gift_set", None)

    if "category_id" in changes:
        category = db.get(Category, changes["category_id"])
        if category is None:
            raise ProductValidationError(f"Category {changes['category_id']} does not exist")
        # A stored name is only replaced when the product moves to another category
        moved = creating or changes["category_id"] != product.category_id
        if not changes.get("category_name") and (moved or not product.category_name):
            changes["category_name"] = category.name

    current = None if creating else _row_state(product)
    state = {**(current or {}), **changes}

    components = load_components(db, state.get("gift_set_items"))
    derived = derive(state, components, current=current, requested_gift_set=requested_gift_set)

    if creating:
        product = Product()
        db.add(product)
    for field, value in changes.items():
        setattr(product, field, value)
    for field, value in derived.model_dump().items():
        setattr(product, field, value)

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if _slug_taken(db, derived.slug, None if creating else product.id):
            logger.info("Rejected product save, slug %s already taken", derived.slug)
            raise SlugConflictError(derived.slug) from exc
        raise
    db.refresh(product)
    logger.info(
        "Saved product %s (slug=%s, gift_set=%s, price=%s)",
        product.id, product.slug, product.is_gift_set, product.price,
    )
    return product


def _slug_taken(db: Session, slug: str, exclude_id: Optional[int]) -> bool:
    query = db.query(Product.id).filter(Product.slug == slug)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


def recalculate_product(db: Session, product: Product) -> Product:
    """Re-save a product unchanged so gift set totals pick up current component prices."""
    return save_product(db, ProductUpdate(), product)


def delete_product(db: Session, product: Product) -> None:
    # Gift sets referencing this product are left as they are; their totals refresh on their next save
    product_id = product.id
    db.delete(product)
    db.commit()
    logger.info("Deleted product %s", product_id)
