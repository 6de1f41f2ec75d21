from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Query
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from typing import List, Optional

from vintage_beauty.models.user import get_db
from vintage_beauty.models.category import Category
from vintage_beauty.models.product import Product
from vintage_beauty.schemas.product import (
    GiftSetComponentOut,
    GiftSetItem,
    ProductCreate,
    ProductOut,
    ProductPage,
    ProductUpdate,
)
from vintage_beauty.services.pricing import resolve_unit_price
from vintage_beauty.services.products import (
    ProductValidationError,
    SlugConflictError,
    delete_product as remove_product,
    load_components,
    recalculate_product,
    save_product,
)
from vintage_beauty.utils.security import require_admin
from vintage_beauty.utils.storage import IMAGE_EXTENSIONS, save_upload_file, delete_media_files

router = APIRouter()

# Helpers

def to_product_out(p: Product) -> ProductOut:
    return ProductOut.model_validate(p)


def _get_or_404(db: Session, id: int) -> Product:
    product = db.get(Product, id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _save(db: Session, draft, product: Optional[Product] = None) -> Product:
    try:
        return save_product(db, draft, product)
    except ProductValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SlugConflictError as e:
        raise HTTPException(
            status_code=409,
            detail=f"{e}. Use a different name or category.",
        )


@router.get("/", response_model=ProductPage)
def get_all_products(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=200),
    category: Optional[str] = None,
    search: Optional[str] = None,
    is_gift_set: Optional[bool] = None,
    featured: Optional[bool] = None,
    best_seller: Optional[bool] = None,
    most_loved: Optional[bool] = None,
    in_stock: Optional[bool] = None,
    db: Session = Depends(get_db)
):
    """List products. ``category`` matches a category slug or name, case-insensitively."""
    query = db.query(Product)
    if category:
        c = category.strip().lower()
        query = query.join(Category, Product.category_id == Category.id).filter(
            or_(Category.slug == c, func.lower(Product.category_name) == c)
        )
    if search:
        query = query.filter(Product.name.ilike(f"%{search}%"))
    if is_gift_set is not None:
        query = query.filter(Product.is_gift_set == is_gift_set)
    if featured is not None:
        query = query.filter(Product.is_featured == featured)
    if best_seller is not None:
        query = query.filter(Product.is_best_seller == best_seller)
    if most_loved is not None:
        query = query.filter(Product.is_most_loved == most_loved)
    if in_stock is not None:
        query = query.filter(Product.in_stock == in_stock)
    total = query.count()
    products = query.order_by(Product.created_at.desc(), Product.id.desc()).offset(page * size).limit(size).all()
    return ProductPage(items=[to_product_out(p) for p in products], total=total, page=page, size=size)


@router.get("/slug/{slug}", response_model=ProductOut)
def get_product_by_slug(slug: str, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.slug == slug).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return to_product_out(product)


@router.get("/{id}", response_model=ProductOut)
def get_product_by_id(id: int, db: Session = Depends(get_db)):
    return to_product_out(_get_or_404(db, id))


@router.get("/{id}/gift-set-items", response_model=List[GiftSetComponentOut])
def get_gift_set_items(id: int, db: Session = Depends(get_db)):
    """Bundle contents with each component's current unit price. Deleted components show as unavailable."""
    product = _get_or_404(db, id)
    items = [GiftSetItem.model_validate(i) for i in product.gift_set_items or []]
    components = load_components(db, items)
    rows = {p.id: p for p in db.query(Product).filter(Product.id.in_(list(components))).all()} if components else {}
    out = []
    for item in items:
        component = components.get(item.product)
        if component is None:
            out.append(GiftSetComponentOut(
                product=item.product, quantity=item.quantity, selected_size=item.selected_size, available=False,
            ))
            continue
        row = rows[item.product]
        unit = resolve_unit_price(item, component)
        out.append(GiftSetComponentOut(
            product=item.product,
            quantity=item.quantity,
            selected_size=item.selected_size,
            available=True,
            name=row.name,
            slug=row.slug,
            image=(row.images or [None])[0],
            unit_price=float(unit),
            line_total=float(unit * item.quantity),
        ))
    return out


@router.get("/{id}/related", response_model=List[ProductOut])
def get_related_products(id: int, limit: int = Query(4, ge=1, le=20), db: Session = Depends(get_db)):
    product = _get_or_404(db, id)
    related = (
        db.query(Product)
        .filter(Product.category_id == product.category_id, Product.id != product.id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .limit(limit)
        .all()
    )
    return [to_product_out(p) for p in related]


# Admin

@router.post("/admin", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    return to_product_out(_save(db, payload))


@router.put("/admin/{id}", response_model=ProductOut)
def update_product(id: int, payload: ProductUpdate, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    product = _get_or_404(db, id)
    return to_product_out(_save(db, payload, product))


@router.post("/admin/{id}/recalculate", response_model=ProductOut)
def recalculate_gift_set(id: int, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    product = _get_or_404(db, id)
    if not product.is_gift_set:
        raise HTTPException(status_code=400, detail="Product is not a gift set")
    return to_product_out(recalculate_product(db, product))


@router.delete("/admin/{id}")
def delete_product(id: int, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    product = _get_or_404(db, id)
    images = list(product.images or [])
    remove_product(db, product)
    delete_media_files(images)
    return {"message": "Product deleted"}


@router.post("/upload")
def upload_file(file: UploadFile = File(...), admin: str = Depends(require_admin)):
    try:
        url = save_upload_file(file, subdir="products", allowed=IMAGE_EXTENSIONS)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"url": url}
