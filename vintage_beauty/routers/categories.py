import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List

from vintage_beauty.models.user import get_db
from vintage_beauty.models.category import Category
from vintage_beauty.models.product import Product
from vintage_beauty.schemas.category import CategoryCreate, CategoryOut
from vintage_beauty.services.pricing import slugify
from vintage_beauty.utils.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


def _product_count(db: Session, category_id: int) -> int:
    return db.query(func.count(Product.id)).filter(Product.category_id == category_id).scalar() or 0


def _to_out(db: Session, c: Category) -> CategoryOut:
    out = CategoryOut.model_validate(c)
    out.product_count = _product_count(db, c.id)
    return out


def _get_or_404(db: Session, id: int) -> Category:
    category = db.get(Category, id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


def _commit_or_conflict(db: Session, name: str) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Category '{name}' already exists")


@router.get("/", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    categories = db.query(Category).order_by(Category.name.asc()).all()
    return [_to_out(db, c) for c in categories]


@router.get("/{id}", response_model=CategoryOut)
def get_category(id: int, db: Session = Depends(get_db)):
    return _to_out(db, _get_or_404(db, id))


@router.post("/", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    category = Category(name=payload.name, slug=slugify(payload.name), description=payload.description)
    db.add(category)
    _commit_or_conflict(db, payload.name)
    db.refresh(category)
    logger.info("Created category %s (%s)", category.id, category.slug)
    return _to_out(db, category)


@router.put("/{id}", response_model=CategoryOut)
def update_category(id: int, payload: CategoryCreate, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    """Rename a category. Products keep their stored category_name (and slug) until they are next saved."""
    category = _get_or_404(db, id)
    category.name = payload.name
    category.slug = slugify(payload.name)
    category.description = payload.description
    _commit_or_conflict(db, payload.name)
    db.refresh(category)
    return _to_out(db, category)


@router.delete("/{id}")
def delete_category(id: int, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    category = _get_or_404(db, id)
    count = _product_count(db, category.id)
    if count:
        raise HTTPException(status_code=409, detail=f"Category still has {count} product(s)")
    db.delete(category)
    db.commit()
    return {"message": "Category deleted"}
