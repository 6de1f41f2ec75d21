from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from vintage_beauty.models.user import get_db
from vintage_beauty.models.hero_carousel import HeroCarouselItem
from vintage_beauty.schemas.hero_carousel import HeroCarouselItemOut
from vintage_beauty.utils.security import require_admin
from vintage_beauty.utils.storage import (
    IMAGE_EXTENSIONS,
    VIDEO_EXTENSIONS,
    save_upload_file,
    delete_media_file,
)


router = APIRouter()


def _to_out(item: HeroCarouselItem) -> HeroCarouselItemOut:
    return HeroCarouselItemOut(
        id=item.id,
        title=item.title,
        subtitle=item.subtitle,
        description=item.description,
        image=item.image,
        video=item.video,
        mediaType="video" if item.video else "image",
        link=item.link,
        buttonText=item.button_text,
        isActive=bool(item.is_active),
        isMobile=bool(item.is_mobile),
        order=item.order or 0,
    )


def _has_media(upload: Optional[UploadFile], url: Optional[str]) -> bool:
    return bool((upload and upload.filename) or (url and url.strip()))


def _check_media(
    image: Optional[UploadFile],
    image_url: Optional[str],
    video: Optional[UploadFile],
    video_url: Optional[str],
    required: bool,
) -> None:
    # Must run before any upload is written to MEDIA_ROOT
    has_image = _has_media(image, image_url)
    has_video = _has_media(video, video_url)
    if has_image and has_video:
        raise HTTPException(status_code=400, detail="Provide either an image or a video, not both")
    if required and not has_image and not has_video:
        raise HTTPException(status_code=400, detail="Please upload an image or a video")


def _resolve_media(upload: Optional[UploadFile], url: Optional[str], allowed: set) -> Optional[str]:
    """Stored path for an uploaded file, else the given URL; None when neither was sent."""
    if upload and upload.filename:
        try:
            return save_upload_file(upload, subdir="carousel", allowed=allowed)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    if url and url.strip():
        return url.strip()
    return None


def _apply_media(item: HeroCarouselItem, image: Optional[str], video: Optional[str]) -> None:
    if image:
        if item.image and item.image != image:
            delete_media_file(item.image)
        item.image, item.video = image, None
    elif video:
        if item.video and item.video != video:
            delete_media_file(item.video)
        item.video, item.image = video, None


@router.get("/", response_model=List[HeroCarouselItemOut])
def get_carousel_items(
    active_only: bool = Query(False),
    is_mobile: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(HeroCarouselItem)
    if active_only:
        query = query.filter(HeroCarouselItem.is_active.is_(True))
    if is_mobile is not None:
        query = query.filter(HeroCarouselItem.is_mobile == is_mobile)
    items = query.order_by(HeroCarouselItem.order.asc(), HeroCarouselItem.created_at.desc()).all()
    return [_to_out(i) for i in items]


@router.get("/{id}", response_model=HeroCarouselItemOut)
def get_carousel_item(id: int, db: Session = Depends(get_db)):
    item = db.get(HeroCarouselItem, id)
    if not item:
        raise HTTPException(status_code=404, detail="Carousel item not found")
    return _to_out(item)


@router.post("/", response_model=HeroCarouselItemOut, status_code=201)
def create_carousel_item(
    title: str = Form(...),
    subtitle: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    link: Optional[str] = Form(None),
    buttonText: Optional[str] = Form(None),
    isActive: bool = Form(True),
    isMobile: bool = Form(False),
    order: int = Form(0),
    image: UploadFile = File(None),
    imageUrl: Optional[str] = Form(None),
    video: UploadFile = File(None),
    videoUrl: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    admin: str = Depends(require_admin),
):
    _check_media(image, imageUrl, video, videoUrl, required=True)
    img = _resolve_media(image, imageUrl, IMAGE_EXTENSIONS)
    vid = _resolve_media(video, videoUrl, VIDEO_EXTENSIONS)

    item = HeroCarouselItem(
        title=title,
        subtitle=subtitle,
        description=description,
        link=link,
        button_text=buttonText,
        is_active=isActive,
        is_mobile=isMobile,
        order=order,
    )
    _apply_media(item, img, vid)
    db.add(item)
    db.commit()
    db.refresh(item)
    return _to_out(item)


@router.put("/{id}", response_model=HeroCarouselItemOut)
def update_carousel_item(
    id: int,
    title: Optional[str] = Form(None),
    subtitle: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    link: Optional[str] = Form(None),
    buttonText: Optional[str] = Form(None),
    isActive: Optional[bool] = Form(None),
    isMobile: Optional[bool] = Form(None),
    order: Optional[int] = Form(None),
    image: UploadFile = File(None),
    imageUrl: Optional[str] = Form(None),
    video: UploadFile = File(None),
    videoUrl: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    admin: str = Depends(require_admin),
):
    item = db.get(HeroCarouselItem, id)
    if not item:
        raise HTTPException(status_code=404, detail="Carousel item not found")
    _check_media(image, imageUrl, video, videoUrl, required=False)
    if title is not None:
        item.title = title
    if subtitle is not None:
        item.subtitle = subtitle
    if description is not None:
        item.description = description
    if link is not None:
        item.link = link
    if buttonText is not None:
        item.button_text = buttonText
    if isActive is not None:
        item.is_active = isActive
    if isMobile is not None:
        item.is_mobile = isMobile
    if order is not None:
        item.order = order
    _apply_media(
        item,
        _resolve_media(image, imageUrl, IMAGE_EXTENSIONS),
        _resolve_media(video, videoUrl, VIDEO_EXTENSIONS),
    )
    db.commit()
    db.refresh(item)
    return _to_out(item)


@router.delete("/{id}")
def delete_carousel_item(id: int, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    item = db.get(HeroCarouselItem, id)
    if not item:
        raise HTTPException(status_code=404, detail="Carousel item not found")
    media = [item.image, item.video]
    db.delete(item)
    db.commit()
    for path in media:
        delete_media_file(path)
    return {"message": "Carousel item deleted"}
