from pathlib import Path
import os
import uuid
import shutil
from typing import List, Optional
from fastapi import UploadFile

from vintage_beauty.config import get_settings

BASE_DIR = Path(__file__).resolve().parents[2]
MEDIA_ROOT = Path(get_settings().MEDIA_ROOT) if get_settings().MEDIA_ROOT else BASE_DIR / "media"

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".avif", ".svg"}
VIDEO_EXTENSIONS = {".mp4", ".webm", ".mov", ".ogg"}


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def save_upload_file(upload_file: UploadFile, subdir: str = "products", allowed: Optional[set] = None) -> str:
    """Save a single UploadFile to media/subdir and return its URL path (/media/subdir/filename)."""
    if not upload_file or not upload_file.filename:
        raise ValueError("No file provided")
    ext = os.path.splitext(upload_file.filename)[1].lower()
    if allowed is not None and ext not in allowed:
        raise ValueError(f"Unsupported file type: {ext or 'none'}")
    filename = f"{uuid.uuid4().hex}{ext}"
    dst_dir = MEDIA_ROOT / subdir
    _ensure_dir(dst_dir)
    file_path = dst_dir / filename
    with file_path.open("wb") as buffer:
        shutil.copyfileobj(upload_file.file, buffer)
    return f"/media/{subdir}/{filename}"


def delete_media_file(rel_url: Optional[str]) -> bool:
    """Delete a single media file by its stored relative URL (e.g. /media/products/<file>). Returns True if removed.

    Only paths inside MEDIA_ROOT are touched; external URLs and missing files are ignored.
    """
    if not rel_url or not isinstance(rel_url, str):
        return False
    if not rel_url.startswith('/media/'):
        return False
    parts = rel_url.strip('/').split('/')  # [media, subdir, filename]
    if len(parts) < 3 or '..' in parts:
        return False
    target_path = MEDIA_ROOT / '/'.join(parts[1:])
    if target_path.is_file():
        target_path.unlink()
        return True
    return False


def delete_media_files(urls: Optional[List[str]]) -> int:
    """Delete multiple media files; returns count of successfully removed files."""
    if not urls:
        return 0
    removed = 0
    for u in urls:
        if delete_media_file(u):
            removed += 1
    return removed
