import logging
import secrets

from fastapi import HTTPException, Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from vintage_beauty.config import get_settings

logger = logging.getLogger(__name__)

ADMIN_EMAIL = get_settings().ADMIN_EMAIL

http_basic = HTTPBasic()


def get_current_user(credentials: HTTPBasicCredentials = Depends(http_basic)):
    from vintage_beauty.models.user import SessionLocal, User
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == credentials.username).first()
        if not user or not secrets.compare_digest(user.password.encode(), credentials.password.encode()):
            logger.info("Rejected login for %s", credentials.username)
            raise HTTPException(
                status_code=401,
                detail="Invalid credentials",
                headers={"WWW-Authenticate": "Basic"},
            )
        return user
    finally:
        db.close()


def is_admin_email(email: str) -> bool:
    if not email:
        return False
    return bool(ADMIN_EMAIL) and email == ADMIN_EMAIL


def require_admin(user=Depends(get_current_user)) -> str:
    if user.role != "ADMIN" and not is_admin_email(user.email):
        raise HTTPException(status_code=403, detail="Admin access required")
    return user.email
