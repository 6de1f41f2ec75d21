# Usage: python -m vintage_beauty.scripts.create_admin <email> <password>
import sys

from vintage_beauty.main import create_tables
from vintage_beauty.models.user import SessionLocal, User


def create_admin(email: str, password: str) -> User:
    create_tables()
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user:
            user.password = password
            user.role = "ADMIN"
        else:
            user = User(email=email, password=password, role="ADMIN")
            db.add(user)
        db.commit()
        db.refresh(user)
        return user
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: python -m vintage_beauty.scripts.create_admin <email> <password>")
        sys.exit(1)
    admin = create_admin(sys.argv[1], sys.argv[2])
    print(f"Admin ready: {admin.email}")
