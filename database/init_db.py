import logging

from sqlalchemy.orm import Session

from api.menu.menu_model import MenuCategory
from api.menu.menu_service import slugify
from api.user.user_model import User, UserRole
from api.user.user_service import hash_password
from config.database import SessionLocal
from config.logging_config import setup_logging
from config.settings import settings
from models.index import init_db as create_tables

logger = logging.getLogger(__name__)

BASE_CATEGORIES = ["Starters", "Main Courses", "Drinks", "Desserts"]


def seed_admin(db: Session) -> User:
    email = settings.ADMIN_EMAIL.lower()
    admin = db.query(User).filter(User.email == email).first()
    if admin:
        return admin
    admin = User(
        email=email,
        password=hash_password(settings.ADMIN_PASSWORD),
        role=UserRole.ADMIN,
        full_name="Administrator",
        active=True,
    )
    db.add(admin)
    db.commit()
    logger.info("Admin account %s created", email)
    return admin


def seed_categories(db: Session) -> int:
    created = 0
    for order, name in enumerate(BASE_CATEGORIES, start=1):
        slug = slugify(name)
        if db.query(MenuCategory.id).filter(MenuCategory.slug == slug).first():
            continue
        db.add(MenuCategory(name=name, slug=slug, sort_order=order * 10))
        created += 1
    db.commit()
    return created


def init_db():
    create_tables()
    db = SessionLocal()
    try:
        seed_admin(db)
        created = seed_categories(db)
        logger.info("Database initialized (%d menu categories added)", created)
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    init_db()
