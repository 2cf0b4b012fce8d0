import logging
import re
import unicodedata
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from api.menu.menu_model import MenuCategory, MenuItem
from api.uploads.uploads_service import FileStorage, InvalidImage, validate_image
from services.base_service import BaseService
from utils.database_utils import is_unique_violation

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 60
LIST_LIMIT = 500


def slugify(value: str) -> str:
    """'Platos Fríos' -> 'platos-frios'; empty results fall back to 'cat'."""
    text = unicodedata.normalize("NFD", str(value or "").lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = re.sub(r"[^a-z0-9]+", "-", text).strip("-")
    return text[:SLUG_MAX_LENGTH] or "cat"


def round_price(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _bad_request(message: str, code: str = "BAD_REQUEST") -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"code": code, "message": message})


def _slug_conflict() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"code": "SLUG_TAKEN", "message": "A category with a similar name already exists"},
    )


@dataclass
class ImageUpload:
    data: bytes
    content_type: Optional[str]


class MenuCategoryService(BaseService[MenuCategory]):
    not_found_detail = {"code": "NOT_FOUND", "message": "Category not found"}

    def __init__(self, db: Session):
        super().__init__(db, MenuCategory)

    def list_categories(self) -> List[MenuCategory]:
        return (
            self.db.query(MenuCategory)
            .order_by(MenuCategory.sort_order.asc(), MenuCategory.created_at.asc())
            .all()
        )

    def create_category(self, name: str, sort_order: int = 100) -> MenuCategory:
        slug = slugify(name)
        if self.exists(slug=slug):
            raise _slug_conflict()
        try:
            category = self.create({"name": name, "slug": slug, "sort_order": sort_order})
        except IntegrityError as e:
            self.db.rollback()
            if is_unique_violation(e, columns=("slug",)):
                raise _slug_conflict()
            raise
        logger.info("Menu category %s created (%s)", category.id, slug)
        return category

    def update_category(self, category_id: str, name: Optional[str], sort_order: Optional[int]) -> MenuCategory:
        changes: Dict[str, Any] = {}
        if name:
            changes["name"] = name
            changes["slug"] = slugify(name)
        if sort_order is not None:
            changes["sort_order"] = sort_order
        if not changes:
            raise _bad_request("Nothing to update")

        category = self.get_by_id_or_404(category_id)
        slug = changes.get("slug")
        if slug and slug != category.slug and self.exists(slug=slug):
            raise _slug_conflict()
        return self.update(category_id, changes)

    def delete_category(self, category_id: str) -> None:
        # items of the category go with it
        self.delete(category_id)
        logger.info("Menu category %s deleted", category_id)


class MenuItemService(BaseService[MenuItem]):
    not_found_detail = {"code": "NOT_FOUND", "message": "Item not found"}

    def __init__(self, db: Session, storage: Optional[FileStorage] = None):
        super().__init__(db, MenuItem)
        self.storage = storage

    def list_items(self, q: Optional[str] = None, category_id: Optional[str] = None) -> List[MenuItem]:
        query = self.db.query(MenuItem).options(joinedload(MenuItem.category))
        if category_id:
            query = query.filter(MenuItem.category_id == category_id)
        q = (q or "").strip()
        if q:
            query = query.filter(MenuItem.name.ilike(f"%{q}%"))
        return (
            query.order_by(MenuItem.sort_order.asc(), MenuItem.created_at.desc())
            .limit(LIST_LIMIT)
            .all()
        )

    def _check_category(self, category_id: Optional[str]) -> None:
        if category_id and not MenuCategoryService(self.db).exists(id=category_id):
            raise _bad_request("Unknown category", code="INVALID_CATEGORY")

    def _store_image(self, image: Optional[ImageUpload]) -> Optional[str]:
        if image is None or not image.data:
            return None
        try:
            validate_image(image.data, image.content_type)
        except InvalidImage as e:
            raise _bad_request(str(e), code="INVALID_IMAGE")
        return self.storage.store(image.data, image.content_type).reference

    def create_item(
        self,
        name: str,
        price,
        category_id: Optional[str] = None,
        sort_order: Optional[int] = None,
        active: Optional[bool] = None,
        image: Optional[ImageUpload] = None,
    ) -> MenuItem:
        name = (name or "").strip()
        if not name:
            raise _bad_request("Name and price are required")
        self._check_category(category_id)
        image_url = self._store_image(image)
        try:
            item = self.create({
                "name": name,
                "price": round_price(price),
                "category_id": category_id or None,
                "sort_order": 100 if sort_order is None else sort_order,
                "active": True if active is None else active,
                "image_url": image_url,
            })
        except Exception:
            self.db.rollback()
            if image_url:
                self.storage.delete(image_url)
            raise
        logger.info("Menu item %s created", item.id)
        return item

    def update_item(
        self,
        item_id: str,
        name: Optional[str] = None,
        price=None,
        category_id: Optional[str] = None,
        clear_category: bool = False,
        sort_order: Optional[int] = None,
        active: Optional[bool] = None,
        image: Optional[ImageUpload] = None,
    ) -> MenuItem:
        changes: Dict[str, Any] = {}
        if name and name.strip():
            changes["name"] = name.strip()
        if price is not None:
            changes["price"] = round_price(price)
        if clear_category:
            changes["category_id"] = None
        elif category_id:
            changes["category_id"] = category_id
        if sort_order is not None:
            changes["sort_order"] = sort_order
        if active is not None:
            changes["active"] = active
        if not changes and (image is None or not image.data):
            raise _bad_request("Nothing to update")

        item = self.get_by_id_or_404(item_id)
        self._check_category(changes.get("category_id"))
        previous_image = item.image_url
        image_url = self._store_image(image)
        if image_url:
            changes["image_url"] = image_url

        item = self.update(item_id, changes)
        if image_url and previous_image:
            self.storage.delete(previous_image)
        return item

    def delete_item(self, item_id: str) -> None:
        item = self.get_by_id_or_404(item_id)
        image_url = item.image_url
        self.delete(item_id)
        if image_url and self.storage:
            self.storage.delete(image_url)
        logger.info("Menu item %s deleted", item_id)
