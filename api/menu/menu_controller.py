from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy.orm import Session

from api.menu.menu_schema import CategoryCreate, CategoryOut, CategoryUpdate, MenuItemOut
from api.menu.menu_service import ImageUpload, MenuCategoryService, MenuItemService
from api.uploads.uploads_service import FileStorage


async def _read_image(image: Optional[UploadFile]) -> Optional[ImageUpload]:
    if image is None or not image.filename:
        return None
    return ImageUpload(data=await image.read(), content_type=image.content_type)


class MenuController:
    # ─── Categories ────────────────────────────────────────────────────────────
    @staticmethod
    def list_categories(db: Session) -> List[CategoryOut]:
        return [CategoryOut.model_validate(c) for c in MenuCategoryService(db).list_categories()]

    @staticmethod
    def create_category(payload: CategoryCreate, db: Session) -> CategoryOut:
        category = MenuCategoryService(db).create_category(payload.name, payload.sort_order)
        return CategoryOut.model_validate(category)

    @staticmethod
    def update_category(category_id: str, payload: CategoryUpdate, db: Session) -> CategoryOut:
        category = MenuCategoryService(db).update_category(category_id, payload.name, payload.sort_order)
        return CategoryOut.model_validate(category)

    @staticmethod
    def delete_category(category_id: str, db: Session) -> dict:
        MenuCategoryService(db).delete_category(category_id)
        return {"ok": True}

    # ─── Items ─────────────────────────────────────────────────────────────────
    @staticmethod
    def list_items(db: Session, q: Optional[str], category_id: Optional[str]) -> List[MenuItemOut]:
        return [MenuItemOut.from_item(i) for i in MenuItemService(db).list_items(q, category_id)]

    @staticmethod
    async def create_item(
        db: Session,
        storage: FileStorage,
        name: str,
        price: float,
        category_id: Optional[str],
        sort_order: Optional[int],
        active: Optional[bool],
        image: Optional[UploadFile],
    ) -> MenuItemOut:
        upload = await _read_image(image)
        item = MenuItemService(db, storage).create_item(
            name, price, category_id, sort_order, active, upload
        )
        return MenuItemOut.from_item(item)

    @staticmethod
    async def update_item(
        item_id: str,
        db: Session,
        storage: FileStorage,
        name: Optional[str],
        price: Optional[float],
        category_id: Optional[str],
        clear_category: bool,
        sort_order: Optional[int],
        active: Optional[bool],
        image: Optional[UploadFile],
    ) -> MenuItemOut:
        upload = await _read_image(image)
        item = MenuItemService(db, storage).update_item(
            item_id,
            name=name,
            price=price,
            category_id=category_id,
            clear_category=clear_category,
            sort_order=sort_order,
            active=active,
            image=upload,
        )
        return MenuItemOut.from_item(item)

    @staticmethod
    def delete_item(item_id: str, db: Session, storage: FileStorage) -> dict:
        MenuItemService(db, storage).delete_item(item_id)
        return {"ok": True}
