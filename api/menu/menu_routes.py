from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.role_middleware import admin_required
from api.menu.menu_controller import MenuController
from api.menu.menu_schema import CategoryCreate, CategoryOut, CategoryUpdate, MenuItemOut
from api.uploads.uploads_service import FileStorage
from utils.deps import get_image_storage

router = APIRouter(prefix="/menu", tags=["Menu"])


# ─── Categories ────────────────────────────────────────────────────────────────
@router.get("/categories", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return MenuController.list_categories(db)


@router.post(
    "/categories",
    response_model=CategoryOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admin_required)],
)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    return MenuController.create_category(payload, db)


@router.put(
    "/categories/{category_id}",
    response_model=CategoryOut,
    dependencies=[Depends(admin_required)],
)
def update_category(category_id: str, payload: CategoryUpdate, db: Session = Depends(get_db)):
    return MenuController.update_category(category_id, payload, db)


@router.delete("/categories/{category_id}", dependencies=[Depends(admin_required)])
def delete_category(category_id: str, db: Session = Depends(get_db)):
    """Deletes the category and its items."""
    return MenuController.delete_category(category_id, db)


# ─── Items ─────────────────────────────────────────────────────────────────────
@router.get("/items", response_model=List[MenuItemOut])
def list_items(
    q: Optional[str] = None,
    category_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return MenuController.list_items(db, q, category_id)


@router.post(
    "/items",
    response_model=MenuItemOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admin_required)],
)
async def create_item(
    name: str = Form(..., min_length=1, max_length=150),
    price: float = Form(..., ge=0),
    category_id: Optional[str] = Form(None),
    sort_order: Optional[int] = Form(None),
    active: Optional[bool] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_image_storage),
):
    return await MenuController.create_item(
        db, storage, name, price, category_id, sort_order, active, image
    )


@router.put(
    "/items/{item_id}",
    response_model=MenuItemOut,
    dependencies=[Depends(admin_required)],
)
async def update_item(
    item_id: str,
    name: Optional[str] = Form(None, max_length=150),
    price: Optional[float] = Form(None, ge=0),
    category_id: Optional[str] = Form(None),
    clear_category: bool = Form(False),
    sort_order: Optional[int] = Form(None),
    active: Optional[bool] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_image_storage),
):
    return await MenuController.update_item(
        item_id, db, storage, name, price, category_id, clear_category, sort_order, active, image
    )


@router.delete("/items/{item_id}", dependencies=[Depends(admin_required)])
def delete_item(
    item_id: str,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_image_storage),
):
    return MenuController.delete_item(item_id, db, storage)
