"""
Base service class with common CRUD operations
"""
from typing import Type, TypeVar, Optional, Any, Dict, Generic
from sqlalchemy.orm import Session
from utils.database_utils import DatabaseUtils

T = TypeVar('T')


class BaseService(Generic[T]):
    """Base service class with common CRUD operations"""

    not_found_detail: Optional[Any] = None

    def __init__(self, db: Session, model_class: Type[T]):
        self.db = db
        self.model_class = model_class
        self.db_utils = DatabaseUtils()

    def get_by_id(self, obj_id: Any) -> Optional[T]:
        """Get object by ID"""
        return self.db.query(self.model_class).filter(
            self.model_class.id == obj_id
        ).first()

    def get_by_id_or_404(self, obj_id: Any) -> T:
        """Get object by ID or raise 404"""
        return self.db_utils.get_or_404(self.db, self.model_class, self.not_found_detail, id=obj_id)

    def create(self, data: Dict[str, Any]) -> T:
        """Create new object"""
        obj = self.model_class(**data)
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def update(self, obj_id: Any, data: Dict[str, Any]) -> T:
        """Update object by ID; 404 when it does not exist"""
        obj = self.get_by_id_or_404(obj_id)
        for key, value in data.items():
            if hasattr(obj, key):
                setattr(obj, key, value)

        self.db.commit()
        self.db.refresh(obj)
        return obj

    def delete(self, obj_id: Any) -> None:
        """Delete object by ID; 404 when it does not exist"""
        obj = self.get_by_id_or_404(obj_id)
        self.db.delete(obj)
        self.db.commit()

    def exists(self, **filters) -> bool:
        """Check if object exists with given filters"""
        return self.db_utils.exists(self.db, self.model_class, **filters)
