from sqlalchemy import (
    Column,
    String,
    Integer,
    Numeric,
    Boolean,
    DateTime,
    ForeignKey,
    func,
)
from sqlalchemy.orm import relationship
from config.database import Base
from utils.database_utils import generate_id


class MenuCategory(Base):
    __tablename__ = "menu_categories"

    id          = Column(String(24), primary_key=True, default=generate_id)
    name        = Column(String(100), nullable=False)
    slug        = Column(String(60), nullable=False, unique=True, index=True)
    sort_order  = Column(Integer, nullable=False, default=100)
    created_at  = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    items = relationship(
        "MenuItem",
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<MenuCategory(id={self.id}, slug='{self.slug}')>"


class MenuItem(Base):
    __tablename__ = "menu_items"

    id          = Column(String(24), primary_key=True, default=generate_id)
    category_id = Column(String(24), ForeignKey("menu_categories.id", ondelete="CASCADE"), nullable=True, index=True)
    name        = Column(String(150), nullable=False)
    price       = Column(Numeric(10, 2), nullable=False)
    image_url   = Column(String(255), nullable=True)
    active      = Column(Boolean, nullable=False, default=True)
    sort_order  = Column(Integer, nullable=False, default=100)
    created_at  = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    category = relationship("MenuCategory", back_populates="items")

    def __repr__(self):
        return f"<MenuItem(id={self.id}, name='{self.name}', price={self.price})>"
