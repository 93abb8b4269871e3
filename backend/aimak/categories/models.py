# backend/aimak/categories/models.py
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    name_kz = Column(String(120), nullable=False)
    name_ru = Column(String(120), nullable=False)
    description_kz = Column(Text, nullable=True)
    description_ru = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    articles = relationship("Article", back_populates="category")

    def __repr__(self) -> str:
        return f"Category(id={self.id}, slug={self.slug!r})"
    def __str__(self) -> str:
        return f"{self.name_kz} / {self.name_ru}"
