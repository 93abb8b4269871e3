# backend/aimak/tags/models.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    name_kz = Column(String(120), nullable=False)
    name_ru = Column(String(120), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    articles = relationship("Article", secondary="article_tags", back_populates="tags")

    def __repr__(self) -> str:
        return f"Tag(id={self.id}, slug={self.slug!r})"
    def __str__(self) -> str:
        return f"#{self.name_kz}"
