# backend/aimak/articles/models.py
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Boolean, Table,
    Enum as SQLEnum, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

class ArticleStatus(str, PyEnum):
    DRAFT = "DRAFT"
    REVIEW = "REVIEW"
    SCHEDULED = "SCHEDULED"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


article_tags = Table(
    "article_tags",
    Base.metadata,
    Column("article_id", Integer, ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Article(Base):
    __tablename__ = "articles"
    __table_args__ = (
        Index("ix_articles_status_published_at", "status", "published_at"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Kazakh is the primary language; Russian is optional and may be machine-translated
    title_kz = Column(String(500), nullable=False)
    slug_kz = Column(String(500), unique=True, nullable=False, index=True)
    content_kz = Column(Text, nullable=False)
    excerpt_kz = Column(Text, nullable=True)

    title_ru = Column(String(500), nullable=True)
    slug_ru = Column(String(500), unique=True, nullable=True, index=True)
    content_ru = Column(Text, nullable=True)
    excerpt_ru = Column(Text, nullable=True)

    cover_image = Column(String(500), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(SQLEnum(ArticleStatus, name="articlestatus"), default=ArticleStatus.DRAFT, nullable=False)
    # legacy flag, always equal to status == PUBLISHED
    published = Column(Boolean, nullable=False, default=False)
    is_breaking = Column(Boolean, nullable=False, default=False)
    is_featured = Column(Boolean, nullable=False, default=False)
    is_pinned = Column(Boolean, nullable=False, default=False)
    allow_comments = Column(Boolean, nullable=False, default=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    views = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    author = relationship("User", back_populates="articles")
    category = relationship("Category", back_populates="articles")
    tags = relationship("Tag", secondary=article_tags, back_populates="articles")

    @property
    def has_russian(self) -> bool:
        return bool(self.title_ru and self.content_ru)

    def __repr__(self) -> str:
        return f"Article(id={self.id}, slug_kz={self.slug_kz!r}, status={self.status!r})"
    def __str__(self) -> str:
        return self.title_kz or f"Article#{self.id}"
