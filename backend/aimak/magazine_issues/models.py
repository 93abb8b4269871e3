# backend/aimak/magazine_issues/models.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    Date,
    BigInteger,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class MagazineIssue(Base):
    __tablename__ = "magazine_issues"
    __table_args__ = (
        UniqueConstraint("issue_number", "year", "month", name="uq_magazine_issue_number_year_month"),
    )

    id = Column(Integer, primary_key=True, index=True)
    issue_number = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False, index=True)
    month = Column(Integer, nullable=False)
    publish_date = Column(Date, nullable=False)

    title_kz = Column(String(255), nullable=False)
    title_ru = Column(String(255), nullable=False)
    description_kz = Column(Text, nullable=True)
    description_ru = Column(Text, nullable=True)

    # file storage is external; only references are kept
    pdf_url = Column(String(500), nullable=False)
    pdf_filename = Column(String(255), nullable=True)
    file_size = Column(BigInteger, nullable=True)
    pages_count = Column(Integer, nullable=True)
    cover_image_url = Column(String(500), nullable=True)

    is_published = Column(Boolean, nullable=False, default=True)
    is_pinned = Column(Boolean, nullable=False, default=False)
    views_count = Column(Integer, nullable=False, default=0)
    downloads_count = Column(Integer, nullable=False, default=0)

    uploaded_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    uploaded_by = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"MagazineIssue(id={self.id}, no={self.issue_number}, {self.year}-{self.month:02d})"
