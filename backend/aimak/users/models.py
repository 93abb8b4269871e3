# backend/aimak/users/models.py
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class UserRole(str, PyEnum):
    USER = "USER"
    EDITOR = "EDITOR"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), index=True)
    email = Column(String(100), unique=True, index=True, nullable=False)
    role = Column(String(20), default=UserRole.USER.value, nullable=False)
    last_login = Column(DateTime(timezone=True))
    hashed_password = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    articles = relationship("Article", back_populates="author")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.EDITOR.value, UserRole.ADMIN.value)

    def __repr__(self) -> str:
        return f"User(id={self.id}, name={self.name!r}, email={self.email!r}, role={self.role!r})"
    def __str__(self) -> str:
        return f"{self.name} ({self.email})"
