from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from ..models import CustomModel
from .models import UserRole


class UserBase(CustomModel):
    email: EmailStr = Field(..., json_schema_extra={"example": "editor@aimak.kz"})
    name: str = Field(..., min_length=1, max_length=100, json_schema_extra={"example": "Айгерім Сейітқызы"})

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, value):
        # login lowercases the username, so stored addresses must match
        return value.lower() if isinstance(value, str) else value

class UserCreate(UserBase):
    password: str = Field(..., min_length=8, json_schema_extra={"example": "strongpassword123"})

class UserUpdate(CustomModel):
    email: Optional[EmailStr] = Field(None, json_schema_extra={"example": "new_email@aimak.kz"})
    name: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, value):
        return value.lower() if isinstance(value, str) else value

class UserPublic(UserBase):
    id: int = Field(..., json_schema_extra={"example": 1})
    role: UserRole

class UserMe(UserPublic):
    created_at: datetime
    updated_at: datetime
    last_login: Optional[datetime] = None

class AdminCreate(UserCreate):
    role: UserRole = UserRole.USER

class UserRoleUpdate(CustomModel):
    role: UserRole

class AuthorSummary(CustomModel):
    """Author block embedded in article responses."""
    id: int
    name: Optional[str] = None
