"""
Authentication schemas for the Visnet E-Learning API.

Request bodies accept camelCase keys (``firstName``) as well as the
snake_case field names.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from elearning.models.user import UserRole
from elearning.utils.formatting import blank_to_none


PHONE_PATTERN = r"^\+?[0-9\s\-()]{7,20}$"


class UserRegister(BaseModel):
    """Registration request."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., alias="firstName", min_length=2, max_length=50)
    last_name: str = Field(..., alias="lastName", min_length=2, max_length=50)
    role: UserRole = UserRole.STUDENT


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    """
    Profile update request. Empty optional fields are stored as null.
    """
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    first_name: str = Field(..., alias="firstName", min_length=2, max_length=50)
    last_name: str = Field(..., alias="lastName", min_length=2, max_length=50)
    bio: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    date_of_birth: Optional[date] = Field(None, alias="dateOfBirth")

    @field_validator("bio", "phone", "date_of_birth", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        if isinstance(v, str):
            return blank_to_none(v)
        return v


class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=6)
