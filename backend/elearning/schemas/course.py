"""
Course, category and lesson schemas for the Visnet E-Learning API.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from elearning.models.course import CourseLevel


class CourseCreate(BaseModel):
    """Course creation request."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    short_description: Optional[str] = Field(None, max_length=500)
    category_id: int
    level: CourseLevel
    language: str = Field(..., min_length=1, max_length=50)
    price: float = Field(0, ge=0)
    thumbnail_url: Optional[str] = Field(None, max_length=500)


class CourseUpdate(BaseModel):
    """
    Partial course update. Only these fields are writable; anything else
    in the body is ignored.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    short_description: Optional[str] = Field(None, max_length=500)
    category_id: Optional[int] = None
    level: Optional[CourseLevel] = None
    language: Optional[str] = Field(None, min_length=1, max_length=50)
    price: Optional[float] = Field(None, ge=0)
    thumbnail_url: Optional[str] = Field(None, max_length=500)


class CategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class LessonCreate(BaseModel):
    """Lesson creation request. ``order_index`` defaults to the next free slot."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = Field(None, max_length=500)
    duration_minutes: int = Field(0, ge=0)
    order_index: Optional[int] = Field(None, ge=0)
    is_preview: bool = False


class LessonUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = Field(None, max_length=500)
    duration_minutes: Optional[int] = Field(None, ge=0)
    order_index: Optional[int] = Field(None, ge=0)
    is_preview: Optional[bool] = None


class CourseApprove(BaseModel):
    feedback: Optional[str] = None


class CourseReject(BaseModel):
    """
    Rejection request. A missing or blank reason is reported by the
    service as a 400 with the course left untouched.
    """
    reason: Optional[str] = None

    @field_validator("reason", mode="before")
    @classmethod
    def strip_reason(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v
