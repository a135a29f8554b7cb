"""
Progress schemas for the Visnet E-Learning API.
"""

from pydantic import BaseModel, ConfigDict, Field


class LessonTime(BaseModel):
    """Time spent on a lesson, in seconds. Used by both complete and time updates."""
    model_config = ConfigDict(populate_by_name=True)

    time_spent: int = Field(0, alias="timeSpent", ge=0)
