"""
Admin schemas for the Visnet E-Learning API.
"""

from pydantic import BaseModel, ConfigDict, Field


class UserStatusUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_active: bool = Field(..., alias="isActive")
