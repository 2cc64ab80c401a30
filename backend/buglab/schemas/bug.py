"""
BugLab Backend — Bug Schemas
=============================
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, StrictInt


class BugCreate(BaseModel):
    name: Optional[str] = Field(default=None, description="Short bug title")
    strength: Optional[StrictInt] = Field(default=None, description="Numeric severity (booleans rejected)")
    type: Optional[str] = Field(default=None, description="Category label, e.g. Critical")


class BugUpdate(BaseModel):
    """Partial update: only the fields sent are changed."""
    name: Optional[str] = None
    strength: Optional[StrictInt] = None
    type: Optional[str] = None


class BugResponse(BaseModel):
    id: int
    name: str
    strength: int
    type: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BugDeleteResponse(BaseModel):
    message: str = "Bug deleted successfully"
    deleted: BugResponse
