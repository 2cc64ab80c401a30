"""
BugLab Backend — Scientist and Assignment Schemas
==================================================
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from buglab.schemas.bug import BugResponse
from buglab.schemas.common import MAX_ID


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


class ScientistCreate(BaseModel):
    """Body of POST /scientists and POST /auth/register."""
    name: Optional[str] = Field(default=None, description="Display name")
    email: Optional[str] = Field(default=None, description="Unique email, also the login")
    password: Optional[str] = Field(default=None, description="Plaintext password (min length applies)")


class ScientistUpdate(BaseModel):
    """Body of PATCH /scientists/{id}. `password` is optional."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class AssignmentRequest(BaseModel):
    bug_id: Optional[int] = Field(default=None, ge=1, le=MAX_ID, description="ID of the bug to (un)assign")


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class ScientistResponse(BaseModel):
    id: int
    name: str
    email: str
    user_id: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ScientistWithBugs(ScientistResponse):
    bugs: List[BugResponse] = Field(default_factory=list)


class ScientistDeleteResponse(BaseModel):
    message: str = "Scientist deleted successfully"
    deleted: ScientistResponse


class AssignmentResponse(BaseModel):
    scientist_id: int
    bug_id: int
    assigned_at: datetime

    model_config = {"from_attributes": True}


class UnassignResponse(BaseModel):
    message: str = "Bug unassigned successfully"
    unassigned: AssignmentResponse
