"""
BugLab Backend — Scientist Routes
==================================

What:  Scientist profiles and their bug assignments.
Who:   The frontend's scientist list, profile editor and assignment board.
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, status

from buglab.dependencies import get_assignment_service, get_profile_service
from buglab.schemas.bug import BugResponse
from buglab.schemas.common import MAX_ID, ErrorResponse
from buglab.schemas.scientist import (
    AssignmentRequest,
    AssignmentResponse,
    ScientistCreate,
    ScientistDeleteResponse,
    ScientistResponse,
    ScientistUpdate,
    ScientistWithBugs,
    UnassignResponse,
)
from buglab.services.assignment_service import AssignmentService
from buglab.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scientists", tags=["Scientists"])

ScientistId = Annotated[int, Path(ge=1, le=MAX_ID)]

_NOT_FOUND = {404: {"description": "Scientist or bug not found", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[ScientistWithBugs],
    summary="List scientists with their assigned bugs",
)
async def list_scientists(
    profiles: ProfileService = Depends(get_profile_service),
) -> List[ScientistWithBugs]:
    return await profiles.list_scientists()


@router.post(
    "",
    response_model=ScientistResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing or malformed field", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create a scientist and its login",
)
async def create_scientist(
    body: ScientistCreate,
    profiles: ProfileService = Depends(get_profile_service),
) -> ScientistResponse:
    return await profiles.register(body.name, body.email, body.password)


@router.get(
    "/{scientist_id}",
    response_model=ScientistWithBugs,
    responses=_NOT_FOUND,
    summary="Get one scientist with its assigned bugs",
)
async def get_scientist(
    scientist_id: ScientistId,
    profiles: ProfileService = Depends(get_profile_service),
) -> ScientistWithBugs:
    return await profiles.get_scientist(scientist_id)


@router.patch(
    "/{scientist_id}",
    response_model=ScientistResponse,
    responses={
        **_NOT_FOUND,
        400: {"description": "Missing or malformed field", "model": ErrorResponse},
        409: {"description": "Email already in use", "model": ErrorResponse},
    },
    summary="Update a scientist's name, email and optionally password",
)
async def update_scientist(
    scientist_id: ScientistId,
    body: ScientistUpdate,
    profiles: ProfileService = Depends(get_profile_service),
) -> ScientistResponse:
    return await profiles.update(scientist_id, body.name, body.email, body.password)


@router.delete(
    "/{scientist_id}",
    response_model=ScientistDeleteResponse,
    responses=_NOT_FOUND,
    summary="Delete a scientist, its assignments and its login",
)
# legacy path kept for older frontends
@router.delete("/{scientist_id}/delete", response_model=ScientistDeleteResponse, include_in_schema=False)
async def delete_scientist(
    scientist_id: ScientistId,
    profiles: ProfileService = Depends(get_profile_service),
) -> ScientistDeleteResponse:
    deleted = await profiles.delete(scientist_id)
    return ScientistDeleteResponse(deleted=deleted)


@router.post(
    "/{scientist_id}/assign",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **_NOT_FOUND,
        409: {"description": "Bug already assigned", "model": ErrorResponse},
    },
    summary="Assign a bug to a scientist",
)
async def assign_bug(
    scientist_id: ScientistId,
    body: AssignmentRequest,
    assignments: AssignmentService = Depends(get_assignment_service),
) -> AssignmentResponse:
    return await assignments.assign(scientist_id, body.bug_id)


@router.post(
    "/{scientist_id}/unassign",
    response_model=UnassignResponse,
    responses={
        **_NOT_FOUND,
        409: {"description": "Bug is not assigned", "model": ErrorResponse},
    },
    summary="Remove a bug from a scientist",
)
async def unassign_bug(
    scientist_id: ScientistId,
    body: AssignmentRequest,
    assignments: AssignmentService = Depends(get_assignment_service),
) -> UnassignResponse:
    removed = await assignments.unassign(scientist_id, body.bug_id)
    return UnassignResponse(unassigned=removed)


@router.get(
    "/{scientist_id}/bugs",
    response_model=List[BugResponse],
    responses=_NOT_FOUND,
    summary="Bugs assigned to a scientist",
)
async def scientist_bugs(
    scientist_id: ScientistId,
    assignments: AssignmentService = Depends(get_assignment_service),
) -> List[BugResponse]:
    return await assignments.list_for_scientist(scientist_id)
