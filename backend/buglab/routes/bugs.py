"""
BugLab Backend — Bug Routes
============================

What:  CRUD for bugs. Deleting a bug also removes its assignments.
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, status

from buglab.dependencies import get_bug_service
from buglab.schemas.bug import BugCreate, BugDeleteResponse, BugResponse, BugUpdate
from buglab.schemas.common import MAX_ID, ErrorResponse
from buglab.services.bug_service import BugService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bugs", tags=["Bugs"])

BugId = Annotated[int, Path(ge=1, le=MAX_ID)]

_NOT_FOUND = {404: {"description": "Bug not found", "model": ErrorResponse}}


@router.get("", response_model=List[BugResponse], summary="List all bugs")
async def list_bugs(bugs: BugService = Depends(get_bug_service)) -> List[BugResponse]:
    return await bugs.list_bugs()


@router.post(
    "",
    response_model=BugResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Missing field", "model": ErrorResponse}},
    summary="Create a bug",
)
async def create_bug(body: BugCreate, bugs: BugService = Depends(get_bug_service)) -> BugResponse:
    return await bugs.create(body.name, body.strength, body.type)


@router.get("/{bug_id}", response_model=BugResponse, responses=_NOT_FOUND, summary="Get a bug")
async def get_bug(bug_id: BugId, bugs: BugService = Depends(get_bug_service)) -> BugResponse:
    return await bugs.get(bug_id)


@router.patch(
    "/{bug_id}",
    response_model=BugResponse,
    responses={
        **_NOT_FOUND,
        400: {"description": "No field given or a field is blank", "model": ErrorResponse},
    },
    summary="Update some or all fields of a bug",
)
async def update_bug(
    bug_id: BugId,
    body: BugUpdate,
    bugs: BugService = Depends(get_bug_service),
) -> BugResponse:
    return await bugs.update(bug_id, name=body.name, strength=body.strength, type=body.type)


@router.delete(
    "/{bug_id}",
    response_model=BugDeleteResponse,
    responses=_NOT_FOUND,
    summary="Delete a bug and its assignments",
)
async def delete_bug(bug_id: BugId, bugs: BugService = Depends(get_bug_service)) -> BugDeleteResponse:
    deleted = await bugs.delete(bug_id)
    return BugDeleteResponse(deleted=deleted)
