"""
Archive endpoint.

Returns every registration joined with its test results.  Requires
``Authorization: Bearer <ARCHIVE_TOKEN>``; the token check runs as a
route dependency before the storage is queried.
"""

from fastapi import APIRouter, Depends

from quiz_intake_api.app.api.deps import get_archive_service
from quiz_intake_api.app.core.security import require_archive_token
from quiz_intake_api.app.schemas.archive import ArchiveResponse
from quiz_intake_api.app.schemas.common import ErrorResponse
from quiz_intake_api.app.services.archive_service import ArchiveService


router = APIRouter()


@router.get(
    "/archive",
    response_model=ArchiveResponse,
    dependencies=[Depends(require_archive_token)],
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Export registrations and results",
)
async def list_archive(service: ArchiveService = Depends(get_archive_service)) -> ArchiveResponse:
    records = await service.list_records()
    return ArchiveResponse(records=records, count=len(records))
