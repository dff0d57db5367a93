"""
Registration endpoint.

Accepts the registration form, stores it and returns the generated
``registrationId``.  Missing fields are rejected with 400 by the
application's validation handler before this function runs.
"""

from fastapi import APIRouter, BackgroundTasks, Depends

from quiz_intake_api.app.api.deps import get_registration_service
from quiz_intake_api.app.schemas.common import ErrorResponse
from quiz_intake_api.app.schemas.registration import RegistrationCreate, RegistrationResponse
from quiz_intake_api.app.services.registration_service import RegistrationService


router = APIRouter()


@router.post(
    "/register",
    response_model=RegistrationResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Submit a registration",
)
async def register(
    data: RegistrationCreate,
    background_tasks: BackgroundTasks,
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationResponse:
    """Create a registration.

    The response is only sent after the record has been committed; the
    chat notification follows in the background.
    """
    record = await service.submit(data, background_tasks)
    return RegistrationResponse(
        registration_id=record.registration_id,
        message="Регистрация успешно завершена!",
    )
