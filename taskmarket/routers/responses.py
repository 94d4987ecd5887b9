from fastapi import status
from fastapi.responses import JSONResponse

from taskmarket.models.schemas import (
    DeletionOutcome,
    ProfileFound,
    ProfileIncomplete,
    ProfileResolution,
    UserNotFound,
)


def resolution_response(result: ProfileResolution) -> JSONResponse:
    """Each resolver outcome gets its own status code so clients can tell them apart."""
    if isinstance(result, (ProfileFound, ProfileIncomplete)):
        status_code = status.HTTP_200_OK
    elif isinstance(result, UserNotFound):
        status_code = status.HTTP_404_NOT_FOUND
    else:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))


def deletion_response(outcome: DeletionOutcome) -> JSONResponse:
    status_code = status.HTTP_200_OK if outcome.success else status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=status_code, content=outcome.model_dump(mode="json"))
