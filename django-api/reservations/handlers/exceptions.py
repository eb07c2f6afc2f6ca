"""Maps domain errors to HTTP responses.

Configured as REST_FRAMEWORK["EXCEPTION_HANDLER"]. Anything that is not a
DomainError falls through to DRF's default handler.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from reservations.domain.errors import (
    BadRequestError,
    ConflictError,
    DomainError,
    InternalError,
    NotFoundError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

STATUS_BY_KIND = (
    (BadRequestError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InternalError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def domain_exception_handler(exc, context):
    if not isinstance(exc, DomainError):
        return exception_handler(exc, context)

    http_status = next(
        (code for kind, code in STATUS_BY_KIND if isinstance(exc, kind)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if http_status >= 500:
        logger.error("Request failed: %s", exc, exc_info=exc)
    else:
        logger.info("Request rejected: %s", exc)

    body = {"code": exc.code.value, "message": exc.message}
    if isinstance(exc, ValidationFailedError):
        body["errors"] = list(exc.errors)
    return Response(body, status=http_status)
