"""Maps domain errors to HTTP responses.

Installed as the REST framework exception handler. Messages are the
user-safe ones carried by the domain error; internal details never leak.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from ticketing.domain.errors import DomainError, ErrorCode

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_SIGNATURE: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.SOLD_OUT: status.HTTP_409_CONFLICT,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TIER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TICKET_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.MALFORMED_CREDENTIAL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_MISMATCH: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_CURRENTLY_VALID: status.HTTP_409_CONFLICT,
    ErrorCode.LEDGER_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.INVALID_EVENT_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_INACTIVE: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_EVENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INSUFFICIENT_LISTING_FEE: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorCode.INVALID_ATTENDEE_COUNT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ADDRESS: status.HTTP_400_BAD_REQUEST,
}


def error_response(error: DomainError) -> Response:
    body = {"code": error.code.value, "message": error.message}
    if error.retryable:
        body["retryable"] = True
    return Response(
        {"error": body},
        status=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST),
    )


def exception_handler(exc, context):
    if isinstance(exc, DomainError):
        view = context.get("view")
        logger.info(
            "%s rejected with %s",
            type(view).__name__ if view else "request",
            exc.code.value,
        )
        return error_response(exc)
    return drf_exception_handler(exc, context)
