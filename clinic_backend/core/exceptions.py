"""
Domain exceptions shared by all apps.

Services raise these; views either catch them explicitly or let
``clinic_exception_handler`` translate them into JSON responses.
"""

from __future__ import annotations

import logging
from typing import Any

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ClinicError(Exception):
    """Base exception for business-rule failures."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Request could not be processed'

    def __init__(self, message: str | None = None, *, code: str | None = None, **extra: Any):
        self.message = message or self.default_message
        self.code = code
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {'error': self.message}
        if self.code:
            result['code'] = self.code
        result.update(self.extra)
        return result


class InvalidRequest(ClinicError):
    """Raised when request data violates a business rule (400)."""


class NotFound(ClinicError):
    """Raised when a referenced record does not exist (404)."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


class Conflict(ClinicError):
    """Raised when the request would create a duplicate (409)."""

    status_code = status.HTTP_409_CONFLICT
    default_message = 'Conflict'


def clinic_exception_handler(exc, context):
    """DRF exception handler.

    - ClinicError -> its status code and ``to_dict()`` body
    - DRF/Django HTTP errors -> DRF default handling
    - anything else -> logged, 500 with a JSON body
    """
    if isinstance(exc, ClinicError):
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view')
    logger.exception('Unhandled error in %s', view.__class__.__name__ if view else 'view')
    return Response(
        {'error': 'Internal server error', 'message': str(exc)},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
