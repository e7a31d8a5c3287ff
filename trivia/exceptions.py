"""
Error taxonomy for the trivia app.

Every failure surfaced to a caller carries a message and a classification.
Views let these exceptions propagate; `trivia_exception_handler` renders
them as:

    {"error": "<message>", "type": "<classification>"}

Nothing in this module retries anything.
"""

import logging

from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler


logger = logging.getLogger(__name__)


class TriviaError(Exception):
    """Base class for all trivia errors."""

    classification = 'error'
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = ''):
        self.message = message or self.__class__.__doc__ or self.classification
        super().__init__(self.message)


class Unauthorized(TriviaError):
    """Authentication is required."""

    classification = 'unauthorized'
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(TriviaError):
    """You do not own this resource."""

    classification = 'forbidden'
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(TriviaError):
    """Resource not found."""

    classification = 'not_found'
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(TriviaError):
    """Malformed request."""

    classification = 'validation_error'
    status_code = status.HTTP_400_BAD_REQUEST


class OutOfRange(ValidationError):
    """Index is out of range."""

    classification = 'out_of_range'


class ConversionFailed(TriviaError):
    """Failed to convert document to trivia."""

    classification = 'conversion_failed'
    status_code = status.HTTP_502_BAD_GATEWAY


class UnsupportedFormat(TriviaError):
    """Unsupported file type."""

    classification = 'unsupported_format'
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


class PersistenceError(TriviaError):
    """Storage operation failed."""

    classification = 'persistence_error'
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# DRF's own exceptions mapped onto the same classifications
_DRF_CLASSIFICATIONS = {
    drf_exceptions.NotAuthenticated: Unauthorized.classification,
    drf_exceptions.AuthenticationFailed: Unauthorized.classification,
    drf_exceptions.PermissionDenied: Forbidden.classification,
    drf_exceptions.NotFound: NotFound.classification,
    drf_exceptions.ValidationError: ValidationError.classification,
    drf_exceptions.ParseError: ValidationError.classification,
    drf_exceptions.UnsupportedMediaType: UnsupportedFormat.classification,
}


def _classify_drf_exception(exc) -> str:
    for exc_class, classification in _DRF_CLASSIFICATIONS.items():
        if isinstance(exc, exc_class):
            return classification
    return getattr(exc, 'default_code', 'error')


def trivia_exception_handler(exc, context):
    """
    DRF exception handler that understands `TriviaError`.

    Args:
        exc: The raised exception.
        context: DRF handler context (view, request, ...).

    Returns:
        A Response, or None to let Django produce a 500 for unknown errors.
    """
    if isinstance(exc, TriviaError):
        view = context.get('view')
        view_name = view.__class__.__name__ if view else 'unknown view'
        if exc.status_code >= 500:
            logger.error(f"{view_name}: {exc.classification}: {exc.message}")
        else:
            logger.info(f"{view_name}: {exc.classification}: {exc.message}")

        response = Response(
            {"error": exc.message, "type": exc.classification},
            status=exc.status_code
        )
        if isinstance(exc, Unauthorized):
            response['WWW-Authenticate'] = 'Basic realm="api"'
        return response

    response = exception_handler(exc, context)
    if response is None:
        return None

    classification = _classify_drf_exception(exc)
    if isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {"error": str(response.data['detail']), "type": classification}
    else:
        # Field-level validation errors keep their structure
        response.data = {"error": response.data, "type": classification}
    return response
