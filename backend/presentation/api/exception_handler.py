import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from domain.shared.exceptions import (
    CircularReferenceException,
    DomainException,
    EntityNotFoundException,
    InvalidFilterCombinationException,
    InvalidPathException,
    StoreException,
    StoreTimeoutException,
    StoreUnavailableException,
    ValidationException,
)

logger = logging.getLogger(__name__)

DOMAIN_STATUS = (
    (InvalidPathException, status.HTTP_400_BAD_REQUEST),
    (ValidationException, status.HTTP_400_BAD_REQUEST),
    (EntityNotFoundException, status.HTTP_404_NOT_FOUND),
    (CircularReferenceException, status.HTTP_409_CONFLICT),
    (StoreTimeoutException, status.HTTP_504_GATEWAY_TIMEOUT),
    (StoreUnavailableException, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def custom_exception_handler(exc, context):
    """
    Map domain exceptions to HTTP responses, then defer to DRF.

    Conflicting list/children filters answer with a plain-text 400.
    """
    if isinstance(exc, InvalidFilterCombinationException):
        return HttpResponse(
            exc.message,
            status=status.HTTP_400_BAD_REQUEST,
            content_type='text/plain; charset=utf-8',
        )

    if isinstance(exc, DomainException):
        if isinstance(exc, StoreException):
            view = context.get('view')
            logger.error("Document store failure in %s: %s", type(view).__name__, exc.message)

        for exc_class, code in DOMAIN_STATUS:
            if isinstance(exc, exc_class):
                return Response(
                    {
                        'detail': exc.message,
                        'error': exc.code,
                        'details': exc.details,
                    },
                    status=code,
                )

    return exception_handler(exc, context)
