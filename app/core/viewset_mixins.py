"""
ViewSet mixins for common DRF functionality.

This module provides generic, non-domain-specific mixins for viewsets:
- ApplicationErrorMixin: Translate BaseApplicationError into JSON responses

Usage:
    from core.viewset_mixins import ApplicationErrorMixin

    class CashboxViewSet(ApplicationErrorMixin, viewsets.ReadOnlyModelViewSet):
        ...

        @action(detail=True, methods=["post"])
        def recalculate(self, request, pk=None):
            # CashboxNotFound raised here becomes a 404 response
            report = ledger.recalculate(pk)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rest_framework import status
from rest_framework.response import Response

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
]


def status_for_error(exc: BaseApplicationError) -> int:
    """
    HTTP status for an application error.

    An ``http_status`` attribute on the exception class wins; otherwise the
    core error kind decides, falling back to 400.
    """
    explicit = getattr(exc, "http_status", None)
    if explicit is not None:
        return explicit
    for error_class, code in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return code
    return status.HTTP_400_BAD_REQUEST


class ApplicationErrorMixin:
    """
    Turn domain exceptions raised in a view into ``to_dict()`` responses.

    Everything else goes through DRF's normal exception handling.
    """

    def handle_exception(self, exc: Exception) -> Any:
        if isinstance(exc, BaseApplicationError):
            code = status_for_error(exc)
            logger.info(
                "Request failed: %s",
                exc.error_code,
                extra={"error_code": exc.error_code, "status_code": code},
            )
            return Response(exc.to_dict(), status=code)
        return super().handle_exception(exc)
