"""Error taxonomy shared by the request/response API and the live channel.

Everything except :class:`DeliveryError` is an ``APIException`` so DRF views can
simply raise it; the realtime router converts the same classes into error
events. ``DeliveryError`` marks a failed best-effort live push and is never
reported to a caller as a failure.
"""

from __future__ import annotations

from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException


class CollabHubError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("Request failed.")
    default_code = "error"

    @property
    def message(self) -> str:
        return str(self.detail)


class AuthenticationError(CollabHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = _("Authentication failed.")
    default_code = "authentication_failed"


class AuthorizationError(CollabHubError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("You do not have permission to perform this action.")
    default_code = "permission_denied"


class ValidationError(CollabHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("Invalid input.")
    default_code = "invalid"


class NotFoundError(CollabHubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = _("Not found.")
    default_code = "not_found"


class ConflictError(CollabHubError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = _("Conflict.")
    default_code = "conflict"


class DeliveryError(Exception):
    """A live push could not be delivered (recipient offline or socket dead)."""
