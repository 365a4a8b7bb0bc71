"""
Enumerations for the request lifecycle data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum
from typing import Any

from dbretry.exceptions import (
    AmbiguousTimeout,
    ClientError,
    InvalidArgument,
    RequestCanceled,
    UnambiguousTimeout,
)


class ServiceType(str, Enum):
    """
    Target service of a request.

    Used for timeout resolution, logging and metrics labels. The admin kinds
    share the management timeout unless configured individually.
    """

    KV = "key_value"
    VIEW = "view"
    QUERY = "query"
    ANALYTICS = "analytics"
    SEARCH = "search"
    MANAGEMENT = "management"
    BUCKET_ADMIN = "bucket_admin"
    COLLECTION_ADMIN = "collection_admin"
    QUERY_ADMIN = "query_admin"
    SEARCH_ADMIN = "search_admin"

    @property
    def is_admin(self) -> bool:
        """True for administrative services (management and its resource kinds)."""
        return self in _ADMIN_SERVICES

    @classmethod
    def parse(cls, service: "ServiceType | str") -> "ServiceType":
        """
        Resolve a ServiceType from an enum member or its string value.

        Raises:
            InvalidArgument: If the service is not recognised
        """
        if isinstance(service, cls):
            return service
        try:
            return cls(service)
        except ValueError:
            raise InvalidArgument(
                f"Service {service!r} not recognised",
                {"service": service, "known_services": [s.value for s in cls]},
            ) from None


_ADMIN_SERVICES = frozenset(
    {
        ServiceType.MANAGEMENT,
        ServiceType.BUCKET_ADMIN,
        ServiceType.COLLECTION_ADMIN,
        ServiceType.QUERY_ADMIN,
        ServiceType.SEARCH_ADMIN,
    }
)


class ErrorKind(str, Enum):
    """
    Terminal error kinds surfaced by a failed RequestBehaviour.

    The kind is what the orchestrator and senders agree on; the caller sees
    the matching exception class (see to_exception).
    """

    REQUEST_CANCELED = "request_canceled"
    UNAMBIGUOUS_TIMEOUT = "unambiguous_timeout"
    AMBIGUOUS_TIMEOUT = "ambiguous_timeout"

    @property
    def exception_class(self) -> type[ClientError]:
        return _EXCEPTION_CLASSES[self]

    def to_exception(
        self, message: str | None = None, context: dict[str, Any] | None = None
    ) -> ClientError:
        """Build the caller-facing exception for this error kind."""
        return self.exception_class(message or _DEFAULT_MESSAGES[self], context)


_EXCEPTION_CLASSES: dict[ErrorKind, type[ClientError]] = {
    ErrorKind.REQUEST_CANCELED: RequestCanceled,
    ErrorKind.UNAMBIGUOUS_TIMEOUT: UnambiguousTimeout,
    ErrorKind.AMBIGUOUS_TIMEOUT: AmbiguousTimeout,
}

_DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.REQUEST_CANCELED: "Cannot retry request",
    ErrorKind.UNAMBIGUOUS_TIMEOUT: "Request timed out before it could be completed",
    ErrorKind.AMBIGUOUS_TIMEOUT: "Request timed out while in flight, outcome unknown",
}
