"""
Per-service timeout defaults.

A Timeouts snapshot is built once from configuration and is immutable
afterwards. Requests resolve their effective deadline from it at
construction time.
"""

from typing import TYPE_CHECKING, Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from dbretry.exceptions import InvalidArgument
from dbretry.models.enums import ServiceType

if TYPE_CHECKING:
    from dbretry.config import Settings


class TimeoutDefaults:
    """Hard-coded default timeouts per service (milliseconds)."""

    KEY_VALUE = 2_500
    VIEW = 70_000
    QUERY = 75_000
    ANALYTICS = 90_000
    SEARCH = 60_000
    MANAGEMENT = 80_000


class Timeouts(BaseModel):
    """
    Immutable per-service timeout table (milliseconds).

    Durations must be real integers: booleans, floats and numeric strings
    are rejected rather than coerced.

    The admin resource kinds (bucket, collection, query index, search index)
    fall back to management_timeout unless given their own override.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    key_value_timeout: StrictInt = Field(default=TimeoutDefaults.KEY_VALUE, gt=0)
    view_timeout: StrictInt = Field(default=TimeoutDefaults.VIEW, gt=0)
    query_timeout: StrictInt = Field(default=TimeoutDefaults.QUERY, gt=0)
    analytics_timeout: StrictInt = Field(default=TimeoutDefaults.ANALYTICS, gt=0)
    search_timeout: StrictInt = Field(default=TimeoutDefaults.SEARCH, gt=0)
    management_timeout: StrictInt = Field(default=TimeoutDefaults.MANAGEMENT, gt=0)
    bucket_admin_timeout: Optional[StrictInt] = Field(default=None, gt=0)
    collection_admin_timeout: Optional[StrictInt] = Field(default=None, gt=0)
    query_admin_timeout: Optional[StrictInt] = Field(default=None, gt=0)
    search_admin_timeout: Optional[StrictInt] = Field(default=None, gt=0)

    @classmethod
    def from_configuration(cls, overrides: Mapping[str, Optional[int]] | None = None) -> "Timeouts":
        """
        Build a snapshot from per-service overrides.

        Args:
            overrides: Mapping of service name (e.g. "query", "management",
                "bucket_admin") to a positive duration in ms. None or a
                missing key keeps the default.

        Raises:
            InvalidArgument: Unknown service name or non-positive duration
        """
        fields: dict[str, Any] = {}
        for name, value in (overrides or {}).items():
            service = ServiceType.parse(name)
            if value is not None:
                fields[_FIELD_BY_SERVICE[service]] = value

        try:
            return cls(**fields)
        except ValidationError as e:
            raise InvalidArgument(
                "Invalid timeout override",
                {"overrides": dict(overrides or {}), "errors": e.errors()},
            ) from e

    @classmethod
    def from_settings(cls, settings: "Settings") -> "Timeouts":
        """Build a snapshot from application settings."""
        return cls.from_configuration(
            {
                "key_value": settings.KEY_VALUE_TIMEOUT_MS,
                "view": settings.VIEW_TIMEOUT_MS,
                "query": settings.QUERY_TIMEOUT_MS,
                "analytics": settings.ANALYTICS_TIMEOUT_MS,
                "search": settings.SEARCH_TIMEOUT_MS,
                "management": settings.MANAGEMENT_TIMEOUT_MS,
            }
        )

    def timeout_for_service(self, service: ServiceType | str) -> int:
        """
        Resolve the default timeout for a service.

        Raises:
            InvalidArgument: If the service is not recognised
        """
        service = ServiceType.parse(service)
        timeout = getattr(self, _FIELD_BY_SERVICE[service])
        if timeout is None:
            # Admin resource kind without its own override
            return self.management_timeout
        return timeout


_FIELD_BY_SERVICE: dict[ServiceType, str] = {
    ServiceType.KV: "key_value_timeout",
    ServiceType.VIEW: "view_timeout",
    ServiceType.QUERY: "query_timeout",
    ServiceType.ANALYTICS: "analytics_timeout",
    ServiceType.SEARCH: "search_timeout",
    ServiceType.MANAGEMENT: "management_timeout",
    ServiceType.BUCKET_ADMIN: "bucket_admin_timeout",
    ServiceType.COLLECTION_ADMIN: "collection_admin_timeout",
    ServiceType.QUERY_ADMIN: "query_admin_timeout",
    ServiceType.SEARCH_ADMIN: "search_admin_timeout",
}
