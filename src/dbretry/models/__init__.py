"""
Data models for the request lifecycle layer.

Includes:
- Enums (ServiceType, ErrorKind)
- Request (mutable envelope tracking one logical operation)
- RequestBehaviour (retry-or-fail decision)
"""

from dbretry.models.enums import ErrorKind, ServiceType
from dbretry.models.behaviour import RequestBehaviour
from dbretry.models.request import Request

__all__ = [
    # Enums
    "ErrorKind",
    "ServiceType",
    # Lifecycle
    "Request",
    "RequestBehaviour",
]
