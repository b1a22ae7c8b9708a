"""
Grid Aware – Exception Hierarchy
=================================

    GridAwareError
    └── ProviderError
        ├── MissingCredentialError   no API key configured
        ├── UpstreamApiError         non-200 from the carbon API (status + body)
        ├── InvalidResponseError     200 but unparsable body
        │   └── NoIntensityDataError 200, parsable, but no usable intensity
        └── TransportError           network-level failure / timeout

Provider errors never reach a page render: the resolver downgrades them to
the conservative ``low`` tier. The HTTP layer maps them to 400 responses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class GridAwareError(Exception):
    """Base exception for all Grid Aware errors."""

    code = "grid_aware_error"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ProviderError(GridAwareError):
    """Any failure while obtaining a reading from the upstream API."""

    code = "provider_error"


class MissingCredentialError(ProviderError):
    code = "no_api_key"

    def __init__(self, message: str = "Electricity Maps API key is required."):
        super().__init__(message)


class UpstreamApiError(ProviderError):
    """Non-200 answer from the carbon-intensity API."""

    code = "api_error"

    def __init__(self, message: str, status: int, body: str = ""):
        super().__init__(message, context={"status": status, "body": body})
        self.status = status
        self.body = body


class InvalidResponseError(ProviderError):
    code = "invalid_response"

    def __init__(self, message: str = "Invalid response from Electricity Maps API."):
        super().__init__(message)


class NoIntensityDataError(InvalidResponseError):
    code = "no_intensity_data"

    def __init__(self, message: str = "No carbon intensity data available in the API response."):
        super().__init__(message)


class TransportError(ProviderError):
    code = "transport_error"
