"""
Error taxonomy for unigate.

Every error that reaches the HTTP boundary is a ``GatewayError`` and is rendered as
``{"error": message}`` with its ``status_code``. Lower layers raise their own
exceptions (``RegistryError``, ``AdapterError``) which the dispatch core maps onto
the boundary errors.
"""


class GatewayError(Exception):
    """Base class for errors rendered to the caller."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message}


class ClientError(GatewayError):
    """Malformed body, empty or unknown model."""

    status_code = 400


class UpstreamError(GatewayError):
    """The provider call failed or returned nothing usable."""

    status_code = 500


class InternalFault(GatewayError):
    """Storage failure or unexpected exception while handling a request."""

    status_code = 500


class RegistryError(Exception):
    """The registry storage could not be queried."""


class AdapterError(Exception):
    """A provider adapter call failed."""
