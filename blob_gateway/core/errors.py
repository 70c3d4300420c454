"""
Error taxonomy for the gateway.

Three categories, each with a fixed place where it is raised and handled:

- ConfigurationError: startup only, fatal. Never reaches a request.
- ClientInputError: the request itself is unusable (HTTP 400).
- BackendError: anything the object store reports (HTTP 500). Auth,
  not-found, network and quota failures are deliberately not told apart;
  only the backend's message survives.
"""


class GatewayError(Exception):
    """Base class for gateway errors."""
    pass


class ConfigurationError(GatewayError):
    """Raised at startup when required configuration is missing."""

    def __init__(self, missing_fields: list[str]) -> None:
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"Missing required configuration: {', '.join(self.missing_fields)}"
        )


class ClientInputError(GatewayError):
    """Raised when a request lacks input the operation needs."""
    pass


class BackendError(GatewayError):
    """Raised when the object store rejects or fails an operation."""
    pass
