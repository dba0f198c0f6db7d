"""Error hierarchy shared by adapters and the delivery pipeline."""

from typing import Optional


class RelayError(Exception):
    """Base class for all relay errors."""


class ConfigError(RelayError):
    """Missing or invalid configuration."""


class HTTPRelayError(RelayError):
    """Error raised from an HTTP exchange, keeping the response for diagnostics."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.body = body
        detail = f"{message} (status={status_code})" if status_code is not None else message
        if body:
            detail = f"{detail}: {body[:500]}"
        super().__init__(detail)


class FeedSourceError(HTTPRelayError):
    """Feed source request failed."""


class DeliveryError(HTTPRelayError):
    """Chat destination rejected or did not receive a message."""


class SummarizerError(HTTPRelayError):
    """Language model request failed or returned an unusable envelope."""


class DigestParseError(RelayError):
    """Model output could not be parsed as a digest."""
