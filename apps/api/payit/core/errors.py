from __future__ import annotations


class PayitError(Exception):
    """Base class for errors raised by this service."""


class ConfigurationError(PayitError):
    def __init__(self, message: str, *, missing: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.missing = missing


class InvalidPayloadError(PayitError):
    # Client-caused; the message is generic and never echoes the body.
    pass


class ProviderError(PayitError):
    pass


class ResponseEncodingError(PayitError):
    pass
