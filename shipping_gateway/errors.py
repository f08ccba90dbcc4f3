"""
Error taxonomy for carrier integrations.

Every error raised by the label workflow carries the stage it came from so a
failed issuance can be diagnosed without re-running it.
"""

from typing import Any, Optional


class ShippingError(Exception):
    """Base exception for shipping gateway errors."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage


class ConfigurationError(ShippingError):
    """Missing or invalid caller/provider configuration. Never retried."""
    pass


class TransportError(ShippingError):
    """Network or timeout failure while talking to the carrier."""
    pass


class HttpStatusError(TransportError):
    """The carrier answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status: int,
        body: str = "",
        stage: Optional[str] = None,
    ):
        super().__init__(message, stage=stage)
        self.status = status
        self.body = body


class ProtocolError(ShippingError):
    """Well-formed HTTP exchange whose payload is missing required data."""

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        payload: Any = None,
    ):
        super().__init__(message, stage=stage)
        self.payload = payload


class BusinessStateError(ShippingError):
    """The carrier order is in a status that cannot be processed."""

    def __init__(self, message: str, status: str, stage: Optional[str] = None):
        super().__init__(message, stage=stage)
        self.status = status


class RetryExhaustedError(ShippingError):
    """All attempts of a retrying stage failed."""

    def __init__(
        self,
        message: str,
        attempts: int,
        last_error: Exception,
        stage: Optional[str] = None,
    ):
        super().__init__(message, stage=stage)
        self.attempts = attempts
        self.last_error = last_error
