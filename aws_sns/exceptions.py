"""Module for SNS client exceptions."""
from typing import Optional


class SnsClientError(Exception):
    """Base exception class for SNS client errors."""


class ValidationError(SnsClientError, ValueError):
    """Exception raised when caller input is missing or invalid."""


class CredentialError(ValidationError):
    """Exception raised when AWS credentials are missing."""


class SigningError(SnsClientError):
    """Exception raised when request signing fails."""


class TransportError(SnsClientError):
    """Exception raised when the HTTP layer fails to deliver a request."""


class HttpError(SnsClientError):
    """Exception raised when SNS answers with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        body: bytes,
        code: Optional[str] = None,
        message: Optional[str] = None
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.code = code
        self.message = message
        detail = f"{code}: {message}" if code else (message or "no detail")
        super().__init__(f"HTTP {status_code} from SNS ({detail})")


class DecodeError(SnsClientError):
    """Exception raised when a response body cannot be decoded.

    Carries the raw body and, for AWS faults, the fault code. The message
    of an AWS fault is used verbatim as the exception message.
    """

    def __init__(
        self,
        message: str,
        body: Optional[bytes] = None,
        code: Optional[str] = None
    ) -> None:
        self.message = message
        self.body = body
        self.code = code
        super().__init__(message)
