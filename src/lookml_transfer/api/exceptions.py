"""Exceptions raised while transferring LookML projects."""

from typing import Optional


class TransferError(Exception):
    """Base exception for LookML transfer errors."""

    pass


class ConfigurationError(TransferError):
    """Required configuration is missing or invalid."""

    pass


class AuthError(TransferError):
    """Token exchange with a Looker instance failed."""

    def __init__(self, message: str, base_url: Optional[str] = None):
        """Initialize authentication error.

        Args:
            message: Error message
            base_url: Instance the exchange was attempted against
        """
        super().__init__(message)
        self.base_url = base_url


class ApiCallError(TransferError):
    """A remote API call returned a non-2xx response or never completed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        """Initialize API call error.

        Args:
            message: Error message
            status_code: HTTP status code, None for transport failures
            body: Raw response body
        """
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ParseError(TransferError):
    """A git remote URL could not be parsed into owner and repository."""

    pass


class ValidationStepFailure(TransferError):
    """A git connection test did not pass."""

    def __init__(self, message: str, test_id: str):
        super().__init__(message)
        self.test_id = test_id


class WorkflowError(TransferError):
    """Unexpected failure inside the transfer workflow."""

    pass


class SheetError(TransferError):
    """The transfer sheet is missing or malformed."""

    pass
