from typing import Any, Dict, Optional


class ShopClientError(Exception):
    """Base class for errors raised by the api package itself.

    Transport failures (``httpx.TransportError``) are not wrapped and reach the
    caller as raised by httpx.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiError(ShopClientError):
    """
    The backend answered with ``success: false``.
    Only a human readable message is available, there is no error code.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class DecodeError(ShopClientError):
    """Response body was not JSON, not an envelope, or data had the wrong shape."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EndpointNotImplementedError(ShopClientError):
    """Raised by operations the backend does not offer yet (staff, product CRUD...)."""
