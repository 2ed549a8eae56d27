# request executor shared by every endpoint group
from __future__ import annotations

import json
import os
from typing import Any, Mapping, Optional, Type

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from api.errors import ApiError, DecodeError
from api.models import Envelope
from api.session import SessionStore
from utils.logger import get_logger

_logger = get_logger(__name__)

API_BASE_URL = os.getenv("SHOP_API_BASE_URL", "https://smarthubsec.com.ng/api")
DEFAULT_ERROR_MESSAGE = "API request failed"

# same coercion Envelope.success gets, so "0" and "false" count as failures
_SUCCESS_FLAG = TypeAdapter(bool)


def _encode_body(body: Any) -> Optional[bytes]:
    if body is None:
        return None
    if isinstance(body, BaseModel):
        body = body.model_dump(mode="json", exclude_none=True)
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


class ApiClient:
    """
    Sends one request per call to the backend and enforces the envelope contract.

    There is no retry, no timeout and no caching here; whatever fails is raised to
    the caller. httpx transport errors are left as they are.
    """

    def __init__(
        self,
        session: SessionStore,
        base_url: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(transport=transport, timeout=None)

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _build_headers(self, extra: Optional[Mapping[str, str]]) -> httpx.Headers:
        headers = httpx.Headers({"Content-Type": "application/json"})
        token = await self.session.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if extra:
            # caller wins, case-insensitively
            headers.update(extra)
        return headers

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        data_model: Optional[Type[Any]] = None,
    ) -> Envelope:
        """
        Call ``endpoint`` (path relative to the base url, query string included).

        Returns the whole envelope; ``data`` is validated against ``data_model``
        when one is given. Raises ApiError when ``success`` is falsy and
        DecodeError when the body cannot be read as an envelope.
        """
        request_headers = await self._build_headers(headers)
        url = f"{self.base_url}{endpoint}"

        response = await self._http.request(
            method, url, headers=request_headers, content=_encode_body(body)
        )
        _logger.debug(f"{method} {endpoint} -> {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(
                f"Response from {endpoint} is not valid JSON",
                status_code=response.status_code,
            ) from e

        if not isinstance(payload, dict):
            raise DecodeError(
                f"Response from {endpoint} is not a JSON object",
                status_code=response.status_code,
            )

        raw_success = payload.get("success")
        try:
            success = raw_success is not None and _SUCCESS_FLAG.validate_python(raw_success)
        except ValidationError as e:
            raise DecodeError(
                f"Response from {endpoint} has an unreadable success flag: {raw_success!r}",
                status_code=response.status_code,
            ) from e

        if not success:
            message = payload.get("message") or DEFAULT_ERROR_MESSAGE
            _logger.warning(f"{method} {endpoint} failed: {message}")
            raise ApiError(str(message), status_code=response.status_code, payload=payload)

        envelope_type = Envelope[data_model] if data_model is not None else Envelope
        try:
            return envelope_type.model_validate(payload)
        except ValidationError as e:
            raise DecodeError(
                f"Unexpected response shape from {endpoint}: {e.error_count()} error(s)",
                status_code=response.status_code,
            ) from e
