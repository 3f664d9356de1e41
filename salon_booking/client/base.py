"""
Async HTTP client for the salon booking API

Every endpoint answers {"isSuccess": bool, "content": any}. The client returns
``content`` on success and raises ApiError with a user-facing message otherwise.
Nothing is retried.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000/api/v1"
CSRF_HEADER_NAME = "X-CSRF-Token"

NETWORK_ERROR_MESSAGE = "Unable to connect to the server. Please check your internet connection and try again."
TIMEOUT_MESSAGE = "Request timed out. Please try again."
NOT_FOUND_MESSAGE = "The requested resource was not found. Please try again."
SERVER_ERROR_MESSAGE = "Server error occurred. Please try again later."


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _response_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def handle_api_error(error: Exception, default_message: str) -> ApiError:
    """Map a failed call to the message shown to the user"""
    logger.debug(f"{default_message}: {error}")

    if isinstance(error, ApiError):
        return error
    if isinstance(error, httpx.TimeoutException):
        return ApiError(TIMEOUT_MESSAGE)
    if isinstance(error, httpx.TransportError):
        return ApiError(NETWORK_ERROR_MESSAGE)

    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 404:
            return ApiError(NOT_FOUND_MESSAGE, status)
        if status == 500:
            return ApiError(SERVER_ERROR_MESSAGE, status)
        if 400 <= status < 500:
            body = _response_body(error.response)
            return ApiError(body.get("content") or body.get("message") or default_message, status)

    return ApiError(str(error) or default_message)


class ApiClient:
    """
    Shared transport for the resource wrappers.
    Session cookies set by the API are kept between calls; the CSRF token from the
    login redirect is echoed back in the X-CSRF-Token header.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[dict] = None,
        csrf_token: Optional[str] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport, headers=headers
        )
        if csrf_token:
            self.set_csrf_token(csrf_token)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    @property
    def csrf_token(self) -> Optional[str]:
        return self._client.headers.get(CSRF_HEADER_NAME)

    def set_csrf_token(self, token: Optional[str]) -> None:
        if token:
            self._client.headers[CSRF_HEADER_NAME] = token
        else:
            self._client.headers.pop(CSRF_HEADER_NAME, None)

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        default_message: str,
        json: Any = None,
        params: Optional[dict] = None,
        data: Optional[dict] = None,
        files: Optional[dict] = None,
    ) -> Any:
        """Send one request and unwrap the envelope"""
        try:
            response = await self._client.request(
                method, path, json=json, params=params, data=data, files=files
            )
            response.raise_for_status()
            body = response.json()
            if not body.get("isSuccess"):
                raise ApiError(body.get("content") or default_message, response.status_code)
            return body.get("content")
        except ApiError:
            raise
        except (httpx.HTTPError, ValueError) as e:
            raise handle_api_error(e, default_message) from e
