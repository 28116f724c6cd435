"""
Async HTTP Transport for azdo-panel.

Handles authenticated communication with the Azure DevOps REST API using the
httpx async client: Basic auth header construction, opt-in retry with
backoff, and error response parsing into typed exceptions.
"""

import asyncio
import base64
import random
import time
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any

import httpx

from azdo_panel.exceptions import (
    AuthenticationError,
    AuthorizationError,
    AzureDevOpsError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from azdo_panel.logging import log_http_request, log_http_response

DEFAULT_API_VERSION = "7.0"


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior.

    Retries are off by default; a failed fetch is reported, not repeated.
    """

    max_retries: int = 0
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


def basic_auth_header(access_token: str) -> str:
    """Build the Basic auth value: empty username, token as password."""
    encoded = base64.b64encode(f":{access_token}".encode()).decode()
    return f"Basic {encoded}"


class AsyncHTTPTransport:
    """
    Async HTTP transport bound to one organization and access token.

    Handles:
    - Basic auth with an empty username and the token as password
    - The api-version query parameter on every request
    - Exponential backoff with jitter for opted-in retries
    - Error response parsing into typed exceptions
    """

    def __init__(
        self,
        organization_url: str,
        access_token: str,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            organization_url: Organization base URL (e.g., "https://dev.azure.com/acme")
            access_token: Personal access token
            api_version: REST API version sent as the api-version parameter
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            http_transport: httpx transport to send through (tests pass httpx.MockTransport)
        """
        self.base_url = organization_url.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={
                "Authorization": basic_auth_header(access_token),
                "Content-Type": "application/json",
            },
            transport=http_transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Make an authenticated GET request.

        Args:
            path: API path relative to the organization URL (e.g., "/_apis/projects")
            params: Extra query parameters

        Returns:
            Parsed JSON response

        Raises:
            AzureDevOpsError: On API errors, network failures or unreadable bodies
        """
        query = {**(params or {}), "api-version": self.api_version}

        url = f"{self.base_url}{path}"

        async def make_request() -> httpx.Response:
            log_http_request("GET", url, dict(self._client.headers))
            started = time.monotonic()
            response = await self._client.get(path, params=query)
            log_http_response(
                response.status_code, url, elapsed_ms=(time.monotonic() - started) * 1000
            )
            return response

        return await self._execute_with_retry(make_request)

    async def _execute_with_retry(
        self, request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]]
    ) -> dict[str, Any]:
        """
        Execute a request, retrying retryable errors when configured to.

        Raises:
            AzureDevOpsError: On non-retryable errors or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                response = await request_fn()

                if response.status_code < 400:
                    return self._parse_body(response)

                error = self._parse_error_response(response)

                if not self._should_retry(response.status_code, attempt):
                    raise error

                last_error = error

                retry_after = response.headers.get("Retry-After")
                wait_time = self._get_backoff_time(attempt, retry_after)
                await asyncio.sleep(wait_time)

            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= self.retry_config.max_retries:
                    raise ServerError("CONNECTION_ERROR", str(e)) from e

                last_error = e
                wait_time = self._get_backoff_time(attempt, None)
                await asyncio.sleep(wait_time)

        if last_error:
            if isinstance(last_error, AzureDevOpsError):
                raise last_error
            raise ServerError("MAX_RETRIES_EXCEEDED", str(last_error))

        raise ServerError("UNKNOWN_ERROR", "Request failed with no error details")

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        if attempt >= self.retry_config.max_retries:
            return False

        return status_code in self.retry_config.retry_on

    def _get_backoff_time(
        self, attempt: int, retry_after: str | None
    ) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass  # Fall through to exponential backoff

        base_wait = self.retry_config.backoff_factor ** attempt

        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)
        wait_time = base_wait + jitter

        return min(wait_time, self.retry_config.max_backoff)

    @staticmethod
    def _parse_body(response: httpx.Response) -> dict[str, Any]:
        # Azure DevOps answers an expired token with a 203 sign-in page.
        try:
            data = response.json()
        except ValueError as e:
            raise ServerError(
                "INVALID_RESPONSE",
                f"Expected JSON, got {response.headers.get('Content-Type', 'unknown content')}",
                response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise ServerError(
                "INVALID_RESPONSE", "Expected a JSON object", response.status_code
            )
        return data

    def _parse_error_response(self, response: httpx.Response) -> AzureDevOpsError:
        """
        Parse an error response into a typed exception.

        Azure DevOps error bodies look like
        ``{"message": "...", "typeKey": "ProjectDoesNotExistWithNameException"}``.
        """
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        status_code = response.status_code
        code = data.get("typeKey") or f"HTTP_{status_code}"
        message = data.get("message") or f"HTTP {status_code}"

        if status_code == 401:
            return AuthenticationError(code, message, status_code)
        elif status_code == 403:
            return AuthorizationError(code, message, status_code)
        elif status_code == 404:
            return NotFoundError(code, message, status_code)
        elif status_code == 429:
            retry_after_str = response.headers.get("Retry-After", "60")
            try:
                retry_after = int(retry_after_str)
            except ValueError:
                retry_after = 60
            return RateLimitedError(code, message, retry_after, status_code)
        elif status_code >= 500:
            return ServerError(code, message, status_code)
        else:
            return ValidationError(code, message, status_code)
