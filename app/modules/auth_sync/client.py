"""Remote sync client.

The orchestrator depends only on the ``RemoteSyncClient`` protocol:

- ``put_credential(provider, secret)``: store an API key for a provider
- ``get_credential_status(provider)``: auth kind configured remotely, or None

Failures are raised as ``RemoteSyncError`` subclasses carrying an HTTP
status and timeout/connection flags. ``HttpRemoteSyncClient`` implements
the protocol over HTTP with httpx.
"""

from typing import Optional, Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from infrastructure.logging import get_module_logger
from infrastructure.security import REDACTION_MARKER, Secret
from modules.auth_sync.errors import NetworkError, ProviderSyncError
from modules.auth_sync.models import AuthKind

logger = get_module_logger()

MAX_ERROR_BODY_CHARS = 200


@runtime_checkable
class RemoteSyncClient(Protocol):
    """Transport-agnostic interface to the remote credential service."""

    async def put_credential(
        self, provider: str, secret: Secret, timeout: Optional[float] = None
    ) -> None:
        """Store ``secret`` as the API key for ``provider``.

        Raises:
            RemoteSyncError: On any transport or remote failure.
        """
        ...

    async def get_credential_status(
        self, provider: str, timeout: Optional[float] = None
    ) -> Optional[AuthKind]:
        """Return the auth kind configured remotely, None if absent.

        Raises:
            RemoteSyncError: On any transport or remote failure.
        """
        ...


def _redact(text: str, secret: Secret) -> str:
    value = secret.reveal()
    return text.replace(value, REDACTION_MARKER) if value else text


def _truncate(text: str, limit: int = MAX_ERROR_BODY_CHARS) -> str:
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class HttpRemoteSyncClient:
    """HTTP implementation of ``RemoteSyncClient``.

    Endpoints:
        PUT {base_url}/auth/{provider}  body {"type": "api", "key": ...}
        GET {base_url}/auth/{provider}  404 means nothing configured

    Args:
        base_url: Remote service base URL
        username: Optional HTTP basic auth username
        password: Optional HTTP basic auth password
        timeout: Default request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        username: str = "",
        password: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url:
            raise ValueError("base_url must not be empty")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        auth = httpx.BasicAuth(username, password) if username else None
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    def _path(self, provider: str) -> str:
        return f"/auth/{quote(provider, safe='')}"

    async def _request(
        self,
        method: str,
        provider: str,
        timeout: Optional[float],
        json: Optional[dict] = None,
    ) -> httpx.Response:
        try:
            return await self._client.request(
                method,
                self._path(provider),
                json=json,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except httpx.TimeoutException as e:
            raise NetworkError(
                f"Request to remote timed out for {provider}: {type(e).__name__}",
                is_timeout=True,
            ) from e
        except httpx.NetworkError as e:
            raise NetworkError(
                f"Connection to remote failed for {provider}: {type(e).__name__}",
                is_connection=True,
            ) from e
        except httpx.TransportError as e:
            raise NetworkError(
                f"Transport error talking to remote for {provider}: {type(e).__name__}"
            ) from e

    async def put_credential(
        self, provider: str, secret: Secret, timeout: Optional[float] = None
    ) -> None:
        response = await self._request(
            "PUT",
            provider,
            timeout,
            json={"type": AuthKind.API.value, "key": secret.reveal()},
        )
        if not response.is_success:
            raise ProviderSyncError(
                provider,
                status_code=response.status_code,
                body=_truncate(_redact(response.text, secret)),
            )
        logger.debug("remote_credential_stored", provider=provider)

    async def get_credential_status(
        self, provider: str, timeout: Optional[float] = None
    ) -> Optional[AuthKind]:
        response = await self._request("GET", provider, timeout)
        if response.status_code == 404:
            return None
        if not response.is_success:
            raise ProviderSyncError(
                provider, status_code=response.status_code, body=_truncate(response.text)
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderSyncError(
                provider, status_code=response.status_code, body="invalid JSON response"
            ) from e

        tag = payload.get("type") if isinstance(payload, dict) else None
        if tag is None:
            return None
        try:
            return AuthKind(tag)
        except ValueError as e:
            raise ProviderSyncError(
                provider,
                status_code=response.status_code,
                body=f"unrecognised auth type {tag!r}",
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpRemoteSyncClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
