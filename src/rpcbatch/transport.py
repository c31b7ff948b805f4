"""
Network transports used by the client to post serialized requests.
"""

from __future__ import annotations

import typing as t

import httpx
import structlog

from rpcbatch.exceptions import TransportError

log = structlog.get_logger(__name__)


@t.runtime_checkable
class Transport(t.Protocol):
    """Posts a request body to an URL and returns the response body."""

    def post(self, url: str, request: bytes) -> bytes: ...


class HttpTransport:
    """
    Blocking HTTP transport backed by ``httpx.Client``.

    Parameters
    ----------
    timeout : float | None
        Request timeout in seconds, forwarded to httpx.
    headers : dict[str, str] | None, optional
        Extra headers sent with every request.
    client : httpx.Client | None, optional
        Pre-built client, e.g. one using ``httpx.MockTransport``. When given,
        the transport does not close it.
    **client_kwargs : typing.Any
        Forwarded to ``httpx.Client`` when ``client`` is not given.
    """

    content_type = "text/xml"

    def __init__(
        self,
        timeout: float | None = 30.0,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
        **client_kwargs: t.Any,
    ) -> None:
        self._headers = {"Content-Type": self.content_type, **(headers or {})}
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, **client_kwargs)
        self.response_headers: httpx.Headers | None = None

    def post(self, url: str, request: bytes) -> bytes:
        """
        Post ``request`` to ``url``.

        Raises
        ------
        TransportError
            If the endpoint cannot be reached, answers with an HTTP error
            status, or returns an empty body.
        """
        log.debug(event="Posting request", url=url, size=len(request))
        try:
            response = self._client.post(url, content=request, headers=self._headers)
        except httpx.HTTPError as exc:
            raise TransportError(f"Could not access {url}: {exc}", url=url) from exc
        self.response_headers = response.headers
        if response.is_error:
            raise TransportError(
                f"Could not access {url}: HTTP {response.status_code}", url=url
            )
        if not response.content:
            raise TransportError(f"Could not access {url}: empty response", url=url)
        log.debug(
            event="Received response",
            url=url,
            status_code=response.status_code,
            size=len(response.content),
        )
        return response.content

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
