"""
rpcbatch-specific runtime exceptions.
"""

from __future__ import annotations

import typing as t


class RpcbatchError(Exception):
    """
    Base class for every error raised by rpcbatch.
    """


class InvalidArgument(RpcbatchError, ValueError):
    """
    Raised when a call is malformed before any network activity happens.

    Parameters
    ----------
    message : str
        Human-readable description.
    position : typing.Any, optional
        Key or index of the offending batch item, when relevant.
    """

    def __init__(self, message: str, *, position: t.Any = None) -> None:
        super().__init__(message)
        self.position = position


class RemoteFault(RpcbatchError):
    """
    Server-reported fault, raised only when ``throw_on_fault`` is enabled.

    Parameters
    ----------
    message : str
        The fault string sent by the server.
    code : int
        The fault code sent by the server.
    fault : dict[str, typing.Any] | None, optional
        The original fault mapping.
    """

    def __init__(
        self,
        message: str,
        code: int,
        *,
        fault: t.Mapping[str, t.Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        if fault is None:
            fault = {"faultCode": code, "faultString": message}
        self.fault = dict(fault)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class EncodingError(RpcbatchError):
    """The codec could not serialize a request."""


class DecodingError(RpcbatchError):
    """The codec could not deserialize a response, or a batch response is malformed."""


class TransportError(RpcbatchError):
    """
    The transport could not complete the exchange.

    Parameters
    ----------
    message : str
        Human-readable description.
    url : str | None, optional
        Endpoint that was being contacted.
    """

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class ConfigurationError(RpcbatchError, ValueError):
    """Invalid client options or settings."""


class CallAlreadyBound(RpcbatchError, RuntimeError):
    """A deferred call was bound to a result twice."""


class CallNotBound(RpcbatchError, RuntimeError):
    """The value of a deferred call was read before its batch was executed."""
