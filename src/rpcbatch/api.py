"""
Main endpoint for users.
Exposes a `client` factory that builds a root `Client` from an URL, applying
environment settings unless they are overridden explicitly.
"""

import typing as t

import structlog

from rpcbatch.client import Client
from rpcbatch.codec import Codec
from rpcbatch.models import OutputOptions
from rpcbatch.settings import ClientSettings
from rpcbatch.transport import HttpTransport, Transport

log = structlog.get_logger(__name__)


def client(
    url: str,
    options: t.Mapping[str, t.Any] | OutputOptions | None = None,
    transport: Transport | None = None,
    *,
    codec: Codec | None = None,
    throw_on_fault: bool | None = None,
    auto_decode: bool | None = None,
    settings: ClientSettings | None = None,
) -> Client:
    """
    Create an XML-RPC client for ``url``.

    Parameters
    ----------
    url : str
        XML-RPC endpoint.
    options : typing.Mapping[str, typing.Any] | OutputOptions | None, optional
        Output options. Given keys override the settings' output options.
    transport : Transport | None, optional
        Transport to use. Defaults to an ``HttpTransport`` with the settings'
        timeout.
    codec : Codec | None, optional
        Serializer, defaults to ``XmlRpcCodec``.
    throw_on_fault : bool | None, optional
        Overrides ``settings.throw_on_fault``.
    auto_decode : bool | None, optional
        Overrides ``settings.auto_decode``.
    settings : ClientSettings | None, optional
        Defaults, read from the environment when omitted.

    Returns
    -------
    Client
        Root client.

    Notes
    -----
    >>> import rpcbatch
    >>> server = rpcbatch.client("https://example.com/RPC2", throw_on_fault=True)
    >>> server.system.listMethods()
    """
    settings = settings if settings is not None else ClientSettings.from_env()
    if isinstance(options, OutputOptions):
        output_options = options
    else:
        merged = settings.output_options.model_dump()
        merged.update(options or {})
        output_options = OutputOptions.from_mapping(merged)
    if transport is None:
        transport = HttpTransport(timeout=settings.timeout)
    log.debug(event="Creating client", url=url, encoding=output_options.encoding)
    return Client(
        url,
        output_options,
        transport,
        codec=codec,
        throw_on_fault=settings.throw_on_fault if throw_on_fault is None else throw_on_fault,
        auto_decode=settings.auto_decode if auto_decode is None else auto_decode,
    )
