"""
Request/response serialization.

The client only depends on the ``Codec`` protocol. ``XmlRpcCodec`` adapts the
standard library ``xmlrpc.client`` marshaller to it.
"""

from __future__ import annotations

import typing as t
import xmlrpc.client
from xml.dom import minidom
from xml.parsers.expat import ExpatError

import structlog

from rpcbatch.exceptions import DecodingError, EncodingError
from rpcbatch.models import OutputOptions

log = structlog.get_logger(__name__)


@t.runtime_checkable
class Codec(t.Protocol):
    """Turns calls into request bytes and response bytes into values."""

    def encode(
        self, method_name: str, args: t.Sequence[t.Any], options: OutputOptions
    ) -> bytes: ...

    def decode(self, data: bytes, encoding: str) -> t.Any: ...


XML_HEADER = "<?xml version='1.0' encoding='{encoding}'?>"


def _drop_layout_text(node: minidom.Node) -> None:
    # Whitespace next to element siblings is layout; text-only elements keep theirs.
    has_elements = any(child.nodeType == child.ELEMENT_NODE for child in node.childNodes)
    for child in list(node.childNodes):
        if child.nodeType == child.ELEMENT_NODE:
            _drop_layout_text(child)
        elif has_elements and child.nodeType == child.TEXT_NODE and not child.data.strip():
            node.removeChild(child)


def layout(payload: str, options: OutputOptions) -> str:
    """
    Re-lay a marshalled request according to ``options.verbosity``.

    ``newlines_only`` keeps the marshaller's one-element-per-line output,
    ``pretty`` indents nested elements and ``no_white_space`` removes all
    whitespace between tags. String contents are never altered.
    """
    if options.verbosity == "newlines_only":
        return payload
    root = minidom.parseString(payload).documentElement
    _drop_layout_text(root)
    header = XML_HEADER.format(encoding=options.encoding)
    if options.verbosity == "pretty":
        return f"{header}\n{root.toprettyxml(indent='  ')}"
    return f"{header}{root.toxml()}"


class XmlRpcCodec:
    """
    XML-RPC codec backed by ``xmlrpc.client``.

    Faults are returned as ``{"faultCode": ..., "faultString": ...}`` mappings
    rather than raised, and ``base64``/``dateTime.iso8601`` values are left as
    ``xmlrpc.client.Binary``/``xmlrpc.client.DateTime`` so the client decides
    whether to convert them.
    """

    def encode(
        self, method_name: str, args: t.Sequence[t.Any], options: OutputOptions
    ) -> bytes:
        try:
            payload = xmlrpc.client.dumps(
                tuple(args),
                methodname=method_name,
                encoding=options.encoding,
                allow_none=options.allow_none,
            )
            payload = layout(payload, options)
        except (TypeError, OverflowError, ExpatError) as exc:
            raise EncodingError(f"Cannot encode call to {method_name!r}: {exc}") from exc
        if "non-ascii" in options.escaping:
            payload = payload.encode("ascii", errors="xmlcharrefreplace").decode("ascii")
        return payload.encode(options.encoding, errors="xmlcharrefreplace")

    def decode(self, data: bytes, encoding: str) -> t.Any:
        source: bytes | str = data
        if not data.lstrip().startswith(b"<?xml"):
            try:
                source = data.decode(encoding)
            except UnicodeDecodeError as exc:
                raise DecodingError(f"Response is not valid {encoding}: {exc}") from exc
        try:
            params, _ = xmlrpc.client.loads(source, use_builtin_types=False)
        except xmlrpc.client.Fault as fault:
            log.debug(event="Decoded fault response", fault_code=fault.faultCode)
            return {"faultCode": fault.faultCode, "faultString": fault.faultString}
        except (ExpatError, xmlrpc.client.ResponseError, ValueError, TypeError) as exc:
            raise DecodingError(f"Malformed XML-RPC response: {exc}") from exc
        if not params:
            return None
        if len(params) == 1:
            return params[0]
        return list(params)
