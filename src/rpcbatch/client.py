"""
XML-RPC client whose attributes are remote namespaces and whose calls are
remote method calls.

    >>> client = Client("https://example.com/RPC2")
    >>> client.film.getScore("abc", 500)          # calls "film.getScore"

Batching goes through the ``system.multicall`` method:

    >>> batch = client.system.multicall()
    >>> batch.start()
    >>> methods = client.system.listMethods()     # a deferred ``Call``
    >>> batch.execute()
    >>> methods.value

Every attribute that does not start with an underscore is a namespace, so the
client's own state and helpers all live under underscore names.
"""

from __future__ import annotations

import threading
import typing as t
from collections.abc import Mapping
from dataclasses import dataclass, field

import structlog

from rpcbatch.call import Call, CallSpec, is_raw_call, to_call_spec
from rpcbatch.codec import Codec, XmlRpcCodec
from rpcbatch.exceptions import DecodingError, InvalidArgument
from rpcbatch.models import OutputOptions
from rpcbatch.multicall import MultiCall
from rpcbatch.normalize import is_fault, normalize_result, raise_for_fault
from rpcbatch.transport import HttpTransport, Transport
from rpcbatch.utils.logging import logging_context

log = structlog.get_logger(__name__)

MULTICALL_METHODS = frozenset({"system.multicall", "system.multiCall"})


@dataclass
class BatchState:
    """
    Mutable state owned by a root client and shared by all its namespaces.

    Parameters
    ----------
    collecting : bool
        Whether calls are currently deferred into ``pending``.
    pending : list[Call]
        Calls captured since ``MultiCall.start``.
    last_request : bytes | None
        Body of the most recent request, for debugging.
    last_response : bytes | None
        Body of the most recent response, for debugging.
    """

    collecting: bool = False
    pending: list[Call] = field(default_factory=list)
    last_request: bytes | None = None
    last_response: bytes | None = None
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def drain(self) -> list[Call]:
        """Leave collecting mode and hand over the pending calls."""
        with self.lock:
            pending = self.pending
            self.pending = []
            self.collecting = False
        return pending


@dataclass
class ClientFlags:
    throw_on_fault: bool = False
    auto_decode: bool = True


class Client:
    """
    A node in the remote namespace tree.

    The root node is built by the caller; child nodes are created on
    attribute access and share the root's transport, codec, flags and
    ``BatchState``.

    Parameters
    ----------
    url : str
        XML-RPC endpoint.
    options : typing.Mapping[str, typing.Any] | OutputOptions | None, optional
        Output options, see ``OutputOptions``.
    transport : Transport | None, optional
        Transport used to post requests. Defaults to ``HttpTransport()``.
    codec : Codec | None, optional
        Serializer. Defaults to ``XmlRpcCodec()``.
    throw_on_fault : bool, optional
        Raise ``RemoteFault`` for fault responses instead of returning them.
    auto_decode : bool, optional
        Convert ``base64`` results to ``bytes`` and ``dateTime.iso8601``
        results to Unix timestamps.
    """

    def __init__(
        self,
        url: str,
        options: t.Mapping[str, t.Any] | OutputOptions | None = None,
        transport: Transport | None = None,
        *,
        codec: Codec | None = None,
        throw_on_fault: bool = False,
        auto_decode: bool = True,
    ) -> None:
        self._url = url
        self._namespace: str | None = None
        self._options = OutputOptions.from_mapping(options)
        self._transport: Transport = transport if transport is not None else HttpTransport()
        self._codec: Codec = codec if codec is not None else XmlRpcCodec()
        self._root: Client = self
        self._children: dict[str, Client] = {}
        self._flags = ClientFlags(throw_on_fault=throw_on_fault, auto_decode=auto_decode)
        self._state = BatchState()

    @classmethod
    def _child_of(cls, parent: Client, namespace: str) -> Client:
        child = cls.__new__(cls)
        child._url = parent._url
        child._namespace = namespace
        child._options = parent._options
        child._transport = parent._transport
        child._codec = parent._codec
        child._root = parent._root
        child._children = {}
        return child

    def __getattr__(self, name: str) -> Client:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._resolve(name)

    def __call__(self, *args: t.Any, **kwargs: t.Any) -> t.Any:
        if kwargs:
            raise InvalidArgument(
                f"Keyword arguments are not supported by XML-RPC: {sorted(kwargs)}"
            )
        if self._namespace is None:
            raise InvalidArgument("Cannot call the client itself, call one of its methods")
        return self._root._dispatch(self._namespace, args)

    def __repr__(self) -> str:
        if self._namespace is None:
            return f"<Client {self._url}>"
        return f"<Client {self._url} namespace={self._namespace}>"

    def __enter__(self) -> Client:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._close()

    def _close(self) -> None:
        close = getattr(self._root._transport, "close", None)
        if callable(close):
            close()

    def _resolve(self, name: str) -> Client:
        """
        Return the cached namespace child ``name``, creating it on first use.
        """
        child = self._children.get(name)
        if child is None:
            namespace = f"{self._namespace}.{name}" if self._namespace else name
            child = Client._child_of(self, namespace)
            self._children[name] = child
        return child

    def _invoke(self, name: str, args: t.Sequence[t.Any] = ()) -> t.Any:
        """
        Call method ``name`` relative to this node's namespace.
        """
        full_name = f"{self._namespace}.{name}" if self._namespace else name
        return self._root._dispatch(full_name, tuple(args))

    @property
    def _request(self) -> bytes | None:
        return self._root._state.last_request

    @property
    def _response(self) -> bytes | None:
        return self._root._state.last_response

    @property
    def _throw_on_fault(self) -> bool:
        return self._root._flags.throw_on_fault

    @_throw_on_fault.setter
    def _throw_on_fault(self, value: bool) -> None:
        self._root._flags.throw_on_fault = value

    @property
    def _auto_decode(self) -> bool:
        return self._root._flags.auto_decode

    @_auto_decode.setter
    def _auto_decode(self, value: bool) -> None:
        self._root._flags.auto_decode = value

    def _dispatch(self, name: str, args: tuple[t.Any, ...]) -> t.Any:
        if name in MULTICALL_METHODS:
            if not args:
                return MultiCall(self._root, name)
            return self._execute_batch(name, args)

        state = self._root._state
        with state.lock:
            if state.collecting:
                call = Call(method_name=name, params=args)
                state.pending.append(call)
                log.debug(event="Deferred call", method=name, pending=len(state.pending))
                return call

        result = self._round_trip(name, args)
        if is_fault(result):
            return self._handle_fault(name, result)
        return normalize_result(result, decode=self._auto_decode)

    def _round_trip(self, name: str, args: t.Sequence[t.Any]) -> t.Any:
        state = self._root._state
        with logging_context(url=self._url, method=name):
            request = self._codec.encode(name, args, self._options)
            state.last_request = request
            state.last_response = None
            log.debug(event="Calling remote method")
            response = self._transport.post(self._url, request)
            state.last_response = response
            return self._codec.decode(response, self._options.encoding)

    def _handle_fault(self, name: str, fault: Mapping[str, t.Any]) -> t.Any:
        log.info(
            event="Remote fault",
            method=name,
            fault_code=fault["faultCode"],
            fault_string=fault["faultString"],
        )
        if self._throw_on_fault:
            raise_for_fault(fault)
        return fault

    def _execute_batch(self, name: str, args: tuple[t.Any, ...]) -> t.Any:
        """
        Send a list of calls as one ``system.multicall`` request.

        ``args`` is either a single collection of calls (list, tuple or
        mapping) or the calls themselves. Each item is a ``Call`` or a
        ``{"methodName": ..., "params": [...]}`` mapping. The result mirrors
        the collection: a list of results, or a dict with the same keys.
        ``Call`` items are also bound to their result.
        """
        source: t.Any = args
        if (
            len(args) == 1
            and isinstance(args[0], (list, tuple, Mapping))
            and not is_raw_call(args[0])
        ):
            source = args[0]
        keyed = list(source.items()) if isinstance(source, Mapping) else list(enumerate(source))

        specs: list[tuple[t.Any, CallSpec]] = []
        seen: set[int] = set()
        for key, item in keyed:
            spec = to_call_spec(item, key)
            if id(spec) in seen:
                raise InvalidArgument(f"Argument {key} appears twice in the batch", position=key)
            seen.add(id(spec))
            specs.append((key, spec))

        # A rejected batch leaves any collected calls in place.
        dropped = self._root._state.drain()
        if dropped:
            log.warning(event="Discarded pending calls for explicit multicall", count=len(dropped))

        items = []
        for index, (_, spec) in enumerate(specs):
            spec.index = index
            items.append(spec.encode())

        log.debug(event="Executing multicall", method=name, size=len(items))
        result = self._round_trip(name, (items,))
        if is_fault(result):
            return self._handle_fault(name, result)
        if not isinstance(result, (list, tuple)) or len(result) < len(specs):
            raise DecodingError(
                f"Expected {len(specs)} results from {name}, got {result!r:.200}"
            )

        values: dict[t.Any, t.Any] = {}
        for key, spec in specs:
            value = normalize_result(result[spec.index], decode=self._auto_decode)
            if isinstance(spec, Call):
                spec.bind(value)
            values[key] = value

        if isinstance(source, Mapping):
            return values
        return [values[key] for key, _ in specs]
