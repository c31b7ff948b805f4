"""
Batch controller returned by ``client.system.multicall()``.
"""

from __future__ import annotations

import typing as t

import structlog

from rpcbatch.call import Call

if t.TYPE_CHECKING:
    from rpcbatch.client import Client

log = structlog.get_logger(__name__)


class MultiCall:
    """
    Start and flush a batch of deferred calls on a root client.

    ``start()`` switches the whole client, including every namespace, into
    collecting mode: calls return ``Call`` placeholders instead of going to
    the server. ``execute()`` sends them as one request and binds each
    placeholder to its result.

    Parameters
    ----------
    client : Client
        Root client owning the batch state.
    method_name : str
        Server method used to send the batch.

    Example::

        with client.system.multicall() as batch:
            a = client.add(1, 2)
            b = client.math.mul(3, 4)
        a.value, b.value
    """

    def __init__(self, client: Client, method_name: str = "system.multicall") -> None:
        self._client = client
        self._method_name = method_name

    @property
    def collecting(self) -> bool:
        return self._client._state.collecting

    def start(self) -> None:
        state = self._client._state
        with state.lock:
            state.collecting = True
        log.debug(event="Started collecting calls", method=self._method_name)

    def execute(self) -> list[t.Any] | t.Any | None:
        """
        Send the collected calls and bind their results.

        Returns
        -------
        list[typing.Any] | typing.Any | None
            The results in call order, the fault mapping when the whole batch
            failed and faults are not raised, or ``None`` when ``start()`` was
            not called.
        """
        state = self._client._state
        with state.lock:
            if not state.collecting:
                log.debug(event="No batch to execute", method=self._method_name)
                return None
            pending = state.drain()
        return self._client._dispatch(self._method_name, (pending,))

    def discard(self) -> list[Call]:
        """Leave collecting mode without sending anything."""
        pending = self._client._state.drain()
        log.debug(event="Discarded batch", method=self._method_name, count=len(pending))
        return pending

    def __enter__(self) -> MultiCall:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.execute()
        else:
            self.discard()

    def __repr__(self) -> str:
        return f"<MultiCall {self._method_name} collecting={self.collecting}>"
