"""
Deferred calls captured while a client is collecting a multicall batch.

Two shapes are accepted wherever a batch is built: a ``Call`` returned by a
client in collecting mode, or a plain ``{"methodName": ..., "params": [...]}``
mapping. Both are validated into a ``CallSpec`` by ``to_call_spec`` and encode
to the same ``BatchRequestItem`` wire shape.
"""

from __future__ import annotations

import typing as t
from collections.abc import Mapping
from dataclasses import dataclass, field

from rpcbatch.exceptions import CallAlreadyBound, CallNotBound, InvalidArgument
from rpcbatch.models import BatchRequestItem

_UNSET: t.Any = object()


@dataclass(eq=False)
class Call:
    """
    Placeholder for a call made while batching, later bound to its result.

    Parameters
    ----------
    method_name : str
        Fully-qualified remote method name.
    params : tuple[typing.Any, ...]
        Positional arguments of the call.
    index : int | None
        Position in the outgoing batch, assigned when the batch is encoded.
    """

    method_name: str
    params: tuple[t.Any, ...] = ()
    index: int | None = None
    _value: t.Any = field(default=_UNSET, repr=False)

    @property
    def is_bound(self) -> bool:
        return self._value is not _UNSET

    @property
    def value(self) -> t.Any:
        """
        The normalized result of the call.

        Raises
        ------
        CallNotBound
            If the batch holding this call has not been executed yet.
        """
        if self._value is _UNSET:
            raise CallNotBound(f"Call to {self.method_name!r} has not been executed yet")
        return self._value

    def bind(self, value: t.Any) -> None:
        if self._value is not _UNSET:
            raise CallAlreadyBound(f"Call to {self.method_name!r} is already bound")
        self._value = value

    def encode(self) -> dict[str, t.Any]:
        return BatchRequestItem(method_name=self.method_name, params=list(self.params)).as_wire()


@dataclass(eq=False)
class RawCall:
    """A ``{"methodName", "params"}`` mapping supplied directly to a multicall."""

    method_name: str
    params: list[t.Any] = field(default_factory=list)
    index: int | None = None

    @classmethod
    def from_mapping(cls, spec: Mapping[str, t.Any]) -> RawCall:
        params = spec.get("params")
        if params is None:
            params = []
        elif isinstance(params, (list, tuple)):
            params = list(params)
        else:
            params = [params]
        return cls(method_name=spec["methodName"], params=params)

    def encode(self) -> dict[str, t.Any]:
        return BatchRequestItem(method_name=self.method_name, params=self.params).as_wire()


CallSpec = Call | RawCall


def is_raw_call(value: t.Any) -> bool:
    return isinstance(value, Mapping) and "methodName" in value


def to_call_spec(item: t.Any, position: t.Any) -> CallSpec:
    """
    Validate one batch item.

    Parameters
    ----------
    item : typing.Any
        A ``Call`` or a mapping carrying ``methodName``.
    position : typing.Any
        Key or index of the item in the caller's collection, used in errors.

    Returns
    -------
    CallSpec
        The validated call.

    Raises
    ------
    InvalidArgument
        If the item is neither form, has an empty method name, or is a call
        that was already bound by a previous batch.
    """
    if isinstance(item, Call):
        if item.is_bound:
            raise InvalidArgument(
                f"Argument {position} is a call that was already executed",
                position=position,
            )
        return item
    if is_raw_call(item):
        method_name = item["methodName"]
        if not isinstance(method_name, str) or not method_name:
            raise InvalidArgument(
                f"Argument {position} has an invalid methodName: {method_name!r}",
                position=position,
            )
        return RawCall.from_mapping(item)
    raise InvalidArgument(f"Argument {position} is not a valid call", position=position)
