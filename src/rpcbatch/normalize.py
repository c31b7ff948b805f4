"""
Response normalization: fault detection, single-element unwrapping and
decoding of XML-RPC special types into native values.
"""

from __future__ import annotations

import calendar
import datetime
import typing as t
import xmlrpc.client
from collections.abc import Mapping

from rpcbatch.exceptions import DecodingError, RemoteFault


def is_fault(value: t.Any) -> bool:
    """
    Detect a fault response.

    Parameters
    ----------
    value : typing.Any
        A decoded response or batch item.

    Returns
    -------
    bool
        ``True`` when ``value`` is a mapping carrying both ``faultCode`` and
        ``faultString``.
    """
    return isinstance(value, Mapping) and "faultCode" in value and "faultString" in value


def raise_for_fault(value: Mapping[str, t.Any]) -> t.NoReturn:
    raise RemoteFault(str(value["faultString"]), value["faultCode"], fault=value)


def unwrap(value: t.Any) -> t.Any:
    # Non-fault multicall results are wrapped in a one-element array.
    if isinstance(value, (list, tuple)) and len(value) == 1:
        return value[0]
    return value


def to_timestamp(value: xmlrpc.client.DateTime) -> int:
    """
    Convert a ``dateTime.iso8601`` value to a Unix timestamp.

    The XML-RPC form ``20240102T03:04:05`` is tried first, then any ISO 8601
    form such as ``2024-01-02T03:04:05+01:00``. Values without a zone are
    read as UTC.
    """
    text = str(value.value).strip()
    try:
        parsed = datetime.datetime.strptime(text, "%Y%m%dT%H:%M:%S")
    except ValueError:
        try:
            parsed = datetime.datetime.fromisoformat(text)
        except ValueError as exc:
            raise DecodingError(f"Unrecognized dateTime.iso8601 value: {text!r}") from exc
    if parsed.tzinfo is None:
        return calendar.timegm(parsed.timetuple())
    return int(parsed.timestamp())


def auto_decode(value: t.Any) -> t.Any:
    """
    Convert ``Binary`` to ``bytes`` and ``DateTime`` to a Unix timestamp.

    Lists, tuples and mappings are walked recursively; anything else is
    returned unchanged.
    """
    if isinstance(value, xmlrpc.client.Binary):
        return value.data
    if isinstance(value, xmlrpc.client.DateTime):
        return to_timestamp(value)
    if isinstance(value, list):
        return [auto_decode(item) for item in value]
    if isinstance(value, tuple):
        return tuple(auto_decode(item) for item in value)
    if isinstance(value, dict):
        return {key: auto_decode(item) for key, item in value.items()}
    return value


def normalize_result(value: t.Any, *, decode: bool) -> t.Any:
    """
    Normalize one non-fault result.

    Parameters
    ----------
    value : typing.Any
        Decoded value.
    decode : bool
        Whether to apply ``auto_decode`` after unwrapping.

    Returns
    -------
    typing.Any
        The normalized value. Faults are returned untouched.
    """
    if is_fault(value):
        return value
    value = unwrap(value)
    if decode:
        value = auto_decode(value)
    return value
