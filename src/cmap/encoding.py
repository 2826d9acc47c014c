"""
Query string encoding

Turns an ordered mapping of field names to scalar values into the
``key=value&key=value`` query string sent to the CMAP API.
"""

import numbers
from datetime import date, datetime
from typing import Any, Mapping
from urllib.parse import quote

import numpy as np

from .errors import MalformedRequest


def encode_value(value: Any) -> str:
    """
    Render one scalar as the text sent on the wire.

    Raises:
        MalformedRequest: If the value is not a supported scalar
    """
    if isinstance(value, (bool, np.bool_)) or value is None:
        raise MalformedRequest(f"Unsupported query value: {value!r}")
    if isinstance(value, str):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, np.datetime64):
        return np.datetime_as_string(value)
    if isinstance(value, numbers.Real):
        if isinstance(value, numbers.Integral):
            return str(int(value))
        return repr(float(value))
    raise MalformedRequest(f"Unsupported query value of type {type(value).__name__}: {value!r}")


def encode_payload(payload: Mapping[str, Any]) -> str:
    """
    Encode a payload mapping as a URL query string.

    Pairs keep the mapping's order, values are percent-encoded with no safe
    characters, and pairs are joined with ``&`` (no trailing separator).

    Args:
        payload: Ordered mapping of field name to scalar value

    Returns:
        Encoded query string (empty for an empty payload)

    Raises:
        MalformedRequest: If a key is empty or a value cannot be encoded

    Examples:
        encode_payload({"query": "EXEC uspCatalog"})
        # Returns: "query=EXEC%20uspCatalog"
    """
    pairs = []
    for key, value in payload.items():
        if not isinstance(key, str) or not key:
            raise MalformedRequest(f"Query field names must be non-empty strings, got {key!r}")
        try:
            text = encode_value(value)
        except MalformedRequest as e:
            raise MalformedRequest(f"Cannot encode field '{key}': {e.message}") from None
        pairs.append(f"{quote(key, safe='')}={quote(text, safe='')}")
    return "&".join(pairs)


def sql_literal(value: Any) -> str:
    """Quote a value as a T-SQL string literal, doubling embedded quotes."""
    return "'" + encode_value(value).replace("'", "''") + "'"
