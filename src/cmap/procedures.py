"""
Typed stored-procedure requests

The subset procedures bind their arguments by position, so each request is a
dataclass whose field order is the wire order.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict

import pandas as pd

from .errors import InvalidParameter

SUBSET_ROUTE = "/api/data/sp"
QUERY_ROUTE = "/api/data/query"


def _as_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidParameter(f"{name} must be numeric, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be numeric, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidParameter(f"{name} must be finite, got {value!r}")
    return number


def _as_timestamp(name: str, value: Any) -> pd.Timestamp:
    try:
        stamp = pd.Timestamp(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} is not a valid date: {value!r}") from None
    if pd.isna(stamp):
        raise InvalidParameter(f"{name} is not a valid date: {value!r}")
    return stamp


@dataclass(frozen=True)
class BoundingBox:
    """Space-time-depth window of a query.

    Dates are passed to the server as given; they are only parsed here to
    check ordering.
    """

    dt1: Any
    dt2: Any
    lat1: Any
    lat2: Any
    lon1: Any
    lon2: Any
    depth1: Any
    depth2: Any

    def validate(self) -> "BoundingBox":
        """
        Check the lower bound of each axis does not exceed the upper bound.

        Returns:
            self, so calls can be chained

        Raises:
            InvalidParameter: If a bound is malformed or the pair is reversed
        """
        if _as_timestamp("dt1", self.dt1) > _as_timestamp("dt2", self.dt2):
            raise InvalidParameter(f"dt1 ({self.dt1}) must not be later than dt2 ({self.dt2})")
        for axis in ("lat", "lon", "depth"):
            low = _as_float(f"{axis}1", getattr(self, f"{axis}1"))
            high = _as_float(f"{axis}2", getattr(self, f"{axis}2"))
            if low > high:
                raise InvalidParameter(f"{axis}1 ({low}) must not be greater than {axis}2 ({high})")
        return self

    def as_tuple(self) -> tuple:
        return (self.dt1, self.dt2, self.lat1, self.lat2, self.lon1, self.lon2, self.depth1, self.depth2)


@dataclass(frozen=True)
class SubsetRequest:
    """One call to a subset procedure (space-time, time series, profile, section)."""

    sp_name: str
    table: str
    variable: str
    bbox: BoundingBox

    def to_payload(self) -> Dict[str, Any]:
        """Return the procedure arguments in the server's positional order."""
        b = self.bbox
        return {
            "tableName": self.table,
            "fields": self.variable,
            "dt1": b.dt1,
            "dt2": b.dt2,
            "lat1": b.lat1,
            "lat2": b.lat2,
            "lon1": b.lon1,
            "lon2": b.lon2,
            "depth1": b.depth1,
            "depth2": b.depth2,
            "spName": self.sp_name,
        }
