"""
Time-series binning intervals

Each interval kind maps to exactly one server-side binning procedure.
Free-text tokens are validated against a closed synonym table.
"""

from enum import Enum
from typing import Optional

from .errors import InvalidParameter


class Interval(Enum):
    """Temporal binning applied by the time-series procedures."""

    NATIVE = "uspTimeSeries"
    WEEKLY = "uspWeekly"
    MONTHLY = "uspMonthly"
    QUARTERLY = "uspQuarterly"
    ANNUAL = "uspAnnual"

    @property
    def procedure(self) -> str:
        return self.value

    @classmethod
    def from_token(cls, token: Optional[str]) -> "Interval":
        """
        Resolve a user-supplied interval token.

        Args:
            token: Interval name or abbreviation; empty string or None means
                the dataset's native resolution

        Raises:
            InvalidParameter: If the token is not a recognized interval
        """
        if isinstance(token, Interval):
            return token
        if token is None:
            return cls.NATIVE
        if not isinstance(token, str):
            raise InvalidParameter(f"Interval must be a string, got {type(token).__name__}")

        normalized = token.strip().lower()
        try:
            return _TOKENS[normalized]
        except KeyError:
            raise InvalidParameter(
                f"Unrecognized interval {token!r}. Valid intervals: {', '.join(repr(t) for t in _TOKENS)}"
            ) from None


_TOKENS = {
    '': Interval.NATIVE,
    'w': Interval.WEEKLY,
    'week': Interval.WEEKLY,
    'weekly': Interval.WEEKLY,
    'm': Interval.MONTHLY,
    'month': Interval.MONTHLY,
    'monthly': Interval.MONTHLY,
    'q': Interval.QUARTERLY,
    's': Interval.QUARTERLY,
    'season': Interval.QUARTERLY,
    'seasonal': Interval.QUARTERLY,
    'seasonality': Interval.QUARTERLY,
    'quarterly': Interval.QUARTERLY,
    'y': Interval.ANNUAL,
    'a': Interval.ANNUAL,
    'year': Interval.ANNUAL,
    'yearly': Interval.ANNUAL,
    'annual': Interval.ANNUAL,
}


def interval_to_uspName(interval: Optional[str]) -> str:
    """Return the stored-procedure name that bins a time series at ``interval``."""
    return Interval.from_token(interval).procedure
