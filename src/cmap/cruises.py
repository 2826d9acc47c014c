"""
CMAP cruise operations

Cruise lookups by name must resolve to exactly one cruise record; every
cruise-scoped query is then issued against that record's numeric ID.
"""

import pandas as pd

from .client import CMAPClient
from .encoding import sql_literal
from .errors import AmbiguousLookup, DataUnavailable, NotFound
from .logging import cruise_logger as logger


def cruises(client: CMAPClient) -> pd.DataFrame:
    """Return the list of cruises in the database."""
    return client.query("EXEC uspCruises")


def cruise_by_name(client: CMAPClient, cruise_name: str) -> pd.DataFrame:
    """
    Look up a cruise by its official name or nickname.

    Args:
        client: Request executor
        cruise_name: Cruise name, partial names are matched by the server

    Returns:
        Single-row table describing the cruise

    Raises:
        NotFound: If no cruise matches
        AmbiguousLookup: If more than one cruise matches
    """
    df = client.query(f"EXEC uspCruiseByName {sql_literal(cruise_name)}")
    if df.empty:
        raise NotFound(f"Invalid cruise name: {cruise_name}")
    if len(df) > 1:
        names = ", ".join(str(n) for n in df["Name"]) if "Name" in df.columns else f"{len(df)} records"
        logger.warning(f"ambiguous cruise name | name:{cruise_name} | matches:{names}")
        raise AmbiguousLookup(
            f"More than one cruise found for '{cruise_name}' ({names}). "
            "Please provide a more specific cruise name.",
            matches=df,
        )
    return df


def cruise_id(client: CMAPClient, cruise_name: str) -> int:
    return int(cruise_by_name(client, cruise_name)["ID"].iloc[0])


def cruise_bounds_by_id(client: CMAPClient, cruise_id: int) -> pd.DataFrame:
    return client.query(f"EXEC uspCruiseBounds {int(cruise_id)}")


def cruise_bounds(client: CMAPClient, cruise_name: str) -> pd.DataFrame:
    """Return the space-time extent (dt, lat, lon bounds) of a cruise."""
    return cruise_bounds_by_id(client, cruise_id(client, cruise_name))


def cruise_trajectory(client: CMAPClient, cruise_name: str) -> pd.DataFrame:
    """Return the time-ordered positions of a cruise."""
    return client.query(f"EXEC uspCruiseTrajectory {cruise_id(client, cruise_name)}")


def cruise_variables(client: CMAPClient, cruise_name: str) -> pd.DataFrame:
    """Return the variables measured during a cruise."""
    return client.query(f"SELECT * FROM dbo.udfCruiseVariables({cruise_id(client, cruise_name)})")


BOUNDS_COLUMNS = ("dt1", "dt2", "lat1", "lat2", "lon1", "lon2")


def first_bounds_row(bounds: pd.DataFrame, cruise_name: str) -> pd.Series:
    missing = [col for col in BOUNDS_COLUMNS if col not in bounds.columns]
    if bounds.empty or missing:
        raise DataUnavailable(f"No trajectory bounds found for cruise: {cruise_name}")
    return bounds.iloc[0]
