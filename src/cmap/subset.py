"""
CMAP subset operations

Space-time subsets, binned time series, depth profiles, sections and
colocation requests. All of them are bounded by a space-time-depth box.
"""

from typing import Any, Optional, Sequence

import pandas as pd

from .catalog import is_climatology
from .client import CMAPClient
from .cruises import cruise_bounds_by_id, cruise_id, first_bounds_row
from .errors import DataUnavailable, InvalidParameter
from .intervals import Interval
from .logging import format_fields, query_logger as logger
from .match import CRUISE_TRAJECTORY_TABLE, MatchRequest, as_list, validate_targets
from .procedures import BoundingBox, SubsetRequest


def subset(
    client: CMAPClient,
    sp_name: str,
    table: str,
    variable: str,
    dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2
) -> pd.DataFrame:
    """
    Call a subset stored procedure over a bounding box.

    Args:
        client: Request executor
        sp_name: Stored procedure name, e.g. ``uspSpaceTime``
        table: Table name
        variable: Variable (column) name
        dt1, dt2: Start and end date or datetime
        lat1, lat2: Latitude bounds in degrees
        lon1, lon2: Longitude bounds in degrees
        depth1, depth2: Depth bounds in meters

    Raises:
        InvalidParameter: If a bound pair is reversed or malformed
    """
    bbox = BoundingBox(dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2).validate()
    request = SubsetRequest(sp_name=sp_name, table=table, variable=variable, bbox=bbox)
    logger.debug(f"subset | {format_fields(sp=sp_name, table=table, field=variable)}")
    return client.stored_proc(request)


def space_time(client: CMAPClient, table: str, variable: str,
               dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2) -> pd.DataFrame:
    """Return the subset of a variable in a space-time box, ordered by time, lat, lon and depth."""
    return subset(client, "uspSpaceTime", table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)


def time_series(client: CMAPClient, table: str, variable: str,
                dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2,
                interval: Optional[str] = '') -> pd.DataFrame:
    """
    Return the spatially aggregated time series of a variable.

    Args:
        interval: Temporal bin; '' keeps the native resolution, see
            ``Interval`` for the weekly, monthly, quarterly and annual tokens

    Raises:
        InvalidParameter: If the interval is unknown, or a custom interval
            is requested on a climatology table
    """
    binning = Interval.from_token(interval)
    if binning is not Interval.NATIVE and is_climatology(table):
        raise InvalidParameter(
            f"Table {table} represents a climatological data set. "
            "Custom binning (monthly, weekly, ...) is not supported for climatological data sets."
        )
    return subset(client, binning.procedure, table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)


def depth_profile(client: CMAPClient, table: str, variable: str,
                  dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2) -> pd.DataFrame:
    """Return the depth profile of a variable, averaged over the horizontal box."""
    return subset(client, "uspDepthProfile", table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)


def section(client: CMAPClient, table: str, variable: str,
            dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2) -> pd.DataFrame:
    return subset(client, "uspSectionMap", table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)


def match(client: CMAPClient, source_table: str, source_variable: str,
          target_tables: Sequence[str], target_variables: Sequence[str],
          dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2,
          temporal_tolerance: Sequence[Any], lat_tolerance: Sequence[Any],
          lon_tolerance: Sequence[Any], depth_tolerance: Sequence[Any]) -> pd.DataFrame:
    """
    Colocate a source variable with one or more target variables.

    Per-target lists are paired by position and must all have the same
    length as ``target_tables``.

    Raises:
        InvalidParameter: Before any request is sent, if the lists are empty,
            misaligned, or a tolerance is not a non-negative number
    """
    request = MatchRequest(
        source_table=source_table,
        source_variable=source_variable,
        target_tables=target_tables,
        target_variables=target_variables,
        bbox=BoundingBox(dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2),
        temporal_tolerance=temporal_tolerance,
        lat_tolerance=lat_tolerance,
        lon_tolerance=lon_tolerance,
        depth_tolerance=depth_tolerance,
    )
    return request.compile(client)


def _bound_date(value, cruise: str) -> str:
    """Render a cruise time bound as a naive UTC ``YYYY-MM-DDTHH:MM:SS`` string."""
    try:
        stamp = pd.Timestamp(value)
    except (TypeError, ValueError):
        stamp = pd.NaT
    if pd.isna(stamp):
        raise DataUnavailable(f"No trajectory time bounds found for cruise: {cruise}")
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert("UTC").tz_localize(None)
    return stamp.strftime("%Y-%m-%dT%H:%M:%S")


def along_track(client: CMAPClient, cruise: str,
                target_tables: Sequence[str], target_variables: Sequence[str],
                depth1, depth2,
                temporal_tolerance: Sequence[Any], lat_tolerance: Sequence[Any],
                lon_tolerance: Sequence[Any], depth_tolerance: Sequence[Any]) -> pd.DataFrame:
    """
    Colocate the trajectory of a cruise with target variables.

    The cruise's trajectory is the match source and its bounds define the
    space-time box; only the depth range is taken from the caller.

    Raises:
        InvalidParameter: If the target lists are malformed (checked before
            the cruise lookup)
        NotFound: If the cruise name matches no cruise
        AmbiguousLookup: If the cruise name matches several cruises
    """
    validate_targets(
        as_list(target_tables),
        as_list(target_variables),
        as_list(temporal_tolerance),
        as_list(lat_tolerance),
        as_list(lon_tolerance),
        as_list(depth_tolerance),
    )

    trajectory_id = cruise_id(client, cruise)
    bounds = first_bounds_row(cruise_bounds_by_id(client, trajectory_id), cruise)
    logger.info(f"along track | cruise:{cruise} | id:{trajectory_id}")

    return match(
        client,
        CRUISE_TRAJECTORY_TABLE,
        str(trajectory_id),
        target_tables,
        target_variables,
        _bound_date(bounds["dt1"], cruise), _bound_date(bounds["dt2"], cruise),
        bounds["lat1"], bounds["lat2"],
        bounds["lon1"], bounds["lon2"],
        depth1, depth2,
        temporal_tolerance,
        lat_tolerance,
        lon_tolerance,
        depth_tolerance,
    )
