"""
Colocation (match) request builder

Assembles the parameters that ask the server to colocate a source dataset
with one or more target datasets. Target names and tolerances are supplied as
independent ordered lists and paired by position:

    target[i] = (target_tables[i], target_variables[i],
                 temporal_tolerance[i], lat_tolerance[i],
                 lon_tolerance[i], depth_tolerance[i])

A source row is matched with target[i] rows whose time differs by at most
``temporal_tolerance[i]`` (days, or months when the target is a monthly
climatology), whose latitude and longitude differ by at most
``lat_tolerance[i]`` / ``lon_tolerance[i]`` degrees, and whose depth differs
by at most ``depth_tolerance[i]`` meters. The join itself runs on the server;
tolerances are passed through unmodified.

All list alignment and tolerance checks happen in ``validate`` so malformed
requests never reach the network.
"""

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Sequence

import pandas as pd

from .client import CMAPClient
from .encoding import sql_literal
from .errors import InvalidParameter, MalformedResponse
from .logging import match_logger as logger
from .procedures import BoundingBox

MATCH_PROCEDURE = "uspMatch"
CRUISE_TRAJECTORY_TABLE = "tblCruise_Trajectory"

TOLERANCE_NAMES = ("temporal_tolerance", "lat_tolerance", "lon_tolerance", "depth_tolerance")


def as_list(value: Any) -> List[Any]:
    """Normalize a per-target argument; a bare string or number is one item."""
    if value is None:
        return []
    if isinstance(value, (str, numbers.Number)):
        return [value]
    if isinstance(value, (pd.Series, pd.Index)):
        return value.tolist()
    try:
        return list(value)
    except TypeError:
        return [value]


def _check_tolerance(name: str, index: int, value: Any) -> None:
    if (
        isinstance(value, bool)
        or not isinstance(value, numbers.Real)
        or not math.isfinite(value)
        or value < 0
    ):
        raise InvalidParameter(
            f"Tolerance must be numeric and non-negative: {name}[{index}] = {value!r}"
        )


def validate_targets(
    target_tables: Sequence[str],
    target_variables: Sequence[str],
    temporal_tolerance: Sequence[Any],
    lat_tolerance: Sequence[Any],
    lon_tolerance: Sequence[Any],
    depth_tolerance: Sequence[Any]
) -> None:
    """
    Check the per-target lists are non-empty, aligned and numerically sane.

    Raises:
        InvalidParameter: With "at least one target required",
            "mismatched target specification length" or
            "tolerance must be numeric and non-negative"
    """
    if len(target_tables) == 0:
        raise InvalidParameter("At least one target required: target_tables is empty")

    lengths = {
        "target_tables": len(target_tables),
        "target_variables": len(target_variables),
        "temporal_tolerance": len(temporal_tolerance),
        "lat_tolerance": len(lat_tolerance),
        "lon_tolerance": len(lon_tolerance),
        "depth_tolerance": len(depth_tolerance),
    }
    if len(set(lengths.values())) != 1:
        detail = ", ".join(f"{name}={length}" for name, length in lengths.items())
        raise InvalidParameter(f"Mismatched target specification length: {detail}")

    for index, (table, variable) in enumerate(zip(target_tables, target_variables)):
        if not isinstance(table, str) or not table:
            raise InvalidParameter(f"target_tables[{index}] must be a non-empty string, got {table!r}")
        if not isinstance(variable, str) or not variable:
            raise InvalidParameter(f"target_variables[{index}] must be a non-empty string, got {variable!r}")

    tolerances = (temporal_tolerance, lat_tolerance, lon_tolerance, depth_tolerance)
    for name, values in zip(TOLERANCE_NAMES, tolerances):
        for index, value in enumerate(values):
            _check_tolerance(name, index, value)


@dataclass(frozen=True)
class MatchDirective:
    """One source-to-target join instruction for the match procedure."""

    source_table: str
    source_variable: str
    target_table: str
    target_variable: str
    bbox: BoundingBox
    temporal_tolerance: Any
    lat_tolerance: Any
    lon_tolerance: Any
    depth_tolerance: Any

    def arguments(self) -> list:
        """Positional arguments of the match procedure, in call order."""
        return [
            self.source_table,
            self.source_variable,
            self.target_table,
            self.target_variable,
            *self.bbox.as_tuple(),
            self.temporal_tolerance,
            self.lat_tolerance,
            self.lon_tolerance,
            self.depth_tolerance,
        ]

    def to_sql(self, procedure: str = MATCH_PROCEDURE) -> str:
        return f"EXEC {procedure} " + ", ".join(sql_literal(arg) for arg in self.arguments())


@dataclass
class MatchRequest:
    """
    A colocation request: one source, N targets, one bounding box and N sets
    of tolerances.

    Per-target arguments are normalized to lists on construction; call
    ``validate`` (done by ``compile``) before dispatching.
    """

    source_table: str
    source_variable: str
    target_tables: List[str]
    target_variables: List[str]
    bbox: BoundingBox
    temporal_tolerance: List[Any]
    lat_tolerance: List[Any]
    lon_tolerance: List[Any]
    depth_tolerance: List[Any]
    procedure: str = field(default=MATCH_PROCEDURE)

    def __post_init__(self):
        self.target_tables = as_list(self.target_tables)
        self.target_variables = as_list(self.target_variables)
        self.temporal_tolerance = as_list(self.temporal_tolerance)
        self.lat_tolerance = as_list(self.lat_tolerance)
        self.lon_tolerance = as_list(self.lon_tolerance)
        self.depth_tolerance = as_list(self.depth_tolerance)

    def validate(self) -> "MatchRequest":
        if not isinstance(self.source_table, str) or not self.source_table:
            raise InvalidParameter(f"source_table must be a non-empty string, got {self.source_table!r}")
        if not isinstance(self.source_variable, str) or not self.source_variable:
            raise InvalidParameter(f"source_variable must be a non-empty string, got {self.source_variable!r}")
        validate_targets(
            self.target_tables,
            self.target_variables,
            self.temporal_tolerance,
            self.lat_tolerance,
            self.lon_tolerance,
            self.depth_tolerance,
        )
        self.bbox.validate()
        return self

    def directives(self) -> Iterator[MatchDirective]:
        columns = zip(
            self.target_tables,
            self.target_variables,
            self.temporal_tolerance,
            self.lat_tolerance,
            self.lon_tolerance,
            self.depth_tolerance,
        )
        for table, variable, temporal, lat, lon, depth in columns:
            yield MatchDirective(
                source_table=self.source_table,
                source_variable=self.source_variable,
                target_table=table,
                target_variable=variable,
                bbox=self.bbox,
                temporal_tolerance=temporal,
                lat_tolerance=lat,
                lon_tolerance=lon,
                depth_tolerance=depth,
            )

    def compile(self, client: CMAPClient) -> pd.DataFrame:
        """
        Validate, dispatch one match call per target and return one table.

        Each per-target result carries the source rows plus the matched
        target columns; results are aligned on the source columns they share.

        Raises:
            InvalidParameter: If the request is malformed (no request is sent)
            MalformedResponse: If two non-empty per-target results share no columns
        """
        self.validate()
        directives = list(self.directives())
        logger.info(
            f"colocating | source:{self.source_table}.{self.source_variable} | targets:{len(directives)}"
        )

        result = None
        for directive in directives:
            logger.debug(f"match directive | target:{directive.target_table}.{directive.target_variable}")
            table = client.query(directive.to_sql(self.procedure))
            result = table if result is None else _combine(result, table)
        return result


def _combine(left: pd.DataFrame, right: pd.DataFrame) -> pd.DataFrame:
    if right.empty and len(right.columns) == 0:
        return left
    if left.empty and len(left.columns) == 0:
        return right
    keys = [col for col in left.columns if col in right.columns]
    if not keys:
        raise MalformedResponse("Match results for different targets share no source columns")
    return pd.merge(left, right, how="outer", on=keys)
