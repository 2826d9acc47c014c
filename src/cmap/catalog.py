"""
CMAP catalog operations

Provides functions for browsing the data catalog and retrieving dataset and
variable information from the CMAP database.
"""

import json
import re
from typing import Optional

import pandas as pd

from .client import CMAPClient
from .encoding import sql_literal
from .errors import DataUnavailable, InvalidParameter, NotFound, RowLimitExceeded
from .logging import catalog_logger as logger

# Full-table downloads above this many rows must go through space_time
MAX_DATASET_ROWS = 2_000_000

CLIMATOLOGY_MARKER = "_Climatology"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def table_identifier(table: str) -> str:
    """Validate a table name that is interpolated as a bare SQL identifier."""
    if not isinstance(table, str) or not _IDENTIFIER.match(table):
        raise InvalidParameter(f"Invalid table name: {table!r}")
    return table


def get_catalog(client: CMAPClient) -> pd.DataFrame:
    """Return the full catalog: one row per variable across all datasets."""
    return client.query("EXEC uspCatalog")


def search_catalog(client: CMAPClient, keywords: str) -> pd.DataFrame:
    """
    Search the catalog by keywords.

    Args:
        client: Request executor
        keywords: Space separated keywords; every keyword must match

    Returns:
        Catalog rows of the matching variables
    """
    logger.debug(f"searching catalog | keywords:{keywords}")
    return client.query(f"EXEC uspSearchCatalog {sql_literal(keywords)}")


def datasets(client: CMAPClient) -> pd.DataFrame:
    return client.query("EXEC uspDatasets")


def head(client: CMAPClient, table: str, rows: int = 5) -> pd.DataFrame:
    """Return the first ``rows`` records of a table."""
    if isinstance(rows, bool) or not isinstance(rows, int) or rows < 1:
        raise InvalidParameter(f"rows must be a positive integer, got {rows!r}")
    return client.query(f"EXEC uspHead {sql_literal(table)}, {sql_literal(rows)}")


def columns(client: CMAPClient, table: str) -> pd.DataFrame:
    return client.query(f"EXEC uspColumns {sql_literal(table)}")


def get_dataset_ID(client: CMAPClient, table: str) -> int:
    """
    Look up the dataset ID owning a table.

    Raises:
        NotFound: If no dataset is associated with the table
    """
    df = client.query(
        "SELECT DISTINCT(Dataset_ID) FROM dbo.udfCatalog() "
        f"WHERE LOWER(Table_Name)=LOWER({sql_literal(table)})"
    )
    if df.empty or "Dataset_ID" not in df.columns:
        raise NotFound(f"No dataset found for table: {table}")
    return int(df["Dataset_ID"].iloc[0])


def dataset_row_estimate(client: CMAPClient, table: str) -> int:
    """
    Return the precomputed row-count estimate of a table.

    Raises:
        DataUnavailable: If the server has no size estimate for the table
    """
    dataset_id = get_dataset_ID(client, table)
    df = client.query(f"SELECT JSON_stats FROM tblDataset_Stats WHERE Dataset_ID={dataset_id}")
    if df.empty or "JSON_stats" not in df.columns or pd.isna(df["JSON_stats"].iloc[0]):
        raise DataUnavailable(f"No size estimates found for the {table} table.")

    try:
        stats = json.loads(df["JSON_stats"].iloc[0])
        rows = int(stats["lat"]["count"])
    except (json.JSONDecodeError, TypeError, KeyError, ValueError, OverflowError) as e:
        raise DataUnavailable(f"No size estimates found for the {table} table: {e}") from e
    return rows


def get_dataset(client: CMAPClient, table: str, max_rows: int = MAX_DATASET_ROWS) -> pd.DataFrame:
    """
    Retrieve an entire table.

    The row-count estimate is checked first so oversized tables are refused
    before any bulk transfer starts.

    Raises:
        DataUnavailable: If no row-count estimate exists
        RowLimitExceeded: If the estimate is above ``max_rows``
    """
    table_identifier(table)
    rows = dataset_row_estimate(client, table)
    logger.info(f"dataset size estimate | table:{table} | rows:{rows}")
    if rows > max_rows:
        raise RowLimitExceeded(
            f"The requested dataset has {rows} records. "
            f"It is not recommended to retrieve datasets with more than {max_rows} rows using this method. "
            "For large datasets, please use the 'space_time' method and retrieve the data in smaller chunks.",
            rows=rows,
            limit=max_rows,
        )
    return client.query(f"SELECT * FROM {table}")


def get_dataset_metadata(client: CMAPClient, table: str) -> pd.DataFrame:
    return client.query(f"EXEC uspDatasetMetadata {sql_literal(table)}")


def get_var_catalog(client: CMAPClient, table: str, variable: str) -> pd.DataFrame:
    return client.query(
        f"SELECT * FROM [dbo].udfCatalog() WHERE Table_Name={sql_literal(table)} AND Variable={sql_literal(variable)}"
    )


def _variable_field(client: CMAPClient, field: str, table: str, variable: str) -> str:
    df = client.query(
        f"SELECT {field}, Short_Name FROM tblVariables "
        f"WHERE Table_Name={sql_literal(table)} AND Short_Name={sql_literal(variable)}"
    )
    if df.empty:
        raise NotFound(f"Variable {variable} not found in table {table}")
    value = df[field].iloc[0]
    return "" if pd.isna(value) else str(value)


def get_var_long_name(client: CMAPClient, table: str, variable: str) -> str:
    return _variable_field(client, "Long_Name", table, variable)


def get_unit(client: CMAPClient, table: str, variable: str) -> str:
    return _variable_field(client, "Unit", table, variable)


def get_var_resolution(client: CMAPClient, table: str, variable: str) -> pd.DataFrame:
    return client.query(f"EXEC uspVariableResolution {sql_literal(table)}, {sql_literal(variable)}")


def get_var_coverage(client: CMAPClient, table: str, variable: str) -> pd.DataFrame:
    return client.query(f"EXEC uspVariableCoverage {sql_literal(table)}, {sql_literal(variable)}")


def get_var_stat(client: CMAPClient, table: str, variable: str) -> pd.DataFrame:
    return client.query(f"EXEC uspVariableStat {sql_literal(table)}, {sql_literal(variable)}")


def has_field(client: CMAPClient, table: str, variable: str) -> bool:
    """Check whether ``variable`` is a column of ``table``."""
    df = client.query(f"SELECT COL_LENGTH({sql_literal(table)}, {sql_literal(variable)}) AS RESULT")
    if df.empty or "RESULT" not in df.columns:
        return False
    return bool(pd.notna(df["RESULT"].iloc[0]))


def is_grid(client: CMAPClient, table: str, variable: str) -> Optional[bool]:
    """
    Check whether a variable lives on a regular spatial grid.

    Returns:
        True for gridded variables, False for irregular (e.g. in-situ)
        ones, None when the variable is not registered
    """
    df = client.query(
        "SELECT Spatial_Res_ID, RTRIM(LTRIM(Spatial_Resolution)) AS Spatial_Resolution FROM tblVariables "
        "JOIN tblSpatial_Resolutions ON [tblVariables].Spatial_Res_ID=[tblSpatial_Resolutions].ID "
        f"WHERE Table_Name={sql_literal(table)} AND Short_Name={sql_literal(variable)}"
    )
    if df.empty:
        return None
    return "irregular" not in str(df["Spatial_Resolution"].iloc[0]).lower()


def is_climatology(table: str) -> bool:
    """Climatology tables are marked by ``_Climatology`` in their name."""
    return CLIMATOLOGY_MARKER in table


def get_references(client: CMAPClient, dataset_id: int) -> pd.DataFrame:
    if isinstance(dataset_id, bool):
        raise InvalidParameter(f"Dataset ID must be an integer, got {dataset_id!r}")
    try:
        dataset_id = int(dataset_id)
    except (TypeError, ValueError):
        raise InvalidParameter(f"Dataset ID must be an integer, got {dataset_id!r}") from None
    return client.query(f"SELECT Reference FROM dbo.udfDatasetReferences({dataset_id})")


def get_metadata(client: CMAPClient, table: str, variable: str) -> pd.DataFrame:
    """Return the combined dataset and variable metadata of one variable."""
    return client.query(f"EXEC uspVariableMetaData {sql_literal(table)}, {sql_literal(variable)}")
