"""
CMAP client facade

``CMAP`` exposes one method per server capability. It owns a configuration
object and a request executor; the module-level functions in ``catalog``,
``cruises`` and ``subset`` do the work.

Example:
    api = CMAP(api_key="...")
    sst = api.space_time('tblsst_AVHRR_OI_NRT', 'sst', '2016-04-30', '2016-04-30',
                         10, 70, -180, -80, 0, 0)
"""

from typing import Any, Optional, Sequence

import httpx
import pandas as pd

from . import catalog
from . import cruises as cruise_ops
from . import subset as subset_ops
from .client import CMAPClient
from .config import CMAPConfig, get_cmap_config
from .errors import InvalidParameter
from .intervals import interval_to_uspName
from .keystore import KeyStore
from .logging import config_logger as logger
from .procedures import SubsetRequest


class CMAP:
    """
    Client for the Simons CMAP data service.

    Args:
        api_key: Explicit API key; otherwise read from ``CMAP_API_KEY`` or the key store
        config: Full configuration, overrides environment lookup
        key_store: Optional persisted storage for the API key
        transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        load_env_file: Load a ``.env`` file when building the configuration
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[CMAPConfig] = None,
        key_store: Optional[KeyStore] = None,
        transport: Optional[httpx.BaseTransport] = None,
        load_env_file: bool = True
    ):
        if config is None:
            config = get_cmap_config(api_key=api_key, key_store=key_store, load_env_file=load_env_file)
        elif api_key:
            config = config.with_api_key(api_key)
        self.key_store = key_store
        self.client = CMAPClient(config, transport=transport)

    @property
    def config(self) -> CMAPConfig:
        return self.client.config

    @property
    def api_key(self) -> str:
        return self.client.config.api_key

    def set_api_key(self, api_key: str) -> None:
        """Replace the API key used for subsequent requests and persist it to the key store."""
        if not isinstance(api_key, str) or not api_key.strip():
            raise InvalidParameter("API key must be a non-empty string")
        self.client.config = self.client.config.with_api_key(api_key)
        if self.key_store is not None:
            self.key_store.set(api_key)
        logger.info("api key updated")

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "CMAP":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Raw access

    def query(self, sql: str) -> pd.DataFrame:
        return self.client.query(sql)

    def stored_proc(self, request: SubsetRequest) -> pd.DataFrame:
        return self.client.stored_proc(request)

    # Catalog

    def get_catalog(self) -> pd.DataFrame:
        return catalog.get_catalog(self.client)

    def search_catalog(self, keywords: str) -> pd.DataFrame:
        return catalog.search_catalog(self.client, keywords)

    def datasets(self) -> pd.DataFrame:
        return catalog.datasets(self.client)

    def head(self, table: str, rows: int = 5) -> pd.DataFrame:
        return catalog.head(self.client, table, rows)

    def columns(self, table: str) -> pd.DataFrame:
        return catalog.columns(self.client, table)

    def get_dataset_ID(self, table: str) -> int:
        return catalog.get_dataset_ID(self.client, table)

    def get_dataset(self, table: str) -> pd.DataFrame:
        return catalog.get_dataset(self.client, table)

    def get_dataset_metadata(self, table: str) -> pd.DataFrame:
        return catalog.get_dataset_metadata(self.client, table)

    def get_var_catalog(self, table: str, variable: str) -> pd.DataFrame:
        return catalog.get_var_catalog(self.client, table, variable)

    def get_var_long_name(self, table: str, variable: str) -> str:
        return catalog.get_var_long_name(self.client, table, variable)

    def get_unit(self, table: str, variable: str) -> str:
        return catalog.get_unit(self.client, table, variable)

    def get_var_resolution(self, table: str, variable: str) -> pd.DataFrame:
        return catalog.get_var_resolution(self.client, table, variable)

    def get_var_coverage(self, table: str, variable: str) -> pd.DataFrame:
        return catalog.get_var_coverage(self.client, table, variable)

    def get_var_stat(self, table: str, variable: str) -> pd.DataFrame:
        return catalog.get_var_stat(self.client, table, variable)

    def has_field(self, table: str, variable: str) -> bool:
        return catalog.has_field(self.client, table, variable)

    def is_grid(self, table: str, variable: str) -> Optional[bool]:
        return catalog.is_grid(self.client, table, variable)

    @staticmethod
    def is_climatology(table: str) -> bool:
        return catalog.is_climatology(table)

    def get_references(self, dataset_id: int) -> pd.DataFrame:
        return catalog.get_references(self.client, dataset_id)

    def get_metadata(self, table: str, variable: str) -> pd.DataFrame:
        return catalog.get_metadata(self.client, table, variable)

    # Cruises

    def cruises(self) -> pd.DataFrame:
        return cruise_ops.cruises(self.client)

    def cruise_by_name(self, cruise_name: str) -> pd.DataFrame:
        return cruise_ops.cruise_by_name(self.client, cruise_name)

    def cruise_bounds(self, cruise_name: str) -> pd.DataFrame:
        return cruise_ops.cruise_bounds(self.client, cruise_name)

    def cruise_trajectory(self, cruise_name: str) -> pd.DataFrame:
        return cruise_ops.cruise_trajectory(self.client, cruise_name)

    def cruise_variables(self, cruise_name: str) -> pd.DataFrame:
        return cruise_ops.cruise_variables(self.client, cruise_name)

    # Subsets

    @staticmethod
    def interval_to_uspName(interval: Optional[str]) -> str:
        return interval_to_uspName(interval)

    def subset(self, sp_name: str, table: str, variable: str,
               dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2) -> pd.DataFrame:
        return subset_ops.subset(self.client, sp_name, table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)

    def space_time(self, table: str, variable: str,
                   dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2) -> pd.DataFrame:
        return subset_ops.space_time(self.client, table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)

    def time_series(self, table: str, variable: str,
                    dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2,
                    interval: Optional[str] = '') -> pd.DataFrame:
        return subset_ops.time_series(
            self.client, table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2, interval=interval
        )

    def depth_profile(self, table: str, variable: str,
                      dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2) -> pd.DataFrame:
        return subset_ops.depth_profile(self.client, table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)

    def section(self, table: str, variable: str,
                dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2) -> pd.DataFrame:
        return subset_ops.section(self.client, table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)

    def match(self, source_table: str, source_variable: str,
              target_tables: Sequence[str], target_variables: Sequence[str],
              dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2,
              temporal_tolerance: Sequence[Any], lat_tolerance: Sequence[Any],
              lon_tolerance: Sequence[Any], depth_tolerance: Sequence[Any]) -> pd.DataFrame:
        return subset_ops.match(
            self.client, source_table, source_variable, target_tables, target_variables,
            dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2,
            temporal_tolerance, lat_tolerance, lon_tolerance, depth_tolerance
        )

    def along_track(self, cruise: str, target_tables: Sequence[str], target_variables: Sequence[str],
                    depth1, depth2,
                    temporal_tolerance: Sequence[Any], lat_tolerance: Sequence[Any],
                    lon_tolerance: Sequence[Any], depth_tolerance: Sequence[Any]) -> pd.DataFrame:
        return subset_ops.along_track(
            self.client, cruise, target_tables, target_variables, depth1, depth2,
            temporal_tolerance, lat_tolerance, lon_tolerance, depth_tolerance
        )
