"""
Simons CMAP client package

Provides a parameter-to-query mapping layer over the CMAP web API: catalog
browsing, space-time subsets, binned time series, depth profiles, sections,
cruise lookups and cross-dataset colocation, returned as pandas DataFrames.
"""

from .api import CMAP
from .client import CMAPClient
from .config import (
    CMAPConfig,
    get_cmap_config,
    validate_cmap_config,
    get_cmap_headers
)
from .encoding import encode_payload
from .errors import (
    CMAPError,
    MissingCredential,
    MalformedRequest,
    MalformedResponse,
    TransportError,
    ServerError,
    DataUnavailable,
    RowLimitExceeded,
    AmbiguousLookup,
    NotFound,
    InvalidParameter
)
from .intervals import Interval, interval_to_uspName
from .keystore import KeyStore, MemoryKeyStore, DotenvKeyStore
from .match import MatchRequest, MatchDirective
from .procedures import BoundingBox, SubsetRequest

__version__ = "0.1.0"

__all__ = [
    # Client
    'CMAP',
    'CMAPClient',

    # Configuration
    'CMAPConfig',
    'get_cmap_config',
    'validate_cmap_config',
    'get_cmap_headers',
    'KeyStore',
    'MemoryKeyStore',
    'DotenvKeyStore',

    # Requests
    'encode_payload',
    'Interval',
    'interval_to_uspName',
    'BoundingBox',
    'SubsetRequest',
    'MatchRequest',
    'MatchDirective',

    # Errors
    'CMAPError',
    'MissingCredential',
    'MalformedRequest',
    'MalformedResponse',
    'TransportError',
    'ServerError',
    'DataUnavailable',
    'RowLimitExceeded',
    'AmbiguousLookup',
    'NotFound',
    'InvalidParameter'
]
