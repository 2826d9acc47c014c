"""
CMAP API configuration

Handles environment variables, the API key lookup chain, authentication
headers and base URL configuration for the Simons CMAP web API.
"""

import os
from dataclasses import dataclass, replace
from typing import Dict, Optional

from dotenv import load_dotenv

from .errors import InvalidParameter, MissingCredential
from .keystore import API_KEY_ENV_VAR, KeyStore
from .logging import config_logger as logger

DEFAULT_BASE_URL = "https://simonscmap.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_CONNECT_TIMEOUT = 20.0
API_KEY_PREFIX = "Api-Key"

MISSING_KEY_MESSAGE = (
    "CMAP API Key not found. "
    f"Set the {API_KEY_ENV_VAR} environment variable, or obtain an API Key from "
    "https://simonscmap.com and record it on your machine with "
    "CMAP.set_api_key('<Your API Key>')."
)


@dataclass(frozen=True)
class CMAPConfig:
    """Immutable client configuration.

    Replaced wholesale (never mutated) when the API key changes.
    """

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    max_retries: int = 0

    def with_api_key(self, api_key: str) -> "CMAPConfig":
        return replace(self, api_key=api_key)

    def __repr__(self) -> str:
        key_state = "set" if self.api_key else "missing"
        return (
            f"CMAPConfig(api_key=<{key_state}>, base_url={self.base_url!r}, timeout={self.timeout}, "
            f"connect_timeout={self.connect_timeout}, max_retries={self.max_retries})"
        )


def _env_number(name: str, default, cast):
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise InvalidParameter(f"{name} must be a {cast.__name__}, got {raw!r}") from None
    if value < 0:
        raise InvalidParameter(f"{name} must be non-negative, got {raw!r}")
    return value


def get_cmap_config(
    api_key: Optional[str] = None,
    key_store: Optional[KeyStore] = None,
    load_env_file: bool = True
) -> CMAPConfig:
    """
    Build a CMAP configuration from arguments, environment and key store.

    The API key is resolved in order: explicit argument, ``CMAP_API_KEY``
    environment variable, then the key store. A missing key is not an error
    here; it is reported when a request is about to be sent.

    Args:
        api_key: Explicit API key, takes precedence over everything else
        key_store: Optional persisted fallback for the API key
        load_env_file: Load a ``.env`` file from the working directory first

    Returns:
        CMAPConfig instance

    Raises:
        InvalidParameter: If a numeric environment override is malformed
    """
    if load_env_file:
        load_dotenv()

    source = "argument"
    if not api_key:
        api_key = os.getenv(API_KEY_ENV_VAR, "")
        source = "environment"
    if not api_key and key_store is not None:
        api_key = key_store.get() or ""
        source = "key store"

    config = CMAPConfig(
        api_key=api_key or "",
        base_url=os.getenv("CMAP_BASE_URL", "") or DEFAULT_BASE_URL,
        timeout=_env_number("CMAP_TIMEOUT", DEFAULT_TIMEOUT, float),
        connect_timeout=_env_number("CMAP_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT, float),
        max_retries=_env_number("CMAP_MAX_RETRIES", 0, int),
    )

    if config.api_key:
        logger.debug(f"api key resolved | source:{source}")
    else:
        logger.debug("api key not configured")
    return config


def validate_cmap_config(config: CMAPConfig) -> Optional[str]:
    """
    Validate CMAP API configuration.

    Returns:
        Error message if configuration is invalid, None if valid
    """
    if not config.api_key:
        return MISSING_KEY_MESSAGE
    if not config.base_url.startswith(("http://", "https://")):
        return f"Invalid CMAP base URL: {config.base_url!r}"
    return None


def get_cmap_headers(config: CMAPConfig, additional_headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """
    Get CMAP API headers with optional additional headers.

    Args:
        config: Client configuration carrying the API key
        additional_headers: Optional additional headers to merge

    Returns:
        Complete headers dictionary for API requests

    Raises:
        MissingCredential: If no API key is configured
    """
    if not config.api_key:
        raise MissingCredential(MISSING_KEY_MESSAGE)

    headers = {"Authorization": f"{API_KEY_PREFIX} {config.api_key}"}
    if additional_headers:
        headers.update(additional_headers)
    return headers


def sanitize_headers_for_logging(headers: Dict[str, str]) -> Dict[str, str]:
    """
    Sanitize headers for logging by redacting sensitive information.

    Args:
        headers: Original headers dictionary

    Returns:
        Sanitized headers safe for logging
    """
    sensitive_keys = {"authorization", "cookie", "x-api-key", "x-auth-token"}
    return {
        key: "[REDACTED]" if key.lower() in sensitive_keys else value
        for key, value in headers.items()
    }
