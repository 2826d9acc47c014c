"""
CMAP API HTTP client

Provides the request executor for the CMAP web API: one authenticated GET
per call, with error handling, logging and CSV response decoding.
"""

import json
from typing import Any, Mapping, Optional

import httpx
import pandas as pd

from .config import CMAPConfig, get_cmap_headers, sanitize_headers_for_logging, validate_cmap_config
from .decoder import TableDecoder
from .encoding import encode_payload
from .errors import InvalidParameter, MissingCredential, ServerError, TransportError
from .logging import http_logger as logger
from .procedures import QUERY_ROUTE, SUBSET_ROUTE, SubsetRequest
from .retry import RetryPolicy


class CMAPClient:
    """
    Synchronous request executor for the CMAP API.

    Args:
        config: Client configuration (API key, base URL, timeouts)
        transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests
        retry_policy: Optional retry policy; defaults to ``config.max_retries``
    """

    def __init__(
        self,
        config: CMAPConfig,
        transport: Optional[httpx.BaseTransport] = None,
        retry_policy: Optional[RetryPolicy] = None
    ):
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy(max_retries=config.max_retries)
        self._http = httpx.Client(
            transport=transport,
            timeout=httpx.Timeout(config.timeout, connect=config.connect_timeout),
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "CMAPClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def build_url(self, route: str, payload: Mapping[str, Any]) -> str:
        query_string = encode_payload(payload)
        return f"{self.config.base_url.rstrip('/')}/{route.lstrip('/')}?{query_string}"

    def request(self, route: str, payload: Mapping[str, Any]) -> pd.DataFrame:
        """
        Make a request to the CMAP API and decode the table it returns.

        Args:
            route: API route (without base URL), e.g. ``/api/data/query``
            payload: Ordered query parameters

        Returns:
            Result table as a fresh pandas DataFrame

        Raises:
            MissingCredential: If no API key is configured
            InvalidParameter: If the base URL is not an http(s) URL
            MalformedRequest: If the payload cannot be encoded
            TransportError: On connection failure or timeout
            ServerError: On any non-2xx HTTP status
            MalformedResponse: If the body is not delimited text
        """
        config_error = validate_cmap_config(self.config)
        if config_error:
            if not self.config.api_key:
                raise MissingCredential(config_error)
            raise InvalidParameter(config_error)

        url = self.build_url(route, payload)
        headers = get_cmap_headers(self.config)

        logger.debug(f"GET {url} | headers:{sanitize_headers_for_logging(headers)}")
        response = self.retry_policy.call(lambda: self._send(url, headers))
        return _process_response(response)

    def _send(self, url: str, headers: Mapping[str, str]) -> httpx.Response:
        try:
            return self._http.get(url, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"HTTP timeout: {str(e)}")
            raise TransportError(f"Request to CMAP timed out: {str(e)}") from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error: {str(e)}")
            raise TransportError(f"HTTP error: {str(e)}") from e

    def query(self, sql: str) -> pd.DataFrame:
        """Run a statement through the generic parameterized-query endpoint."""
        return self.request(QUERY_ROUTE, {"query": sql})

    def stored_proc(self, request: SubsetRequest) -> pd.DataFrame:
        """Call a subset stored procedure with its positional arguments."""
        return self.request(SUBSET_ROUTE, request.to_payload())


def _process_response(response: httpx.Response) -> pd.DataFrame:
    """
    Process HTTP response and return the decoded table.

    Non-success statuses short-circuit before the body is decoded.
    """
    response_text = response.text
    if not response.is_success:
        logger.warning(f"response {response.status_code} | size:{len(response_text)}")
        raise ServerError(
            response.status_code,
            _error_message(response),
            response_data={"raw_content": response_text[:1000]},
        )

    logger.debug(f"response {response.status_code} | size:{len(response_text)}")
    return TableDecoder().parse(response_text)


def _error_message(response: httpx.Response) -> str:
    """Extract the server's error message, preferring a JSON ``message`` field."""
    try:
        error_json = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text.strip() or response.reason_phrase
    if isinstance(error_json, dict) and error_json.get("message"):
        return str(error_json["message"])
    return response.text.strip() or response.reason_phrase
