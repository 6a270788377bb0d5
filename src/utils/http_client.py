"""
Async HTTP helpers for the USGS and NOAA clients.

Each request runs a blocking requests call in a worker thread, bounded by an
asyncio deadline. Every call builds its own session so concurrent evaluations
never share connection state; closing the session at the deadline (or when
the caller cancels) aborts the underlying connection.
"""

import asyncio
import json
import logging
import time
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import NetworkError, ParseError

logger = logging.getLogger(__name__)

# Failures surface to the caller of each fetch; nothing is retried here
MAX_RETRIES = 0
DEFAULT_TIMEOUT = 15.0


def _create_session() -> requests.Session:
    """Create a requests session with connection pooling and no retries."""
    session = requests.Session()

    retry_strategy = Retry(
        total=MAX_RETRIES,
        allowed_methods=["GET"],
        raise_on_status=False
    )

    adapter = HTTPAdapter(
        max_retries=retry_strategy,
        pool_connections=2,
        pool_maxsize=2
    )

    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


async def fetch(
    url: str,
    params: Optional[dict] = None,
    timeout: float = DEFAULT_TIMEOUT
) -> requests.Response:
    """
    Issue a GET request that is abandoned once the deadline passes.

    Args:
        url: Endpoint URL
        params: Query string parameters
        timeout: Deadline in seconds for the whole request

    Returns:
        The successful response.

    Raises:
        NetworkError: On non-success status, transport failure, or timeout.
    """
    session = _create_session()
    start_time = time.time()

    try:
        response = await asyncio.wait_for(
            asyncio.to_thread(session.get, url, params=params, timeout=timeout),
            timeout=timeout
        )
    except asyncio.TimeoutError as e:
        raise NetworkError(f"Request to {url} timed out after {timeout:.0f}s", url=url) from e
    except requests.RequestException as e:
        raise NetworkError(f"Request to {url} failed: {e}", url=url) from e
    finally:
        session.close()

    elapsed = time.time() - start_time
    logger.debug(f"GET {url} -> HTTP {response.status_code} ({elapsed:.2f}s)")

    if not 200 <= response.status_code < 300:
        raise NetworkError(
            f"Request to {url} failed: HTTP {response.status_code}",
            url=url,
            status_code=response.status_code
        )

    return response


async def get_text(
    url: str,
    params: Optional[dict] = None,
    timeout: float = DEFAULT_TIMEOUT
) -> str:
    """Fetch a URL and return its body as text."""
    response = await fetch(url, params=params, timeout=timeout)
    return response.text


async def get_json(
    url: str,
    params: Optional[dict] = None,
    timeout: float = DEFAULT_TIMEOUT
) -> Any:
    """
    Fetch a URL and decode its JSON body.

    Raises:
        NetworkError: As for fetch().
        ParseError: If the body is not valid JSON.
    """
    response = await fetch(url, params=params, timeout=timeout)
    try:
        return response.json()
    except (ValueError, json.JSONDecodeError) as e:
        raise ParseError(f"Invalid JSON from {url}: {e}") from e
