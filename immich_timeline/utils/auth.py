"""Authentication utilities for the Immich API."""

from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter

API_KEY_HEADER = "x-api-key"
DEFAULT_POOL_SIZE = 20


def normalize_base_url(base_url: str) -> str:
    """Validate a server URL and strip any trailing slash.

    Args:
        base_url: Immich server URL, e.g. https://immich.example.com/

    Returns:
        The URL without a trailing slash

    Raises:
        ValueError: If the URL is not an absolute http(s) URL
    """
    url = (base_url or "").strip().rstrip("/")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid Immich server URL: {base_url!r}")
    return url


def build_session(api_key: str, pool_size: int = DEFAULT_POOL_SIZE) -> requests.Session:
    """Build an HTTP session that sends the API key on every request.

    Args:
        api_key: Immich API key
        pool_size: Connections kept open to the server, one per concurrent request

    Returns:
        Configured requests session

    Raises:
        ValueError: If the API key is empty
    """
    if not api_key:
        raise ValueError("An Immich API key is required")

    session = requests.Session()
    session.headers.update(
        {
            "Content-Type": "application/json",
            "Accept": "application/json",
            API_KEY_HEADER: api_key,
        }
    )
    # One host, but up to pool_size threads share the session
    adapter = HTTPAdapter(pool_connections=1, pool_maxsize=max(1, pool_size))
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session
