"""Immich API client for fetching photo metadata."""

import logging
from typing import Any, Dict, List, Optional

import requests

from immich_timeline.models import ConfigurationError, RemoteError
from immich_timeline.utils.auth import DEFAULT_POOL_SIZE, build_session, normalize_base_url

logger = logging.getLogger(__name__)

# Maximum page size accepted by the search endpoint
PAGE_SIZE = 1000


class ImmichClient:
    """Thin wrapper around the Immich REST endpoints used by the timeline."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        session: Optional[requests.Session] = None,
        pool_size: int = DEFAULT_POOL_SIZE,
    ):
        """Initialize the client.

        Raises:
            ConfigurationError: If the base URL or API key is unusable
        """
        try:
            self.base_url = normalize_base_url(base_url)
            self.session = session if session is not None else build_session(api_key, pool_size)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        self.api_key = api_key

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/{path}"

    def _request(self, method: str, path: str, what: str, **kwargs) -> Any:
        """Issue a request whose failure is fatal to the run and return the decoded JSON."""
        try:
            response = self.session.request(method, self._url(path), **kwargs)
        except requests.RequestException as e:
            raise RemoteError(f"Failed to fetch {what}: {e}") from e

        if response.status_code != 200:
            raise RemoteError(
                f"Failed to fetch {what}: {response.status_code} {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(
                f"Failed to fetch {what}: invalid JSON response",
                status_code=response.status_code,
                body=response.text,
            ) from e

    def list_assets(self, album_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Fetch all image assets using the metadata search endpoint.

        Pages are requested until one comes back shorter than the page size.

        Args:
            album_id: Optional album to restrict the search to

        Returns:
            Asset summaries in server order

        Raises:
            RemoteError: If any page request fails
        """
        all_assets: List[Dict[str, Any]] = []
        page = 1

        while True:
            body: Dict[str, Any] = {"size": PAGE_SIZE, "page": page, "type": "IMAGE"}
            if album_id is not None:
                body["albumIds"] = [album_id]

            data = self._request("POST", "search/metadata", "assets", json=body) or {}
            items = (data.get("assets") or {}).get("items") or []
            all_assets.extend(items)

            if len(items) < PAGE_SIZE:
                print(f"Fetched all {len(all_assets)} assets")
                break

            page += 1
            print(f"Fetched {len(all_assets)} assets so far (page {page})...")

        return all_assets

    def get_asset_detail(self, asset_id: str) -> Optional[Dict[str, Any]]:
        """Fetch detailed asset information including EXIF data.

        A non-success response is logged and reported as missing.
        """
        response = self.session.get(self._url(f"assets/{asset_id}"))
        if response.status_code != 200:
            logger.warning(
                "Failed to fetch asset details for %s: %s", asset_id, response.status_code
            )
            return None
        return response.json()

    def list_albums(self) -> List[Dict[str, Any]]:
        """Fetch all albums.

        Raises:
            RemoteError: If the request fails
        """
        return list(self._request("GET", "albums", "albums") or [])
