"""Thin httpx wrapper shared by every request of a download session."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx

from ttdl.config import DownloaderConfig
from ttdl.errors import FetchError

logger = logging.getLogger(__name__)

# InvalidURL is not an HTTPError subclass; it is raised for unparseable URLs.
_REQUEST_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


class Fetcher:
    """Performs GET requests through one cookie-carrying httpx client."""

    def __init__(self, config: DownloaderConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=config.timeout_seconds,
            follow_redirects=True,
        )

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _headers(self, headers: dict[str, str] | None, user_agent: str) -> dict[str, str]:
        merged = {"User-Agent": user_agent}
        merged.update(headers or {})
        return merged

    def _get(self, url: str, *, headers: dict[str, str], params: dict[str, str] | None = None) -> httpx.Response:
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url, headers=headers, params=params)
            response.raise_for_status()
        except _REQUEST_ERRORS as exc:
            raise FetchError(f"Failed to fetch '{url}': {exc}") from exc
        return response

    def get_text(self, url: str, headers: dict[str, str] | None = None) -> str:
        """Fetch a page as text using the desktop user agent."""

        response = self._get(url, headers=self._headers(headers, self.config.user_agent))
        return response.text

    def get_json(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Fetch and decode a JSON body using the API user agent."""

        response = self._get(url, headers=self._headers(headers, self.config.api_user_agent), params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(f"Response from '{url}' is not valid JSON: {exc}") from exc

    def stream_to_file(self, url: str, destination: Path, headers: dict[str, str] | None = None) -> int:
        """Stream a binary body into destination, replacing any existing file.

        A body interrupted by a transport or write error leaves no file behind.
        """

        logger.debug("GET %s -> %s", url, destination)
        written = 0
        opened = False
        try:
            with self._client.stream(
                "GET", url, headers=self._headers(headers, self.config.user_agent)
            ) as response:
                response.raise_for_status()
                opened = True
                with destination.open("wb") as handle:
                    for chunk in response.iter_bytes(chunk_size=self.config.chunk_size):
                        handle.write(chunk)
                        written += len(chunk)
        except _REQUEST_ERRORS as exc:
            if opened:
                destination.unlink(missing_ok=True)
            raise FetchError(f"Failed to download '{url}': {exc}") from exc
        except OSError:
            if opened:
                destination.unlink(missing_ok=True)
            raise
        return written
