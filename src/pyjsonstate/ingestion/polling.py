"""HTTP snapshot polling.

Fetches a JSON document, mirrors it into the store and keeps the raw
document as a ``<path>.json`` snapshot leaf.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from pyjsonstate._constants import SNAPSHOT_LEAF
from pyjsonstate._sanitize import join_path
from pyjsonstate.exceptions import IngestionError
from pyjsonstate.flattener import JsonFlattener
from pyjsonstate.models.options import ParseOptions

_logger = logging.getLogger(__name__)

USER_AGENT = "pyjsonstate"


class HttpSnapshotPoller:
    """Poll JSON endpoints into a flattener.

    The caller owns the ``aiohttp.ClientSession``.
    """

    def __init__(
        self,
        flattener: JsonFlattener,
        http_session: aiohttp.ClientSession,
        *,
        timeout: float = 3 * 60,
    ) -> None:
        self._flattener = flattener
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def fetch_json(self, url: str, params: Mapping[str, Any] | None = None) -> Any:
        """GET *url* and decode the JSON body.

        Raises
        ------
        IngestionError
            On network failures, non-200 responses or invalid JSON.
        """
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        try:
            async with self._http.get(url, params=params, headers=headers, timeout=self._timeout) as response:
                if response.status != 200:
                    raise IngestionError(
                        f"HTTP {response.status} from {url}",
                        source=url,
                        status_code=response.status,
                    )
                return await response.json(content_type=None)
        except IngestionError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise IngestionError(f"request to {url} failed: {exc}", source=url) from exc
        except ValueError as exc:
            raise IngestionError(f"invalid JSON from {url}: {exc}", source=url) from exc

    async def poll_once(
        self,
        url: str,
        path: str,
        options: ParseOptions | Mapping[str, Any] | None = None,
        *,
        params: Mapping[str, Any] | None = None,
        snapshot: bool = True,
    ) -> bool:
        """Fetch *url* and parse it into *path*. Returns False if nothing was ingested."""
        try:
            data = await self.fetch_json(url, params)
        except IngestionError as exc:
            if exc.status_code is not None and exc.status_code >= 500:
                _logger.warning("Cannot reach server at %s (HTTP %s)", url, exc.status_code)
            else:
                _logger.warning("Polling %s failed: %s", url, exc)
            return False

        if data is None:
            _logger.debug("Empty response from %s", url)
            return False
        _logger.debug("Poll of %s successful", url)
        await self._flattener.parse(path, data, options)
        if snapshot:
            await self._flattener.write_snapshot(join_path(path, SNAPSHOT_LEAF), data)
        return True

    async def run(
        self,
        url: str,
        path: str,
        options: ParseOptions | Mapping[str, Any] | None = None,
        *,
        interval: float = 60.0,
        stop: asyncio.Event | None = None,
    ) -> None:
        """Poll *url* every *interval* seconds until *stop* is set."""
        stop = stop or asyncio.Event()
        while not stop.is_set():
            await self.poll_once(url, path, options)
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
