"""
bit.ly URL expansion client.

A single outbound call per short link:

  GET http://api.bit.ly/expand?version=v3&format=txt&hash=<h>&login=<l>&apiKey=<k>

With format=txt the API answers with the long URL as plain text. Credentials
and format live in an immutable BitlyConfig passed to every call rather than
being set on the client. Expanded links are cached in Redis.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx

from chopbox.clients.redis_client import get_expanded_url, set_expanded_url
from chopbox.config import Settings, settings
from chopbox.errors import InvalidArgument, UrlExpansionError
from chopbox.telemetry import URL_EXPANSION_ERRORS_TOTAL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BitlyConfig:
    login: str
    api_key: str
    format: str = "txt"
    api_version: str = "v3"
    api_url: str = "http://api.bit.ly/expand"

    @classmethod
    def from_settings(cls, s: Settings) -> "BitlyConfig":
        return cls(
            login=s.bitly_login,
            api_key=s.bitly_api_key,
            format=s.bitly_format,
            api_version=s.bitly_api_version,
            api_url=s.bitly_api_url,
        )


def parse_hash(url: str) -> str:
    """'http://bit.ly/1RmnUT' → '1RmnUT'. A bare hash is returned unchanged."""
    url = url.strip()
    if "://" not in url and "/" not in url:
        if not url:
            raise InvalidArgument("Short URL is empty")
        return url
    parsed = urlparse(url if "://" in url else f"http://{url}")
    short_hash = parsed.path.strip("/").split("/")[-1]
    if not short_hash:
        raise InvalidArgument(f"No hash found in short URL {url!r}")
    return short_hash


class BitlyClient:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        self._http = httpx.AsyncClient(
            timeout=settings.bitly_timeout, transport=self._transport
        )

    async def stop(self) -> None:
        if self._http:
            await self._http.aclose()
            self._http = None

    async def expand_hash(self, config: BitlyConfig, short_hash: str) -> str:
        """Return the long URL for a bit.ly hash, consulting the Redis cache first."""
        cached = await get_expanded_url(short_hash)
        if cached:
            return cached

        if self._http is None:
            raise RuntimeError("BitlyClient not started — call start() at startup")

        params = {
            "version": config.api_version,
            "format": config.format,
            "hash": short_hash,
            "login": config.login,
            "apiKey": config.api_key,
        }
        try:
            resp = await self._http.get(config.api_url, params=params)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            URL_EXPANSION_ERRORS_TOTAL.inc()
            logger.warning("bit.ly expand failed for %s: %s", short_hash, exc)
            raise UrlExpansionError(f"Could not expand {short_hash}: {exc}") from exc

        long_url = resp.text.strip()
        if not long_url or long_url.upper().startswith(("NOT_FOUND", "INVALID")):
            URL_EXPANSION_ERRORS_TOTAL.inc()
            raise UrlExpansionError(f"bit.ly returned no URL for {short_hash}: {long_url!r}")

        await set_expanded_url(short_hash, long_url)
        return long_url

    async def expand_url(self, config: BitlyConfig, url: str) -> str:
        return await self.expand_hash(config, parse_hash(url))


# Singleton
bitly_client = BitlyClient()
