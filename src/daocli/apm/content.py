"""Client utilities for retrieving APM content (artifact.json, manifest.json)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientResponse, ClientSession
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import DaoCliSettings
from ..errors import ContentFetchError

_LOGGER = logging.getLogger(__name__)
_SUPPORTED_PROVIDERS = ("ipfs", "http", "https")


@dataclass(frozen=True, slots=True)
class ContentLocation:
    """Where a repo version's files live, parsed from its ``contentURI``."""

    provider: str
    location: str

    @classmethod
    def parse(cls, content_uri: str) -> "ContentLocation":
        provider, sep, location = content_uri.partition(":")
        if not sep or provider not in _SUPPORTED_PROVIDERS or not location:
            raise ContentFetchError(f"Unsupported content URI {content_uri!r}")
        if provider == "ipfs":
            return cls(provider=provider, location=location)
        if location.startswith("//"):
            location = f"{provider}:{location}"
        elif not location.startswith(("http://", "https://")):
            location = f"http://{location}"
        return cls(provider="http", location=location)

    def url_for(self, path: str, ipfs_gateway: str) -> str:
        base = f"{ipfs_gateway.rstrip('/')}/{self.location}" if self.provider == "ipfs" else self.location
        return _safe_join(base, path)


def decode_content_uri(raw: Any) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8")
    if isinstance(raw, str) and raw.startswith("0x"):
        return bytes.fromhex(raw[2:]).decode("utf-8")
    return str(raw)


def _safe_join(base: str, path: str) -> str:
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


async def _raise_for_status(response: ClientResponse) -> None:
    try:
        response.raise_for_status()
    except aiohttp.ClientResponseError as exc:
        body = await response.text()
        message = f"Content request failed with {exc.status}: {exc.message}. Body: {body[:200]}"
        raise ContentFetchError(message, status=exc.status) from exc


class ContentClient:
    """Asynchronous client for APM content served over IPFS gateways or HTTP."""

    def __init__(self, settings: DaoCliSettings):
        self._settings = settings
        self._session: Optional[ClientSession] = None

    async def __aenter__(self) -> "ContentClient":
        timeout = aiohttp.ClientTimeout(total=self._settings.request_timeout_seconds)
        self._session = aiohttp.ClientSession(timeout=timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    def _require_session(self) -> ClientSession:
        if not self._session:
            raise RuntimeError("Client session not initialized. Use as an async context manager.")
        return self._session

    async def fetch_json(self, content_uri: str, path: str) -> Dict[str, Any]:
        """Return the JSON document stored at ``path`` under ``content_uri``."""

        location = ContentLocation.parse(content_uri)
        url = location.url_for(path, str(self._settings.ipfs_gateway))
        retrying = AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(self._settings.content_retry_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            retry=retry_if_exception_type(aiohttp.ClientError),
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._get_json(url)
        except aiohttp.ClientError as exc:
            raise ContentFetchError(f"Could not fetch {path} from {url}: {exc}") from exc
        raise ContentFetchError(f"Could not fetch {path} from {url}")

    async def _get_json(self, url: str) -> Dict[str, Any]:
        session = self._require_session()
        _LOGGER.debug("Fetching content | url=%s", url)
        async with session.get(url) as response:
            await _raise_for_status(response)
            payload = await response.json(content_type=None)
        if not isinstance(payload, dict):
            raise ContentFetchError(f"Expected a JSON object at {url}")
        return payload


__all__ = ["ContentClient", "ContentLocation", "decode_content_uri"]
