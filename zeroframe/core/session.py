from __future__ import annotations

import logging
import re
from typing import Dict, Optional

import httpx

from zeroframe.config import ClientOptions
from zeroframe.protocol.constants import MASTER_ADDRESS_COOKIE, WEBSOCKET_PATH, WRAPPER_KEY_PATTERN
from zeroframe.protocol.errors import ErrorCode, SessionError

logger = logging.getLogger(__name__)

_WRAPPER_KEY_RE = re.compile(WRAPPER_KEY_PATTERN)


class ClientSession:
    """Holds site addressing, the wrapper key and handshake credential helpers."""

    def __init__(
        self,
        site: str,
        options: Optional[ClientOptions] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not site:
            raise SessionError(ErrorCode.SESSION_NOT_READY, "Site address is not specified")

        self.options = options or ClientOptions()
        self.site = site
        self.host: str = self.options.instance.host
        self.port: int = self.options.instance.port
        self.secure: bool = self.options.instance.secure
        self.master_address: Optional[str] = self.options.multiuser.master_address
        self.master_seed: Optional[str] = self.options.multiuser.master_seed
        self.wrapper_key: Optional[str] = None
        self._http_client = http_client

    @property
    def base_url(self) -> str:
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.host}:{self.port}/{self.site}"

    @property
    def websocket_url(self) -> str:
        if not self.wrapper_key:
            raise SessionError(ErrorCode.SESSION_NOT_READY, "Wrapper key is not resolved yet")
        scheme = "wss" if self.secure else "ws"
        return f"{scheme}://{self.host}:{self.port}{WEBSOCKET_PATH}?wrapper_key={self.wrapper_key}"

    def build_headers(self) -> Dict[str, str]:
        """Extra headers for the socket handshake (multiuser credential)."""
        if not self.master_address:
            return {}
        return {"Cookie": f"{MASTER_ADDRESS_COOKIE}={self.master_address}"}

    async def fetch_wrapper_key(self) -> str:
        """Fetch the site wrapper page and extract the wrapper key embedded in it."""
        try:
            if self._http_client is not None:
                body = await self._get_wrapper_page(self._http_client)
            else:
                async with httpx.AsyncClient() as client:
                    body = await self._get_wrapper_page(client)
        except httpx.HTTPError as exc:
            raise SessionError(
                ErrorCode.WRAPPER_KEY_FETCH_FAILED, f"Wrapper request to {self.base_url} failed: {exc}"
            ) from exc

        match = _WRAPPER_KEY_RE.search(body)
        if not match:
            raise SessionError(ErrorCode.WRAPPER_KEY_MISSING, f"No wrapper key found at {self.base_url}")

        self.wrapper_key = match.group(1)
        logger.debug("Wrapper key resolved for %s", self.site)
        return self.wrapper_key

    async def _get_wrapper_page(self, client: httpx.AsyncClient) -> str:
        got = await client.get(self.base_url, headers={"Accept": "text/html"})
        got.raise_for_status()
        return got.text


__all__ = ["ClientSession"]
