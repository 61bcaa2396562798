import asyncio
import logging

import aiohttp

from .models import RequestOutcome

DEFAULT_TIMEOUT_S = 60.0


class ProtocolError(Exception):
    """Server answered with a status outside 2xx/3xx."""

    def __init__(self, status: int, reason: str | None, method: str, path: str, body: str):
        self.status = status
        super().__init__(f"{status}:{reason}\nMETHOD:{method}\nURI:{path}\n{body}")


class HttpRequestClient:
    """
    Issues one request at a time against a fixed host:port.

    Failures never propagate to the caller: protocol errors (non 2xx/3xx)
    and transport errors are logged and folded into a ``RequestOutcome``,
    so the caller still times the call and records it like any other.
    """

    def __init__(
        self,
        host: str,
        port: int,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        logger: logging.Logger | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.base_url = f"http://{host}:{port}"
        self.timeout = aiohttp.ClientTimeout(total=timeout_s)
        self.logger = logger or logging.getLogger(__name__)
        self._session: aiohttp.ClientSession | None = None

    async def post(
        self,
        path: str,
        body: bytes | str | None = None,
        headers: dict[str, str] | None = None,
        fresh_connection: bool = False,
    ) -> RequestOutcome:
        if fresh_connection:
            return await self._request_with_new_session("POST", path, body, headers)
        return await self._request_with_existing_session("POST", path, body, headers)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
            self.logger.debug(f"Closed connection to {self.base_url}")
        self._session = None

    # ────────────────────────────────
    # Connection Modes
    # ────────────────────────────────

    async def _request_with_new_session(self, method, path, body, headers) -> RequestOutcome:
        connector = aiohttp.TCPConnector(force_close=True)
        async with aiohttp.ClientSession(connector=connector, timeout=self.timeout) as session:
            return await self._send(session, method, path, body, headers)

    async def _request_with_existing_session(self, method, path, body, headers) -> RequestOutcome:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(limit=1)
            self._session = aiohttp.ClientSession(connector=connector, timeout=self.timeout)
            self.logger.debug(f"Opened reusable connection to {self.base_url}")
        return await self._send(self._session, method, path, body, headers)

    # ────────────────────────────────
    # Request & Classification
    # ────────────────────────────────

    async def _send(self, session, method, path, body, headers) -> RequestOutcome:
        url = self.base_url + path
        try:
            async with session.request(
                method, url, data=body, headers=headers, allow_redirects=False
            ) as resp:
                text = await resp.text(errors="replace")
                if not 200 <= resp.status < 400:
                    raise ProtocolError(resp.status, resp.reason, method, path, text)
                return RequestOutcome(status=resp.status)
        except ProtocolError as e:
            self.logger.error(f"Failed to post message {e}")
            return RequestOutcome(status=e.status, error=str(e))
        except aiohttp.ClientError as e:
            self.logger.error(f"Failed to post message {e}")
            return RequestOutcome(status=None, error=str(e) or type(e).__name__)
        except asyncio.TimeoutError:
            self.logger.error(f"Failed to post message: timeout after {self.timeout.total}s for {path}")
            return RequestOutcome(status=None, error="timeout")
