"""Base async HTTP client for mail APIs."""

import httpx
from loguru import logger

from settings import MAIL_API_TIMEOUT


class TransportError(Exception):
    """Mail API request failed (network error, timeout or non-2xx response)."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class BaseClient:
    """Base async HTTP client. Use as an async context manager."""

    def __init__(
        self,
        base_url: str,
        timeout: float = MAIL_API_TIMEOUT,
        auth: tuple[str, str] | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._auth = auth
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None
        self._request_count = 0
        logger.info("{}: base_url={}", self.__class__.__name__, self._base_url)

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            auth=self._auth,
            transport=self._http_transport,
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )
        return self

    async def __aexit__(self, *_):
        logger.info("Total mail API requests: {}", self._request_count)
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def request_count(self) -> int:
        return self._request_count

    async def _post(self, path: str, data: dict) -> dict:
        """POST form data, return the JSON body."""
        if self._client is None:
            raise TransportError(f"{self.__class__.__name__} used outside its context manager")
        self._request_count += 1
        try:
            resp = await self._client.post(path, data=data)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"HTTP {e.response.status_code}: {e.response.text[:200]}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e
        return resp.json()
