"""HTTP adapter for TelDrive API operations."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..exceptions import TeldriveAPIError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/116.0.0.0 Safari/537.36"
)

SUCCESS_STATUS = 200


def _error_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class HTTPAPIClient:
    """
    HTTP client adapter for API calls.

    Implements IAPIClient protocol. Holds the base host, the ``access_token``
    cookie and the user agent for one driver instance; nothing is shared at
    module level.
    """

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._access_token = access_token
        self._timeout = timeout
        self._user_agent = user_agent
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self):
        cookies = {"access_token": self._access_token} if self._access_token else None
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            headers={"User-Agent": self._user_agent},
            cookies=cookies,
            follow_redirects=False,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        endpoint: str,
        check: bool = True,
        **kwargs,
    ) -> httpx.Response:
        if not self._client:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")

        logger.debug("%s %s", method, endpoint)
        response = await self._client.request(method, endpoint, **kwargs)

        if check and response.status_code != SUCCESS_STATUS:
            raise TeldriveAPIError(response.status_code, method, endpoint, _error_detail(response))

        return response

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, check: bool = True) -> httpx.Response:
        return await self._request("GET", endpoint, check=check, params=params)

    async def post(
        self,
        endpoint: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        content: Any = None,
        headers: Optional[Dict[str, str]] = None,
        check: bool = True,
    ) -> httpx.Response:
        return await self._request(
            "POST",
            endpoint,
            check=check,
            json=json,
            params=params,
            content=content,
            headers=headers,
        )

    async def patch(self, endpoint: str, json: Any = None, check: bool = True) -> httpx.Response:
        return await self._request("PATCH", endpoint, check=check, json=json)

    async def delete(self, endpoint: str, json: Any = None, check: bool = True) -> httpx.Response:
        # httpx.AsyncClient.delete() takes no body, so go through request()
        return await self._request("DELETE", endpoint, check=check, json=json)
