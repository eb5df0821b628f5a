"""Async HTTP client used by the UI components to talk to the API."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import httpx

import config

logger = logging.getLogger(__name__)


class ApiRequestError(Exception):
    """Non-2xx API response or transport failure, with the server's message."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self._token_provider = token_provider
        self._transport = transport
        self._timeout = timeout

    def _headers(self) -> Dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                transport=self._transport,
                timeout=self._timeout,
            ) as client:
                response = await client.request(method, path, headers=headers, **kwargs)
        except httpx.RequestError as exc:
            logger.warning("API %s %s failed: %s", method, path, exc)
            raise ApiRequestError(str(exc) or "Network error") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            message = data.get("error") if isinstance(data, dict) else None
            raise ApiRequestError(
                message or f"Request failed with status {response.status_code}",
                response.status_code,
            )
        return data if isinstance(data, dict) else {"data": data}

    async def get(self, path: str, **kwargs: Any) -> Dict[str, Any]:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Dict[str, Any]:
        return await self.request("POST", path, **kwargs)


__all__ = ["ApiClient", "ApiRequestError"]
