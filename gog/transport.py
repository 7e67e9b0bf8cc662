"""Authenticated HTTP wrapper around the Gogs REST API (v1)."""

from typing import Any

import httpx

from gog.errors import ApiError, AuthError, ForbiddenError, NetworkError, NotFoundError

API_PREFIX = "/api/v1"
TIMEOUT = 30.0


class GogsTransport:
    """One shared AsyncClient per command run. Use as an async context manager."""

    def __init__(self, base_url: str, token: str, timeout: float = TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}{API_PREFIX}",
            headers={
                "Authorization": f"token {token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            # One request per repository during fan-out; don't queue behind a pool cap.
            limits=httpx.Limits(max_connections=None, max_keepalive_connections=20),
        )

    async def __aenter__(self) -> "GogsTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        body: dict | None = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, params=params, json=body)
        except httpx.HTTPError as exc:
            raise NetworkError(f"Request to {path} failed: {exc}") from exc

        if not response.is_success:
            text = response.text
            match response.status_code:
                case 401:
                    raise AuthError("Authentication failed. Check your API token.")
                case 403:
                    raise ForbiddenError("Access denied. Check permissions for this resource.")
                case 404:
                    raise NotFoundError(f"Resource not found: {text}")
                case status:
                    raise ApiError(f"API error {status}: {text}")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON in response from {path}: {exc}") from exc

    async def get(self, path: str, params: dict | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: dict) -> Any:
        return await self.request("POST", path, body=body)

    async def patch(self, path: str, body: dict) -> Any:
        return await self.request("PATCH", path, body=body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
