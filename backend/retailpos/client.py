# Overview: HTTP client for the RetailPOS API (httpx) with envelope unwrapping and transport retries.

"""
API client

Attaches the bearer token and the X-Tenant-ID header, unwraps the
{success, message, data} envelope and raises ApiError for every non-2xx
answer.

RETRIES: only transport-level failures (connection refused, timeouts) are
retried, with exponential backoff: attempts=2, backoff 1s, doubling. An HTTP
error response is an answer from the server and is never retried.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response (status set) or exhausted transport retries (status None)."""

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body


class PosApiClient:
    """
    Thin wrapper over httpx.Client.

    login()/register_store() remember the returned token; set tenant to a
    subdomain or tenant id to send X-Tenant-ID on every request.
    """

    def __init__(
        self,
        base_url: str,
        tenant: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 30.0,
        max_attempts: int = 2,
        backoff: float = 1.0,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.base_url = base_url.rstrip("/")
        self.tenant = tenant
        self.token = token
        self.max_attempts = max_attempts
        self.backoff = backoff
        self._sleep = sleep
        self.client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def _headers(self, extra: Optional[Dict] = None) -> Dict:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.tenant:
            headers["X-Tenant-ID"] = self.tenant
        if extra:
            headers.update(extra)
        return headers

    def request(self, method: str, path: str, **kwargs) -> Any:
        """Send a request and return the envelope's data (or the whole body when it has none)."""
        headers = self._headers(kwargs.pop("headers", None))
        delay = self.backoff
        attempt = 1
        while True:
            try:
                response = self.client.request(method, path, headers=headers, **kwargs)
                break
            except httpx.TransportError as e:
                if attempt >= self.max_attempts:
                    raise ApiError(f"Request failed after {attempt} attempt(s): {e}") from e
                logger.warning("%s %s failed (%s); retrying in %.1fs", method, path, e, delay)
                self._sleep(delay)
                delay *= 2
                attempt += 1

        return self._unwrap(response)

    @staticmethod
    def _unwrap(response: httpx.Response) -> Any:
        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_success:
            if isinstance(body, dict) and "data" in body:
                return body["data"]
            return body

        message = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
        raise ApiError(message or f"HTTP {response.status_code}", status=response.status_code, body=body)

    def get(self, path: str, params: Optional[Dict] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[Dict] = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Optional[Dict] = None) -> Any:
        return self.request("PUT", path, json=json)

    def patch(self, path: str, json: Optional[Dict] = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def register_store(self, payload: Dict) -> Dict:
        data = self.post("/api/tenants/register", json=payload)
        self.token = data["token"]
        self.tenant = data["tenant"]["id"]
        return data

    def login(self, email: str, password: str) -> Dict:
        data = self.post("/api/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data

    def logout(self) -> None:
        if self.token:
            self.post("/api/auth/logout")
        self.token = None

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "PosApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
