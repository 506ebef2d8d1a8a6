"""
Base HTTP client for the builder services (Layout Service, Elementor, Text Labs).

One httpx.AsyncClient per service, created at startup and closed on shutdown.
Clients that report failures as values use `request()`, which never raises:
non-2xx responses become `HTTP_<status>` errors and transport failures
become `NETWORK_ERROR`.
"""

import time
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from app.core.logging_config import logger


class ServiceErrorInfo(BaseModel):
    code: str
    message: str


class ServiceResponse(BaseModel):
    """Outcome of a builder service call. `data` is the service's JSON body."""
    success: bool
    data: Dict[str, Any] = {}
    error: Optional[ServiceErrorInfo] = None

    @classmethod
    def failure(cls, code: str, message: str) -> "ServiceResponse":
        return cls(success=False, error=ServiceErrorInfo(code=code, message=message))


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {"result": body}


class BuilderServiceClient:
    """Shared plumbing: base URL, timeouts, structured call logging"""

    service_name = "service"

    def __init__(self, base_url: str, timeout: float = 60.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _error_message(self, body: Dict[str, Any], status_code: int) -> str:
        """Pull a human readable message out of an error body"""
        return f"Request failed with status {status_code}"

    async def request(self, method: str, path: str, operation: str, **kwargs) -> ServiceResponse:
        start = time.perf_counter()
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.log_service_call(self.service_name, operation, False, duration_ms, error_code="NETWORK_ERROR")
            return ServiceResponse.failure("NETWORK_ERROR", str(e) or "Network request failed")

        duration_ms = (time.perf_counter() - start) * 1000
        body = _json_body(response)

        if not response.is_success:
            code = f"HTTP_{response.status_code}"
            logger.log_service_call(self.service_name, operation, False, duration_ms, error_code=code)
            return ServiceResponse.failure(code, self._error_message(body, response.status_code))

        success = bool(body.get("success", True))
        error = body.get("error")
        error_info = None
        if isinstance(error, dict) and error.get("code"):
            error_info = ServiceErrorInfo(code=str(error["code"]), message=str(error.get("message", "")))
        elif isinstance(error, str) and not success:
            error_info = ServiceErrorInfo(code="SERVICE_ERROR", message=error)

        logger.log_service_call(
            self.service_name, operation, success, duration_ms,
            error_code=error_info.code if error_info else None,
        )
        return ServiceResponse(success=success, data=body, error=error_info)
