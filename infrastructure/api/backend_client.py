import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

log = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


@dataclass(frozen=True)
class ApiResponse:
    """Typed result of one backend call. HTTP and network failures never raise."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    message: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class BackendClient:
    def __init__(self, base_url: str, token_provider: Optional[TokenProvider] = None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(self, method: str, endpoint: str, payload: Any = None) -> ApiResponse:
        url = f"{self.base_url}{endpoint}"
        try:
            resp = requests.request(
                method,
                url,
                headers=self._headers(),
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error(f"❌ {method} {endpoint} failed: {e}")
            return ApiResponse(success=False, error=str(e) or "Network error")

        try:
            body = resp.json()
        except ValueError:
            body = None

        if not resp.ok:
            error = body.get("error") if isinstance(body, dict) else None
            log.warning(f"⚠️ {method} {endpoint} -> HTTP {resp.status_code}")
            return ApiResponse(
                success=False,
                error=error or f"HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        if body is None:
            log.error(f"❌ {method} {endpoint} returned a non-JSON body")
            return ApiResponse(success=False, error="Invalid response body", status_code=resp.status_code)

        if isinstance(body, dict):
            return ApiResponse(
                success=True,
                data=body.get("data") or body,
                message=body.get("message"),
                status_code=resp.status_code,
            )
        return ApiResponse(success=True, data=body, status_code=resp.status_code)

    # Auth
    def sign_in_with_google(self, auth_code: str) -> ApiResponse:
        return self._request("POST", "/google-oauth", {"code": auth_code})

    # Profile
    def get_profile(self) -> ApiResponse:
        return self._request("GET", "/profile")

    def update_profile(self, profile_data: Dict[str, Any]) -> ApiResponse:
        return self._request("PUT", "/profile", profile_data)

    def delete_profile(self) -> ApiResponse:
        return self._request("DELETE", "/profile")

    # Admin
    def get_admin_stats(self) -> ApiResponse:
        return self._request("GET", "/admin/stats")

    def health_check(self) -> ApiResponse:
        return self._request("GET", "/health")
