"""
HTTP client for the RentCare API, used by the page controllers.
"""
import logging
from typing import Optional

import requests

log = logging.getLogger(__name__)


class ApiError(Exception):
    """Any failed call: non-2xx response or transport error."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason or f"HTTP error! status: {response.status_code}"
    if isinstance(data, dict):
        for key in ("detail", "message", "error"):
            if isinstance(data.get(key), str):
                return data[key]
    return response.reason or f"HTTP error! status: {response.status_code}"


class ApiClient:
    def __init__(self, base_url: str, token: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs):
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, headers=headers, **kwargs)
        except requests.RequestException as e:
            log.error(f"{method} {url} failed: {e}")
            raise ApiError(str(e))
        if not response.ok:
            message = _error_message(response)
            log.warning(f"{method} {url} -> {response.status_code}: {message}")
            raise ApiError(message, status=response.status_code)
        if not response.content:
            return None
        return response.json()

    # ---------- Auth ----------

    def login(self, identifier: str, password: str) -> dict:
        return self._request("POST", "/auth/login", json={"identifier": identifier, "password": password})

    # ---------- Properties ----------

    def list_properties(self, owner_id: str) -> list:
        return self._request("GET", "/properties", params={"ownerId": owner_id})

    def get_property(self, property_id: str) -> dict:
        return self._request("GET", f"/properties/{property_id}")

    def create_property(self, data: dict) -> dict:
        return self._request("POST", "/properties", json=data)

    def update_property(self, property_id: str, data: dict) -> dict:
        return self._request("PUT", f"/properties/{property_id}", json=data)

    def delete_property(self, property_id: str):
        return self._request("DELETE", f"/properties/{property_id}")

    def mark_payment_success(self, property_id: str, flat_no: str, rent_amount, session_id: Optional[str] = None) -> dict:
        body = {"rentAmount": rent_amount}
        if session_id:
            body["sessionId"] = session_id
        return self._request("PUT", f"/properties/{property_id}/tenants/{flat_no}/payment-success", json=body)

    def notify_tenant(self, property_id: str, flat_no: str, message: str) -> dict:
        return self._request("POST", f"/properties/{property_id}/tenants/{flat_no}/notify", json={"message": message})

    # ---------- Payment ----------

    def create_checkout_session(self, body: dict) -> dict:
        return self._request("POST", "/api/payment/create-checkout-session", json=body)
