"""
Thin HTTP client for the FitOS REST API.

Requests carry a bearer token and JSON bodies; responses are unwrapped from the
{"success": true, "data": ...} envelope. Anything else raises ApiError. There
are no retries.
"""
import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15


class ApiError(Exception):
    def __init__(self, message, status=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload

    def __str__(self):
        if self.status:
            return f"[{self.status}] {self.message}"
        return self.message


class ApiClient:
    def __init__(self, base_url, token=None, tenant=None, timeout=DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        if tenant:
            self.session.headers["X-Tenant"] = tenant

    def _url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method, path, params=None, json=None, full=False):
        """
        Send a request and return the envelope's `data`
        (or the whole envelope when `full` is set, e.g. to read `pagination`).
        """
        url = self._url(path)
        try:
            resp = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("❌ %s %s failed: %s", method, url, exc)
            raise ApiError(f"Request to {url} failed: {exc}") from exc

        if resp.status_code == 204:
            return None

        try:
            payload = resp.json()
        except ValueError:
            payload = None

        if not resp.ok or not isinstance(payload, dict) or payload.get("success") is False:
            message = _error_message(payload) or resp.reason or "Request failed"
            logger.warning("⚠️ %s %s rejected (%s): %s", method, url, resp.status_code, message)
            raise ApiError(message, status=resp.status_code, payload=payload)

        return payload if full else payload.get("data")

    def get(self, path, params=None, full=False):
        return self.request("GET", path, params=params, full=full)

    def post(self, path, json=None):
        return self.request("POST", path, json=json)

    def put(self, path, json=None):
        return self.request("PUT", path, json=json)

    def patch(self, path, json=None):
        return self.request("PATCH", path, json=json)

    def delete(self, path):
        return self.request("DELETE", path)


def _error_message(payload):
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict):
        return error.get("message")
    if isinstance(error, str):
        return error
    return payload.get("detail") or payload.get("message")
