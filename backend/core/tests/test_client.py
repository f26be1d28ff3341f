from unittest.mock import MagicMock

import requests
from django.test import SimpleTestCase

from core.client import ApiClient, ApiError


def fake_response(status=200, payload=None, reason="OK", invalid_json=False):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = status < 400
    resp.reason = reason
    if invalid_json:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    return resp


class ApiClientTests(SimpleTestCase):
    def setUp(self):
        self.session = MagicMock()
        self.session.headers = {}
        self.client = ApiClient("http://api.test/", token="abc", tenant="iron-gym", session=self.session)

    def test_headers_are_set(self):
        self.assertEqual(self.session.headers["Authorization"], "Bearer abc")
        self.assertEqual(self.session.headers["X-Tenant"], "iron-gym")
        self.assertEqual(self.session.headers["Accept"], "application/json")

    def test_unwraps_data(self):
        self.session.request.return_value = fake_response(payload={"success": True, "data": {"id": 1}})

        self.assertEqual(self.client.get("/api/users/1/", params={"a": 1}), {"id": 1})
        self.session.request.assert_called_once_with(
            "GET", "http://api.test/api/users/1/", params={"a": 1}, json=None, timeout=15,
        )

    def test_full_returns_envelope(self):
        envelope = {"success": True, "data": [], "pagination": {"page": 1, "limit": 10, "total": 0, "pages": 0}}
        self.session.request.return_value = fake_response(payload=envelope)
        self.assertEqual(self.client.get("api/users/", full=True), envelope)

    def test_no_content(self):
        self.session.request.return_value = fake_response(status=204, invalid_json=True)
        self.assertIsNone(self.client.delete("/api/users/1/"))

    def test_error_envelope_raises(self):
        self.session.request.return_value = fake_response(
            status=409,
            reason="Conflict",
            payload={"success": False, "error": {"message": "Tenant already has an active custom plan."}},
        )
        with self.assertRaises(ApiError) as ctx:
            self.client.post("/api/super-admin/custom-plans/", json={})
        self.assertEqual(ctx.exception.status, 409)
        self.assertEqual(ctx.exception.message, "Tenant already has an active custom plan.")
        self.assertEqual(str(ctx.exception), "[409] Tenant already has an active custom plan.")

    def test_success_false_with_200_raises(self):
        self.session.request.return_value = fake_response(payload={"success": False, "error": "nope"})
        with self.assertRaises(ApiError) as ctx:
            self.client.get("/api/x/")
        self.assertEqual(ctx.exception.message, "nope")

    def test_non_json_error_uses_reason(self):
        self.session.request.return_value = fake_response(status=502, reason="Bad Gateway", invalid_json=True)
        with self.assertRaises(ApiError) as ctx:
            self.client.get("/api/x/")
        self.assertEqual(ctx.exception.message, "Bad Gateway")

    def test_network_error_is_wrapped(self):
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(ApiError) as ctx:
            self.client.get("/api/x/")
        self.assertIsNone(ctx.exception.status)
