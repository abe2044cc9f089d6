import unittest
from unittest.mock import Mock, patch

import requests

from vidforge.core.config import AppConfig
from vidforge.core.request_context import RequestContext
from vidforge.core.result import Err, Ok
from vidforge.services.api_client import ApiClient


def _response(status=200, body=None, reason="OK", json_error=False):
    response = Mock(status_code=status, reason=reason)
    response.cookies = {}
    if json_error:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


class TestApiClient(unittest.TestCase):
    def setUp(self):
        self.client = ApiClient(AppConfig(api_url="http://api.test/api/v1", api_key="k", api_timeout_seconds=9.0))
        self.ctx = RequestContext(access_token="tok", locale="en")

    def test_envelope_is_normalized(self):
        body = {"success": True, "message": "Fetched", "data": {"id": 1}, "pagination": {"page": 1}}
        with patch("requests.request", return_value=_response(body=body)) as req:
            response = self.client.request(self.ctx, "GET", "/protected-admin/users/1")
        self.assertTrue(response.success)
        self.assertEqual(response.message, "Fetched")
        self.assertEqual(response.data, {"id": 1})
        self.assertEqual(response.pagination, {"page": 1})
        self.assertEqual(req.call_args.args[1], "http://api.test/api/v1/protected-admin/users/1")

    def test_uses_configured_timeout(self):
        with patch("requests.request", return_value=_response(body={"success": True})) as req:
            self.client.request(self.ctx, "GET", "/x")
            self.assertEqual(req.call_args.kwargs.get("timeout"), 9.0)

    def test_honors_explicit_timeout(self):
        with patch("requests.request", return_value=_response(body={"success": True})) as req:
            self.client.request(self.ctx, "GET", "/x", timeout=3.0)
            self.assertEqual(req.call_args.kwargs.get("timeout"), 3.0)

    def test_bearer_only_for_non_public_calls(self):
        with patch("requests.request", return_value=_response(body={"success": True})) as req:
            self.client.request(self.ctx, "GET", "/x")
            headers = req.call_args.kwargs["headers"]
            self.assertEqual(headers["Authorization"], "Bearer tok")
            self.assertEqual(headers["X-API-Key"], "k")

            self.client.request(self.ctx, "GET", "/x", public=True)
            self.assertNotIn("Authorization", req.call_args.kwargs["headers"])

    def test_invalid_json_becomes_failure(self):
        with patch("requests.request", return_value=_response(status=502, reason="Bad Gateway", json_error=True)):
            response = self.client.request(self.ctx, "GET", "/x")
        self.assertFalse(response.success)
        self.assertEqual(response.status, 502)
        self.assertEqual(response.error_code, "INVALID_JSON")
        self.assertIn("Invalid JSON response", response.message)

    def test_no_content_is_success(self):
        with patch("requests.request", return_value=_response(status=204, json_error=True)):
            response = self.client.request(self.ctx, "DELETE", "/x", with_csrf=False)
        self.assertTrue(response.success)

    def test_network_error_never_raises(self):
        with patch("requests.request", side_effect=requests.ConnectionError("refused")):
            response = self.client.request(self.ctx, "GET", "/x")
        self.assertFalse(response.success)
        self.assertEqual(response.status, 500)
        self.assertEqual(response.error_code, "NETWORK_ERROR")

    def test_http_error_with_success_body_is_failure(self):
        with patch("requests.request", return_value=_response(status=404, body={"success": True, "message": "odd"})):
            response = self.client.request(self.ctx, "GET", "/x")
        self.assertFalse(response.success)
        self.assertEqual(response.status, 404)

    def test_csrf_header_on_browser_mutations(self):
        csrf = _response(body={"success": True, "data": {"csrf_token": "c1"}})
        done = _response(body={"success": True, "message": "Saved"})
        with patch("requests.request", side_effect=[csrf, done]) as req:
            response = self.client.request(self.ctx, "PUT", "/protected-admin/settings/bulk", {"a": 1})
        self.assertTrue(response.success)
        self.assertEqual(req.call_count, 2)
        self.assertTrue(req.call_args_list[0].args[1].endswith("/token/csrf"))
        headers = req.call_args_list[1].kwargs["headers"]
        self.assertEqual(headers["X-XSRF-TOKEN"], "c1")
        self.assertIn("csrf_token=c1", headers["Cookie"])

    def test_no_csrf_for_mobile_platform(self):
        ctx = RequestContext(access_token="tok", platform="android")
        with patch("requests.request", return_value=_response(body={"success": True})) as req:
            self.client.request(ctx, "POST", "/mobile-client/protected-mobile/auth/logout")
        self.assertEqual(req.call_count, 1)
        self.assertEqual(req.call_args.kwargs["headers"]["X-Platform"], "android")

    def test_call_folds_into_result(self):
        with patch("requests.request", return_value=_response(body={"success": True, "data": [1]})):
            ok = self.client.call(self.ctx, "GET", "/x")
        self.assertIsInstance(ok, Ok)
        self.assertEqual(ok.value.data, [1])

        body = {"success": False, "message": "Nope", "error": {"code": "NOT_FOUND"}}
        with patch("requests.request", return_value=_response(status=404, body=body)):
            err = self.client.call(self.ctx, "GET", "/x")
        self.assertIsInstance(err, Err)
        self.assertEqual(err.message, "Nope")
        self.assertEqual(err.status, 404)
        self.assertEqual(err.code, "NOT_FOUND")

    def test_fetch_raw_returns_plain_json(self):
        with patch("requests.request", return_value=_response(body={"cpu": 3})):
            result = self.client.fetch_raw(self.ctx, "/metrics")
        self.assertEqual(result, Ok({"cpu": 3}))


if __name__ == "__main__":
    unittest.main()
