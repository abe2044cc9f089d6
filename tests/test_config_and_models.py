import unittest
from datetime import datetime, timezone
from pathlib import Path

from vidforge.core.config import load_config
from vidforge.core.request_context import RequestContext, normalize_locale
from vidforge.models.download_task import DownloadTask, TaskStatus
from vidforge.models.pagination import PaginatedResult, QueryParams
from vidforge.models.user import User


class TestConfig(unittest.TestCase):
    def test_defaults(self):
        config = load_config({})
        self.assertEqual(config.api_timeout_seconds, 15.0)
        self.assertEqual(config.reconnect_max_attempts, 8)
        self.assertIsNone(config.secure_cookies)
        self.assertEqual(config.static_dir, Path("static"))

    def test_env_overrides(self):
        config = load_config({
            "VIDFORGE_API_URL": "https://api.vid.test/api/v1/",
            "VIDFORGE_API_TIMEOUT": "4.5",
            "VIDFORGE_SECURE_COOKIES": "yes",
            "VIDFORGE_RECONNECT_MAX_ATTEMPTS": "0",
            "VIDFORGE_LOG_LEVEL": "debug",
        })
        self.assertEqual(config.base_url, "https://api.vid.test/api/v1")
        self.assertEqual(config.api_timeout_seconds, 4.5)
        self.assertTrue(config.secure_cookies)
        self.assertEqual(config.reconnect_max_attempts, 1)
        self.assertEqual(config.log_level, "DEBUG")

    def test_bad_numbers_fall_back(self):
        self.assertEqual(load_config({"VIDFORGE_API_TIMEOUT": "soon"}).api_timeout_seconds, 15.0)


class TestRequestContext(unittest.TestCase):
    def test_locale_normalization(self):
        self.assertEqual(normalize_locale("pt_BR"), "pt")
        self.assertEqual(normalize_locale("xx"), "en")
        self.assertEqual(normalize_locale(None), "en")

    def test_cookie_header_and_forwarding(self):
        ctx = RequestContext(cookies={"access_token": "t"}, client_ip="10.0.0.1", user_agent="UA")
        self.assertEqual(ctx.cookie_header({"csrf_token": "c"}), "access_token=t; csrf_token=c")
        headers = ctx.forwarded_headers()
        self.assertEqual(headers["X-Forwarded-For"], "10.0.0.1")
        self.assertEqual(headers["User-Agent"], "UA")
        self.assertFalse(ctx.is_authenticated)
        self.assertTrue(ctx.with_token("t").is_authenticated)


class TestModels(unittest.TestCase):
    def test_query_defaults_to_last_30_days(self):
        now = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)
        query = QueryParams.from_mapping({"page": "0", "order_by": "sideways", "status": "ALL"}, now=now)
        self.assertEqual(query.page, 1)
        self.assertEqual(query.order_by, "desc")
        self.assertEqual(query.date_from, "2024-03-01T00:00:00Z")
        self.assertEqual(query.date_to, "2024-03-31T23:59:59.999000Z")
        self.assertNotIn("status", query.to_query())

    def test_paginated_result_to_dict(self):
        page = PaginatedResult.build([{"id": 1}, "junk"], {"total_items": "1"}, User.from_dict)
        payload = page.to_dict()
        self.assertEqual(payload["data"][0]["id"], "1")
        self.assertEqual(payload["pagination"]["total_items"], 1)

    def test_task_status_parsing(self):
        self.assertEqual(TaskStatus.parse("FAILED"), TaskStatus.FAILED)
        self.assertEqual(TaskStatus.parse("weird"), TaskStatus.PENDING)
        with self.assertRaises(ValueError):
            DownloadTask.from_dict({"title": "no id"})


if __name__ == "__main__":
    unittest.main()
