import unittest

from vidforge.core.config import AppConfig
from vidforge.core.request_context import RequestContext
from vidforge.core.result import Err, Ok
from vidforge.models.pagination import QueryParams
from vidforge.services.admin_service import AdminService, normalize_cookies
from vidforge.services.api_client import ApiClient, ApiResponse
from vidforge.services.mobile_service import MobileService, mobile_context
from vidforge.services.platform_service import PlatformService
from vidforge.services.resource_services import DownloadService
from vidforge.services.setting_service import SettingService
from vidforge.services.user_service import UserService
from vidforge.services.web_service import WebService


class _ScriptedApi(ApiClient):
    """ApiClient whose transport is a queue of canned ApiResponses"""

    def __init__(self, *responses):
        super().__init__(AppConfig(api_url="http://api.test"))
        self.responses = list(responses)
        self.calls = []

    def request(self, ctx, method, path, data=None, **kwargs):
        self.calls.append((method, path, data, kwargs))
        if not self.responses:
            raise AssertionError(f"unexpected call {method} {path}")
        return self.responses.pop(0)


def ok(data=None, message="", pagination=None):
    return ApiResponse(status=200, success=True, message=message or "Request successful", data=data,
                       pagination=pagination, explicit_message=bool(message))


def fail(status=500, message="Boom", code="HTTP_ERROR"):
    return ApiResponse(status=status, success=False, message=message, error={"code": code}, explicit_message=True)


class TestDownloadService(unittest.TestCase):
    def setUp(self):
        self.ctx = RequestContext(access_token="t")

    def test_list_parses_rows_and_pagination(self):
        api = _ScriptedApi(ok([{"id": 7, "status": "COMPLETED", "title": "clip"}], pagination={"total_items": 1}))
        page = DownloadService(api).list(self.ctx, QueryParams(page=2, status="completed"))
        self.assertEqual(len(page.data), 1)
        self.assertEqual(page.data[0].id, "7")
        self.assertEqual(page.data[0].status.value, "completed")
        self.assertEqual(page.pagination.total_items, 1)
        method, path, _, kwargs = api.calls[0]
        self.assertEqual((method, path), ("GET", "/protected-admin/downloads"))
        self.assertEqual(kwargs["params"]["page"], "2")
        self.assertEqual(kwargs["params"]["status"], "completed")

    def test_list_failure_degrades_to_empty_page(self):
        page = DownloadService(_ScriptedApi(fail())).list(self.ctx)
        self.assertEqual(page.data, [])
        self.assertEqual(page.pagination.total_items, 0)

    def test_delete_uses_default_message_without_backend_text(self):
        result = DownloadService(_ScriptedApi(ok())).delete(self.ctx, "5")
        self.assertEqual(result, Ok("Download deleted successfully", "Download deleted successfully"))

    def test_delete_prefers_backend_message(self):
        result = DownloadService(_ScriptedApi(ok(message="Gone"))).delete(self.ctx, "5")
        self.assertEqual(result.value, "Gone")

    def test_bulk_delete_counts_ids(self):
        api = _ScriptedApi(ok())
        result = DownloadService(api).bulk_delete(self.ctx, ["1", "2", "3"])
        self.assertEqual(result.value, "3 download(s) deleted successfully")
        self.assertEqual(api.calls[0][2], {"ids": ["1", "2", "3"]})

    def test_bulk_delete_rejects_empty_ids_without_calling(self):
        api = _ScriptedApi()
        result = DownloadService(api).bulk_delete(self.ctx, [])
        self.assertIsInstance(result, Err)
        self.assertEqual(result.status, 400)
        self.assertEqual(api.calls, [])

    def test_get_without_data_is_error(self):
        result = DownloadService(_ScriptedApi(ok(None))).get(self.ctx, "1")
        self.assertIsInstance(result, Err)
        self.assertEqual(result.code, "EMPTY_DATA")


class TestUserService(unittest.TestCase):
    def test_anonymous_context_resolves_no_user(self):
        api = _ScriptedApi()
        self.assertIsNone(UserService(api).resolve_user(RequestContext()))
        self.assertEqual(api.calls, [])

    def test_resolve_user(self):
        api = _ScriptedApi(ok({"id": 1, "email": "a@b.c", "role": {"name": "superadmin"}}))
        user = UserService(api).resolve_user(RequestContext(access_token="t"))
        self.assertEqual(user.email, "a@b.c")
        self.assertTrue(user.is_admin)

    def test_failed_lookup_is_anonymous(self):
        user = UserService(_ScriptedApi(fail(401))).resolve_user(RequestContext(access_token="bad"))
        self.assertIsNone(user)

    def test_avatar_upload_returns_url(self):
        api = _ScriptedApi(ok({"avatar_url": "/a.png"}))
        result = UserService(api).update_avatar(RequestContext(access_token="t"), "a.png", b"x", "image/png")
        self.assertEqual(result.value, "/a.png")
        self.assertIn("avatar", api.calls[0][3]["files"])


class TestSettingService(unittest.TestCase):
    def test_public_settings_fall_back_to_defaults(self):
        settings = SettingService(_ScriptedApi(fail())).public_settings(RequestContext())
        self.assertEqual(settings.site_name, "Video Downloader")

    def test_public_settings_merge_records(self):
        api = _ScriptedApi(ok([{"key": "site_name", "value": "Clipper", "group_name": "WEBSITE"}]))
        settings = SettingService(api).public_settings(RequestContext())
        self.assertEqual(settings.site_name, "Clipper")
        self.assertTrue(api.calls[0][3]["public"])

    def test_update_bulk_rejects_empty(self):
        api = _ScriptedApi()
        result = SettingService(api).update_bulk(RequestContext(access_token="t"), [])
        self.assertEqual(result.status, 400)
        self.assertEqual(api.calls, [])

    def test_logo_upload_is_multipart(self):
        api = _ScriptedApi(ok({"url": "/uploads/logo.png"}))
        result = SettingService(api).update_logo(RequestContext(access_token="t"), "logo.png", b"png")
        self.assertEqual(result.value, "/uploads/logo.png")
        _, path, data, kwargs = api.calls[0]
        self.assertEqual(path, "/protected-admin/settings/upload")
        self.assertEqual(data, {"key": "site_logo"})
        self.assertEqual(kwargs["files"]["file"][0], "logo.png")


class TestWebService(unittest.TestCase):
    def test_mp3_platforms_route_to_mp3_processor(self):
        api = _ScriptedApi(ok({"id": "d1", "status": "pending"}), ok({"id": "d2"}))
        service = WebService(api)
        service.process_download(RequestContext(), {"url": "https://x", "type": "youtube-to-mp3", "format": ""})
        service.process_download(RequestContext(), {"url": "https://x", "type": "youtube"})
        self.assertEqual(api.calls[0][1], "/web-client/download/process/mp3")
        self.assertNotIn("format", api.calls[0][2])
        self.assertEqual(api.calls[1][1], "/web-client/download/process/video")

    def test_process_failure_passes_message(self):
        result = WebService(_ScriptedApi(fail(422, "Unsupported URL"))).download_video(RequestContext(), {"url": "x"})
        self.assertEqual(result, Err("Unsupported URL", status=422, code="HTTP_ERROR"))


class TestPlatformService(unittest.TestCase):
    def test_all_parses_platforms(self):
        api = _ScriptedApi(ok([{"id": 1, "name": "YouTube", "slug": "youtube", "config": {"mp3": True}}]))
        result = PlatformService(api).all(RequestContext())
        self.assertIsInstance(result, Ok)
        self.assertEqual(result.value[0].config, {"mp3": True})

    def test_malformed_record_in_list_is_error(self):
        api = _ScriptedApi(ok([{"id": 1, "slug": "youtube", "config": "broken"}]))
        result = PlatformService(api).all(RequestContext())
        self.assertIsInstance(result, Err)
        self.assertEqual(result.status, 502)
        self.assertEqual(result.code, "BAD_PAYLOAD")


class TestAdminService(unittest.TestCase):
    def test_normalize_cookies_from_text(self):
        cookies = normalize_cookies({"content": "a\nb", "valid": True, "path": "/c.txt"})
        self.assertEqual(cookies["lines"], ["a", "b"])
        self.assertTrue(cookies["valid"])

    def test_update_cookies_refetches_state(self):
        api = _ScriptedApi(ok(), ok({"lines": ["x"]}))
        result = AdminService(api).update_cookies(RequestContext(access_token="t"), "x")
        self.assertEqual(result.value["content"], "x")
        self.assertEqual([c[0] for c in api.calls], ["PUT", "GET"])


class TestMobileService(unittest.TestCase):
    def test_messaging_token(self):
        api = _ScriptedApi(ok({"token": "jwt"}))
        result = MobileService(api).messaging_token(mobile_context("t"))
        self.assertEqual(result.value, "jwt")
        self.assertEqual(api.calls[0][1], "/mobile-client/centrifugo/token")

    def test_missing_messaging_token_is_error(self):
        result = MobileService(_ScriptedApi(ok({}))).messaging_token(mobile_context("t"))
        self.assertIsInstance(result, Err)

    def test_login_requires_access_token(self):
        result = MobileService(_ScriptedApi(ok({"user": {}}))).login(mobile_context(), "a@b.c", "pw")
        self.assertIsInstance(result, Err)

    def test_create_download_parses_task(self):
        api = _ScriptedApi(ok({"id": 3, "status": "processing"}))
        result = MobileService(api).create_download_mp3(mobile_context("t"), "https://x", "p1")
        self.assertEqual(result.value.id, "3")
        self.assertEqual(api.calls[0][1], "/mobile-client/download/process/mp3")


if __name__ == "__main__":
    unittest.main()
