import unittest

from vidforge.web.forms import FORM_ERRORS_KEY, validate_form
from vidforge.web.schemas import (
    ApplicationForm,
    DownloadVideoForm,
    LoginForm,
    PasswordForm,
    PlatformUpdateForm,
    WebSettingsForm,
)


class TestFormValidation(unittest.TestCase):
    def test_web_settings_require_site_name(self):
        state = validate_form(WebSettingsForm, {"site_tagline": "Fast"})
        self.assertFalse(state.valid)
        self.assertEqual(state.errors["site_name"], ["Site name is required"])
        self.assertEqual(state.message, "Site name is required")

    def test_web_settings_valid(self):
        state = validate_form(WebSettingsForm, {"site_name": " Clipper ", "site_url": "https://clip.test", "site_email": ""})
        self.assertTrue(state.valid)
        self.assertEqual(state.model.site_name, "Clipper")
        self.assertIsNone(state.model.site_email)

    def test_login_messages(self):
        state = validate_form(LoginForm, {"email": "1abc@x.io", "password": "123"})
        self.assertEqual(state.errors["email"], ["Email must start with a letter"])
        self.assertEqual(state.errors["password"], ["Password must be at least 6 characters long"])
        self.assertEqual(state.message, "Email must start with a letter, Password must be at least 6 characters long")

    def test_secret_fields_are_not_echoed(self):
        state = validate_form(PasswordForm, {"current_password": "secret1", "new_password": "a", "confirm_password": "b"})
        echoed = state.to_dict()
        self.assertFalse(echoed["valid"])
        self.assertEqual(echoed["data"]["current_password"], "")
        self.assertIn("new_password", echoed["errors"])

    def test_password_mismatch_is_form_level(self):
        state = validate_form(PasswordForm, {"current_password": "secret1", "new_password": "abcdef", "confirm_password": "abcdeg"})
        self.assertEqual(state.errors[FORM_ERRORS_KEY], ["New password and confirm password must be the same"])

    def test_download_type_defaults(self):
        state = validate_form(DownloadVideoForm, {"url": "https://youtu.be/x", "type": ""})
        self.assertEqual(state.model.type, "any-video-downloader")
        self.assertFalse(validate_form(DownloadVideoForm, {"url": "https://x", "type": "myspace"}).valid)

    def test_platform_config_json(self):
        state = validate_form(PlatformUpdateForm, {"id": "1", "name": "YouTube", "slug": "youtube", "config": '{"a": 1}'})
        self.assertEqual(state.model.to_payload()["config"], {"a": 1})
        self.assertNotIn("id", state.model.to_payload())
        bad = validate_form(PlatformUpdateForm, {"id": "1", "name": "YouTube", "slug": "youtube", "config": "{"})
        self.assertEqual(bad.errors["config"], ["Config must be valid JSON"])


class TestApplicationMonetization(unittest.TestCase):
    BASE = {"name": "Clipper", "package_name": "com.clip", "version": "1.0", "platform": "android"}

    def test_monetization_needs_a_network(self):
        state = validate_form(ApplicationForm, dict(self.BASE, enable_monetization="on"))
        self.assertIn("At least one ad network must be enabled when monetization is enabled", state.message)

    def test_enabled_network_needs_unit_ids(self):
        state = validate_form(ApplicationForm, dict(self.BASE, enable_monetization="true", enable_start_app="true"))
        self.assertEqual(state.errors[FORM_ERRORS_KEY], ["Start App ad unit ID is required when Start App is enabled"])

        state = validate_form(ApplicationForm, dict(self.BASE, enable_monetization="true", enable_unity_ad="true",
                                                    unity_ad_unit_id="u1"))
        self.assertIn("Unity banner ad unit ID is required when Unity is enabled", state.message)
        self.assertNotIn("Unity ad unit ID is required", state.message)

    def test_monetization_off_skips_checks(self):
        state = validate_form(ApplicationForm, dict(self.BASE, enable_admob="true"))
        self.assertTrue(state.valid)
        payload = state.model.to_payload()
        self.assertEqual(payload["name"], "Clipper")
        self.assertNotIn("admob_ad_unit_id", payload)


if __name__ == "__main__":
    unittest.main()
