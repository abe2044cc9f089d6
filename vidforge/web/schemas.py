"""Form and request-body models for the web route handlers."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
URL_RE = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)

PLATFORM_TYPES = (
    "youtube", "tiktok", "instagram", "facebook", "twitter", "vimeo", "dailymotion",
    "rumble", "any-video-downloader", "snackvideo", "linkedin", "baidu", "pinterest",
    "snapchat", "twitch", "youtube-to-mp3", "facebook-to-mp3", "tiktok-to-mp3",
    "linkedin-to-mp3", "snackvideo-to-mp3", "twitch-to-mp3", "baidu-to-mp3",
    "pinterest-to-mp3", "snapchat-to-mp3", "instagram-to-mp3", "twitter-to-mp3",
    "vimeo-to-mp3", "dailymotion-to-mp3", "rumble-to-mp3",
)
PlatformType = Literal[PLATFORM_TYPES]  # type: ignore[valid-type]


def _required(value: Any, message: str) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValueError(message)
    return text


def _email(value: Any, message: str = "Email is not valid") -> str:
    text = _required(value, "Email is required")
    if not EMAIL_RE.match(text):
        raise ValueError(message)
    return text


def _password(value: Any, label: str, min_length: int = 6) -> str:
    text = re.sub(r"\s+", "", str(value or ""))
    if not text:
        raise ValueError(f"{label} is required")
    if len(text) < min_length:
        raise ValueError(f"{label} must be at least {min_length} characters long")
    return text


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class FormModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


# Auth

class LoginForm(FormModel):
    email: str
    password: str
    remember_me: bool = False

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v):
        text = _email(v, "Invalid email address")
        if not text[0].isalpha():
            raise ValueError("Email must start with a letter")
        return text

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, v):
        return _password(v, "Password")


class GoogleLoginRequest(FormModel):
    credential: str

    @field_validator("credential", mode="before")
    @classmethod
    def _check_credential(cls, v):
        return _required(v, "Credential is required")


class ForgotForm(FormModel):
    email: str

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v):
        return _email(v)


class ResetPasswordForm(FormModel):
    new_password: str
    confirm_password: str
    token: str

    @field_validator("new_password", mode="before")
    @classmethod
    def _check_new(cls, v):
        return _password(v, "Password")

    @field_validator("confirm_password", mode="before")
    @classmethod
    def _check_confirm(cls, v):
        return _required(re.sub(r"\s+", "", str(v or "")), "Confirm password is required")

    @field_validator("token", mode="before")
    @classmethod
    def _check_token(cls, v):
        return _required(v, "Token is required")

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Password and confirm password must be the same")
        return self


# Public site

class ContactForm(FormModel):
    name: str
    email: str
    subject: str
    message: str

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v):
        return _email(v)

    @field_validator("name", "subject", "message", mode="before")
    @classmethod
    def _check_required(cls, v, info):
        return _required(v, f"{info.field_name.capitalize()} is required")


class DownloadVideoForm(FormModel):
    url: str
    type: PlatformType = "any-video-downloader"
    user_id: Optional[str] = None
    platform_id: Optional[str] = None
    app_id: Optional[str] = None

    @field_validator("url", mode="before")
    @classmethod
    def _check_url(cls, v):
        return _required(v, "URL is required")

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, v):
        return _blank_to_none(v) or "any-video-downloader"


class ProxyDownloadRequest(BaseModel):
    videoUrl: str
    filename: Optional[str] = None


class ErrorReport(BaseModel):
    model_config = ConfigDict(extra="allow")

    error: Any = None
    message: Any = None
    platform_id: Any = None
    user_id: Any = None
    user_agent: Any = None
    url: Any = None
    method: Any = None
    request: Any = None
    status: Any = None
    level: Any = None
    locale: Any = None
    timestamp_ms: Any = None


# Settings

class WebSettingsForm(FormModel):
    site_name: str
    site_tagline: Optional[str] = None
    site_description: Optional[str] = None
    site_keywords: Optional[str] = None
    site_email: Optional[str] = None
    site_phone: Optional[str] = None
    site_url: Optional[str] = None

    @field_validator("site_name", mode="before")
    @classmethod
    def _check_name(cls, v):
        return _required(v, "Site name is required")

    @field_validator("site_email", mode="before")
    @classmethod
    def _check_email(cls, v):
        v = _blank_to_none(v)
        return None if v is None else _email(v, "Invalid email")

    @field_validator("site_url", mode="before")
    @classmethod
    def _check_url(cls, v):
        v = _blank_to_none(v)
        if v is not None and not URL_RE.match(str(v).strip()):
            raise ValueError("Invalid URL")
        return v


class EmailSettingsForm(FormModel):
    smtp_enabled: bool = True
    smtp_service: Optional[str] = "gmail"
    smtp_host: Optional[str] = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    from_email: Optional[str] = None
    from_name: Optional[str] = None

    @field_validator("from_email", mode="before")
    @classmethod
    def _check_email(cls, v):
        v = _blank_to_none(v)
        return None if v is None else _email(v, "Invalid email")

    @field_validator("smtp_port", mode="before")
    @classmethod
    def _default_port(cls, v):
        return _blank_to_none(v) or 587


class SystemSettingsForm(FormModel):
    enable_documentation: bool = True
    maintenance_mode: bool = False
    maintenance_message: Optional[str] = None
    source_logo_favicon: Literal["local", "remote"] = "local"
    histats_tracking_code: Optional[str] = None
    google_analytics_code: Optional[str] = None
    play_store_app_url: Optional[str] = None
    app_store_app_url: Optional[str] = None

    @field_validator("source_logo_favicon", mode="before")
    @classmethod
    def _default_source(cls, v):
        return _blank_to_none(v) or "local"


class MonetizationSettingsForm(FormModel):
    enable_monetize: bool = False
    type_monetize: Literal["adsense", "revenuecat", "adsterra"] = "adsense"
    enable_popup_ad: bool = False
    auto_ad_code: Optional[str] = None
    popup_ad_code: Optional[str] = None
    socialbar_ad_code: Optional[str] = None
    banner_rectangle_ad_code: Optional[str] = None
    banner_horizontal_ad_code: Optional[str] = None
    banner_vertical_ad_code: Optional[str] = None
    native_ad_code: Optional[str] = None
    direct_link_ad_code: Optional[str] = None

    @field_validator("type_monetize", mode="before")
    @classmethod
    def _default_type(cls, v):
        return _blank_to_none(v) or "adsense"


class TextContentForm(BaseModel):
    content: str = ""


class CookiesForm(BaseModel):
    cookies: str = ""


# Accounts

class ProfileForm(FormModel):
    full_name: str
    email: str

    @field_validator("full_name", mode="before")
    @classmethod
    def _check_name(cls, v):
        text = _required(v, "Name is required")
        if len(text) < 3:
            raise ValueError("Name must be at least 3 characters long")
        return text

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v):
        return _email(v)


class PasswordForm(FormModel):
    current_password: str
    new_password: str
    confirm_password: str

    @field_validator("current_password", mode="before")
    @classmethod
    def _check_current(cls, v):
        return _password(v, "Current password")

    @field_validator("new_password", mode="before")
    @classmethod
    def _check_new(cls, v):
        return _password(v, "New password")

    @field_validator("confirm_password", mode="before")
    @classmethod
    def _check_confirm(cls, v):
        return _required(re.sub(r"\s+", "", str(v or "")), "Confirm password is required")

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("New password and confirm password must be the same")
        return self


# Catalog

class PlatformUpdateForm(FormModel):
    id: str
    name: str
    slug: str
    type: PlatformType = "youtube"
    url_pattern: Optional[str] = None
    is_active: bool = True
    is_premium: bool = False
    config: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", "name", "slug", mode="before")
    @classmethod
    def _check_required(cls, v, info):
        label = {"id": "ID"}.get(info.field_name, info.field_name.capitalize())
        return _required(v, f"{label} is required")

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, v):
        return _blank_to_none(v) or "youtube"

    @field_validator("config", mode="before")
    @classmethod
    def _parse_config(cls, v):
        v = _blank_to_none(v)
        if v is None:
            return {}
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except ValueError:
                raise ValueError("Config must be valid JSON")
        if not isinstance(v, dict):
            raise ValueError("Config must be a JSON object")
        return v

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"id"})


AD_NETWORK_UNITS = {
    "enable_admob": ("Admob", "admob_ad_unit_id", "admob_banner_ad_unit_id", "admob_interstitial_ad_unit_id",
                     "admob_native_ad_unit_id", "admob_rewarded_ad_unit_id"),
    "enable_unity_ad": ("Unity", "unity_ad_unit_id", "unity_banner_ad_unit_id", "unity_interstitial_ad_unit_id",
                        "unity_native_ad_unit_id", "unity_rewarded_ad_unit_id"),
    "enable_start_app": ("Start App", "start_app_ad_unit_id"),
}


def _unit_label(field_name: str, network: str) -> str:
    kind = field_name.split("_ad_unit_id")[0].split("_")[-1]
    if kind in {"admob", "unity", "app"}:
        return f"{network} ad unit ID"
    return f"{network} {kind} ad unit ID"


class ApplicationForm(FormModel):
    name: str
    package_name: str
    version: str
    platform: str
    enable_monetization: bool = False
    enable_admob: bool = False
    enable_unity_ad: bool = False
    enable_start_app: bool = False
    enable_in_app_purchase: bool = False
    admob_ad_unit_id: Optional[str] = None
    unity_ad_unit_id: Optional[str] = None
    start_app_ad_unit_id: Optional[str] = None
    admob_banner_ad_unit_id: Optional[str] = None
    admob_interstitial_ad_unit_id: Optional[str] = None
    admob_native_ad_unit_id: Optional[str] = None
    admob_rewarded_ad_unit_id: Optional[str] = None
    unity_banner_ad_unit_id: Optional[str] = None
    unity_interstitial_ad_unit_id: Optional[str] = None
    unity_native_ad_unit_id: Optional[str] = None
    unity_rewarded_ad_unit_id: Optional[str] = None
    is_active: bool = True

    @field_validator("name", "package_name", "version", "platform", mode="before")
    @classmethod
    def _check_required(cls, v, info):
        label = info.field_name.replace("_", " ").capitalize()
        return _required(v, f"{label} is required")

    @model_validator(mode="after")
    def _check_monetization(self):
        if not self.enable_monetization:
            return self
        problems: List[str] = []
        if not (self.enable_admob or self.enable_unity_ad or self.enable_start_app):
            problems.append("At least one ad network must be enabled when monetization is enabled")
        for flag, (network, *units) in AD_NETWORK_UNITS.items():
            if not getattr(self, flag):
                continue
            for unit in units:
                if not getattr(self, unit):
                    problems.append(f"{_unit_label(unit, network)} is required when {network} is enabled")
        if problems:
            raise ValueError("; ".join(problems))
        return self

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"id"}, exclude_none=True)


class ApplicationUpdateForm(ApplicationForm):
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _check_id(cls, v):
        return _required(v, "ID is required")
