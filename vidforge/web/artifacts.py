"""
Static SEO/ads artifacts.

ads.txt and robots.txt are generated from a template on first request and
persisted under the static directory; later requests serve the stored file.
Sitemaps and RSS feeds are rendered per request.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
import logging
from pathlib import Path
import threading
from typing import Iterable, List, Optional, Sequence
from xml.sax.saxutils import escape

from ..core.config import SUPPORTED_LOCALES

logger = logging.getLogger(__name__)

ADS_TXT = "ads.txt"
ROBOTS_TXT = "robots.txt"
STATIC_PAGES = ("about", "contact", "faq", "privacy", "terms")
DEFAULT_CONTACT = "admin@your-domain.com"


def https_origin(origin: str) -> str:
    origin = (origin or "").rstrip("/")
    if origin.startswith("http://"):
        return "https://" + origin[len("http://"):]
    return origin


def default_ads_txt(origin: str) -> str:
    return "\n".join(
        [
            f"# Default ads.txt for {origin}",
            "google.com, pub-0000000000000000, DIRECT, f08c47fec0942fa0",
            "google.com, pub-0000000000000001, RESELLER",
            "# Add your own ad network entries here",
            f"# Contact: {DEFAULT_CONTACT}",
        ]
    )


def default_robots_txt(origin: str, contact_email: Optional[str] = None) -> str:
    return "\n".join(
        [
            f"# Default robots.txt for {origin}",
            "User-agent: *",
            "Disallow: /admin/",
            "Disallow: /private/",
            "Disallow: /tmp/",
            "Disallow: /uploads/",
            "# Add your own disallow entries here",
            f"# Contact: {contact_email or DEFAULT_CONTACT}",
        ]
    )


# Line endings are kept as stored.
def _read_file(path: Path) -> str:
    with path.open("r", encoding="utf-8", newline="") as fh:
        return fh.read()


def _write_file(path: Path, content: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(content)


@dataclass(frozen=True)
class ArtifactContent:
    content: str
    status_code: int = 200


class ArtifactStore:
    """Generate-once, read-many text files under the static directory"""

    def __init__(self, static_dir: Path):
        self.static_dir = Path(static_dir)
        self._lock = threading.Lock()

    def path(self, name: str) -> Path:
        return self.static_dir / name

    def _load_or_create(self, name: str, default: str) -> ArtifactContent:
        path = self.path(name)
        try:
            with self._lock:
                if path.exists():
                    return ArtifactContent(_read_file(path))
                path.parent.mkdir(parents=True, exist_ok=True)
                _write_file(path, default)
                logger.info("Generated default %s at %s", name, path)
                return ArtifactContent(default)
        except OSError as exc:
            logger.error("Failed to read or write %s: %s", path, exc)
            return ArtifactContent(default, status_code=500)

    def ads_txt(self, origin: str) -> ArtifactContent:
        return self._load_or_create(ADS_TXT, default_ads_txt(https_origin(origin)))

    def robots_txt(self, origin: str, contact_email: Optional[str] = None) -> ArtifactContent:
        return self._load_or_create(ROBOTS_TXT, default_robots_txt(https_origin(origin), contact_email))

    def read(self, name: str) -> str:
        path = self.path(name)
        try:
            return _read_file(path) if path.exists() else ""
        except OSError as exc:
            logger.error("Failed to read %s: %s", path, exc)
            return ""

    def write(self, name: str, content: str) -> None:
        """Replace an artifact; raises OSError for the caller to report"""
        path = self.path(name)
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            _write_file(path, content)


def sitemap_pages(slugs: Iterable[str]) -> List[str]:
    pages = list(STATIC_PAGES)
    for slug in slugs:
        slug = str(slug or "").strip().strip("/")
        if slug and slug not in pages:
            pages.append(slug)
    return pages


def render_sitemap(origin: str, pages: Sequence[str], locale: Optional[str] = None) -> str:
    base = https_origin(origin)
    if locale:
        base = f"{base}/{locale}"
    entries = []
    for page in pages:
        entries.append(
            "  <url>\n"
            f"    <loc>{escape(f'{base}/{page}')}</loc>\n"
            "    <changefreq>daily</changefreq>\n"
            "    <priority>0.5</priority>\n"
            "  </url>"
        )
    body = "\n".join(entries)
    return (
        '<?xml version="1.0" encoding="UTF-8" ?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{body}\n"
        "</urlset>"
    )


def _rss(title: str, link: str, description: str, items: List[str]) -> str:
    now = format_datetime(datetime.now(timezone.utc))
    return (
        '<?xml version="1.0" encoding="UTF-8" ?>\n'
        '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">\n'
        "<channel>\n"
        f"  <title>{escape(title)}</title>\n"
        f"  <link>{escape(link)}</link>\n"
        f"  <description>{escape(description)}</description>\n"
        f"  <lastBuildDate>{now}</lastBuildDate>\n"
        + "".join(items)
        + "</channel>\n</rss>"
    )


def _rss_item(title: str, link: str, description: str = "") -> str:
    return (
        "  <item>\n"
        f"    <title>{escape(title)}</title>\n"
        f"    <link>{escape(link)}</link>\n"
        f"    <guid>{escape(link)}</guid>\n"
        f"    <description>{escape(description)}</description>\n"
        "  </item>\n"
    )


def render_rss_index(origin: str, site_name: str, description: str) -> str:
    base = https_origin(origin)
    items = [_rss_item(f"{site_name} ({locale})", f"{base}/rss-{locale}.xml") for locale in SUPPORTED_LOCALES]
    return _rss(site_name, base, description, items)


def render_locale_rss(origin: str, locale: str, site_name: str, description: str, platforms: Iterable) -> str:
    base = https_origin(origin)
    items = [
        _rss_item(getattr(p, "name", "") or p.slug, f"{base}/{locale}/{p.slug}", f"{site_name} - {getattr(p, 'name', '')}")
        for p in platforms
        if getattr(p, "slug", "")
    ]
    return _rss(f"{site_name} ({locale})", f"{base}/{locale}", description, items)
