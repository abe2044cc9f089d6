import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from vidforge.models.catalog import Platform
from vidforge.web.artifacts import (
    ArtifactStore,
    https_origin,
    render_locale_rss,
    render_rss_index,
    render_sitemap,
    sitemap_pages,
)


class TestArtifactStore(unittest.TestCase):
    def test_generates_once_then_serves_stored_file(self):
        with tempfile.TemporaryDirectory() as td:
            store = ArtifactStore(Path(td) / "static")
            first = store.robots_txt("http://vid.test", "ops@vid.test")
            self.assertEqual(first.status_code, 200)
            self.assertIn("# Default robots.txt for https://vid.test", first.content)
            self.assertIn("# Contact: ops@vid.test", first.content)
            self.assertTrue((Path(td) / "static" / "robots.txt").exists())

            store.write("robots.txt", "User-agent: *\nDisallow: /")
            again = store.robots_txt("http://other.test")
            self.assertEqual(again.content, "User-agent: *\nDisallow: /")

    def test_io_failure_serves_default_with_500(self):
        with tempfile.TemporaryDirectory() as td:
            store = ArtifactStore(Path(td))
            with patch.object(Path, "open", side_effect=OSError("read-only")):
                artifact = store.ads_txt("https://vid.test")
            self.assertEqual(artifact.status_code, 500)
            self.assertIn("google.com, pub-0000000000000000, DIRECT", artifact.content)
            self.assertFalse((Path(td) / "ads.txt").exists())

    def test_stored_line_endings_survive_round_trip(self):
        with tempfile.TemporaryDirectory() as td:
            store = ArtifactStore(Path(td))
            store.write("ads.txt", "google.com, pub-1, DIRECT\r\nexample.net, 42, RESELLER\r\n")
            self.assertEqual(store.read("ads.txt"), "google.com, pub-1, DIRECT\r\nexample.net, 42, RESELLER\r\n")
            self.assertEqual((Path(td) / "ads.txt").read_bytes().count(b"\r\n"), 2)
            self.assertEqual(store.ads_txt("https://vid.test").content.count("\r\n"), 2)

    def test_read_missing_is_empty(self):
        with tempfile.TemporaryDirectory() as td:
            self.assertEqual(ArtifactStore(Path(td)).read("ads.txt"), "")


class TestFeeds(unittest.TestCase):
    def test_https_origin(self):
        self.assertEqual(https_origin("http://vid.test/"), "https://vid.test")
        self.assertEqual(https_origin("https://vid.test"), "https://vid.test")

    def test_sitemap_pages_dedupe(self):
        self.assertEqual(sitemap_pages(["youtube", "/faq/", ""])[-1], "youtube")
        self.assertEqual(sitemap_pages(["faq"]).count("faq"), 1)

    def test_sitemap_entries(self):
        body = render_sitemap("http://vid.test", ["about", "tiktok"], "de")
        self.assertIn("<loc>https://vid.test/de/tiktok</loc>", body)
        self.assertEqual(body.count("<priority>0.5</priority>"), 2)

    def test_rss_index_lists_locales(self):
        body = render_rss_index("https://vid.test", "Clipper & Co", "Videos")
        self.assertIn("<link>https://vid.test/rss-ja.xml</link>", body)
        self.assertIn("Clipper &amp; Co", body)

    def test_locale_rss_lists_platforms(self):
        body = render_locale_rss(
            "https://vid.test", "fr", "Clipper", "Videos",
            [Platform(id="1", name="TikTok", slug="tiktok"), Platform(id="2", name="Hidden")],
        )
        self.assertIn("<link>https://vid.test/fr/tiktok</link>", body)
        self.assertEqual(body.count("<item>"), 1)


if __name__ == "__main__":
    unittest.main()
