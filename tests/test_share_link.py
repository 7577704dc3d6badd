from __future__ import annotations

import hashlib
import unittest

from postkeeper.share_link import ShareLinkBuilder, content_fingerprint, normalize_base_url


class TestShareLinkBuilder(unittest.TestCase):
    def test_plain_link_matches_id_format(self) -> None:
        builder = ShareLinkBuilder(fingerprint_chars=0)
        self.assertEqual(builder.build(7, "hello"), "http://myapp.com/post/7")

    def test_fingerprint_is_sha256_prefix(self) -> None:
        builder = ShareLinkBuilder("https://example.com", fingerprint_chars=8)
        expected = hashlib.sha256(b"7:hello").hexdigest()[:8]
        self.assertEqual(builder.build(7, "hello"), f"https://example.com/post/7-{expected}")

    def test_build_is_deterministic(self) -> None:
        a = ShareLinkBuilder(fingerprint_chars=12)
        b = ShareLinkBuilder(fingerprint_chars=12)
        self.assertEqual(a.build(3, "same"), b.build(3, "same"))
        self.assertNotEqual(a.build(3, "same"), a.build(3, "other"))

    def test_content_fingerprint_length(self) -> None:
        self.assertEqual(len(content_fingerprint(1, "x", chars=5)), 5)
        self.assertEqual(len(content_fingerprint(1, "x", chars=64)), 64)

    def test_rejects_out_of_range_fingerprint(self) -> None:
        with self.assertRaises(ValueError):
            ShareLinkBuilder(fingerprint_chars=-1)
        with self.assertRaises(ValueError):
            ShareLinkBuilder(fingerprint_chars=65)


class TestNormalizeBaseUrl(unittest.TestCase):
    def test_strips_trailing_slash_and_lowercases_host(self) -> None:
        self.assertEqual(normalize_base_url(" HTTPS://Example.COM/share/ "), "https://example.com/share")
        self.assertEqual(normalize_base_url("http://myapp.com/"), "http://myapp.com")

    def test_rejects_non_http_urls(self) -> None:
        for bad in ("", "myapp.com", "ftp://myapp.com", "https://"):
            with self.assertRaises(ValueError):
                normalize_base_url(bad)


if __name__ == "__main__":
    unittest.main()
