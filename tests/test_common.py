import importlib
import io
import os
import pathlib
import unittest
import urllib.error
from unittest import mock

from smartfeed import common


class _FakeResponse(io.BytesIO):
    def __init__(self, body: bytes, status: int = 200, reason: str = "OK"):
        super().__init__(body)
        self.status = status
        self.reason = reason


class HttpGetTests(unittest.TestCase):
    def test_sends_user_agent_and_accept(self):
        captured = {}

        def fake_urlopen(req, timeout):
            captured["ua"] = req.get_header("User-agent")
            captured["accept"] = req.get_header("Accept")
            captured["timeout"] = timeout
            return _FakeResponse("<rss>ü</rss>".encode("utf-8"))

        with mock.patch.object(common.urllib.request, "urlopen", side_effect=fake_urlopen):
            text = common.http_get("https://origin.example/feed", accept="application/rss+xml")

        self.assertEqual(text, "<rss>ü</rss>")
        self.assertEqual(captured["ua"], common.UA)
        self.assertEqual(captured["accept"], "application/rss+xml")
        self.assertEqual(captured["timeout"], common.HTTP_TIMEOUT)

    def test_http_error_becomes_fetch_error(self):
        error = urllib.error.HTTPError("https://origin.example/feed", 503, "Service Unavailable", {}, None)
        with mock.patch.object(common.urllib.request, "urlopen", side_effect=error):
            with self.assertRaises(common.FetchError) as ctx:
                common.http_get("https://origin.example/feed")
        self.assertEqual(ctx.exception.status, 503)
        self.assertEqual(str(ctx.exception), "Fetch https://origin.example/feed failed: 503 Service Unavailable")

    def test_network_error_becomes_fetch_error(self):
        error = urllib.error.URLError("Name or service not known")
        with mock.patch.object(common.urllib.request, "urlopen", side_effect=error):
            with self.assertRaises(common.FetchError) as ctx:
                common.http_get("https://nowhere.invalid/")
        self.assertIsNone(ctx.exception.status)
        self.assertIn("Name or service not known", str(ctx.exception))

    def test_non_success_response_becomes_fetch_error(self):
        response = _FakeResponse(b"", status=304, reason="Not Modified")
        with mock.patch.object(common.urllib.request, "urlopen", return_value=response):
            with self.assertRaises(common.FetchError) as ctx:
                common.http_get("https://origin.example/feed")
        self.assertEqual(ctx.exception.status, 304)
        self.assertEqual(str(ctx.exception), "Fetch https://origin.example/feed failed: 304 Not Modified")


class ConfigTests(unittest.TestCase):
    def tearDown(self):
        importlib.reload(common)

    def test_env_overrides(self):
        env = {"MAX_LINKS": "5", "SMARTNEWS_OUTPUT": "/tmp/out.xml", "ENRICH_AUTHOR": "0"}
        with mock.patch.dict(os.environ, env):
            module = importlib.reload(common)
            self.assertEqual(module.MAX_LINKS, 5)
            self.assertEqual(str(module.OUTPUT), "/tmp/out.xml")
            self.assertFalse(module.ENRICH_AUTHOR)

    def test_invalid_int_falls_back(self):
        with mock.patch.dict(os.environ, {"MAX_LINKS": "lots"}):
            module = importlib.reload(common)
            self.assertEqual(module.MAX_LINKS, 12)

    def test_default_output_is_relative_to_working_directory(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            module = importlib.reload(common)
            self.assertEqual(module.OUTPUT, pathlib.Path("dist") / "feed-smartnews.xml")
            self.assertFalse(module.OUTPUT.is_absolute())
            self.assertEqual(module.FEED_URL, "https://www.cabletv.com/feed")


if __name__ == "__main__":
    unittest.main()
