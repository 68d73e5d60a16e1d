import pathlib
import unittest

from smartfeed import normalize


def load_text(name: str) -> str:
    path = pathlib.Path(__file__).parent / "feeds" / name
    return path.read_text(encoding="utf-8")


class EnsureNamespacesTests(unittest.TestCase):
    def test_missing_declarations_are_added_once(self):
        xml = load_text("sample_rss.xml")
        out = normalize.ensure_namespaces(xml)
        self.assertEqual(out.count('xmlns:snf="http://www.smartnews.be/snf"'), 1)
        self.assertEqual(out.count('xmlns:media="http://search.yahoo.com/mrss/"'), 1)
        self.assertEqual(out.count('xmlns:dc="http://purl.org/dc/elements/1.1/"'), 1)
        self.assertIn('xmlns:content="http://purl.org/rss/1.0/modules/content/"', out)

    def test_second_pass_is_a_no_op(self):
        once = normalize.ensure_namespaces(load_text("sample_rss.xml"))
        self.assertEqual(normalize.ensure_namespaces(once), once)

    def test_existing_prefix_is_not_redeclared(self):
        xml = '<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/"><channel></channel></rss>'
        out = normalize.ensure_namespaces(xml)
        self.assertEqual(out.count("xmlns:media="), 1)
        self.assertIn("xmlns:snf=", out)
        self.assertIn("xmlns:dc=", out)

    def test_document_without_rss_tag_is_untouched(self):
        self.assertEqual(normalize.ensure_namespaces("<feed></feed>"), "<feed></feed>")


class EnsureLogoTests(unittest.TestCase):
    def test_logo_inserted_after_channel(self):
        xml = "<rss><channel><title>T</title></channel></rss>"
        out = normalize.ensure_logo(xml, logo_url="https://cdn.example.com/logo.png")
        self.assertIn(
            "<channel>\n    <snf:logo><url>https://cdn.example.com/logo.png</url></snf:logo><title>",
            out,
        )

    def test_existing_logo_left_alone(self):
        xml = "<rss><channel><snf:logo><url>https://a/b.png</url></snf:logo></channel></rss>"
        self.assertEqual(normalize.ensure_logo(xml), xml)

    def test_normalize_document_is_idempotent(self):
        once = normalize.normalize_document(load_text("sample_rss.xml"))
        self.assertEqual(normalize.normalize_document(once), once)
        self.assertEqual(once.count("<snf:logo>"), 1)


if __name__ == "__main__":
    unittest.main()
