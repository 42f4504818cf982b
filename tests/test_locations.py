import os
import sys
import unittest

sys.path.append(os.getcwd())
from masterdl.locations import (
    is_remote,
    resolve_base,
    resolve_segment,
    split_location,
)
from masterdl.exceptions import ContentIOError


class TestSplitLocation(unittest.TestCase):

    def test_http_url(self):
        self.assertEqual(
            split_location("https://h.example/p/m.json?x=1"),
            ("https", "h.example", "/p/m.json"),
        )

    def test_plain_path(self):
        self.assertEqual(split_location("/tmp/m.json"), ("", "", "/tmp/m.json"))
        self.assertEqual(split_location("m.json"), ("", "", "m.json"))

    def test_file_url_maps_to_path(self):
        self.assertEqual(split_location("file:///tmp/a%20b/m.json"), ("", "", "/tmp/a b/m.json"))

    def test_is_remote(self):
        self.assertTrue(is_remote("http://h/m.json"))
        self.assertTrue(is_remote("HTTPS://h/m.json"))
        self.assertFalse(is_remote("/tmp/m.json"))
        self.assertFalse(is_remote("file:///tmp/m.json"))


class TestResolveBase(unittest.TestCase):

    def test_relative_bases(self):
        base = resolve_base("https://h/video/123/master.json", "../", "v360/")
        self.assertEqual(base, "/video/v360/")

    def test_absolute_manifest_base_restarts_from_root(self):
        self.assertEqual(resolve_base("https://h/p/m.json", "/a/", ""), "/a/")

    def test_collapses_duplicate_separators(self):
        base = resolve_base("https://h/p//q/m.json", "a//b/", "./c")
        self.assertEqual(base, "/p/q/a/b/c/")

    def test_parent_above_root_stays_at_root(self):
        self.assertEqual(resolve_base("https://h/m.json", "../../x/", ""), "/x/")

    def test_local_paths(self):
        self.assertEqual(
            resolve_base("/data/clip/master.json", "parts/", "v1"), "/data/clip/parts/v1/"
        )
        self.assertEqual(resolve_base("master.json", "", ""), "./")
        self.assertEqual(resolve_base("clip/master.json", "", "v1/"), "clip/v1/")


class TestResolveSegment(unittest.TestCase):

    def test_network_location(self):
        self.assertEqual(
            resolve_segment("/a/", "s1.m4s", "https", "h"), "https://h/a/s1.m4s"
        )

    def test_network_location_cleans_segment_path(self):
        self.assertEqual(
            resolve_segment("/a/b/", "../c/./s1.m4s", "http", "h:8080"),
            "http://h:8080/a/c/s1.m4s",
        )

    def test_network_location_keeps_query(self):
        self.assertEqual(
            resolve_segment("/a/", "s1.m4s?r=1", "https", "h"), "https://h/a/s1.m4s?r=1"
        )

    def test_relative_base_with_host_is_rooted(self):
        self.assertEqual(resolve_segment("./", "s.m4s", "https", "h"), "https://h/s.m4s")

    def test_without_scheme_is_filesystem_path(self):
        self.assertEqual(resolve_segment("/data/v1/", "s1.m4s"), "/data/v1/s1.m4s")
        self.assertEqual(resolve_segment("./", "s1.m4s"), "s1.m4s")

    def test_host_without_scheme_is_filesystem_path(self):
        self.assertEqual(resolve_segment("/data/", "s1.m4s", "", "h"), "/data/s1.m4s")


class TestAssociativity(unittest.TestCase):
    """
    Resolver (ubicación, base_manifiesto, base_representación, segmento) de una
    vez da lo mismo que resolver primero (ubicación, base_manifiesto) y usar el
    resultado como nueva ubicación del manifiesto.
    """

    CASES = [
        ("https://h/p/q/m.json", "../a/", "b/c/", "../s.m4s"),
        ("https://h/p/m.json", "/a/", "v/", "s1.m4s"),
        ("https://h/m.json", "", "", "s.m4s"),
        ("/data/clip/master.json", "../", "v360", "seg/1.m4s"),
        ("master.json", "", "b", "s.m4s"),
        ("master.json", "../", "b/", "s.m4s"),
        ("clip/master.json", "a", "./b", "../s.m4s"),
    ]

    def test_composition(self):
        for location, manifest_base, rendition_base, segment in self.CASES:
            with self.subTest(location=location, manifest_base=manifest_base):
                scheme, host, _ = split_location(location)

                direct = resolve_segment(
                    resolve_base(location, manifest_base, rendition_base),
                    segment, scheme, host,
                )

                first = resolve_base(location, manifest_base, "")
                new_location = f"{scheme}://{host}{first}" if scheme else first
                composed = resolve_segment(
                    resolve_base(new_location, "", rendition_base),
                    segment, scheme, host,
                )

                self.assertEqual(direct, composed)


class TestInvalidLocations(unittest.TestCase):
    """Una URL mal formada es un error de E/S, no un ValueError suelto."""

    def test_split_location_bad_ipv6_host(self):
        with self.assertRaises(ContentIOError) as ctx:
            split_location("http://[bad/m.json")
        self.assertEqual(ctx.exception.location, "http://[bad/m.json")
        self.assertIsInstance(ctx.exception.cause, ValueError)

    def test_is_remote_bad_ipv6_host(self):
        with self.assertRaises(ContentIOError):
            is_remote("http://[bad/m.json")

    def test_resolve_segment_bad_segment_url(self):
        with self.assertRaises(ContentIOError):
            resolve_segment("/a/", "//[bad/s1.m4s", "https", "h")


if __name__ == "__main__":
    unittest.main()
