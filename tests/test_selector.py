import os
import sys
import unittest

sys.path.append(os.getcwd())
from masterdl.exceptions import SelectionError
from masterdl.schemas import Rendition
from masterdl.selector import (
    select_by_height,
    select_highest_resolution,
    select_rendition,
)


def _rendition(id, width, height):
    return Rendition(id=id, width=width, height=height)


class TestSelectHighestResolution(unittest.TestCase):

    def test_picks_global_maximum(self):
        renditions = [
            _rendition("360", 640, 360),
            _rendition("1080", 1920, 1080),
            _rendition("720", 1280, 720),
        ]
        self.assertEqual(select_highest_resolution(renditions).id, "1080")

    def test_tie_goes_to_first(self):
        renditions = [
            _rendition("a", 1280, 720),
            _rendition("b", 720, 1280),
            _rendition("c", 1280, 720),
        ]
        self.assertEqual(select_highest_resolution(renditions).id, "a")

    def test_zero_dimensions_rank_below_positive(self):
        renditions = [_rendition("sin", 0, 0), _rendition("con", 16, 9)]
        self.assertEqual(select_highest_resolution(renditions).id, "con")

    def test_only_zero_dimensions_raises(self):
        with self.assertRaises(SelectionError):
            select_highest_resolution([_rendition("sin", 0, 0)])


class TestSelectByHeight(unittest.TestCase):

    def test_first_exact_match_wins(self):
        renditions = [
            _rendition("a", 1920, 1080),
            _rendition("b", 640, 360),
            _rendition("c", 480, 360),
        ]
        self.assertEqual(select_by_height(renditions, 360).id, "b")

    def test_no_match_raises(self):
        with self.assertRaises(SelectionError) as ctx:
            select_by_height([_rendition("a", 1920, 1080)], 720)
        self.assertEqual(ctx.exception.preferred_height, 720)


class TestSelectRendition(unittest.TestCase):

    def setUp(self):
        self.renditions = [
            _rendition("360", 640, 360),
            _rendition("1080", 1920, 1080),
            _rendition("720", 1280, 720),
        ]

    def test_empty_list_raises(self):
        with self.assertRaises(SelectionError) as ctx:
            select_rendition([])
        self.assertIn("no rendition available", str(ctx.exception))

    def test_without_preference_uses_max(self):
        self.assertEqual(select_rendition(self.renditions).id, "1080")

    def test_zero_preference_uses_max(self):
        self.assertEqual(select_rendition(self.renditions, preferred_height=0).id, "1080")

    def test_exact_match_regardless_of_rank(self):
        """Una coincidencia exacta gana aunque no sea la de mayor resolución."""
        self.assertEqual(select_rendition(self.renditions, preferred_height=360).id, "360")

    def test_no_silent_substitution(self):
        with self.assertRaises(SelectionError):
            select_rendition(self.renditions, preferred_height=480)

    def test_explicit_fallback_to_max(self):
        rendition = select_rendition(
            self.renditions, preferred_height=480, fallback_to_best=True
        )
        self.assertEqual(rendition.id, "1080")


if __name__ == "__main__":
    unittest.main()
