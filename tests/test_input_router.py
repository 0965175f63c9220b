import unittest

import pytest

pytest.importorskip("PyQt6.QtGui")

from PyQt6.QtCore import Qt  # noqa: E402

from gameplay_models import InputKind  # noqa: E402
from input_router import InputRouter  # noqa: E402
from lane_input import LaneInputState  # noqa: E402


class FakeKeyEvent:
    def __init__(self, key, auto_repeat=False):
        self._key = int(key.value)
        self._auto_repeat = auto_repeat

    def key(self):
        return self._key

    def isAutoRepeat(self):
        return self._auto_repeat


class TestInputRouter(unittest.TestCase):
    def setUp(self):
        self.song_time = 1.25
        self.edges = []
        self.router = InputRouter(lambda: self.song_time)
        self.router.laneInput.connect(self.edges.append)

    def test_default_keys_map_to_lanes(self):
        for key, lane in ((Qt.Key.Key_D, 0), (Qt.Key.Key_K, 3), (Qt.Key.Key_Left, 0), (Qt.Key.Key_Right, 3)):
            self.assertEqual(self.router.key_to_lane_map[int(key.value)], lane)

    def test_press_and_release_emit_edges(self):
        self.assertTrue(self.router.handle_key_press(FakeKeyEvent(Qt.Key.Key_J)))
        self.song_time = 1.5
        self.assertTrue(self.router.handle_key_release(FakeKeyEvent(Qt.Key.Key_J)))

        self.assertEqual([(edge.lane, edge.kind, edge.time_seconds) for edge in self.edges], [
            (2, InputKind.PRESS, 1.25),
            (2, InputKind.RELEASE, 1.5),
        ])
        self.assertEqual(self.router.total_presses, 1)

    def test_auto_repeat_and_double_press_are_ignored(self):
        self.router.handle_key_press(FakeKeyEvent(Qt.Key.Key_F))
        self.router.handle_key_press(FakeKeyEvent(Qt.Key.Key_F, auto_repeat=True))
        self.router.handle_key_press(FakeKeyEvent(Qt.Key.Key_Down))
        self.assertEqual(len(self.edges), 1)
        self.assertEqual(self.router.ignored_presses, 2)
        self.assertEqual(self.router.lane_state().held_lanes(), frozenset({1}))

    def test_own_lane_state_does_not_accumulate_edges(self):
        for _ in range(3):
            self.router.handle_key_press(FakeKeyEvent(Qt.Key.Key_D))
            self.router.handle_key_release(FakeKeyEvent(Qt.Key.Key_D))
        self.assertEqual(len(self.edges), 6)
        self.assertEqual(self.router.lane_state().drain_events(), [])

    def test_shared_lane_state_keeps_edges_for_its_owner(self):
        shared = LaneInputState()
        router = InputRouter(lambda: self.song_time, lane_state=shared)
        router.handle_key_press(FakeKeyEvent(Qt.Key.Key_K))
        self.assertEqual([(edge.lane, edge.kind) for edge in shared.drain_events()], [(3, InputKind.PRESS)])

    def test_unmapped_key_is_not_consumed(self):
        self.assertFalse(self.router.handle_key_press(FakeKeyEvent(Qt.Key.Key_Space)))
        self.assertEqual(self.edges, [])

    def test_clear_pressed_keys(self):
        self.router.handle_key_press(FakeKeyEvent(Qt.Key.Key_D))
        self.router.clear_pressed_keys()
        self.assertEqual(self.router.lane_state().held_lanes(), frozenset())
        self.router.reset_stats()
        self.assertEqual(self.router.total_presses, 0)


if __name__ == "__main__":
    unittest.main()
