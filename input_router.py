# -*- coding: utf-8 -*-
########################
# input_router.py
########################
# Purpose:
# - Single keyboard listener for gameplay lane input.
# - Translates QKeyEvent press/release into LaneInputEvent edges and emits a Qt signal for each.
#
# Design notes:
# - This must be the only lane input source. No duplicate key mapping elsewhere.
# - Debounce rules:
#   - Ignore auto repeat.
#   - LaneInputState drops a second press while the lane is held.
# - Time source is injected as a callable returning song time in seconds.
#
########################
# Interfaces:
# Public classes:
# - class InputRouter(PyQt6.QtCore.QObject)
#   - Signals:
#     - laneInput(gameplay_models.LaneInputEvent)
#   - Methods:
#     - handle_key_press(event: QKeyEvent) -> bool
#     - handle_key_release(event: QKeyEvent) -> bool
#     - lane_state() -> LaneInputState
#     - clear_pressed_keys() -> None
#     - reset_stats() -> None
#
# Inputs:
# - Raw QKeyEvent from the Qt event loop.
#
# Outputs:
# - Press and release edges consumed by GameplaySession / JudgeEngine.
#
########################

from __future__ import annotations

from typing import Callable, Dict, Optional

from PyQt6.QtCore import QObject, Qt, pyqtSignal
from PyQt6.QtGui import QKeyEvent

import lane_input


def _build_default_key_to_lane_map() -> Dict[int, int]:
    """
    Default lane mapping for a four lane beatmap.

    Accepted keys:
      - D, F, J, K (home row)
      - Arrow keys: Left, Down, Up, Right
    """
    key_to_lane: Dict[int, int] = {}

    def bind(key_constant: Qt.Key, lane_index: int) -> None:
        key_to_lane[int(key_constant.value)] = int(lane_index)

    bind(Qt.Key.Key_D, 0)
    bind(Qt.Key.Key_F, 1)
    bind(Qt.Key.Key_J, 2)
    bind(Qt.Key.Key_K, 3)

    bind(Qt.Key.Key_Left, 0)
    bind(Qt.Key.Key_Down, 1)
    bind(Qt.Key.Key_Up, 2)
    bind(Qt.Key.Key_Right, 3)

    return key_to_lane


class InputRouter(QObject):
    """
    Central keyboard router for gameplay lane input.

    This object never judges timing. Its only job is to:
      - map keys to lane indexes
      - attach the current song time from the injected time provider
      - emit a LaneInputEvent for each press and release edge

    Without a lane_state argument the router keeps its own state that does not queue
    edges, so laneInput is the only delivery. A shared lane_state (for example the
    one owned by GameplaySession) keeps queuing and its owner drains it each frame.
    """

    laneInput = pyqtSignal(object)

    def __init__(
        self,
        song_time_provider: Callable[[], float],
        parent: Optional[QObject] = None,
        key_to_lane_map: Optional[Dict[int, int]] = None,
        lane_state: Optional[lane_input.LaneInputState] = None,
    ) -> None:
        super().__init__(parent)

        self._song_time_provider: Callable[[], float] = song_time_provider
        self._key_to_lane: Dict[int, int] = (
            dict(key_to_lane_map) if key_to_lane_map is not None else _build_default_key_to_lane_map()
        )
        self._lane_state = lane_state if lane_state is not None else lane_input.LaneInputState(queue_events=False)

        self._total_presses: int = 0
        self._ignored_presses: int = 0

    # ------------------------------------------------------------------
    # Public API used by the frame loop owner
    # ------------------------------------------------------------------

    def handle_key_press(self, event: QKeyEvent) -> bool:
        """
        Handle a Qt key press.

        Returns True if this router consumed the event, False otherwise.
        """
        lane_index = self._key_to_lane.get(int(event.key()))
        if lane_index is None:
            return False

        if event.isAutoRepeat():
            self._ignored_presses += 1
            return True

        edge = self._lane_state.press(lane_index, float(self._song_time_provider()))
        if edge is None:
            self._ignored_presses += 1
            return True

        self._total_presses += 1
        self.laneInput.emit(edge)
        return True

    def handle_key_release(self, event: QKeyEvent) -> bool:
        """
        Handle a Qt key release.

        Returns True if this router consumed the event, False otherwise.
        """
        lane_index = self._key_to_lane.get(int(event.key()))
        if lane_index is None:
            return False

        if event.isAutoRepeat():
            return True

        edge = self._lane_state.release(lane_index, float(self._song_time_provider()))
        if edge is not None:
            self.laneInput.emit(edge)
        return True

    def lane_state(self) -> lane_input.LaneInputState:
        return self._lane_state

    def clear_pressed_keys(self) -> None:
        """
        Clear held state for all lanes.

        Called on focus loss or window deactivation. Holding notes fail on the next frame.
        """
        self._lane_state.clear()

    def reset_stats(self) -> None:
        self._total_presses = 0
        self._ignored_presses = 0

    @property
    def key_to_lane_map(self) -> Dict[int, int]:
        return dict(self._key_to_lane)

    @property
    def total_presses(self) -> int:
        return self._total_presses

    @property
    def ignored_presses(self) -> int:
        return self._ignored_presses
