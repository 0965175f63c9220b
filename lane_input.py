# -*- coding: utf-8 -*-
########################
# lane_input.py
########################
# Purpose:
# - Turns raw per-lane key down/up notifications into press/release edges plus a held-lane set.
#
# Design notes:
# - No Qt usage. InputRouter feeds this from QKeyEvent; tests and tools feed it directly.
# - A press while the lane is already held is not an edge and is dropped.
# - Edges are queued until the frame loop drains them, in arrival order.
#   With queue_events=False nothing is queued and callers only use the returned edges.
#
########################
# Interfaces:
# Public classes:
# - class LaneInputState
#   - __init__(lane_count=4, *, queue_events=True)
#   - press(lane: int, time_seconds: float) -> Optional[LaneInputEvent]
#   - release(lane: int, time_seconds: float) -> Optional[LaneInputEvent]
#   - held_lanes() -> frozenset[int]
#   - drain_events() -> list[LaneInputEvent]
#   - clear() -> None
#
########################

from __future__ import annotations

from typing import FrozenSet, List, Optional, Set

import gameplay_models
from gameplay_models import InputKind, LaneInputEvent


class LaneInputState:
    def __init__(self, lane_count: int = gameplay_models.LANE_COUNT, *, queue_events: bool = True) -> None:
        self._lane_count = int(lane_count)
        self._queue_events = bool(queue_events)
        self._held: Set[int] = set()
        self._pending_events: List[LaneInputEvent] = []

    def _check_lane(self, lane: int) -> int:
        lane_index = int(lane)
        if not 0 <= lane_index < self._lane_count:
            raise ValueError(f"lane {lane_index} outside [0, {self._lane_count})")
        return lane_index

    def press(self, lane: int, time_seconds: float) -> Optional[LaneInputEvent]:
        lane_index = self._check_lane(lane)
        if lane_index in self._held:
            return None
        self._held.add(lane_index)
        event = LaneInputEvent(time_seconds=float(time_seconds), lane=lane_index, kind=InputKind.PRESS)
        if self._queue_events:
            self._pending_events.append(event)
        return event

    def release(self, lane: int, time_seconds: float) -> Optional[LaneInputEvent]:
        lane_index = self._check_lane(lane)
        if lane_index not in self._held:
            return None
        self._held.discard(lane_index)
        event = LaneInputEvent(time_seconds=float(time_seconds), lane=lane_index, kind=InputKind.RELEASE)
        if self._queue_events:
            self._pending_events.append(event)
        return event

    def held_lanes(self) -> FrozenSet[int]:
        return frozenset(self._held)

    def drain_events(self) -> List[LaneInputEvent]:
        events = list(self._pending_events)
        self._pending_events.clear()
        return events

    def clear(self) -> None:
        """Forget held lanes and queued edges, e.g. on focus loss or restart."""
        self._held.clear()
        self._pending_events.clear()
