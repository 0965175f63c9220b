# -*- coding: utf-8 -*-
########################
# note_scheduler.py
########################
# Purpose:
# - Organize beatmap notes into per-lane schedules for efficient judgement.
# - Owns the lifecycle state of every note (ScheduledNote.state) and provides queries
#   for nearest pending note, holding notes and session completion.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - Schedule order is deterministic: sort by (start_seconds, lane).
# - This module owns the list of notes and their state; other modules query it and
#   request transitions through transition().
# - Terminal states never transition again. An illegal transition raises.
#
########################
# Interfaces:
# Public exceptions:
# - class IllegalTransitionError(RuntimeError)
#
# Public dataclasses:
# - ScheduledNote(note_event: NoteEvent, state: NoteState = PENDING, judgement_delta_seconds: Optional[float] = None)
#
# Public classes:
# - class NoteScheduler
#   - __init__(beatmap: gameplay_models.Beatmap)
#   - beatmap() -> gameplay_models.Beatmap
#   - scheduled_notes() -> list[ScheduledNote]
#   - reset() -> None
#   - transition(scheduled_note, new_state, *, delta_seconds=None) -> None
#   - find_nearest_pending_note(*, lane, target_time_seconds, max_window_seconds) -> Optional[ScheduledNote]
#   - holding_note_in_lane(lane) -> Optional[ScheduledNote]
#   - holding_notes() -> list[ScheduledNote]
#   - pending_notes() -> list[ScheduledNote]
#   - all_terminal() -> bool
#   - counts_by_state() -> dict[NoteState, int]
#
# Inputs:
# - Beatmap and time parameters.
#
# Outputs:
# - ScheduledNote views and candidate selection for JudgeEngine.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import gameplay_models
from gameplay_models import NoteState


class IllegalTransitionError(RuntimeError):
    """Raised when a note is asked to leave a terminal state or skip its lifecycle."""


@dataclass
class ScheduledNote:
    note_event: gameplay_models.NoteEvent
    state: NoteState = NoteState.PENDING
    judgement_delta_seconds: Optional[float] = None

    @property
    def lane(self) -> int:
        return int(self.note_event.lane)

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal


class NoteScheduler:
    def __init__(self, beatmap: gameplay_models.Beatmap) -> None:
        sorted_notes = sorted(beatmap.notes, key=lambda item: (float(item.start_seconds), int(item.lane)))
        self._beatmap = gameplay_models.Beatmap(
            difficulty=str(beatmap.difficulty),
            notes=list(sorted_notes),
            duration_seconds=float(beatmap.duration_seconds),
        )
        self._scheduled_notes = [ScheduledNote(note_event=note) for note in self._beatmap.notes]
        self._lanes: Dict[int, List[ScheduledNote]] = {}
        for scheduled_note in self._scheduled_notes:
            self._lanes.setdefault(scheduled_note.lane, []).append(scheduled_note)
        self._lane_indices: Dict[int, int] = {lane: 0 for lane in self._lanes.keys()}

    def beatmap(self) -> gameplay_models.Beatmap:
        return self._beatmap

    def scheduled_notes(self) -> List[ScheduledNote]:
        return list(self._scheduled_notes)

    def reset(self) -> None:
        for scheduled_note in self._scheduled_notes:
            scheduled_note.state = NoteState.PENDING
            scheduled_note.judgement_delta_seconds = None
        for lane in self._lane_indices.keys():
            self._lane_indices[lane] = 0

    def transition(
        self,
        scheduled_note: ScheduledNote,
        new_state: NoteState,
        *,
        delta_seconds: Optional[float] = None,
    ) -> None:
        allowed = gameplay_models.ALLOWED_TRANSITIONS.get(scheduled_note.state, frozenset())
        if new_state not in allowed:
            raise IllegalTransitionError(
                f"Note at {scheduled_note.note_event.start_seconds:.3f}s lane {scheduled_note.lane}: "
                f"{scheduled_note.state.value} -> {new_state.value} is not allowed"
            )
        scheduled_note.state = new_state
        if delta_seconds is not None:
            scheduled_note.judgement_delta_seconds = float(delta_seconds)
        self._advance_lane_index(scheduled_note.lane)

    def _lane_list(self, lane: int) -> List[ScheduledNote]:
        return self._lanes.get(int(lane), [])

    def _advance_lane_index(self, lane: int) -> None:
        # Skips leading notes that no longer need a per-lane scan.
        lane_key = int(lane)
        lane_list = self._lane_list(lane_key)
        index = int(self._lane_indices.get(lane_key, 0))
        while index < len(lane_list) and lane_list[index].is_terminal:
            index += 1
        self._lane_indices[lane_key] = index

    def find_nearest_pending_note(
        self,
        *,
        lane: int,
        target_time_seconds: float,
        max_window_seconds: float,
    ) -> Optional[ScheduledNote]:
        lane_key = int(lane)
        lane_list = self._lane_list(lane_key)
        if not lane_list:
            return None

        window = float(max_window_seconds)
        target = float(target_time_seconds)
        start = target - window
        end = target + window

        start_index = int(self._lane_indices.get(lane_key, 0))
        best_note: Optional[ScheduledNote] = None
        best_abs_delta = 999999.0

        for index in range(start_index, len(lane_list)):
            candidate = lane_list[index]
            if candidate.state is not NoteState.PENDING:
                continue
            note_time = float(candidate.note_event.start_seconds)
            if note_time < start:
                continue
            if note_time > end:
                break

            abs_delta = abs(target - note_time)
            # Strict comparison keeps the earlier note when equidistant.
            if abs_delta < best_abs_delta:
                best_note = candidate
                best_abs_delta = abs_delta

        return best_note

    def holding_note_in_lane(self, lane: int) -> Optional[ScheduledNote]:
        lane_list = self._lane_list(lane)
        start_index = int(self._lane_indices.get(int(lane), 0))
        for index in range(start_index, len(lane_list)):
            if lane_list[index].state is NoteState.HOLDING:
                return lane_list[index]
        return None

    def holding_notes(self) -> List[ScheduledNote]:
        return [item for item in self._scheduled_notes if item.state is NoteState.HOLDING]

    def pending_notes(self) -> List[ScheduledNote]:
        return [item for item in self._scheduled_notes if item.state is NoteState.PENDING]

    def all_terminal(self) -> bool:
        return all(item.is_terminal for item in self._scheduled_notes)

    def counts_by_state(self) -> Dict[NoteState, int]:
        counts: Dict[NoteState, int] = {state: 0 for state in NoteState}
        for scheduled_note in self._scheduled_notes:
            counts[scheduled_note.state] += 1
        return counts


def _run_unit_tests() -> None:
    notes = [
        gameplay_models.NoteEvent(start_seconds=1.0, end_seconds=1.0, lane=1),
        gameplay_models.NoteEvent(start_seconds=1.0, end_seconds=1.5, lane=0),
        gameplay_models.NoteEvent(start_seconds=0.5, end_seconds=0.5, lane=2),
    ]
    beatmap = gameplay_models.Beatmap(difficulty="easy", notes=notes, duration_seconds=5.0)
    scheduler = NoteScheduler(beatmap)

    ordered = [(n.note_event.start_seconds, n.lane) for n in scheduler.scheduled_notes()]
    assert ordered == [(0.5, 2), (1.0, 0), (1.0, 1)]

    nearest = scheduler.find_nearest_pending_note(lane=0, target_time_seconds=1.0, max_window_seconds=0.2)
    assert nearest is not None
    assert nearest.note_event.is_hold

    scheduler.transition(nearest, NoteState.HOLDING, delta_seconds=0.0)
    assert scheduler.holding_note_in_lane(0) is nearest
    scheduler.transition(nearest, NoteState.FAILED)
    try:
        scheduler.transition(nearest, NoteState.COMPLETED)
    except IllegalTransitionError:
        pass
    else:
        raise AssertionError("Expected IllegalTransitionError for terminal note")

    scheduler.reset()
    assert len(scheduler.pending_notes()) == 3
    assert not scheduler.all_terminal()


if __name__ == "__main__":
    _run_unit_tests()
    print("note_scheduler.py: ok")
