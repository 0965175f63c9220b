# -*- coding: utf-8 -*-
########################
# judge.py
########################
# Purpose:
# - Hit judgement and scoring engine.
# - Matches lane presses to the nearest pending ScheduledNote within timing windows.
# - Drives the hold lifecycle: start on a timed press, complete at the end time, fail on early release.
# - Generates JudgementEvent for hits, misses, completed holds and failed holds.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - Strict inputs: discrete press/release edges, held lanes and a monotonic song time.
# - Scheduler owns the note list; JudgeEngine changes note state via NoteScheduler.transition.
# - Frame order: input edges in arrival order, then the passive sweep
#   (holds first, then overdue pending notes).
# - Misuse (lane out of range, negative time or dt, time moving backwards) raises
#   ContractViolationError instead of being clamped.
#
########################
# Interfaces:
# Public exceptions:
# - class ContractViolationError(ValueError)
#
# Public dataclasses:
# - JudgementWindows(perfect_ms: float, good_ms: float, miss_ms: float)
#   - classify_delta(delta_seconds: float) -> Optional[JudgementKind]
# - ScoreState(score, combo, max_combo, perfect_count, good_count, miss_count, hold_count)
#   - apply_judgement(kind: JudgementKind) -> int
#   - add_hold_ticks(dt_seconds: float) -> int
#   - accuracy_percent() -> float
#   - rank() -> str
#   - is_full_combo() -> bool
#
# Public classes:
# - class JudgeEngine
#   - __init__(note_scheduler, judgement_windows=DEFAULT_JUDGEMENT_WINDOWS, *, auto_play=False,
#              on_combo_milestone=None, lane_count=LANE_COUNT)
#   - score_state() -> ScoreState
#   - judgement_windows() -> JudgementWindows
#   - recent_judgements() -> list[JudgementEvent]
#   - clear_recent_judgements() -> None
#   - reset() -> None
#   - on_press(lane: int, time_seconds: float) -> Optional[JudgementEvent]
#   - on_release(lane: int, time_seconds: float) -> Optional[JudgementEvent]
#   - on_input_event(input_event: LaneInputEvent) -> Optional[JudgementEvent]
#   - update_for_time(song_time_seconds: float, dt_seconds: float, held_lanes) -> list[JudgementEvent]
#   - process_frame(song_time_seconds, dt_seconds, input_events, held_lanes) -> list[JudgementEvent]
#   - is_ready_to_end(playback_stopped: bool) -> bool
#
# Inputs:
# - LaneInputEvent(time_seconds, lane, kind) edges and held lane sets (from LaneInputState).
# - song_time_seconds and frame dt (from TimingModel).
#
# Outputs:
# - JudgementEvent objects for scoring and visual collaborators.
# - Combo milestone callback every 50 consecutive successful judgements.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import gameplay_models
import note_scheduler
from gameplay_models import InputKind, JudgementKind, NoteState


PERFECT_SCORE = 300
GOOD_SCORE = 100
HOLD_TICK_SCORE = 10
HOLD_COMPLETE_SCORE = 100

COMBO_MILESTONE = 50
AUTO_PLAY_WINDOW_MS = 5.0


class ContractViolationError(ValueError):
    """Raised when the engine is driven with inputs outside its contract."""


@dataclass(frozen=True)
class JudgementWindows:
    perfect_ms: float = 45.0
    good_ms: float = 100.0
    miss_ms: float = 150.0

    def classify_delta(self, delta_seconds: float) -> Optional[JudgementKind]:
        abs_delta_ms = abs(float(delta_seconds)) * 1000.0
        if abs_delta_ms <= float(self.perfect_ms):
            return JudgementKind.PERFECT
        if abs_delta_ms <= float(self.good_ms):
            return JudgementKind.GOOD
        if abs_delta_ms <= float(self.miss_ms):
            return JudgementKind.MISS
        return None


DEFAULT_JUDGEMENT_WINDOWS = JudgementWindows()


@dataclass
class ScoreState:
    score: int = 0
    combo: int = 0
    max_combo: int = 0
    perfect_count: int = 0
    good_count: int = 0
    miss_count: int = 0
    hold_count: int = 0
    hold_tick_carry: float = 0.0

    def apply_judgement(self, kind: JudgementKind) -> int:
        """Apply one judgement and return the score delta it produced."""
        score_delta = 0
        if kind is JudgementKind.PERFECT:
            score_delta = PERFECT_SCORE
            self.combo += 1
            self.perfect_count += 1
        elif kind is JudgementKind.GOOD:
            score_delta = GOOD_SCORE
            self.combo += 1
            self.good_count += 1
        elif kind is JudgementKind.HOLD_OK:
            score_delta = HOLD_COMPLETE_SCORE
            self.combo += 1
            self.hold_count += 1
        elif kind in (JudgementKind.MISS, JudgementKind.HOLD_FAILED):
            self.combo = 0
            self.miss_count += 1

        self.score += score_delta
        if self.combo > self.max_combo:
            self.max_combo = self.combo
        return score_delta

    def add_hold_ticks(self, dt_seconds: float) -> int:
        # HOLD_TICK_SCORE per 0.1s held; fractions carry over between frames.
        self.hold_tick_carry += HOLD_TICK_SCORE * float(dt_seconds) * 10.0
        whole = int(self.hold_tick_carry)
        self.hold_tick_carry -= whole
        self.score += whole
        return whole

    def total_judged(self) -> int:
        return self.perfect_count + self.good_count + self.miss_count + self.hold_count

    def accuracy_percent(self) -> float:
        total = self.total_judged()
        if total <= 0:
            return 0.0
        weighted = self.perfect_count * 100.0 + self.good_count * 50.0 + self.hold_count * 80.0
        return weighted / float(total)

    def rank(self) -> str:
        accuracy = self.accuracy_percent()
        if accuracy >= 95.0 and self.miss_count == 0:
            return "SS"
        if accuracy >= 90.0:
            return "S"
        if accuracy >= 80.0:
            return "A"
        if accuracy >= 70.0:
            return "B"
        if accuracy >= 60.0:
            return "C"
        if accuracy >= 50.0:
            return "D"
        return "F"

    def is_full_combo(self) -> bool:
        return self.miss_count == 0


class JudgeEngine:
    def __init__(
        self,
        note_scheduler_obj: note_scheduler.NoteScheduler,
        judgement_windows: JudgementWindows = DEFAULT_JUDGEMENT_WINDOWS,
        *,
        auto_play: bool = False,
        on_combo_milestone: Optional[Callable[[int], None]] = None,
        lane_count: int = gameplay_models.LANE_COUNT,
    ) -> None:
        self._note_scheduler = note_scheduler_obj
        self._judgement_windows = judgement_windows
        self._auto_play = bool(auto_play)
        self._on_combo_milestone = on_combo_milestone
        self._lane_count = int(lane_count)
        self._score_state = ScoreState()
        self._recent_judgements: List[gameplay_models.JudgementEvent] = []
        self._last_song_time_seconds: Optional[float] = None

    def score_state(self) -> ScoreState:
        return self._score_state

    def judgement_windows(self) -> JudgementWindows:
        return self._judgement_windows

    def auto_play(self) -> bool:
        return self._auto_play

    def clear_recent_judgements(self) -> None:
        self._recent_judgements.clear()

    def recent_judgements(self) -> List[gameplay_models.JudgementEvent]:
        return list(self._recent_judgements)

    def reset(self) -> None:
        self._score_state = ScoreState()
        self._recent_judgements.clear()
        self._last_song_time_seconds = None

    # ------------------------------------------------------------------
    # Contract checks
    # ------------------------------------------------------------------

    def _require_lane(self, lane: int) -> int:
        if isinstance(lane, bool) or not isinstance(lane, int):
            raise ContractViolationError(f"lane must be an int, got {lane!r}")
        if not 0 <= lane < self._lane_count:
            raise ContractViolationError(f"lane {lane} outside [0, {self._lane_count})")
        return lane

    @staticmethod
    def _require_time(time_seconds: float) -> float:
        value = float(time_seconds)
        if value < 0.0:
            raise ContractViolationError(f"time must be non-negative, got {value}")
        return value

    # ------------------------------------------------------------------
    # Discrete input
    # ------------------------------------------------------------------

    def on_press(self, lane: int, time_seconds: float) -> Optional[gameplay_models.JudgementEvent]:
        lane = self._require_lane(lane)
        press_time = self._require_time(time_seconds)

        scheduled_note = self._note_scheduler.find_nearest_pending_note(
            lane=lane,
            target_time_seconds=press_time,
            max_window_seconds=float(self._judgement_windows.miss_ms) / 1000.0,
        )
        if scheduled_note is None:
            return None

        note_time = float(scheduled_note.note_event.start_seconds)
        delta = press_time - note_time
        kind = self._judgement_windows.classify_delta(delta)
        if kind is None:
            return None

        if kind is JudgementKind.MISS:
            new_state = NoteState.FAILED if scheduled_note.note_event.is_hold else NoteState.MISSED
        else:
            new_state = NoteState.HOLDING if scheduled_note.note_event.is_hold else NoteState.HIT
        self._note_scheduler.transition(scheduled_note, new_state, delta_seconds=delta)
        return self._record(kind, time_seconds=press_time, scheduled_note=scheduled_note, delta_seconds=delta)

    def on_release(self, lane: int, time_seconds: float) -> Optional[gameplay_models.JudgementEvent]:
        lane = self._require_lane(lane)
        release_time = self._require_time(time_seconds)

        scheduled_note = self._note_scheduler.holding_note_in_lane(lane)
        if scheduled_note is None:
            return None

        end_time = float(scheduled_note.note_event.end_seconds)
        delta = release_time - end_time
        if abs(delta) * 1000.0 <= float(self._judgement_windows.good_ms):
            self._note_scheduler.transition(scheduled_note, NoteState.COMPLETED)
            return self._record(JudgementKind.HOLD_OK, time_seconds=release_time, scheduled_note=scheduled_note, delta_seconds=delta)
        if release_time < end_time:
            self._note_scheduler.transition(scheduled_note, NoteState.FAILED)
            return self._record(JudgementKind.HOLD_FAILED, time_seconds=release_time, scheduled_note=scheduled_note, delta_seconds=delta)
        return None

    def on_input_event(self, input_event: gameplay_models.LaneInputEvent) -> Optional[gameplay_models.JudgementEvent]:
        if self._auto_play:
            return None
        if input_event.kind is InputKind.RELEASE:
            return self.on_release(input_event.lane, input_event.time_seconds)
        return self.on_press(input_event.lane, input_event.time_seconds)

    # ------------------------------------------------------------------
    # Passive per-frame resolution
    # ------------------------------------------------------------------

    def update_for_time(
        self,
        song_time_seconds: float,
        dt_seconds: float,
        held_lanes: Iterable[int] = (),
    ) -> List[gameplay_models.JudgementEvent]:
        current_time = self._require_time(song_time_seconds)
        dt = float(dt_seconds)
        if dt < 0.0:
            raise ContractViolationError(f"dt must be non-negative, got {dt}")
        if self._last_song_time_seconds is not None and current_time < self._last_song_time_seconds:
            raise ContractViolationError(
                f"song time moved backwards: {current_time} < {self._last_song_time_seconds}"
            )
        self._last_song_time_seconds = current_time
        held = {self._require_lane(int(lane)) for lane in held_lanes}

        events: List[gameplay_models.JudgementEvent] = []
        if self._auto_play:
            events.extend(self._auto_play_for_time(current_time))

        for scheduled_note in self._note_scheduler.holding_notes():
            is_held = self._auto_play or scheduled_note.lane in held
            if not is_held:
                self._note_scheduler.transition(scheduled_note, NoteState.FAILED)
                events.append(self._record(JudgementKind.HOLD_FAILED, time_seconds=current_time, scheduled_note=scheduled_note))
                continue

            self._score_state.add_hold_ticks(dt)
            end_time = float(scheduled_note.note_event.end_seconds)
            if current_time >= end_time:
                self._note_scheduler.transition(scheduled_note, NoteState.COMPLETED)
                events.append(
                    self._record(
                        JudgementKind.HOLD_OK,
                        time_seconds=current_time,
                        scheduled_note=scheduled_note,
                        delta_seconds=current_time - end_time,
                    )
                )

        if not self._auto_play:
            miss_seconds = float(self._judgement_windows.miss_ms) / 1000.0
            for scheduled_note in self._note_scheduler.pending_notes():
                note_time = float(scheduled_note.note_event.start_seconds)
                if (current_time - note_time) * 1000.0 > float(self._judgement_windows.miss_ms):
                    delta = current_time - note_time
                    self._note_scheduler.transition(scheduled_note, NoteState.MISSED, delta_seconds=delta)
                    events.append(self._record(JudgementKind.MISS, time_seconds=current_time, scheduled_note=scheduled_note, delta_seconds=delta))
                elif note_time > current_time + miss_seconds:
                    # Pending notes are ordered by start time.
                    break

        return events

    def process_frame(
        self,
        song_time_seconds: float,
        dt_seconds: float,
        input_events: Iterable[gameplay_models.LaneInputEvent] = (),
        held_lanes: Iterable[int] = (),
    ) -> List[gameplay_models.JudgementEvent]:
        events: List[gameplay_models.JudgementEvent] = []
        for input_event in input_events:
            event = self.on_input_event(input_event)
            if event is not None:
                events.append(event)
        events.extend(self.update_for_time(song_time_seconds, dt_seconds, held_lanes))
        return events

    def _auto_play_for_time(self, current_time: float) -> List[gameplay_models.JudgementEvent]:
        events: List[gameplay_models.JudgementEvent] = []
        for scheduled_note in self._note_scheduler.pending_notes():
            note_time = float(scheduled_note.note_event.start_seconds)
            diff_ms = (current_time - note_time) * 1000.0
            if diff_ms < -AUTO_PLAY_WINDOW_MS:
                break
            # A 60 fps frame is about 16.7 ms, wider than the 5 ms window, so notes already
            # behind the frame time are played as well instead of being left pending.
            new_state = NoteState.HOLDING if scheduled_note.note_event.is_hold else NoteState.HIT
            self._note_scheduler.transition(scheduled_note, new_state, delta_seconds=0.0)
            events.append(self._record(JudgementKind.PERFECT, time_seconds=current_time, scheduled_note=scheduled_note, delta_seconds=0.0))
        return events

    # ------------------------------------------------------------------
    # Session end
    # ------------------------------------------------------------------

    def is_ready_to_end(self, playback_stopped: bool) -> bool:
        return bool(playback_stopped) and self._note_scheduler.all_terminal()

    def _record(
        self,
        kind: JudgementKind,
        *,
        time_seconds: float,
        scheduled_note: note_scheduler.ScheduledNote,
        delta_seconds: Optional[float] = None,
    ) -> gameplay_models.JudgementEvent:
        score_delta = self._score_state.apply_judgement(kind)
        combo = int(self._score_state.combo)

        event = gameplay_models.JudgementEvent(
            time_seconds=float(time_seconds),
            lane=scheduled_note.lane,
            kind=kind,
            score_delta=int(score_delta),
            combo_after=combo,
            note_start_seconds=float(scheduled_note.note_event.start_seconds),
            delta_seconds=None if delta_seconds is None else float(delta_seconds),
        )
        self._recent_judgements.append(event)

        if kind.is_success and combo > 0 and combo % COMBO_MILESTONE == 0 and self._on_combo_milestone is not None:
            self._on_combo_milestone(combo)
        return event


def _run_unit_tests() -> None:
    beatmap = gameplay_models.Beatmap(
        difficulty="easy",
        notes=[
            gameplay_models.NoteEvent(start_seconds=1.0, end_seconds=1.0, lane=0),
            gameplay_models.NoteEvent(start_seconds=2.0, end_seconds=2.6, lane=1),
        ],
        duration_seconds=3.0,
    )
    scheduler = note_scheduler.NoteScheduler(beatmap)
    engine = JudgeEngine(scheduler)

    hit = engine.on_press(0, 1.0)
    assert hit is not None
    assert hit.kind is JudgementKind.PERFECT
    assert engine.score_state().score == PERFECT_SCORE

    stray = engine.on_press(2, 1.0)
    assert stray is None

    start = engine.on_press(1, 2.02)
    assert start is not None and start.kind is JudgementKind.PERFECT
    engine.update_for_time(2.3, 0.1, held_lanes={1})
    completed = engine.update_for_time(2.6, 0.3, held_lanes={1})
    assert [event.kind for event in completed] == [JudgementKind.HOLD_OK]
    assert engine.score_state().hold_count == 1

    scheduler.reset()
    engine.reset()
    misses = engine.update_for_time(song_time_seconds=1.5, dt_seconds=0.016)
    assert len(misses) == 1
    assert engine.score_state().miss_count == 1


if __name__ == "__main__":
    _run_unit_tests()
    print("judge.py: ok")
