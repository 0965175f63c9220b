# -*- coding: utf-8 -*-
########################
# gameplay_session.py
########################
# Purpose:
# - Qt-free gameplay pipeline for one beatmap: TimingModel + NoteScheduler + JudgeEngine + LaneInputState.
# - The frame loop owner calls tick() once per rendered frame.
#
# Design notes:
# - Uses TimingModel as the single source of truth for song time.
# - Each tick drains queued input edges before the passive sweep and judges them at the tick's song time.
# - start() drops any edges queued before the session started.
# - restart() returns every note to PENDING in one batch and clears score and input state.
# - Session end needs the external playback-stopped signal; the session never owns playback.
#
########################
# Interfaces:
# Public dataclasses:
# - SessionResults(score, max_combo, perfect_count, good_count, miss_count, hold_count,
#                  accuracy_percent, rank, is_full_combo, total_notes)
#
# Public classes:
# - class GameplaySession
#   - __init__(beatmap, *, auto_play=False, av_offset_seconds=0.0, on_combo_milestone=None)
#   - start(elapsed_seconds: float = 0.0) -> None
#   - tick(elapsed_seconds: float) -> list[JudgementEvent]
#   - press(lane: int) -> None
#   - release(lane: int) -> None
#   - pause(elapsed_seconds=None) / resume(elapsed_seconds=None) / restart()
#   - is_ready_to_end(playback_stopped: bool) -> bool
#   - results() -> SessionResults
#
########################

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, List, Optional

import gameplay_models
import judge
import lane_input
import note_scheduler
import timing_model
from logging_utils import get_logger

_log = get_logger("Session")


@dataclass(frozen=True)
class SessionResults:
    score: int
    max_combo: int
    perfect_count: int
    good_count: int
    miss_count: int
    hold_count: int
    accuracy_percent: float
    rank: str
    is_full_combo: bool
    total_notes: int


class GameplaySession:
    def __init__(
        self,
        beatmap: gameplay_models.Beatmap,
        *,
        auto_play: bool = False,
        av_offset_seconds: float = 0.0,
        on_combo_milestone: Optional[Callable[[int], None]] = None,
    ) -> None:
        self._timing = timing_model.TimingModel()
        self._timing.set_av_offset_seconds(av_offset_seconds)
        self._note_scheduler = note_scheduler.NoteScheduler(beatmap)
        self._judge_engine = judge.JudgeEngine(
            self._note_scheduler,
            auto_play=auto_play,
            on_combo_milestone=on_combo_milestone,
        )
        self._lane_input = lane_input.LaneInputState()
        self._is_started = False

    def timing(self) -> timing_model.TimingModel:
        return self._timing

    def note_scheduler(self) -> note_scheduler.NoteScheduler:
        return self._note_scheduler

    def judge_engine(self) -> judge.JudgeEngine:
        return self._judge_engine

    def lane_input(self) -> lane_input.LaneInputState:
        return self._lane_input

    def is_started(self) -> bool:
        return self._is_started

    def song_time_seconds(self) -> float:
        return self._timing.song_time_seconds()

    def start(self, elapsed_seconds: float = 0.0) -> None:
        self._timing.reset()
        self._lane_input.clear()
        self._timing.update_elapsed_seconds(elapsed_seconds)
        self._is_started = True
        _log.info("Session started", fields={"notes": len(self._note_scheduler.scheduled_notes())})

    def press(self, lane: int) -> None:
        self._lane_input.press(lane, self._timing.song_time_seconds())

    def release(self, lane: int) -> None:
        self._lane_input.release(lane, self._timing.song_time_seconds())

    def tick(self, elapsed_seconds: float) -> List[gameplay_models.JudgementEvent]:
        if not self._is_started:
            return []
        dt_seconds = self._timing.update_elapsed_seconds(elapsed_seconds)
        if self._timing.is_paused():
            return []
        song_time = self._timing.song_time_seconds()
        # Edges queued since the last frame are judged at this frame's song time.
        input_events = [replace(event, time_seconds=song_time) for event in self._lane_input.drain_events()]
        return self._judge_engine.process_frame(
            song_time,
            dt_seconds,
            input_events,
            self._lane_input.held_lanes(),
        )

    def pause(self, elapsed_seconds: Optional[float] = None) -> None:
        if elapsed_seconds is not None:
            self._timing.update_elapsed_seconds(elapsed_seconds)
        self._timing.pause()

    def resume(self, elapsed_seconds: Optional[float] = None) -> None:
        if elapsed_seconds is not None:
            self._timing.update_elapsed_seconds(elapsed_seconds)
        self._timing.resume()

    def restart(self) -> None:
        self._note_scheduler.reset()
        self._judge_engine.reset()
        self._lane_input.clear()
        self._timing.reset()
        self._is_started = False
        _log.info("Session restarted")

    def is_ready_to_end(self, playback_stopped: bool) -> bool:
        return self._judge_engine.is_ready_to_end(playback_stopped)

    def results(self) -> SessionResults:
        score_state = self._judge_engine.score_state()
        return SessionResults(
            score=int(score_state.score),
            max_combo=int(score_state.max_combo),
            perfect_count=int(score_state.perfect_count),
            good_count=int(score_state.good_count),
            miss_count=int(score_state.miss_count),
            hold_count=int(score_state.hold_count),
            accuracy_percent=float(score_state.accuracy_percent()),
            rank=score_state.rank(),
            is_full_combo=score_state.is_full_combo(),
            total_notes=len(self._note_scheduler.scheduled_notes()),
        )
