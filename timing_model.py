# -*- coding: utf-8 -*-
########################
# timing_model.py
########################
# Purpose:
# - Single source of truth for song timing in gameplay.
# - Converts elapsed wall-clock time into song time by excluding paused spans and applying an AV offset.
#
# Design notes:
# - Gameplay code must use TimingModel.song_time_seconds.
# - No Qt usage. Keep this module pure and deterministic.
# - Elapsed time is pushed in by the frame loop; this module never reads a clock itself.
# - Song time is clamped to non-negative so JudgeEngine never sees a negative time.
#
########################
# Interfaces:
# Public dataclasses:
# - TimingSnapshot(elapsed_seconds: float, pause_offset_seconds: float, av_offset_seconds: float,
#                  song_time_seconds: float, is_paused: bool)
#
# Public classes:
# - class TimingModel
#   - elapsed_seconds() -> float
#   - av_offset_seconds() -> float
#   - pause_offset_seconds() -> float
#   - song_time_seconds() -> float
#   - is_paused() -> bool
#   - set_av_offset_seconds(av_offset_seconds: float) -> None
#   - update_elapsed_seconds(elapsed_seconds: float) -> float   # returns frame dt in song time
#   - pause() -> None
#   - resume() -> None
#   - reset() -> None
#   - snapshot() -> TimingSnapshot
#
# Inputs:
# - elapsed_seconds from the frame loop clock (seconds since session start).
# - av_offset_seconds from configuration (seconds).
#
# Outputs:
# - Derived song_time_seconds used by GameplaySession and JudgeEngine.
#
########################

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TimingSnapshot:
    elapsed_seconds: float
    pause_offset_seconds: float
    av_offset_seconds: float
    song_time_seconds: float
    is_paused: bool


class TimingModel:
    def __init__(self) -> None:
        self._elapsed_seconds = 0.0
        self._av_offset_seconds = 0.0
        self._pause_offset_seconds = 0.0
        self._paused_at_seconds = 0.0
        self._is_paused = False

    def elapsed_seconds(self) -> float:
        return float(self._elapsed_seconds)

    def av_offset_seconds(self) -> float:
        return float(self._av_offset_seconds)

    def pause_offset_seconds(self) -> float:
        return float(self._pause_offset_seconds)

    def is_paused(self) -> bool:
        return bool(self._is_paused)

    def song_time_seconds(self) -> float:
        running = self._paused_at_seconds if self._is_paused else self._elapsed_seconds
        song_time_seconds = float(running) - float(self._pause_offset_seconds) + float(self._av_offset_seconds)
        if song_time_seconds < 0.0:
            song_time_seconds = 0.0
        return float(song_time_seconds)

    def set_av_offset_seconds(self, av_offset_seconds: float) -> None:
        self._av_offset_seconds = float(av_offset_seconds)

    def update_elapsed_seconds(self, elapsed_seconds: float) -> float:
        value = float(elapsed_seconds)
        if value < self._elapsed_seconds:
            # Clock sources may jitter backwards; hold the last value.
            value = self._elapsed_seconds
        previous_song_time = self.song_time_seconds()
        self._elapsed_seconds = value
        return self.song_time_seconds() - previous_song_time

    def pause(self) -> None:
        if self._is_paused:
            return
        self._is_paused = True
        self._paused_at_seconds = self._elapsed_seconds

    def resume(self) -> None:
        if not self._is_paused:
            return
        self._pause_offset_seconds += self._elapsed_seconds - self._paused_at_seconds
        self._is_paused = False

    def reset(self) -> None:
        self._elapsed_seconds = 0.0
        self._pause_offset_seconds = 0.0
        self._paused_at_seconds = 0.0
        self._is_paused = False

    def snapshot(self) -> TimingSnapshot:
        return TimingSnapshot(
            elapsed_seconds=self.elapsed_seconds(),
            pause_offset_seconds=self.pause_offset_seconds(),
            av_offset_seconds=self.av_offset_seconds(),
            song_time_seconds=self.song_time_seconds(),
            is_paused=self.is_paused(),
        )


def _run_unit_tests() -> None:
    model = TimingModel()
    model.set_av_offset_seconds(-0.2)
    model.update_elapsed_seconds(0.1)
    assert model.song_time_seconds() == 0.0

    model.update_elapsed_seconds(1.5)
    assert abs(model.song_time_seconds() - 1.3) < 1e-9

    model.pause()
    model.update_elapsed_seconds(4.0)
    assert abs(model.song_time_seconds() - 1.3) < 1e-9
    model.resume()
    dt = model.update_elapsed_seconds(4.5)
    assert abs(model.song_time_seconds() - 1.8) < 1e-9
    assert abs(dt - 0.5) < 1e-9

    snap = model.snapshot()
    assert abs(snap.song_time_seconds - model.song_time_seconds()) < 1e-9
    assert abs(snap.pause_offset_seconds - 2.5) < 1e-9


if __name__ == "__main__":
    _run_unit_tests()
    print("timing_model.py: ok")
