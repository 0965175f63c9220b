# -*- coding: utf-8 -*-
########################
# onset_detector.py
########################
# Purpose:
# - Adaptive-threshold beat detection over per-frame band energies.
# - Produces Beat records with per-band classification (bass, snare, hihat).
#
# Design notes:
# - No Qt usage. Pure analysis logic.
# - One RollingHistory per band plus total. Energies are pushed before averaging,
#   so the trailing average includes the current frame.
# - Detection is skipped until the history is half full (warm-up).
# - Minimum spacing between beats is half the profile note interval.
#
########################
# Interfaces:
# Public classes:
# - class RollingHistory
#   - push(value: float) -> None
#   - average() -> float
#   - clear() -> None
# - class AdaptiveOnsetDetector
#   - __init__(profile: DifficultyProfile, history_size: int = 43)
#   - process_frame(time_seconds: float, energies: BandEnergies) -> Optional[Beat]
#   - reset() -> None
#
# Public functions:
# - detect_beats(pcm_buffer: PcmBuffer, profile: DifficultyProfile) -> list[Beat]
#
########################

from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional

import band_energy
import difficulty
import gameplay_models
import signal_windower


HISTORY_SIZE = 43
RATIO_FLOOR = 0.001

BASS_FLOOR = 0.001
SNARE_FLOOR = 0.0005
HIHAT_FLOOR = 0.0001
TOTAL_AVERAGE_FLOOR = 0.0005

BASS_THRESHOLD_BIAS = 0.1
HIHAT_THRESHOLD_BIAS = -0.1


class RollingHistory:
    def __init__(self, capacity: int = HISTORY_SIZE) -> None:
        if int(capacity) <= 0:
            raise ValueError("capacity must be positive")
        self._values: Deque[float] = deque(maxlen=int(capacity))

    @property
    def capacity(self) -> int:
        return int(self._values.maxlen or 0)

    def __len__(self) -> int:
        return len(self._values)

    def push(self, value: float) -> None:
        self._values.append(float(value))

    def average(self) -> float:
        if not self._values:
            return 0.0
        return sum(self._values) / len(self._values)

    def clear(self) -> None:
        self._values.clear()


class AdaptiveOnsetDetector:
    def __init__(self, profile: difficulty.DifficultyProfile, history_size: int = HISTORY_SIZE) -> None:
        self._profile = profile
        self._history_size = int(history_size)
        self._bass_history = RollingHistory(history_size)
        self._mid_history = RollingHistory(history_size)
        self._high_history = RollingHistory(history_size)
        self._total_history = RollingHistory(history_size)
        self._last_beat_seconds = -0.1

    def reset(self) -> None:
        for history in (self._bass_history, self._mid_history, self._high_history, self._total_history):
            history.clear()
        self._last_beat_seconds = -0.1

    def process_frame(self, time_seconds: float, energies: band_energy.BandEnergies) -> Optional[gameplay_models.Beat]:
        self._bass_history.push(energies.bass)
        self._mid_history.push(energies.mid)
        self._high_history.push(energies.high)
        self._total_history.push(energies.total)

        if len(self._total_history) < self._history_size // 2:
            return None

        avg_bass = self._bass_history.average()
        avg_mid = self._mid_history.average()
        avg_high = self._high_history.average()
        avg_total = self._total_history.average()

        threshold = float(self._profile.beat_threshold)
        is_bass = energies.bass > avg_bass * (threshold + BASS_THRESHOLD_BIAS) and energies.bass > BASS_FLOOR
        is_snare = energies.mid > avg_mid * threshold and energies.mid > SNARE_FLOOR
        is_hihat = energies.high > avg_high * (threshold + HIHAT_THRESHOLD_BIAS) and energies.high > HIHAT_FLOOR
        is_any_beat = energies.total > avg_total * threshold and avg_total > TOTAL_AVERAGE_FLOOR

        if not (is_bass or is_snare or is_hihat or is_any_beat):
            return None

        min_interval = float(self._profile.min_note_interval) * 0.5
        if float(time_seconds) - self._last_beat_seconds < min_interval:
            return None

        self._last_beat_seconds = float(time_seconds)
        return gameplay_models.Beat(
            time_seconds=float(time_seconds),
            intensity=energies.total / max(avg_total, RATIO_FLOOR),
            bass_strength=energies.bass / max(avg_bass, RATIO_FLOOR),
            mid_strength=energies.mid / max(avg_mid, RATIO_FLOOR),
            high_strength=energies.high / max(avg_high, RATIO_FLOOR),
            is_bass=bool(is_bass),
            is_snare=bool(is_snare),
            is_hihat=bool(is_hihat),
        )


def detect_beats(pcm_buffer: signal_windower.PcmBuffer, profile: difficulty.DifficultyProfile) -> List[gameplay_models.Beat]:
    detector = AdaptiveOnsetDetector(profile)
    beats: List[gameplay_models.Beat] = []
    for frame in signal_windower.iter_frames(pcm_buffer):
        energies = band_energy.compute_band_energies(frame.samples)
        beat = detector.process_frame(frame.start_seconds, energies)
        if beat is not None:
            beats.append(beat)
    return beats
