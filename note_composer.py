# -*- coding: utf-8 -*-
########################
# note_composer.py
########################
# Purpose:
# - Converts a detected beat stream into lane-assigned tap and hold notes.
#
# Design notes:
# - Deterministic for a given (beats, profile, random generator seed).
# - The random generator is passed in. Never use the module level random functions here.
# - Random draws are consumed in a fixed order and only when the preceding
#   conditions hold. Changing that order changes every generated beatmap.
# - Output is in emission order. Callers sort by (start_seconds, lane).
#
# Lane rules:
# - bass beats pick from lanes {0, 1}, snare from {1, 2}, hihat from {2, 3}.
# - unclassified beats pick any lane, re-rolling a repeat of the previous lane two times in three.
# - a lane whose last note ends less than min_note_interval before the beat is busy.
#   The first free lane in index order replaces it. With no free lane the beat keeps its lane.
#
########################
# Interfaces:
# Public dataclasses:
# - CompositionState(last_note_end_seconds: list[float], last_lane: int)
#
# Public functions:
# - compose_notes(beats, profile, random_generator, state=None) -> list[NoteEvent]
#
########################

from __future__ import annotations

from dataclasses import dataclass, field
import random
from typing import List, Optional, Sequence

import difficulty
import gameplay_models


MIN_HOLD_SECONDS = 0.25
BASS_HOLD_STRENGTH = 2.0
BASS_HOLD_END_STRENGTH = 1.5
BASS_HOLD_DEFAULT_SECONDS = 0.3
BASS_HOLD_GAP_SECONDS = 0.05
BASS_HOLD_LOOKAHEAD = 10
HIHAT_RUN_WINDOW = 5
HIHAT_RUN_MIN_COUNT = 3
HIHAT_HOLD_BASE_SECONDS = 0.3
HIHAT_HOLD_SPREAD_SECONDS = 0.5
DOUBLE_MIN_INTENSITY = 1.5
DOUBLE_INTENSITY_SCALE = 0.8


def _initial_lane_ends() -> List[float]:
    return [-1.0] * gameplay_models.LANE_COUNT


@dataclass
class CompositionState:
    last_note_end_seconds: List[float] = field(default_factory=_initial_lane_ends)
    last_lane: int = -1

    def lane_is_free(self, lane: int, time_seconds: float, min_gap_seconds: float) -> bool:
        return float(time_seconds) - self.last_note_end_seconds[lane] >= float(min_gap_seconds)


def _choose_lane(beat: gameplay_models.Beat, state: CompositionState, random_generator: random.Random) -> int:
    if beat.is_bass:
        return random_generator.randrange(2)
    if beat.is_snare:
        return 1 + random_generator.randrange(2)
    if beat.is_hihat:
        return 2 + random_generator.randrange(2)

    while True:
        lane = random_generator.randrange(gameplay_models.LANE_COUNT)
        if lane != state.last_lane or random_generator.randrange(3) == 0:
            return lane


def _resolve_conflict(lane: int, time_seconds: float, state: CompositionState, min_gap_seconds: float) -> int:
    if state.lane_is_free(lane, time_seconds, min_gap_seconds):
        return lane
    for candidate in range(gameplay_models.LANE_COUNT):
        if state.lane_is_free(candidate, time_seconds, min_gap_seconds):
            return candidate
    return lane


def _bass_hold_duration(beats: Sequence[gameplay_models.Beat], index: int, profile: difficulty.DifficultyProfile) -> float:
    beat = beats[index]
    hold_end = beat.time_seconds + BASS_HOLD_DEFAULT_SECONDS
    for next_beat in beats[index + 1:index + BASS_HOLD_LOOKAHEAD]:
        if next_beat.is_bass and next_beat.bass_strength > BASS_HOLD_END_STRENGTH:
            hold_end = next_beat.time_seconds - BASS_HOLD_GAP_SECONDS
            break

    duration = min(max(hold_end - beat.time_seconds, MIN_HOLD_SECONDS), float(profile.max_hold_duration))
    if duration < MIN_HOLD_SECONDS:
        return 0.0
    return duration


def _hold_duration(
    beats: Sequence[gameplay_models.Beat],
    index: int,
    profile: difficulty.DifficultyProfile,
    random_generator: random.Random,
) -> float:
    beat = beats[index]
    if beat.is_bass and beat.bass_strength > BASS_HOLD_STRENGTH and random_generator.random() < profile.hold_note_chance * 2:
        return _bass_hold_duration(beats, index, profile)

    if beat.is_hihat and index + 2 < len(beats) and random_generator.random() < profile.hold_note_chance:
        hihat_count = sum(1 for item in beats[index:index + HIHAT_RUN_WINDOW] if item.is_hihat)
        if hihat_count >= HIHAT_RUN_MIN_COUNT:
            duration = HIHAT_HOLD_BASE_SECONDS + random_generator.random() * HIHAT_HOLD_SPREAD_SECONDS
            return min(duration, float(profile.max_hold_duration))

    return 0.0


def compose_notes(
    beats: Sequence[gameplay_models.Beat],
    profile: difficulty.DifficultyProfile,
    random_generator: random.Random,
    state: Optional[CompositionState] = None,
) -> List[gameplay_models.NoteEvent]:
    composition = state if state is not None else CompositionState()
    min_gap = float(profile.min_note_interval)
    notes: List[gameplay_models.NoteEvent] = []

    for index, beat in enumerate(beats):
        time_seconds = float(beat.time_seconds)
        lane = _choose_lane(beat, composition, random_generator)
        lane = _resolve_conflict(lane, time_seconds, composition, min_gap)

        duration = _hold_duration(beats, index, profile, random_generator)
        # A busy lane after a failed conflict scan may still be inside a hold.
        if duration > 0.0 and time_seconds < composition.last_note_end_seconds[lane]:
            duration = 0.0

        notes.append(
            gameplay_models.NoteEvent(
                start_seconds=time_seconds,
                end_seconds=time_seconds + duration,
                lane=lane,
                intensity=float(beat.intensity),
            )
        )
        composition.last_note_end_seconds[lane] = max(composition.last_note_end_seconds[lane], time_seconds + duration)
        composition.last_lane = lane

        if profile.allow_doubles and random_generator.random() < profile.double_chance and beat.intensity > DOUBLE_MIN_INTENSITY:
            while True:
                second_lane = random_generator.randrange(gameplay_models.LANE_COUNT)
                if second_lane != lane:
                    break
            if composition.lane_is_free(second_lane, time_seconds, min_gap):
                notes.append(
                    gameplay_models.NoteEvent(
                        start_seconds=time_seconds,
                        end_seconds=time_seconds,
                        lane=second_lane,
                        intensity=float(beat.intensity) * DOUBLE_INTENSITY_SCALE,
                    )
                )
                composition.last_note_end_seconds[second_lane] = time_seconds

    return notes
