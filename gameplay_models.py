# -*- coding: utf-8 -*-
########################
# gameplay_models.py
########################
# Purpose:
# - Core data models shared by beatmap generation and the runtime judgement pipeline.
# - Defines detected beats, note events, per-note lifecycle state and gameplay events.
#
# Design notes:
# - Keep these models stable. Prefer extending with new optional fields rather than breaking changes.
# - No Qt usage. These are plain dataclasses and enums.
# - NoteEvent is immutable. Lifecycle state lives on ScheduledNote, owned by NoteScheduler.
#
########################
# Interfaces:
# Constants:
# - LANE_COUNT = 4
# - HOLD_EPSILON_SECONDS = 0.01
#
# Public enums:
# - class NoteState(enum.Enum): PENDING | HIT | MISSED | HOLDING | COMPLETED | FAILED
# - class JudgementKind(enum.Enum): PERFECT | GOOD | MISS | HOLD_OK | HOLD_FAILED
# - class InputKind(enum.Enum): PRESS | RELEASE
#
# Public dataclasses:
# - Beat(time_seconds, intensity, bass_strength, mid_strength, high_strength, is_bass, is_snare, is_hihat)
# - NoteEvent(start_seconds: float, end_seconds: float, lane: int, intensity: float)
# - Beatmap(difficulty: str, notes: list[NoteEvent], duration_seconds: float)
# - LaneInputEvent(time_seconds: float, lane: int, kind: InputKind)
# - JudgementEvent(time_seconds, lane, kind, score_delta, combo_after, note_start_seconds, delta_seconds)
#
# Inputs/Outputs:
# - Beats flow from onset_detector to note_composer.
# - NoteEvents flow from note_composer to NoteScheduler.
# - LaneInputEvents flow from InputRouter / LaneInputState to JudgeEngine.
# - JudgementEvents flow from JudgeEngine to scoring and visual collaborators.
#
########################

from __future__ import annotations

from dataclasses import dataclass
import enum
from typing import List, Optional


LANE_COUNT = 4
HOLD_EPSILON_SECONDS = 0.01


class NoteState(enum.Enum):
    PENDING = "pending"
    HIT = "hit"
    MISSED = "missed"
    HOLDING = "holding"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset({NoteState.HIT, NoteState.MISSED, NoteState.COMPLETED, NoteState.FAILED})

ALLOWED_TRANSITIONS = {
    NoteState.PENDING: frozenset({NoteState.HIT, NoteState.MISSED, NoteState.HOLDING, NoteState.FAILED}),
    NoteState.HOLDING: frozenset({NoteState.COMPLETED, NoteState.FAILED}),
}


class JudgementKind(enum.Enum):
    PERFECT = "perfect"
    GOOD = "good"
    MISS = "miss"
    HOLD_OK = "hold_ok"
    HOLD_FAILED = "hold_failed"

    @property
    def is_success(self) -> bool:
        return self in (JudgementKind.PERFECT, JudgementKind.GOOD, JudgementKind.HOLD_OK)


class InputKind(enum.Enum):
    PRESS = "press"
    RELEASE = "release"


@dataclass(frozen=True)
class Beat:
    time_seconds: float
    intensity: float
    bass_strength: float
    mid_strength: float
    high_strength: float
    is_bass: bool
    is_snare: bool
    is_hihat: bool


@dataclass(frozen=True)
class NoteEvent:
    start_seconds: float
    end_seconds: float
    lane: int
    intensity: float = 1.0

    @property
    def duration_seconds(self) -> float:
        return float(self.end_seconds) - float(self.start_seconds)

    @property
    def is_hold(self) -> bool:
        return float(self.end_seconds) > float(self.start_seconds) + HOLD_EPSILON_SECONDS


@dataclass(frozen=True)
class Beatmap:
    difficulty: str
    notes: List[NoteEvent]
    duration_seconds: float

    @property
    def hold_count(self) -> int:
        return sum(1 for note in self.notes if note.is_hold)


@dataclass(frozen=True)
class LaneInputEvent:
    time_seconds: float
    lane: int
    kind: InputKind = InputKind.PRESS


@dataclass(frozen=True)
class JudgementEvent:
    time_seconds: float
    lane: int
    kind: JudgementKind
    score_delta: int
    combo_after: int
    note_start_seconds: float
    delta_seconds: Optional[float] = None
