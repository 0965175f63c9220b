# -*- coding: utf-8 -*-
########################
# difficulty.py
########################
# Purpose:
# - Difficulty presets that drive both beat detection sensitivity and note density.
#
# Design notes:
# - Profiles are immutable and selected once per session.
# - Preset values define observable difficulty behavior. Do not tune them here.
#
########################
# Interfaces:
# Public enums:
# - class Difficulty(enum.Enum): VERY_EASY | EASY | MEDIUM | HARD | EXTREME
#
# Public dataclasses:
# - DifficultyProfile(beat_threshold, min_note_interval, hold_note_chance, max_hold_duration,
#                     allow_doubles, double_chance)
#
# Public functions:
# - normalize_difficulty(difficulty: str | Difficulty) -> Difficulty
# - profile_for(difficulty: str | Difficulty) -> DifficultyProfile
# - display_name(difficulty: str | Difficulty) -> str
#
########################

from __future__ import annotations

from dataclasses import dataclass
import enum
from typing import Dict, Union


class Difficulty(enum.Enum):
    VERY_EASY = "very_easy"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXTREME = "extreme"


@dataclass(frozen=True)
class DifficultyProfile:
    beat_threshold: float
    min_note_interval: float
    hold_note_chance: float
    max_hold_duration: float
    allow_doubles: bool
    double_chance: float


_PROFILES: Dict[Difficulty, DifficultyProfile] = {
    Difficulty.VERY_EASY: DifficultyProfile(1.9, 0.5, 0.0, 0.0, False, 0.0),
    Difficulty.EASY: DifficultyProfile(1.6, 0.25, 0.1, 0.8, False, 0.0),
    Difficulty.MEDIUM: DifficultyProfile(1.4, 0.15, 0.2, 1.2, False, 0.0),
    Difficulty.HARD: DifficultyProfile(1.3, 0.10, 0.25, 1.5, True, 0.15),
    Difficulty.EXTREME: DifficultyProfile(1.2, 0.08, 0.3, 2.0, True, 0.25),
}

_ALIASES: Dict[str, Difficulty] = {
    "very_easy": Difficulty.VERY_EASY,
    "very-easy": Difficulty.VERY_EASY,
    "veryeasy": Difficulty.VERY_EASY,
    "ve": Difficulty.VERY_EASY,
    "beginner": Difficulty.VERY_EASY,
    "easy": Difficulty.EASY,
    "e": Difficulty.EASY,
    "medium": Difficulty.MEDIUM,
    "m": Difficulty.MEDIUM,
    "normal": Difficulty.MEDIUM,
    "n": Difficulty.MEDIUM,
    "hard": Difficulty.HARD,
    "h": Difficulty.HARD,
    "extreme": Difficulty.EXTREME,
    "x": Difficulty.EXTREME,
    "insane": Difficulty.EXTREME,
}

_DISPLAY_NAMES: Dict[Difficulty, str] = {
    Difficulty.VERY_EASY: "VERY EASY",
    Difficulty.EASY: "EASY",
    Difficulty.MEDIUM: "MEDIUM",
    Difficulty.HARD: "HARD",
    Difficulty.EXTREME: "EXTREME",
}


def normalize_difficulty(difficulty: Union[str, Difficulty]) -> Difficulty:
    if isinstance(difficulty, Difficulty):
        return difficulty
    difficulty_text = str(difficulty or "").strip().lower()
    resolved = _ALIASES.get(difficulty_text)
    if resolved is None:
        raise ValueError(f"Unsupported difficulty: {difficulty!r}. Allowed: {sorted(_ALIASES)}")
    return resolved


def profile_for(difficulty: Union[str, Difficulty]) -> DifficultyProfile:
    return _PROFILES[normalize_difficulty(difficulty)]


def display_name(difficulty: Union[str, Difficulty]) -> str:
    return _DISPLAY_NAMES[normalize_difficulty(difficulty)]
