from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Union

import difficulty
import note_composer
import onset_detector
from gameplay_models import Beatmap, NoteEvent
from logging_utils import log_event
from signal_windower import PcmBuffer


GENERATOR_VERSION = "energy_v1"
DEFAULT_SEED = 42


@dataclass(frozen=True)
class GeneratedBeatmap:
    beatmap: Beatmap
    beat_count: int
    hold_count: int
    seed: int
    generator_version: str


def _note_sort_key(note: NoteEvent):
    return (float(note.start_seconds), int(note.lane))


def generate_beatmap(
    *,
    pcm_buffer: PcmBuffer,
    difficulty_name: Union[str, difficulty.Difficulty],
    seed: int = DEFAULT_SEED,
    generator_version: str = GENERATOR_VERSION,
) -> GeneratedBeatmap:
    level = difficulty.normalize_difficulty(difficulty_name)
    profile = difficulty.profile_for(level)

    log_event(
        "info",
        "Analyzer",
        f"Analyzing: {pcm_buffer.samples.size} samples, {pcm_buffer.sample_rate} Hz [{difficulty.display_name(level)}]",
        channels=pcm_buffer.channel_count,
    )

    beats = onset_detector.detect_beats(pcm_buffer, profile)
    log_event("info", "Analyzer", f"Detected {len(beats)} beats")

    # Fresh generator per call so the same track and difficulty always compose the same notes.
    random_generator = random.Random(int(seed))
    note_events = note_composer.compose_notes(beats, profile, random_generator)
    note_events.sort(key=_note_sort_key)

    beatmap = Beatmap(
        difficulty=level.value,
        notes=note_events,
        duration_seconds=float(pcm_buffer.duration_seconds),
    )
    hold_count = beatmap.hold_count
    log_event("info", "Composer", f"Generated {len(note_events)} notes ({hold_count} holds)")

    return GeneratedBeatmap(
        beatmap=beatmap,
        beat_count=len(beats),
        hold_count=int(hold_count),
        seed=int(seed),
        generator_version=str(generator_version),
    )
