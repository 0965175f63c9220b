"""
beatmap_tool.py

Command line entrypoint for beatmap generation without the game window.

Usage
- python beatmap_tool.py song.wav --difficulty hard
- python beatmap_tool.py --demo --simulate
- python beatmap_tool.py song.wav --notes   (include the full note list)

Input must already be 16-bit PCM WAV. Decoding other formats belongs to the caller.
Prints one JSON document, like config.py does.
"""

from __future__ import annotations

import argparse
import json
import wave
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

import chart_generator
import gameplay_session
import synthetic_audio
from config import get_config
from logging_utils import log_event, set_log_level
from signal_windower import PcmBuffer, PcmFormatError


SIMULATION_FPS = 144.0
SIMULATION_TAIL_SECONDS = 1.0


def read_wav_pcm16(wav_path: Path) -> PcmBuffer:
    try:
        with wave.open(str(wav_path), "rb") as wav_file:
            sample_width = wav_file.getsampwidth()
            channel_count = wav_file.getnchannels()
            sample_rate = wav_file.getframerate()
            raw_bytes = wav_file.readframes(wav_file.getnframes())
    except wave.Error as exc:
        raise PcmFormatError(f"Not a PCM WAV file: {wav_path}. Error: {exc}") from exc

    if sample_width != 2:
        raise PcmFormatError(f"Expected 16-bit samples, got {sample_width * 8}-bit: {wav_path}")

    samples = np.frombuffer(raw_bytes, dtype="<i2").astype(np.int16)
    return PcmBuffer(samples=samples, sample_rate=int(sample_rate), channel_count=int(channel_count))


def simulate_session(
    generated: chart_generator.GeneratedBeatmap,
    *,
    auto_play: bool = True,
    av_offset_seconds: float = 0.0,
) -> Dict[str, Any]:
    """Play the beatmap at a fixed frame rate. Without auto play nobody presses, so every note is missed."""
    milestones: List[int] = []
    session = gameplay_session.GameplaySession(
        generated.beatmap,
        auto_play=auto_play,
        av_offset_seconds=av_offset_seconds,
        on_combo_milestone=milestones.append,
    )
    session.start(0.0)

    frame_seconds = 1.0 / SIMULATION_FPS
    end_seconds = float(generated.beatmap.duration_seconds) + SIMULATION_TAIL_SECONDS
    frame_index = 0
    elapsed = 0.0
    while True:
        frame_index += 1
        elapsed = frame_index * frame_seconds
        session.tick(elapsed)
        playback_stopped = elapsed >= float(generated.beatmap.duration_seconds)
        if session.is_ready_to_end(playback_stopped) or elapsed >= end_seconds:
            break

    results = session.results()
    return {
        "score": results.score,
        "max_combo": results.max_combo,
        "accuracy_percent": round(results.accuracy_percent, 2),
        "rank": results.rank,
        "full_combo": results.is_full_combo,
        "combo_milestones": milestones,
        "ended_at_seconds": round(elapsed, 3),
    }


def build_summary(generated: chart_generator.GeneratedBeatmap, *, include_notes: bool) -> Dict[str, Any]:
    beatmap = generated.beatmap
    lane_counts = [0] * 4
    for note in beatmap.notes:
        lane_counts[int(note.lane)] += 1

    summary: Dict[str, Any] = {
        "ok": True,
        "difficulty": beatmap.difficulty,
        "duration_seconds": round(beatmap.duration_seconds, 3),
        "beat_count": generated.beat_count,
        "note_count": len(beatmap.notes),
        "hold_count": generated.hold_count,
        "lane_counts": lane_counts,
        "seed": generated.seed,
        "generator_version": generated.generator_version,
    }
    if include_notes:
        summary["notes"] = [
            {
                "start": round(note.start_seconds, 4),
                "end": round(note.end_seconds, 4),
                "lane": note.lane,
                "intensity": round(note.intensity, 3),
            }
            for note in beatmap.notes
        ]
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a four lane beatmap from 16-bit PCM audio.")
    parser.add_argument("wav_path", nargs="?", help="Path to a 16-bit PCM WAV file")
    parser.add_argument("--difficulty", default=None, help="very_easy, easy, medium, hard, extreme (default from config)")
    parser.add_argument("--demo", action="store_true", help="Use a synthetic 10 second bass pulse track")
    parser.add_argument("--simulate", action="store_true", help="Run a gameplay session and report results")
    parser.add_argument("--auto", action="store_true", help="Simulate with the auto player (default from config)")
    parser.add_argument("--notes", action="store_true", help="Include the note list in the output")
    args = parser.parse_args(argv)

    try:
        config, _config_path = get_config()
    except (OSError, ValueError) as exc:
        print(json.dumps({"ok": False, "error": str(exc)}, ensure_ascii=False, indent=2))
        return 2
    set_log_level(config.logging.level)

    if not args.demo and not args.wav_path:
        parser.error("wav_path is required unless --demo is given")

    difficulty_name = args.difficulty or config.gameplay.difficulty
    try:
        if args.demo:
            pcm_buffer = synthetic_audio.bass_pulse_train(seconds=10.0)
        else:
            pcm_buffer = read_wav_pcm16(Path(args.wav_path))
        generated = chart_generator.generate_beatmap(pcm_buffer=pcm_buffer, difficulty_name=difficulty_name)
    except (OSError, ValueError) as exc:
        log_event("error", "Tool", f"Beatmap generation failed: {exc}")
        print(json.dumps({"ok": False, "error": str(exc)}, ensure_ascii=False, indent=2))
        return 2

    summary = build_summary(generated, include_notes=bool(args.notes))
    if args.simulate:
        summary["simulation"] = simulate_session(
            generated,
            auto_play=bool(args.auto or config.gameplay.auto_play),
            av_offset_seconds=float(config.gameplay.av_offset_ms) / 1000.0,
        )

    print(json.dumps(summary, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
