# synthetic_audio.py
from __future__ import annotations

import numpy as np

from signal_windower import PcmBuffer


def silence(*, seconds: float, sample_rate: int = 44100, channels: int = 2) -> PcmBuffer:
    frame_count = int(round(float(seconds) * int(sample_rate)))
    samples = np.zeros(frame_count * int(channels), dtype=np.int16)
    return PcmBuffer(samples=samples, sample_rate=int(sample_rate), channel_count=int(channels))


def bass_pulse_train(
    *,
    seconds: float,
    period_seconds: float = 0.5,
    first_pulse_seconds: float = 0.25,
    pulse_seconds: float = 0.04,
    frequency_hz: float = 55.0,
    amplitude: float = 0.8,
    sample_rate: int = 44100,
    channels: int = 2,
) -> PcmBuffer:
    """Short decaying low sine bursts on a fixed grid, identical on every channel.

    The bursts are shorter than the minimum beat spacing of every difficulty, so each one
    produces a single bass onset.
    """
    frame_count = int(round(float(seconds) * int(sample_rate)))
    mono = np.zeros(frame_count, dtype=np.float64)

    pulse_length = int(round(float(pulse_seconds) * int(sample_rate)))
    pulse_time = np.arange(pulse_length, dtype=np.float64) / float(sample_rate)
    envelope = np.exp(-pulse_time / (float(pulse_seconds) / 2.0))
    pulse = float(amplitude) * envelope * np.sin(2.0 * np.pi * float(frequency_hz) * pulse_time)

    onset = float(first_pulse_seconds)
    while onset < float(seconds):
        start = int(round(onset * int(sample_rate)))
        end = min(frame_count, start + pulse_length)
        mono[start:end] += pulse[:end - start]
        onset += float(period_seconds)

    pcm = np.clip(np.round(mono * 32767.0), -32768, 32767).astype(np.int16)
    samples = np.repeat(pcm, int(channels))
    return PcmBuffer(samples=samples, sample_rate=int(sample_rate), channel_count=int(channels))
