# -*- coding: utf-8 -*-
########################
# signal_windower.py
########################
# Purpose:
# - Holds the decoded PCM input of the analysis pipeline.
# - Slices interleaved 16-bit PCM into overlapping analysis frames.
#
# Design notes:
# - No Qt usage. numpy only.
# - Frames are produced lazily. The generator is finite and not restartable.
# - Input too short for one frame yields no frames. That is not an error.
#
########################
# Interfaces:
# Public exceptions:
# - class PcmFormatError(ValueError)
#
# Public dataclasses:
# - PcmBuffer(samples: numpy.ndarray[int16], sample_rate: int, channel_count: int)
# - AnalysisFrame(start_seconds: float, samples: numpy.ndarray[float64] shape (block_size, channel_count))
#
# Public functions:
# - iter_frames(pcm_buffer, *, block_size=1024, hop_size=512) -> Iterator[AnalysisFrame]
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Union

import numpy as np


BLOCK_SIZE = 1024
HOP_SIZE = 512
PCM_SCALE = 32768.0


class PcmFormatError(ValueError):
    """Raised when a PCM buffer is constructed with an invalid layout."""


@dataclass(frozen=True)
class PcmBuffer:
    samples: np.ndarray
    sample_rate: int
    channel_count: int

    def __post_init__(self) -> None:
        if int(self.sample_rate) <= 0:
            raise PcmFormatError(f"sample_rate must be positive, got {self.sample_rate!r}")
        if int(self.channel_count) <= 0:
            raise PcmFormatError(f"channel_count must be positive, got {self.channel_count!r}")
        if np.ndim(self.samples) != 1:
            raise PcmFormatError("samples must be a flat interleaved array")

    @classmethod
    def from_samples(
        cls,
        samples: Union[Sequence[int], np.ndarray],
        *,
        sample_rate: int,
        channel_count: int,
    ) -> "PcmBuffer":
        array = np.asarray(samples)
        if array.size and not np.issubdtype(array.dtype, np.integer):
            raise PcmFormatError(f"samples must be 16-bit integers, got dtype {array.dtype}")
        return cls(samples=array.astype(np.int16, copy=False).reshape(-1), sample_rate=int(sample_rate), channel_count=int(channel_count))

    @property
    def frame_count(self) -> int:
        return int(self.samples.size) // int(self.channel_count)

    @property
    def duration_seconds(self) -> float:
        return float(self.frame_count) / float(self.sample_rate)


@dataclass(frozen=True)
class AnalysisFrame:
    start_seconds: float
    samples: np.ndarray


def iter_frames(pcm_buffer: PcmBuffer, *, block_size: int = BLOCK_SIZE, hop_size: int = HOP_SIZE) -> Iterator[AnalysisFrame]:
    channels = int(pcm_buffer.channel_count)
    sample_rate = int(pcm_buffer.sample_rate)
    samples = pcm_buffer.samples
    total = int(samples.size)
    span = int(block_size) * channels
    step = int(hop_size) * channels

    index = 0
    while index + span <= total:
        block = samples[index:index + span].astype(np.float64) / PCM_SCALE
        yield AnalysisFrame(
            start_seconds=float(index // channels) / float(sample_rate),
            samples=block.reshape(int(block_size), channels),
        )
        index += step
