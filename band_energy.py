# -*- coding: utf-8 -*-
########################
# band_energy.py
########################
# Purpose:
# - Per-frame detection features: three proxy band energies and a weighted total.
#
# Design notes:
# - These are time-domain proxies, not spectral bins.
#   - bass: mean square of 4-sample block averages (all channels), a crude low-pass.
#   - mid: first difference of channel 0, a crude high-pass.
#   - high: second difference of channel 0, fastest transients.
# - mid and high are normalized by the frame length, not by the number of differences.
# - Weights of the total are fixed: bass + 0.5 * mid + 0.3 * high.
#
########################
# Interfaces:
# Public dataclasses:
# - BandEnergies(bass: float, mid: float, high: float, total: float)
#
# Public functions:
# - compute_band_energies(frame_samples: numpy.ndarray) -> BandEnergies
#
########################

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


BASS_BLOCK = 4
MID_WEIGHT = 0.5
HIGH_WEIGHT = 0.3


@dataclass(frozen=True)
class BandEnergies:
    bass: float
    mid: float
    high: float
    total: float


def compute_band_energies(frame_samples: np.ndarray) -> BandEnergies:
    """frame_samples: float array of shape (block_size, channel_count), scaled to [-1, 1)."""
    frame = np.asarray(frame_samples, dtype=np.float64)
    if frame.ndim == 1:
        frame = frame.reshape(-1, 1)
    block_size = int(frame.shape[0])
    if block_size == 0:
        return BandEnergies(bass=0.0, mid=0.0, high=0.0, total=0.0)

    usable = (block_size // BASS_BLOCK) * BASS_BLOCK
    block_means = frame[:usable].reshape(usable // BASS_BLOCK, -1).mean(axis=1)
    bass = float(np.sum(block_means * block_means)) / float(block_size // BASS_BLOCK) if usable else 0.0

    lead = frame[:, 0]
    first_diff = np.diff(lead)
    second_diff = np.diff(lead, n=2)
    mid = float(np.sum(first_diff * first_diff)) / float(block_size)
    high = float(np.sum(second_diff * second_diff)) / float(block_size)

    total = bass + mid * MID_WEIGHT + high * HIGH_WEIGHT
    return BandEnergies(bass=bass, mid=mid, high=high, total=total)


def _run_unit_tests() -> None:
    silent = compute_band_energies(np.zeros((1024, 2)))
    assert silent.total == 0.0

    steady = compute_band_energies(np.full((1024, 1), 0.5))
    assert abs(steady.bass - 0.25) < 1e-12
    assert steady.mid == 0.0 and steady.high == 0.0

    empty = compute_band_energies(np.zeros((0, 2)))
    assert empty.total == 0.0


if __name__ == "__main__":
    _run_unit_tests()
    print("band_energy.py: ok")
