# -*- coding: utf-8 -*-
########################
# beatmap_loader.py
########################
# Purpose:
# - Runs beatmap generation on a background thread while the caller shows a loading indicator.
#
# Design notes:
# - One-shot: start() may be called once; the completion callback fires exactly once.
# - No cancellation. Generation runs to completion.
# - The callback runs on the worker thread. Qt callers should marshal it to the GUI thread.
#
########################
# Interfaces:
# Public classes:
# - class BeatmapLoader
#   - __init__(*, pcm_buffer, difficulty_name, seed=DEFAULT_SEED, on_finished=None)
#   - start() -> None
#   - is_finished() -> bool
#   - wait(timeout_seconds: Optional[float] = None) -> bool
#   - result() -> GeneratedBeatmap   # re-raises the worker failure
#
########################

from __future__ import annotations

import threading
from typing import Callable, Optional, Union

import chart_generator
import difficulty
from logging_utils import log_event
from signal_windower import PcmBuffer


class BeatmapLoader:
    def __init__(
        self,
        *,
        pcm_buffer: PcmBuffer,
        difficulty_name: Union[str, difficulty.Difficulty],
        seed: int = chart_generator.DEFAULT_SEED,
        on_finished: Optional[Callable[["BeatmapLoader"], None]] = None,
    ) -> None:
        self._pcm_buffer = pcm_buffer
        self._difficulty_name = difficulty_name
        self._seed = int(seed)
        self._on_finished = on_finished
        self._done = threading.Event()
        self._start_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._result: Optional[chart_generator.GeneratedBeatmap] = None
        self._error: Optional[BaseException] = None

    def start(self) -> None:
        with self._start_lock:
            if self._thread is not None:
                raise RuntimeError("BeatmapLoader.start() may only be called once")
            self._thread = threading.Thread(target=self._run, name="beatlane-beatmap-loader", daemon=True)
            self._thread.start()

    def _run(self) -> None:
        try:
            self._result = chart_generator.generate_beatmap(
                pcm_buffer=self._pcm_buffer,
                difficulty_name=self._difficulty_name,
                seed=self._seed,
            )
        except Exception as exc:
            log_event("error", "Loader", f"Beatmap generation failed: {exc}")
            self._error = exc
        finally:
            self._done.set()
            if self._on_finished is not None:
                self._on_finished(self)

    def is_finished(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout_seconds: Optional[float] = None) -> bool:
        return self._done.wait(timeout_seconds)

    def result(self) -> chart_generator.GeneratedBeatmap:
        if not self._done.is_set():
            raise RuntimeError("Beatmap generation has not finished")
        if self._error is not None:
            raise self._error
        assert self._result is not None
        return self._result
