import contextlib
import io
import json
import os
import tempfile
import unittest
import wave
from pathlib import Path
from unittest import mock

import numpy as np

import beatmap_tool
import config
import synthetic_audio
from chart_generator import generate_beatmap
from signal_windower import PcmFormatError


class TestBeatmapTool(unittest.TestCase):
    def setUp(self):
        self._temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self._temp_dir.name)
        environment = {key: value for key, value in os.environ.items() if not key.startswith("BEATLANE_")}
        self._patches = [
            mock.patch.dict(os.environ, environment, clear=True),
            mock.patch.object(config, "_default_config_candidates", return_value=[self.root / "none.json"]),
        ]
        for patcher in self._patches:
            patcher.start()
        config.get_config.cache_clear()

    def tearDown(self):
        for patcher in reversed(self._patches):
            patcher.stop()
        config.get_config.cache_clear()
        self._temp_dir.cleanup()

    def run_main(self, argv):
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            exit_code = beatmap_tool.main(argv)
        return exit_code, json.loads(output.getvalue())

    def test_read_wav_round_trip(self):
        pcm = synthetic_audio.bass_pulse_train(seconds=1.0)
        path = self.root / "pulse.wav"
        with wave.open(str(path), "wb") as wav_file:
            wav_file.setnchannels(2)
            wav_file.setsampwidth(2)
            wav_file.setframerate(44100)
            wav_file.writeframes(pcm.samples.astype("<i2").tobytes())

        loaded = beatmap_tool.read_wav_pcm16(path)
        self.assertEqual(loaded.channel_count, 2)
        self.assertEqual(loaded.sample_rate, 44100)
        self.assertTrue(np.array_equal(loaded.samples, pcm.samples))

    def test_read_wav_rejects_8_bit(self):
        path = self.root / "eight.wav"
        with wave.open(str(path), "wb") as wav_file:
            wav_file.setnchannels(1)
            wav_file.setsampwidth(1)
            wav_file.setframerate(8000)
            wav_file.writeframes(bytes(800))
        with self.assertRaises(PcmFormatError):
            beatmap_tool.read_wav_pcm16(path)

    def test_build_summary(self):
        generated = generate_beatmap(pcm_buffer=synthetic_audio.bass_pulse_train(seconds=5.0), difficulty_name="easy")
        summary = beatmap_tool.build_summary(generated, include_notes=True)
        self.assertTrue(summary["ok"])
        self.assertEqual(summary["difficulty"], "easy")
        self.assertEqual(sum(summary["lane_counts"]), summary["note_count"])
        self.assertEqual(len(summary["notes"]), summary["note_count"])

    def test_simulation_without_player_misses_everything(self):
        generated = generate_beatmap(pcm_buffer=synthetic_audio.bass_pulse_train(seconds=3.0), difficulty_name="medium")
        result = beatmap_tool.simulate_session(generated, auto_play=False)
        self.assertEqual(result["score"], 0)
        self.assertEqual(result["rank"], "F")
        self.assertFalse(result["full_combo"])

    def test_demo_with_auto_play(self):
        exit_code, summary = self.run_main(["--demo", "--simulate", "--auto"])
        self.assertEqual(exit_code, 0)
        self.assertEqual(summary["difficulty"], "medium")
        self.assertGreater(summary["note_count"], 0)
        self.assertTrue(summary["simulation"]["full_combo"])
        self.assertGreater(summary["simulation"]["score"], 0)

    def test_bad_difficulty_reports_error(self):
        exit_code, payload = self.run_main(["--demo", "--difficulty", "nightmare"])
        self.assertEqual(exit_code, 2)
        self.assertFalse(payload["ok"])


if __name__ == "__main__":
    unittest.main()
