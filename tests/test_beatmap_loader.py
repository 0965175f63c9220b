import threading
import unittest

import synthetic_audio
from beatmap_loader import BeatmapLoader


class TestBeatmapLoader(unittest.TestCase):
    def test_generates_on_worker_thread(self):
        finished = threading.Event()
        calls = []

        def on_finished(loader):
            calls.append(threading.current_thread().name)
            finished.set()

        loader = BeatmapLoader(
            pcm_buffer=synthetic_audio.silence(seconds=1.0),
            difficulty_name="easy",
            on_finished=on_finished,
        )
        loader.start()
        self.assertTrue(finished.wait(30.0))
        self.assertTrue(loader.wait(30.0))
        self.assertTrue(loader.is_finished())
        self.assertEqual(calls, ["beatlane-beatmap-loader"])

        generated = loader.result()
        self.assertEqual(generated.beat_count, 0)
        self.assertEqual(generated.beatmap.difficulty, "easy")

    def test_start_only_once(self):
        loader = BeatmapLoader(pcm_buffer=synthetic_audio.silence(seconds=0.5), difficulty_name="easy")
        loader.start()
        with self.assertRaises(RuntimeError):
            loader.start()
        self.assertTrue(loader.wait(30.0))

    def test_result_before_finish(self):
        loader = BeatmapLoader(pcm_buffer=synthetic_audio.silence(seconds=0.5), difficulty_name="easy")
        with self.assertRaises(RuntimeError):
            loader.result()

    def test_worker_failure_is_reraised(self):
        finished = threading.Event()
        loader = BeatmapLoader(
            pcm_buffer=synthetic_audio.silence(seconds=0.5),
            difficulty_name="bogus",
            on_finished=lambda _loader: finished.set(),
        )
        loader.start()
        self.assertTrue(finished.wait(30.0))
        with self.assertRaises(ValueError):
            loader.result()


if __name__ == "__main__":
    unittest.main()
