import unittest

import difficulty
import synthetic_audio
from band_energy import BandEnergies
from onset_detector import HISTORY_SIZE, AdaptiveOnsetDetector, RollingHistory, detect_beats


def _energies(bass=0.0, mid=0.0, high=0.0):
    return BandEnergies(bass=bass, mid=mid, high=high, total=bass + mid * 0.5 + high * 0.3)


class TestRollingHistory(unittest.TestCase):
    def test_average_and_eviction(self):
        history = RollingHistory(3)
        self.assertEqual(history.average(), 0.0)
        for value in (1.0, 2.0, 3.0, 4.0):
            history.push(value)
        self.assertEqual(len(history), 3)
        self.assertAlmostEqual(history.average(), 3.0)
        history.clear()
        self.assertEqual(len(history), 0)


class TestAdaptiveOnsetDetector(unittest.TestCase):
    def test_no_beats_during_warm_up(self):
        detector = AdaptiveOnsetDetector(difficulty.profile_for("medium"))
        for index in range(HISTORY_SIZE // 2 - 1):
            self.assertIsNone(detector.process_frame(index * 0.01, _energies(bass=1.0 if index % 3 == 0 else 0.0)))

    def test_bass_spike_after_quiet_history(self):
        detector = AdaptiveOnsetDetector(difficulty.profile_for("medium"))
        for index in range(30):
            detector.process_frame(index * 0.0116, _energies(bass=0.002))
        beat = detector.process_frame(30 * 0.0116, _energies(bass=0.05))

        self.assertIsNotNone(beat)
        self.assertTrue(beat.is_bass)
        self.assertFalse(beat.is_snare)
        self.assertFalse(beat.is_hihat)
        self.assertGreater(beat.bass_strength, 1.5)

    def test_min_interval_suppresses_close_onsets(self):
        detector = AdaptiveOnsetDetector(difficulty.profile_for("very_easy"))
        for index in range(30):
            detector.process_frame(index * 0.0116, _energies(bass=0.002))
        self.assertIsNotNone(detector.process_frame(1.0, _energies(bass=0.2)))
        # very easy spacing is 0.5s, so onsets need 0.25s between them
        self.assertIsNone(detector.process_frame(1.1, _energies(bass=2.0)))


class TestDetectBeats(unittest.TestCase):
    def test_silence_has_no_beats(self):
        pcm = synthetic_audio.silence(seconds=3.0)
        self.assertEqual(detect_beats(pcm, difficulty.profile_for("extreme")), [])

    def test_pulse_train_gives_one_bass_beat_per_pulse(self):
        profile = difficulty.profile_for("medium")
        beats = detect_beats(synthetic_audio.bass_pulse_train(seconds=10.0), profile)

        self.assertGreaterEqual(len(beats), 18)
        self.assertLessEqual(len(beats), 22)
        for beat in beats:
            self.assertTrue(beat.is_bass)
        for earlier, later in zip(beats, beats[1:]):
            self.assertGreaterEqual(later.time_seconds - earlier.time_seconds, profile.min_note_interval * 0.5)


if __name__ == "__main__":
    unittest.main()
