import unittest

import synthetic_audio
from chart_generator import generate_beatmap
from gameplay_models import Beatmap, JudgementKind, NoteEvent, NoteState
from gameplay_session import GameplaySession


def single_tap_beatmap(start=1.0, lane=0):
    return Beatmap(
        difficulty="medium",
        notes=[NoteEvent(start_seconds=start, end_seconds=start, lane=lane)],
        duration_seconds=5.0,
    )


class TestGameplaySession(unittest.TestCase):
    def test_press_is_judged_at_next_frame_time(self):
        session = GameplaySession(single_tap_beatmap(start=1.06))
        session.start(0.0)
        self.assertEqual(session.tick(0.5), [])
        self.assertEqual(session.tick(1.0), [])

        session.press(0)
        events = session.tick(1.06)
        self.assertEqual([event.kind for event in events], [JudgementKind.PERFECT])
        self.assertAlmostEqual(events[0].time_seconds, 1.06)
        self.assertAlmostEqual(events[0].delta_seconds, 0.0)
        session.release(0)
        self.assertEqual(session.tick(1.1), [])

        results = session.results()
        self.assertEqual(results.score, 300)
        self.assertEqual(results.perfect_count, 1)
        self.assertTrue(results.is_full_combo)
        self.assertEqual(results.rank, "SS")

    def test_press_before_start_is_dropped(self):
        session = GameplaySession(single_tap_beatmap(start=0.1))
        session.press(0)
        session.start(0.0)

        self.assertEqual(session.tick(0.05), [])
        self.assertEqual(session.lane_input().held_lanes(), frozenset())
        self.assertEqual(session.results().score, 0)
        self.assertIs(session.note_scheduler().scheduled_notes()[0].state, NoteState.PENDING)

    def test_tick_before_start_does_nothing(self):
        session = GameplaySession(single_tap_beatmap())
        self.assertEqual(session.tick(3.0), [])
        self.assertFalse(session.is_started())

    def test_pause_freezes_song_time(self):
        session = GameplaySession(single_tap_beatmap(start=3.0))
        session.start(0.0)
        session.tick(0.5)
        session.pause(0.6)
        self.assertEqual(session.tick(5.0), [])
        self.assertAlmostEqual(session.song_time_seconds(), 0.6)

        session.resume(5.1)
        session.tick(5.6)
        self.assertAlmostEqual(session.song_time_seconds(), 1.1)

    def test_av_offset_shifts_song_time(self):
        session = GameplaySession(single_tap_beatmap(), av_offset_seconds=0.05)
        session.start(0.0)
        session.tick(1.0)
        self.assertAlmostEqual(session.song_time_seconds(), 1.05)

    def test_missed_note_ends_session(self):
        session = GameplaySession(single_tap_beatmap())
        session.start(0.0)
        self.assertFalse(session.is_ready_to_end(True))

        events = session.tick(1.2)
        self.assertEqual([event.kind for event in events], [JudgementKind.MISS])
        self.assertFalse(session.is_ready_to_end(False))
        self.assertTrue(session.is_ready_to_end(True))

        results = session.results()
        self.assertEqual(results.miss_count, 1)
        self.assertEqual(results.total_notes, 1)
        self.assertEqual(results.rank, "F")
        self.assertFalse(results.is_full_combo)

    def test_silence_session_ends_when_playback_stops(self):
        generated = generate_beatmap(pcm_buffer=synthetic_audio.silence(seconds=2.0), difficulty_name="medium")
        session = GameplaySession(generated.beatmap)
        session.start(0.0)
        session.tick(1.0)
        self.assertFalse(session.is_ready_to_end(False))
        self.assertTrue(session.is_ready_to_end(True))
        self.assertEqual(session.results().total_notes, 0)

    def test_restart_returns_notes_to_pending(self):
        session = GameplaySession(single_tap_beatmap())
        session.start(0.0)
        session.tick(1.0)
        session.press(0)
        session.tick(1.01)
        session.press(1)

        session.restart()
        self.assertFalse(session.is_started())
        self.assertEqual(session.results().score, 0)
        self.assertEqual(session.lane_input().held_lanes(), frozenset())
        states = [item.state for item in session.note_scheduler().scheduled_notes()]
        self.assertEqual(states, [NoteState.PENDING])

        session.start(0.0)
        session.tick(1.0)
        session.press(0)
        self.assertEqual([event.kind for event in session.tick(1.0)], [JudgementKind.PERFECT])

    def test_auto_play_generated_beatmap(self):
        milestones = []
        generated = generate_beatmap(pcm_buffer=synthetic_audio.bass_pulse_train(seconds=10.0), difficulty_name="medium")
        session = GameplaySession(generated.beatmap, auto_play=True, on_combo_milestone=milestones.append)
        session.start(0.0)
        for frame in range(1, 60 * 11):
            session.tick(frame / 60.0)

        results = session.results()
        self.assertTrue(session.is_ready_to_end(True))
        self.assertEqual(results.miss_count, 0)
        self.assertEqual(results.perfect_count, len(generated.beatmap.notes))
        self.assertEqual(results.hold_count, generated.hold_count)
        self.assertEqual(results.max_combo, len(generated.beatmap.notes) + generated.hold_count)
        self.assertEqual(milestones, [])


if __name__ == "__main__":
    unittest.main()
