import random
import unittest

import difficulty
from gameplay_models import Beat
from note_composer import CompositionState, compose_notes


def make_beat(time_seconds, *, bass=False, snare=False, hihat=False, intensity=1.0, bass_strength=1.0):
    return Beat(
        time_seconds=time_seconds,
        intensity=intensity,
        bass_strength=bass_strength,
        mid_strength=1.0,
        high_strength=1.0,
        is_bass=bass,
        is_snare=snare,
        is_hihat=hihat,
    )


def random_beats(seed, count=300):
    rng = random.Random(seed)
    beats = []
    time_seconds = 0.5
    for _ in range(count):
        time_seconds += rng.uniform(0.02, 0.3)
        beats.append(
            make_beat(
                time_seconds,
                bass=rng.random() < 0.4,
                snare=rng.random() < 0.3,
                hihat=rng.random() < 0.4,
                intensity=rng.uniform(0.5, 3.0),
                bass_strength=rng.uniform(0.5, 4.0),
            )
        )
    return beats


class TestNoteComposer(unittest.TestCase):
    def test_empty_beats_give_no_notes(self):
        self.assertEqual(compose_notes([], difficulty.profile_for("hard"), random.Random(42)), [])

    def test_same_seed_same_notes(self):
        beats = random_beats(1)
        profile = difficulty.profile_for("extreme")
        first = compose_notes(beats, profile, random.Random(42))
        second = compose_notes(beats, profile, random.Random(42))
        self.assertEqual(first, second)

    def test_classified_beats_use_their_lane_pairs(self):
        profile = difficulty.profile_for("very_easy")
        rng = random.Random(7)
        cases = [({"bass": True}, {0, 1}), ({"snare": True}, {1, 2}), ({"hihat": True}, {2, 3})]
        for flags, lanes in cases:
            beats = [make_beat(1.0 + index * 1.0, **flags) for index in range(40)]
            notes = compose_notes(beats, profile, rng)
            self.assertEqual(len(notes), len(beats))
            self.assertTrue({note.lane for note in notes} <= lanes)

    def test_busy_lane_moves_to_first_free_lane(self):
        profile = difficulty.profile_for("medium")
        for seed in range(20):
            beats = [make_beat(1.0, bass=True), make_beat(1.05, bass=True)]
            first, second = compose_notes(beats, profile, random.Random(seed))
            self.assertIn(second.lane, {0, 1})
            self.assertNotEqual(first.lane, second.lane)

    def test_all_lanes_busy_keeps_the_beat(self):
        profile = difficulty.profile_for("medium")
        beats = [make_beat(1.0 + index * 0.01) for index in range(5)]
        notes = compose_notes(beats, profile, random.Random(3))
        self.assertEqual(len(notes), 5)
        self.assertEqual({note.lane for note in notes[:4]}, {0, 1, 2, 3})

    def test_very_easy_never_holds(self):
        notes = compose_notes(random_beats(2), difficulty.profile_for("very_easy"), random.Random(42))
        self.assertFalse(any(note.is_hold for note in notes))

    def test_holds_never_overlap_in_a_lane(self):
        for seed in range(5):
            notes = compose_notes(random_beats(seed), difficulty.profile_for("extreme"), random.Random(seed))
            self.assertTrue(any(note.is_hold for note in notes))
            for lane in range(4):
                lane_holds = sorted((note for note in notes if note.lane == lane and note.is_hold), key=lambda note: note.start_seconds)
                for earlier, later in zip(lane_holds, lane_holds[1:]):
                    self.assertGreaterEqual(later.start_seconds, earlier.end_seconds)

    def test_hold_length_is_bounded_by_difficulty(self):
        for name in ("easy", "medium", "hard", "extreme"):
            profile = difficulty.profile_for(name)
            notes = compose_notes(random_beats(9), profile, random.Random(42))
            for note in notes:
                self.assertLessEqual(note.duration_seconds, profile.max_hold_duration + 1e-9)
                if note.is_hold:
                    self.assertGreaterEqual(note.duration_seconds, 0.25 - 1e-9)

    def test_strong_bass_hold_ends_before_next_strong_bass(self):
        # hold chance 0.6 at extreme, so some of these become holds
        beats = [make_beat(1.0 + index * 0.6, bass=True, bass_strength=3.0) for index in range(40)]
        notes = compose_notes(beats, difficulty.profile_for("extreme"), random.Random(42))
        # the last beat has no following bass beat and keeps the default length
        holds = [note for note in notes if note.is_hold and note.start_seconds < beats[-1].time_seconds]
        self.assertTrue(holds)
        for note in holds:
            self.assertAlmostEqual(note.duration_seconds, 0.55)

    def test_doubles_only_on_loud_beats_when_allowed(self):
        loud = [make_beat(1.0 + index * 1.0, intensity=2.0) for index in range(100)]
        quiet = [make_beat(1.0 + index * 1.0, intensity=1.0) for index in range(100)]

        self.assertEqual(len(compose_notes(loud, difficulty.profile_for("medium"), random.Random(42))), 100)
        self.assertEqual(len(compose_notes(quiet, difficulty.profile_for("extreme"), random.Random(42))), 100)

        notes = compose_notes(loud, difficulty.profile_for("hard"), random.Random(42))
        self.assertGreater(len(notes), 100)
        by_start = {}
        for note in notes:
            by_start.setdefault(note.start_seconds, []).append(note)
        for group in by_start.values():
            lanes = [note.lane for note in group]
            self.assertEqual(len(lanes), len(set(lanes)))
            if len(group) == 2:
                self.assertAlmostEqual(group[1].intensity, 2.0 * 0.8)

    def test_state_carries_across_calls(self):
        state = CompositionState()
        profile = difficulty.profile_for("medium")
        compose_notes([make_beat(1.0, bass=True)], profile, random.Random(1), state)
        self.assertEqual(sorted(state.last_note_end_seconds).count(1.0), 1)
        self.assertIn(state.last_lane, {0, 1})


if __name__ == "__main__":
    unittest.main()
