import math
import unittest
from unittest import mock

from tonal_tuner.note_table import get_note_table
from tonal_tuner.note_types import OutOfRange, TunerTarget
from tonal_tuner.note_utils import (
    cents,
    closest_note,
    convert_note_notation,
    get_note_name,
    parse_note,
    semitones_from_a4,
    target_for,
)


class TestScientificPitchNotation(unittest.TestCase):
    def test_middle_c(self):
        # Middle C (C4) should be ~261.63 Hz
        self.assertEqual(get_note_name(261.63), "C4")

    def test_a4(self):
        self.assertEqual(get_note_name(440.0), "A4")

    def test_octave_transitions(self):
        # Octave numbers change between B and C
        self.assertEqual(get_note_name(246.94), "B3")
        self.assertEqual(get_note_name(261.63), "C4")

    def test_sharps_and_flats(self):
        self.assertEqual(get_note_name(277.18), "C#4")
        self.assertEqual(get_note_name(311.13), "D#4")
        self.assertEqual(get_note_name(277.18, use_flats=True), "Db4")
        self.assertEqual(get_note_name(311.13, use_flats=True), "Eb4")
        self.assertEqual(get_note_name(329.63, use_flats=True), "E4")

    def test_out_of_range(self):
        self.assertEqual(get_note_name(5.0), "---")
        self.assertEqual(get_note_name(0.0), "---")


class TestClosestNote(unittest.TestCase):
    def test_canonical_frequency(self):
        note = closest_note(445.0)
        self.assertIsInstance(note, TunerTarget)
        self.assertEqual((note.note_name, note.octave), ("A", 4))
        # Deviation is measured against the table value, not the input
        self.assertEqual(note.frequency, 440.0)

    def test_low_e(self):
        note = closest_note(82.41)
        self.assertEqual((note.note_name, note.octave), ("E", 2))
        self.assertAlmostEqual(note.frequency, 82.4069, places=3)

    def test_table_edges(self):
        table = get_note_table()
        first = closest_note(table[0].frequency)
        last = closest_note(table[-1].frequency)
        self.assertEqual(str(first), "C0")
        self.assertEqual(str(last), "B8")

    def test_out_of_range(self):
        for frequency in [5.0, 9000.0, 0.0, -440.0, float("nan"), float("inf")]:
            with self.subTest(frequency=frequency):
                self.assertIsInstance(closest_note(frequency), OutOfRange)

    def test_out_of_range_is_falsy_value(self):
        result = closest_note(20000.0)
        self.assertFalse(result)
        self.assertEqual(result.frequency, 20000.0)

    def test_midpoint_is_deterministic(self):
        table = get_note_table()
        for index in [20, 45, 56, 57, 80]:
            low, high = table[index], table[index + 1]
            midpoint = math.sqrt(low.frequency * high.frequency)
            self.assertAlmostEqual(semitones_from_a4(midpoint) % 1, 0.5, places=9)

            first = closest_note(midpoint)
            self.assertIn(str(first), {str(low), str(high)})
            for _ in range(5):
                self.assertEqual(closest_note(midpoint), first)

    def test_exact_half_semitone_rounds_up(self):
        for offset, expected in [(0.5, "A#4"), (2.5, "C5"), (-0.5, "A4"), (-1.5, "G#4")]:
            with self.subTest(offset=offset):
                with mock.patch("tonal_tuner.note_utils.semitones_from_a4", return_value=offset):
                    self.assertEqual(str(closest_note(440.0)), expected)

    def test_just_either_side_of_midpoint(self):
        low, high = get_note_table()[57], get_note_table()[58]
        midpoint = math.sqrt(low.frequency * high.frequency)
        self.assertEqual(str(closest_note(midpoint * 0.999)), "A4")
        self.assertEqual(str(closest_note(midpoint * 1.001)), "A#4")


class TestCents(unittest.TestCase):
    def test_sign_convention(self):
        self.assertGreater(cents(466.16, 440.0), 0)
        self.assertLess(cents(415.30, 440.0), 0)
        self.assertEqual(cents(440.0, 440.0), 0)

    def test_semitone_and_octave(self):
        self.assertAlmostEqual(cents(466.16, 440.0), 100.0, delta=0.1)
        self.assertAlmostEqual(cents(880.0, 440.0), 1200.0)
        self.assertAlmostEqual(cents(220.0, 440.0), -1200.0)

    def test_not_clamped(self):
        self.assertAlmostEqual(cents(1760.0, 440.0), 2400.0)


class TestNoteParsing(unittest.TestCase):
    def test_parse_with_octave(self):
        target = parse_note("E2")
        self.assertEqual((target.note_name, target.octave), ("E", 2))
        self.assertAlmostEqual(target.frequency, 82.41, places=2)

    def test_parse_flat_and_lowercase(self):
        self.assertEqual(str(parse_note("bb3")), "A#3")
        self.assertEqual(str(parse_note("Gb2")), "F#2")

    def test_default_octave(self):
        self.assertEqual(str(parse_note("G")), "G4")
        self.assertEqual(str(parse_note("G", default_octave=3)), "G3")

    def test_invalid(self):
        for text in ["H2", "E10", "", "E-1", "C9"]:
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    parse_note(text)

    def test_convert_notation(self):
        self.assertEqual(convert_note_notation("F#2", to_flats=True), "Gb2")
        self.assertEqual(convert_note_notation("Gb2", to_flats=False), "F#2")
        self.assertEqual(convert_note_notation("E4", to_flats=True), "E4")
        self.assertEqual(convert_note_notation(""), "")

    def test_target_for(self):
        target = target_for("Bb", 3)
        self.assertEqual(target.note_name, "A#")
        self.assertAlmostEqual(target.frequency, 233.08, places=2)

        custom = target_for("A", 4, 432.0)
        self.assertEqual(custom.frequency, 432.0)

        with self.assertRaises(ValueError):
            target_for("A", 4, -1.0)
        with self.assertRaises(ValueError):
            target_for("A", -1, 440.0)


if __name__ == "__main__":
    unittest.main()
