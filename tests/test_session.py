import unittest

import numpy as np
import pytest

from tonal_tuner.core.errors import ConfigurationError
from tonal_tuner.detection.selection import SelectionState, TunerContext
from tonal_tuner.detection.session import DetectionSession, SessionState
from tonal_tuner.note_types import (
    DetectionResult,
    Mode,
    NoSignal,
    NoSignalReason,
    StatusKind,
    TunerStatus,
    TunerTarget,
)
from tonal_tuner.note_utils import target_for

from audio_fixtures import BUFFER_SIZE, SAMPLE_RATE, FixedEstimator, sine


class TestDetectionSession(unittest.TestCase):
    def setUp(self):
        self.session = DetectionSession()
        self.results = []
        self.statuses = []
        self.session.events.on_result(lambda r, t: self.results.append((r, t)))
        self.session.events.on_status(lambda s, t: self.statuses.append((s, t)))

    def test_idle_ignores_frames(self):
        self.assertEqual(self.session.state, SessionState.IDLE)
        self.assertIsNone(self.session.process_frame(sine(82.41), SAMPLE_RATE))
        self.assertEqual(self.results, [])
        self.assertEqual(self.statuses, [])

    def test_auto_mode_resolves_low_e(self):
        self.session.start()
        result = self.session.process_frame(sine(82.41), SAMPLE_RATE, timestamp=1.5)

        self.assertIsInstance(result, DetectionResult)
        self.assertEqual((result.note_name, result.octave), ("E", 2))
        self.assertAlmostEqual(result.frequency, 82.41, delta=0.83)
        self.assertLess(abs(result.cents), 20)
        self.assertAlmostEqual(result.target_frequency, 82.4069, places=3)
        self.assertTrue(result.has_signal)
        self.assertEqual(self.results, [(result, 1.5)])

    def test_auto_mode_follows_the_signal(self):
        self.session.start()
        first = self.session.process_frame(sine(110.0), SAMPLE_RATE)
        second = self.session.process_frame(sine(196.0), SAMPLE_RATE)
        self.assertEqual(str(first).split()[0], "A2")
        self.assertEqual(str(second).split()[0], "G3")

    def test_manual_target_is_kept(self):
        self.session.selection.set_target("E", 2)
        self.session.start()

        # F2 played against a pinned E2 stays on E2, about a semitone sharp
        result = self.session.process_frame(sine(87.31), SAMPLE_RATE)
        self.assertEqual((result.note_name, result.octave), ("E", 2))
        self.assertGreater(result.cents, 80)
        self.assertLess(result.cents, 120)

    def test_manual_target_custom_frequency(self):
        session = DetectionSession(estimator=FixedEstimator(432.0))
        session.selection.set_target("A", 4, 432.0)
        session.start()
        result = session.process_frame(np.zeros(BUFFER_SIZE), SAMPLE_RATE)
        self.assertEqual(result.cents, 0.0)
        self.assertEqual(result.target_frequency, 432.0)

    def test_manual_without_target(self):
        self.session.selection.set_mode(Mode.MANUAL)
        self.session.start()
        status = self.session.process_frame(sine(110.0), SAMPLE_RATE)

        self.assertIsInstance(status, TunerStatus)
        self.assertEqual(status.kind, StatusKind.NO_TARGET)
        self.assertAlmostEqual(status.frequency, 110.0, delta=1.1)
        self.assertEqual(self.statuses[0][0], status)

    def test_silence_reports_no_signal(self):
        self.session.start()
        status = self.session.process_frame(np.zeros(BUFFER_SIZE), SAMPLE_RATE)
        self.assertEqual(status.kind, StatusKind.NO_SIGNAL)
        self.assertIsNone(status.frequency)
        self.assertEqual(self.results, [])

    def test_out_of_range_in_auto_mode(self):
        session = DetectionSession(estimator=FixedEstimator(9000.0))
        session.start()
        status = session.process_frame(np.zeros(BUFFER_SIZE), SAMPLE_RATE)
        self.assertEqual(status.kind, StatusKind.OUT_OF_RANGE)
        self.assertEqual(status.frequency, 9000.0)

    def test_out_of_range_with_manual_target(self):
        # A pinned target is compared directly, whatever the detected frequency
        session = DetectionSession(estimator=FixedEstimator(9000.0))
        session.selection.set_target("E", 4)
        session.start()
        result = session.process_frame(np.zeros(BUFFER_SIZE), SAMPLE_RATE)
        self.assertIsInstance(result, DetectionResult)
        self.assertGreater(result.cents, 1200)

    def test_explicit_context_wins(self):
        self.session.selection.set_target("E", 2)
        self.session.start()
        result = self.session.process_frame(sine(110.0), SAMPLE_RATE, context=TunerContext())
        self.assertEqual((result.note_name, result.octave), ("A", 2))

    def test_selection_change_applies_next_tick(self):
        self.session.start()
        first = self.session.process_frame(sine(110.0), SAMPLE_RATE)
        self.session.selection.set_target("B", 1)
        second = self.session.process_frame(sine(110.0), SAMPLE_RATE)
        self.session.selection.set_mode(Mode.AUTO)
        third = self.session.process_frame(sine(110.0), SAMPLE_RATE)

        self.assertEqual(first.note_name, "A")
        self.assertEqual((second.note_name, second.octave), ("B", 1))
        self.assertEqual(third.note_name, "A")

    def test_state_changes_are_published(self):
        changes = []
        self.session.events.on_state_changed(lambda old, new: changes.append((old, new)))

        self.session.start()
        self.session.start()
        self.session.stop()
        self.assertEqual(
            changes,
            [
                (SessionState.IDLE, SessionState.LISTENING),
                (SessionState.LISTENING, SessionState.IDLE),
            ],
        )

    def test_capture_lost_returns_to_idle(self):
        self.session.start()
        self.session.capture_lost("device unplugged")
        self.assertFalse(self.session.is_listening())
        self.assertIsNone(self.session.process_frame(sine(110.0), SAMPLE_RATE))

    def test_configuration_error_propagates(self):
        self.session.start()
        with self.assertRaises(ConfigurationError):
            self.session.process_frame(sine(110.0, length=1000), SAMPLE_RATE)
        with self.assertRaises(ConfigurationError):
            self.session.process_frame(sine(110.0), 0)
        self.assertEqual(self.results, [])

    def test_failing_listener_does_not_break_tick(self):
        def broken(result, timestamp):
            raise RuntimeError("listener failed")

        self.session.events.on_result(broken)
        self.session.start()
        result = self.session.process_frame(sine(110.0), SAMPLE_RATE)
        self.assertIsInstance(result, DetectionResult)
        self.assertEqual(len(self.results), 1)


def test_evaluate_does_not_publish():
    session = DetectionSession(estimator=FixedEstimator(440.0))
    seen = []
    session.events.on_result(lambda r, t: seen.append(r))

    result = session.evaluate(np.zeros(BUFFER_SIZE), SAMPLE_RATE, TunerContext())
    assert str(result) == "A4 440.0Hz +0 cents"
    assert seen == []


@pytest.mark.parametrize(
    "context, expected",
    [
        (TunerContext(), StatusKind.NO_SIGNAL),
        (TunerContext(Mode.MANUAL), StatusKind.NO_SIGNAL),
        (TunerContext(Mode.MANUAL, TunerTarget("E", 2, 82.41)), StatusKind.NO_SIGNAL),
    ],
)
def test_no_signal_wins_in_every_mode(context, expected):
    session = DetectionSession(estimator=FixedEstimator(NoSignal(NoSignalReason.TOO_QUIET)))
    status = session.evaluate(np.zeros(BUFFER_SIZE), SAMPLE_RATE, context)
    assert status.kind is expected


def test_session_shares_selection():
    selection = SelectionState()
    session = DetectionSession(selection=selection)
    selection.select(target_for("D", 3))
    assert session.selection.target.note_name == "D"
    assert session.selection.mode is Mode.MANUAL
