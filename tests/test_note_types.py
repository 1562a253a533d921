import dataclasses

import pytest

from tonal_tuner.note_types import (
    DetectionResult,
    NoSignal,
    NoSignalReason,
    OutOfRange,
    TunerTarget,
    TuningState,
)


def reading(cents):
    return DetectionResult(frequency=82.41, note_name="E", octave=2, cents=cents)


@pytest.mark.parametrize(
    "cents, expected",
    [
        (0.0, TuningState.IN_TUNE),
        (5.0, TuningState.IN_TUNE),
        (-5.0, TuningState.IN_TUNE),
        (5.1, TuningState.CLOSE),
        (-20.0, TuningState.CLOSE),
        (20.5, TuningState.OUT_OF_TUNE),
        (-100.0, TuningState.OUT_OF_TUNE),
    ],
)
def test_tuning_state(cents, expected):
    assert reading(cents).tuning_state() is expected


def test_tuning_state_custom_tolerance():
    assert reading(8.0).tuning_state(tolerance=10.0) is TuningState.IN_TUNE


@pytest.mark.parametrize(
    "cents, angle",
    [(0.0, 0.0), (10.0, 9.0), (-40.0, -36.0), (50.0, 45.0), (-300.0, -45.0)],
)
def test_needle_angle_is_clamped(cents, angle):
    assert reading(cents).needle_angle() == pytest.approx(angle)


def test_result_str():
    assert str(reading(3.4)) == "E2 82.4Hz +3 cents"
    assert str(reading(-12.6)) == "E2 82.4Hz -13 cents"


def test_results_are_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        reading(0.0).cents = 1.0


def test_no_signal_and_out_of_range_are_falsy():
    assert not NoSignal(NoSignalReason.NO_PEAK)
    assert not OutOfRange(9000.0)
    assert str(TunerTarget("A", 4, 440.0)) == "A4"
