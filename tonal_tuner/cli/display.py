"""Text rendering of tuner readings for the terminal."""

from typing import Optional

import click
import pyfiglet

from ..note_types import DetectionResult, StatusKind, TunerStatus, TuningState
from ..note_utils import convert_note_notation

METER_WIDTH = 41  # Odd so the centre mark is a single column
METER_RANGE_CENTS = 50.0

STATE_COLORS = {
    TuningState.IN_TUNE: "green",
    TuningState.CLOSE: "yellow",
    TuningState.OUT_OF_TUNE: "red",
}


def note_label(result: DetectionResult, use_flats: bool = False) -> str:
    """Note name with octave, e.g. 'E2' or 'Bb3'."""
    return convert_note_notation(f"{result.note_name}{result.octave}", to_flats=use_flats)


def cents_meter(cents: float, width: int = METER_WIDTH) -> str:
    """Draw a horizontal needle for a deviation, clamped to +/-50 cents."""
    half = width // 2
    clamped = max(-METER_RANGE_CENTS, min(METER_RANGE_CENTS, cents))
    position = half + int(round(clamped / METER_RANGE_CENTS * half))
    cells = ["-"] * width
    cells[half] = "|"
    cells[position] = "^"
    return "[" + "".join(cells) + "]"


def format_result(
    result: DetectionResult, use_flats: bool = False, tolerance: float = 5.0
) -> str:
    """One-line description of a reading, coloured by tuning state."""
    rounded = int(round(result.cents))
    sign = "+" if rounded >= 0 else ""
    state = result.tuning_state(tolerance)
    line = (
        f"{note_label(result, use_flats):<4} {result.frequency:7.1f} Hz "
        f"{sign}{rounded:>3} cents {cents_meter(result.cents)}"
    )
    return click.style(line, fg=STATE_COLORS[state])


def format_status(status: TunerStatus) -> str:
    if status.kind is StatusKind.OUT_OF_RANGE and status.frequency is not None:
        return f"--   {status.frequency:7.1f} Hz {status.message}"
    if status.kind is StatusKind.NO_TARGET and status.frequency is not None:
        return f"??   {status.frequency:7.1f} Hz {status.message}"
    return status.message


def format_outcome(outcome, use_flats: bool = False, tolerance: float = 5.0) -> str:
    if isinstance(outcome, DetectionResult):
        return format_result(outcome, use_flats, tolerance)
    return format_status(outcome)


def render_big_note(
    outcome: Optional[object], use_flats: bool = False, tolerance: float = 5.0
) -> str:
    """Render a reading as a figlet banner with the meter underneath."""
    if not isinstance(outcome, DetectionResult):
        banner = pyfiglet.figlet_format("--")
        message = format_status(outcome) if outcome is not None else "Waiting for audio..."
        return f"{banner}\n{message}"

    banner = pyfiglet.figlet_format(note_label(outcome, use_flats))
    return f"{banner}\n{format_result(outcome, use_flats, tolerance)}"
