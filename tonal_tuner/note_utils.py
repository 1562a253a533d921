"""Utility functions for working with musical notes and frequencies."""

import math
import re
from typing import Optional, Union

import numpy as np

from .logger import get_logger
from .note_table import (
    A4_FREQUENCY,
    A4_INDEX,
    FLAT_TO_SHARP,
    NOTE_NAMES,
    SEMITONES_PER_OCTAVE,
    SHARP_TO_FLAT,
    TABLE_SIZE,
    entry_for,
    get_note_table,
    normalize_note_name,
)
from .note_types import OutOfRange, TunerTarget

# Get logger for this module
logger = get_logger(__name__)

CENTS_PER_OCTAVE = 1200.0
DEFAULT_OCTAVE = 4

# This pattern matches:
# - Note name (A-G, case insensitive)
# - Optional accidental (# or b)
# - Optional octave number (0-9)
NOTE_PATTERN = re.compile(r"^([A-Ga-g][#b]?)([0-9]?)$")


def semitones_from_a4(frequency: float) -> float:
    """Fractional number of equal-tempered semitones between a frequency and A4."""
    return float(SEMITONES_PER_OCTAVE * np.log2(frequency / A4_FREQUENCY))


def closest_note(frequency: float) -> Union[TunerTarget, OutOfRange]:
    """Find the note table entry nearest to a frequency.

    The semitone offset is rounded half up, so a frequency exactly at the
    midpoint between two notes resolves to the upper one.

    Args:
        frequency: Frequency in Hz

    Returns:
        The nearest note with its canonical table frequency, or OutOfRange when
        the frequency falls outside the table
    """
    if not np.isfinite(frequency) or frequency <= 0:
        logger.debug(f"Cannot resolve non-positive frequency: {frequency}")
        return OutOfRange(frequency)

    index = math.floor(semitones_from_a4(frequency) + 0.5) + A4_INDEX
    if index < 0 or index >= TABLE_SIZE:
        logger.debug(f"Note index {index} out of range for frequency {frequency:.2f}Hz")
        return OutOfRange(frequency)

    entry = get_note_table()[index]
    return TunerTarget(entry.name, entry.octave, entry.frequency)


def cents(detected: float, target: float) -> float:
    """Signed distance from target to detected in cents; positive means sharp."""
    return float(CENTS_PER_OCTAVE * np.log2(detected / target))


def convert_note_notation(note_name: str, to_flats: bool = False) -> str:
    """Convert a note name between sharp and flat notation.

    Args:
        note_name: The note name to convert (e.g., 'F#2' or 'Gb2')
        to_flats: If True, convert to flats (e.g., 'Gb2'), otherwise to sharps (e.g., 'F#2')

    Returns:
        str: The converted note name, or original if no conversion needed

    Examples:
        >>> convert_note_notation('F#2', to_flats=True)
        'Gb2'
        >>> convert_note_notation('Gb2', to_flats=False)
        'F#2'
    """
    if not note_name or not isinstance(note_name, str):
        return note_name or ""

    note_part = "".join(c for c in note_name if not c.isdigit() and c != "-").strip()
    octave_part = note_name[len(note_part) :]

    if to_flats and note_part in SHARP_TO_FLAT:
        return f"{SHARP_TO_FLAT[note_part]}{octave_part}"
    elif not to_flats and note_part in FLAT_TO_SHARP:
        return f"{FLAT_TO_SHARP[note_part]}{octave_part}"

    return note_name


def get_note_name(freq: float, use_flats: bool = False) -> str:
    """Convert frequency to note name using Scientific Pitch Notation (SPN).

    Args:
        freq: Frequency in Hz
        use_flats: If True, use flat notes (e.g., 'Bb') instead of sharps (e.g., 'A#')

    Returns:
        Note name with octave in SPN (e.g., 'A4', 'C#4', 'Bb3'), or '---' when
        the frequency is outside the note table
    """
    note = closest_note(freq)
    if isinstance(note, OutOfRange):
        return "---"
    return convert_note_notation(str(note), to_flats=use_flats)


def parse_note(text: str, default_octave: int = DEFAULT_OCTAVE) -> TunerTarget:
    """Parse a note such as 'E2', 'bb3' or 'G' into a tuning target.

    Args:
        text: Note name with optional accidental and octave
        default_octave: Octave to use when none is given

    Returns:
        The target with its canonical table frequency

    Raises:
        ValueError: If the text is not a note or the note is outside the table
    """
    match = NOTE_PATTERN.match(text.strip()) if isinstance(text, str) else None
    if not match:
        raise ValueError(f"Invalid note format: {text!r}")

    name, octave_text = match.groups()
    octave = int(octave_text) if octave_text else default_octave
    entry = entry_for(name, octave)
    return TunerTarget(entry.name, entry.octave, entry.frequency)


def target_for(name: str, octave: int, frequency: Optional[float] = None) -> TunerTarget:
    """Build a tuning target, defaulting its frequency to the table value.

    Raises:
        ValueError: If the note is unknown or the frequency is not positive
    """
    pitch_class = normalize_note_name(name)
    if octave < 0:
        raise ValueError(f"Octave must not be negative, got {octave}")
    if frequency is None:
        frequency = entry_for(pitch_class, octave).frequency
    elif not np.isfinite(frequency) or frequency <= 0:
        raise ValueError(f"Target frequency must be positive, got {frequency}")
    return TunerTarget(pitch_class, int(octave), float(frequency))


__all__ = [
    "NOTE_NAMES",
    "closest_note",
    "cents",
    "convert_note_notation",
    "get_note_name",
    "parse_note",
    "semitones_from_a4",
    "target_for",
]
