"""The equal-tempered note table shared by every Tonal Tuner component."""

from functools import lru_cache
from typing import Dict, List, Tuple

from .logger import get_logger
from .note_types import NoteTableEntry, TunerTarget

logger = get_logger(__name__)

NOTE_NAMES: Tuple[str, ...] = (
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
)

# Mapping between sharp and flat note names
SHARP_TO_FLAT: Dict[str, str] = {
    "C#": "Db",
    "D#": "Eb",
    "F#": "Gb",
    "G#": "Ab",
    "A#": "Bb",
}

FLAT_TO_SHARP: Dict[str, str] = {v: k for k, v in SHARP_TO_FLAT.items()}

SEMITONES_PER_OCTAVE = 12
OCTAVE_COUNT = 9  # C0 to B8
TABLE_SIZE = OCTAVE_COUNT * SEMITONES_PER_OCTAVE

A4_FREQUENCY = 440.0
A4_INDEX = 4 * SEMITONES_PER_OCTAVE + NOTE_NAMES.index("A")  # 57

# Open strings, low to high
STANDARD_GUITAR_TUNING: List[Tuple[str, int]] = [
    ("E", 2),
    ("A", 2),
    ("D", 3),
    ("G", 3),
    ("B", 3),
    ("E", 4),
]


def build_note_table() -> Tuple[NoteTableEntry, ...]:
    """Build the chromatic note table from C0 to B8.

    Returns:
        Entries ordered by index, where index i is octave i // 12 and
        pitch class i % 12, tuned to A4 = 440 Hz
    """
    entries = []
    for index in range(TABLE_SIZE):
        octave, pitch_class = divmod(index, SEMITONES_PER_OCTAVE)
        frequency = A4_FREQUENCY * 2.0 ** ((index - A4_INDEX) / SEMITONES_PER_OCTAVE)
        entries.append(
            NoteTableEntry(name=NOTE_NAMES[pitch_class], frequency=frequency, octave=octave)
        )
    return tuple(entries)


@lru_cache(maxsize=None)
def get_note_table() -> Tuple[NoteTableEntry, ...]:
    """Get the process-wide note table, building it on first use."""
    table = build_note_table()
    logger.debug(
        f"Note table built: {len(table)} entries, "
        f"{table[0].frequency:.2f}Hz - {table[-1].frequency:.2f}Hz"
    )
    return table


def normalize_note_name(name: str) -> str:
    """Return the sharp spelling of a pitch class (e.g., 'bb' -> 'A#').

    Raises:
        ValueError: If the name is not one of the twelve pitch classes
    """
    if not name or not isinstance(name, str):
        raise ValueError(f"Invalid note name: {name!r}")

    cleaned = name.strip()
    if not cleaned:
        raise ValueError(f"Invalid note name: {name!r}")
    cleaned = cleaned[0].upper() + cleaned[1:]
    cleaned = FLAT_TO_SHARP.get(cleaned, cleaned)
    if cleaned not in NOTE_NAMES:
        raise ValueError(f"Invalid note name: {name!r}")
    return cleaned


def note_index(name: str, octave: int) -> int:
    """Get the table index of a note.

    Args:
        name: Pitch class, sharp or flat (e.g., 'F#' or 'Gb')
        octave: Octave number (0-8)

    Returns:
        The index into the note table

    Raises:
        ValueError: If the note name is invalid or the note is outside the table
    """
    index = octave * SEMITONES_PER_OCTAVE + NOTE_NAMES.index(normalize_note_name(name))
    if not 0 <= index < TABLE_SIZE:
        raise ValueError(f"Note {name}{octave} is outside the note table")
    return index


def entry_for(name: str, octave: int) -> NoteTableEntry:
    """Look up the table entry for a note name and octave."""
    return get_note_table()[note_index(name, octave)]


def guitar_string_targets() -> List[TunerTarget]:
    """Tuning targets for the open strings of a guitar in standard tuning."""
    targets = []
    for name, octave in STANDARD_GUITAR_TUNING:
        entry = entry_for(name, octave)
        targets.append(TunerTarget(entry.name, entry.octave, entry.frequency))
    return targets
