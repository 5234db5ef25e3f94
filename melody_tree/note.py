"""Note value type and motif helpers.

A :class:`Note` is the smallest unit the evolutionary engine manipulates. It
stores a MIDI style pitch number and a duration in beats. Motifs are plain
tuples of notes so they can be shared between nodes without fear of
accidental mutation.

Example
-------
>>> from melody_tree.note import parse_motif, format_motif
>>> motif = parse_motif("60:0.25,64:0.5")
>>> format_motif(motif)
'60-0.25 64-0.5'
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

__all__ = [
    "Note",
    "Motif",
    "MIN_PITCH",
    "MAX_PITCH",
    "MIN_DURATION",
    "MAX_DURATION",
    "DEFAULT_MOTIF",
    "parse_motif",
    "format_motif",
    "clamp",
]

# Bounds applied by mutation. Notes constructed directly are not validated
# against them so callers may seed the tree with anything they like.
MIN_PITCH = 0
MAX_PITCH = 127
MIN_DURATION = 0.1
MAX_DURATION = 0.7


@dataclass(frozen=True)
class Note:
    """Single pitched event with a duration."""

    pitch: int
    duration: float

    def __str__(self) -> str:
        return f"{self.pitch}-{self.duration:g}"


Motif = Tuple[Note, ...]


DEFAULT_MOTIF: Motif = (
    Note(50, 0.1),
    Note(78, 0.7),
    Note(84, 0.7),
    Note(61, 0.4),
    Note(67, 0.1),
    Note(78, 0.1),
)


def clamp(value, lower, upper):
    """Return ``value`` limited to the closed range ``[lower, upper]``."""

    return max(lower, min(value, upper))


def format_motif(motif: Iterable[Note]) -> str:
    """Render ``motif`` as space separated ``pitch-duration`` tokens."""

    return " ".join(str(n) for n in motif)


_TOKEN = re.compile(r"^\s*(\d+)\s*:\s*(\d*\.?\d+)\s*$")


def parse_motif(text: str) -> Motif:
    """Parse ``"pitch:duration,pitch:duration"`` into a motif.

    Parameters
    ----------
    text:
        Comma separated ``pitch:duration`` pairs. Whitespace around tokens
        is ignored.

    Returns
    -------
    Motif
        Tuple of :class:`Note` objects in the order given.

    Raises
    ------
    ValueError
        If ``text`` is empty, a token is malformed, a pitch falls outside
        ``0-127`` or a duration is not positive.
    """

    if not text or not text.strip():
        raise ValueError("motif must contain at least one note")

    notes = []
    for token in text.split(","):
        match = _TOKEN.match(token)
        if not match:
            logging.error("Invalid motif token: %s", token)
            raise ValueError(f"Invalid motif token: {token.strip()!r}")
        pitch = int(match.group(1))
        duration = float(match.group(2))
        if not MIN_PITCH <= pitch <= MAX_PITCH:
            raise ValueError(f"pitch {pitch} outside {MIN_PITCH}-{MAX_PITCH}")
        if duration <= 0:
            raise ValueError("duration must be positive")
        notes.append(Note(pitch, duration))
    return tuple(notes)


def as_motif(notes: Sequence[Note]) -> Motif:
    """Return ``notes`` as an immutable motif, rejecting non-``Note`` items."""

    motif = tuple(notes)
    for item in motif:
        if not isinstance(item, Note):
            raise ValueError(f"motif items must be Note instances, got {item!r}")
    return motif
