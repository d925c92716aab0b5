"""
Song record.

A `Song` is a plain immutable value: two songs are the same song when all four
fields match exactly. There is no identity beyond that.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields

from musicdb.core import DurationFormatError, PreconditionViolation

FIELD_SEPARATOR = "\t"

_DURATION_RE = re.compile(r"(\d+):(\d+)")


@dataclass(frozen=True, slots=True)
class Song:
    """
    A music track record.

    `duration` is kept as the `MM:SS` text it was created with; use
    `duration_seconds()` when a number is needed (e.g. for sorting by length).
    """

    title: str
    artist: str
    album: str
    duration: str

    def __post_init__(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) is None:
                raise PreconditionViolation(f"Song.{f.name} must not be None")

    @classmethod
    def from_seconds(cls, title: str, artist: str, album: str, seconds: int) -> Song:
        """Create a song from a numeric duration, rendered as zero-padded MM:SS."""
        if seconds < 0:
            raise PreconditionViolation(f"duration must be >= 0, got {seconds}")
        minutes, secs = divmod(int(seconds), 60)
        return cls(title, artist, album, f"{minutes:02d}:{secs:02d}")

    def duration_seconds(self) -> int:
        """
        Convert the `MM:SS` duration to total seconds.

        Raises:
            DurationFormatError: If the duration is not `digits:digits`.
        """
        return parse_duration(self.duration)

    def __str__(self) -> str:
        return FIELD_SEPARATOR.join((self.title, self.artist, self.album, self.duration))


def parse_duration(text: str) -> int:
    """
    Parse `MM:SS` text into seconds.

    Minutes are not capped at 59; seconds are taken as written.
    """
    m = _DURATION_RE.fullmatch(text)
    if m is None:
        raise DurationFormatError(f"invalid duration {text!r}, expected MM:SS")
    return int(m.group(1)) * 60 + int(m.group(2))
