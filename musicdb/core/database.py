"""
Public music database class.

`MusicDatabase` is a `KernelDatabase` that also offers every secondary
operation as a method. The methods only forward to
`musicdb.core.secondary`, which sees the database through the kernel
protocol, so secondary behavior never depends on how songs are stored.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TextIO

from musicdb.config import get_config
from musicdb.core import secondary
from musicdb.core.kernel import KernelDatabase
from musicdb.core.scanner import ScanConfig, scan_music_folder
from musicdb.core.secondary import SearchField, SongComparator
from musicdb.core.song import Song


class MusicDatabase(KernelDatabase):
    """
    Ordered collection of songs with search, sort, split and file I/O.

    Args:
        capacity: Optional capacity hint. Defaults to the configured
            `initial_capacity`.
        kind: Storage kind ("array" or "hash"). Defaults to the configured
            `default_kind`.
    """

    def __init__(self, capacity: int | None = None, *, kind: str | None = None) -> None:
        config = get_config()
        if capacity is None and config.initial_capacity:
            capacity = config.initial_capacity
        super().__init__(capacity, kind=kind or config.default_kind)

    @classmethod
    def from_file(cls, path: str | Path, *, kind: str | None = None) -> MusicDatabase:
        """Create a database holding the songs recorded in `path`."""
        db = cls(kind=kind)
        db.read_from_file(path)
        return db

    def append(self, other: KernelDatabase) -> int:
        """Add `other`'s songs that are not already present. Returns the count added."""
        return secondary.append(self, other)

    def add_entries(self, songs: Iterable[Song]) -> int:
        """Add every song in order, duplicates included."""
        return secondary.add_entries(self, songs)

    def remove_entry(self, song: Song) -> Song:
        """Remove and return the first entry equal to `song`."""
        return secondary.remove_entry(self, song)

    def contains(self, song: Song) -> bool:
        return secondary.contains(self, song)

    def get_entries(self, field: SearchField, value: str) -> list[Song]:
        return secondary.get_entries(self, field, value)

    def remove_entries(self, field: SearchField, value: str) -> list[Song]:
        return secondary.remove_entries(self, field, value)

    def split(self, field: SearchField, value: str) -> MusicDatabase:
        """Move matching songs into a new database of the same kind and return it."""
        return secondary.split(self, field, value)

    def sort(self, comparator: SongComparator) -> None:
        secondary.sort(self, comparator)

    def read_from_file(self, path: str | Path) -> int:
        """Read songs from a tab-delimited file, skipping ones already present."""
        return secondary.read_from_file(self, path, encoding=get_config().encoding)

    def write_to_file(self, path: str | Path) -> int:
        """Write all songs to a tab-delimited file, replacing it."""
        return secondary.write_to_file(self, path, encoding=get_config().encoding)

    def import_folder(self, root: str | Path) -> int:
        """
        Add songs read from the audio tags of files under `root`.

        Songs already present are skipped. Files that cannot be read are
        logged and skipped.

        Returns:
            Number of songs added.
        """
        result = scan_music_folder(
            ScanConfig(root=Path(root), extensions=get_config().audio_extensions)
        )
        scanned = self.new_instance()
        scanned.add_entries(result.songs)
        return self.append(scanned)

    def to_text(self) -> str:
        return secondary.to_text(self)

    def equals(self, other: object) -> bool:
        return secondary.equals(self, other)

    def print_song(self, song: Song, file: TextIO | None = None) -> None:
        secondary.print_song(song, file)

    def print_songs(self, songs: Sequence[Song], file: TextIO | None = None) -> None:
        secondary.print_songs(songs, file)

    def __contains__(self, song: object) -> bool:
        return isinstance(song, Song) and self.contains(song)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KernelDatabase):
            return NotImplemented
        return self.equals(other)

    # Mutable; not hashable.
    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return self.to_text()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, size={self.size()})"
