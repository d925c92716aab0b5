"""
Secondary database operations.

Every function here takes a `MusicDatabaseKernel` and is written purely in
terms of its primitives (`add_entry`, `remove_entry_by_order`,
`get_entry_by_order`, `size`, `new_instance`, iteration). None of them reach
into a database's storage, so they work for any storage kind.

`MusicDatabase` (see `musicdb.core.database`) exposes these as methods.
"""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from functools import cmp_to_key
from pathlib import Path
from typing import TextIO, TypeVar

from musicdb.core import PreconditionViolation
from musicdb.core.kernel import MusicDatabaseKernel
from musicdb.core.records import LINE_TERMINATOR, format_record, iter_lines, parse_record, write_lines
from musicdb.core.song import Song

logger = logging.getLogger(__name__)

DB = TypeVar("DB", bound=MusicDatabaseKernel)

SongComparator = Callable[[Song, Song], int]


class SearchField(Enum):
    """Song fields that can be searched on."""

    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"

    def value_of(self, song: Song) -> str:
        """Return this field's value for `song`."""
        return getattr(song, self.value)


def _compare(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


def title_comparator(a: Song, b: Song) -> int:
    """Order by title, case-sensitive."""
    return _compare(a.title, b.title)


def artist_comparator(a: Song, b: Song) -> int:
    """Order by artist, case-sensitive."""
    return _compare(a.artist, b.artist)


def album_comparator(a: Song, b: Song) -> int:
    """Order by album, case-sensitive. Empty albums come first."""
    return _compare(a.album, b.album)


def length_comparator(a: Song, b: Song) -> int:
    """Order by duration in seconds."""
    return _compare(a.duration_seconds(), b.duration_seconds())


class Comparator(Enum):
    """Named comparators; members are callable like the functions they wrap."""

    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"
    LENGTH = "length"

    def __call__(self, a: Song, b: Song) -> int:
        return _COMPARATORS[self](a, b)


_COMPARATORS: dict[Comparator, SongComparator] = {
    Comparator.TITLE: title_comparator,
    Comparator.ARTIST: artist_comparator,
    Comparator.ALBUM: album_comparator,
    Comparator.LENGTH: length_comparator,
}


# =============================================================================
# Search
# =============================================================================


def contains(db: MusicDatabaseKernel, song: Song) -> bool:
    """Return True if some entry equals `song`."""
    for i in range(db.size()):
        if db.get_entry_by_order(i) == song:
            return True
    return False


def _matching_positions(db: MusicDatabaseKernel, field: SearchField, value: str) -> list[int]:
    return [i for i in range(db.size()) if field.value_of(db.get_entry_by_order(i)) == value]


def get_entries(db: MusicDatabaseKernel, field: SearchField, value: str) -> list[Song]:
    """Return every song whose `field` equals `value`, in storage order."""
    return [db.get_entry_by_order(i) for i in _matching_positions(db, field, value)]


# =============================================================================
# Mutation
# =============================================================================


def add_entries(db: MusicDatabaseKernel, songs: Iterable[Song]) -> int:
    """
    Add every song in order, keeping duplicates.

    Returns:
        Number of songs added.
    """
    count = 0
    for song in songs:
        db.add_entry(song)
        count += 1
    return count


def append(db: MusicDatabaseKernel, other: MusicDatabaseKernel) -> int:
    """
    Add each of `other`'s songs to `db` unless an equal song is already there.

    `other` is not modified. Appending a database to itself changes nothing.

    Returns:
        Number of songs added.
    """
    if other is db:
        return 0
    added = 0
    for i in range(other.size()):
        song = other.get_entry_by_order(i)
        if contains(db, song):
            logger.debug("append: skipping duplicate %s", song.title)
            continue
        db.add_entry(song)
        added += 1
    return added


def remove_entry(db: MusicDatabaseKernel, song: Song) -> Song:
    """
    Remove and return the first entry equal to `song`.

    Raises:
        PreconditionViolation: If no entry equals `song`.
    """
    for i in range(db.size()):
        if db.get_entry_by_order(i) == song:
            return db.remove_entry_by_order(i)
    raise PreconditionViolation(f"song not in database: {song.title!r} by {song.artist!r}")


def remove_entries(db: MusicDatabaseKernel, field: SearchField, value: str) -> list[Song]:
    """
    Remove every song whose `field` equals `value`.

    Matches are located first and removed from the highest position down, so
    earlier positions stay valid.

    Returns:
        The removed songs, in their original order.
    """
    positions = _matching_positions(db, field, value)
    removed = [db.remove_entry_by_order(i) for i in reversed(positions)]
    removed.reverse()
    if removed:
        logger.debug("Removed %d entries where %s == %r", len(removed), field.value, value)
    return removed


def split(db: DB, field: SearchField, value: str) -> DB:
    """
    Move every song whose `field` equals `value` into a new database.

    Returns:
        A database of the same kind as `db` holding the matches (empty if
        nothing matched).
    """
    matches = db.new_instance()
    add_entries(matches, remove_entries(db, field, value))
    return matches


def sort(db: MusicDatabaseKernel, comparator: SongComparator) -> None:
    """
    Reorder entries by `comparator` (negative/zero/positive, like `cmp`).

    The sort is stable: entries that compare equal keep their current order.
    If `comparator` raises, `db` is left unchanged.
    """
    songs = [db.get_entry_by_order(i) for i in range(db.size())]
    songs.sort(key=cmp_to_key(comparator))
    for _ in range(db.size()):
        db.remove_entry_by_order(db.size() - 1)
    add_entries(db, songs)


# =============================================================================
# Rendering & equality
# =============================================================================


def to_text(db: MusicDatabaseKernel) -> str:
    """Render every entry as a record line followed by a newline."""
    return "".join(
        format_record(db.get_entry_by_order(i)) + LINE_TERMINATOR for i in range(db.size())
    )


def equals(db: MusicDatabaseKernel, other: object) -> bool:
    """
    Return True if `other` holds the same songs in the same order.

    Storage kinds do not have to match.
    """
    if other is db:
        return True
    if not isinstance(other, MusicDatabaseKernel):
        return False
    if db.size() != other.size():
        return False
    return all(db.get_entry_by_order(i) == other.get_entry_by_order(i) for i in range(db.size()))


def print_song(song: Song, file: TextIO | None = None) -> None:
    """Write one song's record line to `file` (stdout by default)."""
    out = file if file is not None else sys.stdout
    out.write(format_record(song) + LINE_TERMINATOR)


def print_songs(songs: Sequence[Song], file: TextIO | None = None) -> None:
    """Write each song's record line to `file` (stdout by default)."""
    for song in songs:
        print_song(song, file)


# =============================================================================
# Files
# =============================================================================


def read_from_file(db: MusicDatabaseKernel, path: str | Path, *, encoding: str = "utf-8") -> int:
    """
    Add the songs recorded in a tab-delimited file.

    Lines whose song is already present are skipped; empty lines are ignored.
    Reading stops at the first malformed line; songs read before it stay.

    Returns:
        Number of songs added.

    Raises:
        DataFormatError: If a line cannot be parsed.
        ResourceError: If the file cannot be read.
    """
    source = str(path)
    added = 0
    skipped = 0
    with contextlib.closing(iter_lines(path, encoding=encoding)) as lines:
        for line_no, line in enumerate(lines, start=1):
            if not line:
                continue
            song = parse_record(line, source=source, line_no=line_no)
            if contains(db, song):
                skipped += 1
                continue
            db.add_entry(song)
            added += 1

    logger.info("Read %s: %d added, %d duplicates skipped", source, added, skipped)
    return added


def write_to_file(db: MusicDatabaseKernel, path: str | Path, *, encoding: str = "utf-8") -> int:
    """
    Write every entry to a tab-delimited file, replacing it if it exists.

    Returns:
        Number of records written.

    Raises:
        ResourceError: If the file cannot be written.
    """
    count = write_lines(
        path,
        (format_record(db.get_entry_by_order(i)) for i in range(db.size())),
        encoding=encoding,
    )
    logger.info("Wrote %d records to %s", count, path)
    return count
