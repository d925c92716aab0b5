"""
Tab-delimited record format.

One song per line:

    <title>\t<artist>\t<album>\t<duration>

`album` may be empty (two consecutive tabs). A three-field line is read as
title, artist, duration with an empty album. There is no header and no
escaping: a field containing a tab or a newline breaks the record boundary.

The line reader/writer here are the only places that touch the filesystem.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from musicdb.core import DataFormatError, DurationFormatError, ResourceError
from musicdb.core.song import FIELD_SEPARATOR, Song, parse_duration

logger = logging.getLogger(__name__)

LINE_TERMINATOR = "\n"


def format_record(song: Song) -> str:
    """Render a song as a record line, without terminator."""
    return str(song)


def parse_record(line: str, *, source: str | None = None, line_no: int | None = None) -> Song:
    """
    Parse one record line into a `Song`.

    Args:
        line: The line, with or without its terminator.
        source: Where the line came from (used in error messages).
        line_no: 1-based line number (used in error messages).

    Raises:
        DataFormatError: If the line does not have 3 or 4 fields or the
            duration is not `MM:SS`.
    """
    parts = line.rstrip("\r\n").split(FIELD_SEPARATOR)
    if len(parts) == 4:
        title, artist, album, duration = parts
    elif len(parts) == 3:
        title, artist, duration = parts
        album = ""
    else:
        raise DataFormatError(
            f"expected 4 tab-separated fields, got {len(parts)}",
            source=source,
            line_no=line_no,
        )

    try:
        parse_duration(duration)
    except DurationFormatError as e:
        raise DurationFormatError(str(e), source=source, line_no=line_no) from e

    return Song(title, artist, album, duration)


def iter_lines(path: str | Path, *, encoding: str = "utf-8") -> Iterator[str]:
    """
    Lazily yield the lines of a text file without their terminators.

    The file stays open only while the generator is being consumed and is
    closed on every exit path, including an exception raised by the consumer.

    Raises:
        ResourceError: If the file cannot be opened or read.
    """
    p = Path(path)
    try:
        with p.open("r", encoding=encoding, newline="") as f:
            for line in f:
                yield line.rstrip("\r\n")
    except OSError as e:
        raise ResourceError(f"cannot read {p}: {e}") from e
    except UnicodeDecodeError as e:
        raise DataFormatError(f"{p}: not valid {encoding} text: {e}") from e


def write_lines(path: str | Path, lines: Iterable[str], *, encoding: str = "utf-8") -> int:
    """
    Write each line followed by a newline, replacing the file if it exists.

    Returns:
        Number of lines written.

    Raises:
        ResourceError: If the file cannot be opened or written.
    """
    p = Path(path)
    count = 0
    try:
        with p.open("w", encoding=encoding, newline="") as f:
            for line in lines:
                f.write(line)
                f.write(LINE_TERMINATOR)
                count += 1
    except OSError as e:
        raise ResourceError(f"cannot write {p}: {e}") from e
    logger.debug("Wrote %d lines to %s", count, p)
    return count
