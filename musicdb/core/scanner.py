"""
Audio tag import for musicdb.

Walks a folder, reads title/artist/album/duration from each audio file with
mutagen and turns them into `Song` records. Scanning is synchronous and
returns a pure in-memory result; adding the songs to a database is the
caller's job (see `MusicDatabase.import_folder`).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mutagen import File as mutagen_file
from mutagen import MutagenError

from musicdb.core import DataFormatError, ResourceError
from musicdb.core.song import Song

logger = logging.getLogger(__name__)


DEFAULT_AUDIO_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".mp3",
        ".flac",
        ".ogg",
        ".opus",
        ".m4a",
        ".aac",
        ".wav",
        ".aiff",
        ".aif",
        ".wma",
    }
)


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """Configuration for scanning a music folder."""

    root: Path
    extensions: frozenset[str] = DEFAULT_AUDIO_EXTENSIONS
    follow_symlinks: bool = False


@dataclass(frozen=True, slots=True)
class ScanIssue:
    path: Path
    message: str


@dataclass(frozen=True, slots=True)
class ScanResult:
    songs: list[Song]
    issues: list[ScanIssue]


def _clean_str(value: str | None) -> str | None:
    if value is None:
        return None
    s = value.strip()
    return s if s else None


def _first_text(value: Any) -> str | None:
    """
    Mutagen returns different shapes depending on container/tag type:
    - ID3 frames
    - lists of strings
    - plain strings
    - objects with `.text`
    We normalize to a single string (first item if multiple).
    """
    if value is None:
        return None

    if isinstance(value, (list, tuple)):
        if not value:
            return None
        return _first_text(value[0])

    # Mutagen ID3 frames often have `.text` list
    text = getattr(value, "text", None)
    if text is not None:
        return _first_text(text)

    return _clean_str(str(value))


def _tags_get(tags: Any, keys: Iterable[str]) -> Any:
    if not tags:
        return None
    for k in keys:
        if k in tags:
            return tags[k]
    return None


def _format_duration(length: Any) -> str:
    """Render a mutagen length (float seconds) as MM:SS, rounding to the nearest second."""
    if not isinstance(length, (int, float)) or length <= 0:
        return "00:00"
    minutes, seconds = divmod(int(round(length)), 60)
    return f"{minutes:02d}:{seconds:02d}"


def extract_song(path: Path) -> Song:
    """
    Read a `Song` from an audio file's tags.

    Title falls back to the file stem; a missing artist or album becomes "".
    Tabs and newlines in tag values are replaced by spaces so the song can be
    written to a record file.

    Raises:
        DataFormatError: If mutagen cannot read the file.
    """
    try:
        audio = mutagen_file(path)
    except MutagenError as e:
        raise DataFormatError(f"{path}: {e}") from e
    if audio is None:
        raise DataFormatError(f"{path}: unsupported or unreadable audio file")

    tags = getattr(audio, "tags", None)

    # Keys: ID3=TIT2, Vorbis=title, MP4=©nam
    title = _first_text(_tags_get(tags, ("TIT2", "title", "TITLE", "©nam"))) or path.stem
    # Keys: ID3=TPE1, Vorbis=artist, MP4=©ART
    artist = _first_text(_tags_get(tags, ("TPE1", "artist", "ARTIST", "©ART"))) or ""
    # Keys: ID3=TALB, Vorbis=album, MP4=©alb
    album = _first_text(_tags_get(tags, ("TALB", "album", "ALBUM", "©alb"))) or ""

    info = getattr(audio, "info", None)
    duration = _format_duration(getattr(info, "length", None))

    return Song(_flatten(title), _flatten(artist), _flatten(album), duration)


def _flatten(value: str) -> str:
    return " ".join(value.replace("\t", " ").splitlines())


def iter_audio_files(config: ScanConfig) -> Iterator[Path]:
    """
    Yield audio file paths under `config.root`, sorted case-insensitively.

    Raises:
        ResourceError: If the root does not exist or is not a directory.
    """
    root = config.root
    if not root.exists():
        raise ResourceError(f"music folder not found: {root}")
    if not root.is_dir():
        raise ResourceError(f"not a directory: {root}")

    paths: list[Path] = []
    for p in root.rglob("*"):
        try:
            if not config.follow_symlinks and p.is_symlink():
                continue
            if not p.is_file():
                continue
            if p.suffix.lower() not in config.extensions:
                continue
            paths.append(p)
        except OSError:
            # Ignore broken permissions/paths during walk.
            continue

    paths.sort(key=lambda p: str(p).lower())
    yield from paths


def scan_music_folder(config: ScanConfig) -> ScanResult:
    """
    Scan a folder for audio files and extract a `Song` from each.

    Files that fail to decode are reported as `ScanIssue`s instead of
    stopping the scan.
    """
    songs: list[Song] = []
    issues: list[ScanIssue] = []

    for path in iter_audio_files(config):
        try:
            songs.append(extract_song(path))
        except Exception as e:  # noqa: BLE001 - a bad file is an issue, not a failure
            msg = f"{type(e).__name__}: {e}"
            issues.append(ScanIssue(path=path, message=msg))
            logger.warning("Scan issue for %s: %s", path, msg)

    logger.info(
        "Scanned %s: %d songs, %d issues", config.root, len(songs), len(issues)
    )
    return ScanResult(songs=songs, issues=issues)
