"""
Tests for musicdb.core.scanner.

mutagen is replaced by small stand-ins so the tests do not need real audio
files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from mutagen import MutagenError

from musicdb.core import DataFormatError, ResourceError
from musicdb.core import scanner
from musicdb.core.database import MusicDatabase
from musicdb.core.scanner import (
    ScanConfig,
    _first_text,
    _format_duration,
    extract_song,
    iter_audio_files,
    scan_music_folder,
)
from musicdb.core.song import Song


@dataclass
class FakeInfo:
    length: float | None = None


@dataclass
class FakeAudio:
    tags: dict[str, Any] | None = field(default_factory=dict)
    info: FakeInfo = field(default_factory=FakeInfo)


@dataclass
class FakeFrame:
    """Shaped like a mutagen ID3 text frame."""

    text: list[str]


def touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


@pytest.fixture
def fake_files(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """Map file names to what mutagen should return (or raise) for them."""
    by_name: dict[str, Any] = {}

    def fake_mutagen_file(path: Path) -> Any:
        result = by_name.get(Path(path).name)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(scanner, "mutagen_file", fake_mutagen_file)
    return by_name


class TestScannerHelpers:
    """Tests for scanner utility functions."""

    def test_first_text_string(self) -> None:
        assert _first_text("hello") == "hello"
        assert _first_text("  spaced  ") == "spaced"
        assert _first_text("") is None

    def test_first_text_list(self) -> None:
        assert _first_text(["first", "second"]) == "first"
        assert _first_text([]) is None

    def test_first_text_frame(self) -> None:
        assert _first_text(FakeFrame(text=["AWAKE"])) == "AWAKE"

    def test_first_text_none(self) -> None:
        assert _first_text(None) is None

    def test_format_duration(self) -> None:
        assert _format_duration(194.2) == "03:14"
        assert _format_duration(199.6) == "03:20"
        assert _format_duration(3605) == "60:05"

    def test_format_duration_unknown(self) -> None:
        assert _format_duration(None) == "00:00"
        assert _format_duration(0) == "00:00"
        assert _format_duration("long") == "00:00"


class TestExtractSong:
    """Tests for extract_song."""

    def test_vorbis_style_tags(self, tmp_path: Path, fake_files: dict[str, Any]) -> None:
        fake_files["awake.flac"] = FakeAudio(
            tags={
                "title": ["AWAKE"],
                "artist": ["Hoshimachi Suisei"],
                "album": ["Shinsei Mokuroku"],
            },
            info=FakeInfo(length=194.0),
        )
        song = extract_song(touch(tmp_path / "awake.flac"))
        assert song == Song("AWAKE", "Hoshimachi Suisei", "Shinsei Mokuroku", "03:14")

    def test_id3_style_frames(self, tmp_path: Path, fake_files: dict[str, Any]) -> None:
        fake_files["undead.mp3"] = FakeAudio(
            tags={"TIT2": FakeFrame(["UNDEAD"]), "TPE1": FakeFrame(["YOASOBI"])},
            info=FakeInfo(length=183.4),
        )
        song = extract_song(touch(tmp_path / "undead.mp3"))
        assert song == Song("UNDEAD", "YOASOBI", "", "03:03")

    def test_missing_tags_fall_back(self, tmp_path: Path, fake_files: dict[str, Any]) -> None:
        fake_files["Untitled Demo.ogg"] = FakeAudio(tags=None)
        song = extract_song(touch(tmp_path / "Untitled Demo.ogg"))
        assert song == Song("Untitled Demo", "", "", "00:00")

    def test_tabs_and_newlines_flattened(self, tmp_path: Path, fake_files: dict[str, Any]) -> None:
        fake_files["odd.flac"] = FakeAudio(tags={"title": ["Line one\nLine\ttwo"]})
        song = extract_song(touch(tmp_path / "odd.flac"))
        assert song.title == "Line one Line two"

    def test_unreadable_file(self, tmp_path: Path, fake_files: dict[str, Any]) -> None:
        fake_files["broken.mp3"] = MutagenError("can't sync to MPEG frame")
        with pytest.raises(DataFormatError):
            extract_song(touch(tmp_path / "broken.mp3"))

    def test_unsupported_file(self, tmp_path: Path, fake_files: dict[str, Any]) -> None:
        fake_files["notes.wav"] = None
        with pytest.raises(DataFormatError):
            extract_song(touch(tmp_path / "notes.wav"))


class TestScanFolder:
    """Tests for iter_audio_files, scan_music_folder and import_folder."""

    def test_iter_audio_files_filters_and_sorts(self, tmp_path: Path) -> None:
        touch(tmp_path / "b.MP3")
        touch(tmp_path / "sub" / "a.flac")
        touch(tmp_path / "cover.jpg")
        touch(tmp_path / "notes.txt")

        paths = list(iter_audio_files(ScanConfig(root=tmp_path)))

        assert [p.name for p in paths] == ["b.MP3", "a.flac"]

    def test_iter_audio_files_custom_extensions(self, tmp_path: Path) -> None:
        touch(tmp_path / "a.flac")
        touch(tmp_path / "b.mp3")
        config = ScanConfig(root=tmp_path, extensions=frozenset({".mp3"}))
        assert [p.name for p in iter_audio_files(config)] == ["b.mp3"]

    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(ResourceError):
            list(iter_audio_files(ScanConfig(root=tmp_path / "nowhere")))

    def test_root_is_file(self, tmp_path: Path) -> None:
        with pytest.raises(ResourceError):
            list(iter_audio_files(ScanConfig(root=touch(tmp_path / "a.mp3"))))

    def test_scan_collects_issues(self, tmp_path: Path, fake_files: dict[str, Any]) -> None:
        touch(tmp_path / "good.flac")
        touch(tmp_path / "bad.flac")
        fake_files["good.flac"] = FakeAudio(tags={"title": ["Good"], "artist": ["A"]})
        fake_files["bad.flac"] = MutagenError("not a FLAC file")

        result = scan_music_folder(ScanConfig(root=tmp_path))

        assert result.songs == [Song("Good", "A", "", "00:00")]
        assert len(result.issues) == 1
        assert result.issues[0].path.name == "bad.flac"
        assert "DataFormatError" in result.issues[0].message

    def test_import_folder_deduplicates(
        self, tmp_path: Path, fake_files: dict[str, Any], kind: str
    ) -> None:
        music = tmp_path / "music"
        touch(music / "1.flac")
        touch(music / "2.flac")
        touch(music / "3.flac")
        awake = FakeAudio(
            tags={"title": ["AWAKE"], "artist": ["Hoshimachi Suisei"]},
            info=FakeInfo(length=194),
        )
        fake_files["1.flac"] = awake
        fake_files["2.flac"] = awake
        fake_files["3.flac"] = FakeAudio(
            tags={"title": ["UNDEAD"], "artist": ["YOASOBI"]},
            info=FakeInfo(length=183),
        )

        db = MusicDatabase(kind=kind)
        db.add_entry(Song("UNDEAD", "YOASOBI", "", "03:03"))
        added = db.import_folder(music)

        assert added == 1
        assert [s.title for s in db] == ["UNDEAD", "AWAKE"]
