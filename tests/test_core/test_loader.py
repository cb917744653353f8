"""Tests for WavLoader file I/O and validation."""

import pytest

from wavcraft.core.loader import MAX_FILE_SIZE, WavLoader, create_wav_loader
from wavcraft.utils.errors import (
    FileReadError,
    FileTooLargeError,
    UnsupportedFormatError,
    WriteError,
)


class TestLoad:
    def test_round_trip(self, loader, wav_file, stereo_tone):
        path = wav_file(stereo_tone, "stereo.wav")
        assert loader.load(path) == stereo_tone

    def test_accepts_string_path(self, loader, wav_file, tone):
        path = wav_file(tone)
        assert loader.load(str(path)) == tone

    def test_wave_suffix_case_insensitive(self, loader, wav_file, tone):
        path = wav_file(tone, "upper.WAVE")
        assert loader.load(path) == tone

    def test_missing_file(self, loader, tmp_path):
        path = tmp_path / "missing.wav"
        with pytest.raises(FileReadError) as exc_info:
            loader.load(path)
        assert str(path) in exc_info.value.message
        assert exc_info.value.file_path == str(path)

    def test_unsupported_suffix(self, loader, tmp_path):
        path = tmp_path / "song.mp3"
        path.write_bytes(b"ID3")
        with pytest.raises(UnsupportedFormatError) as exc_info:
            loader.load(path)
        assert exc_info.value.format == ".mp3"

    def test_corrupt_file_names_path(self, loader, tmp_path):
        path = tmp_path / "corrupt.wav"
        path.write_bytes(b"RIFF0000WAVEjunk")
        with pytest.raises(FileReadError) as exc_info:
            loader.load(path)
        assert str(path) in exc_info.value.message

    def test_size_limit(self, wav_file, tone):
        path = wav_file(tone)
        with pytest.raises(FileTooLargeError) as exc_info:
            WavLoader(max_file_size=100).load(path)
        assert exc_info.value.max_size == 100
        assert exc_info.value.file_size > 100


class TestSave:
    def test_returns_written_size(self, loader, tmp_path, tone):
        path = tmp_path / "out.wav"
        size = loader.save(tone, path)
        assert size == path.stat().st_size
        assert size > tone.num_frames * 2

    def test_creates_parent_directories(self, loader, tmp_path, tone):
        path = tmp_path / "nested" / "deeper" / "out.wav"
        loader.save(tone, path)
        assert path.is_file()

    def test_unwritable_destination(self, loader, tmp_path, tone):
        blocker = tmp_path / "file.txt"
        blocker.write_text("not a directory")
        with pytest.raises(WriteError) as exc_info:
            loader.save(tone, blocker / "out.wav")
        assert "out.wav" in exc_info.value.message


class TestCreateWavLoader:
    def test_defaults(self):
        loader = create_wav_loader()
        assert loader.max_file_size == MAX_FILE_SIZE
        assert loader.supported_suffixes == {".wav", ".wave"}

    def test_from_config(self):
        loader = create_wav_loader({"max_file_size": 1024, "supported_formats": [".wav"]})
        assert loader.max_file_size == 1024
        assert loader.supported_suffixes == {".wav"}
