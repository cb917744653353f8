"""
WAV file loader for WavCraft.

Reads and writes AudioBuffers from and to disk, validating input files
and wrapping every I/O failure in a WavCraft error that names the path.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Set

from wavcraft.core.codec import read_wav, write_wav
from wavcraft.core.models import AudioBuffer
from wavcraft.utils.errors import (
    FileReadError,
    FileTooLargeError,
    UnsupportedFormatError,
    WriteError,
)

SUPPORTED_SUFFIXES: Set[str] = {'.wav', '.wave'}
MAX_FILE_SIZE: int = 524288000  # 500 MB

logger = logging.getLogger(__name__)


class WavLoader:
    """
    Loads WAV files into AudioBuffers and saves buffers back to disk.

    Stateless apart from its limits.
    """

    def __init__(
        self,
        max_file_size: int = MAX_FILE_SIZE,
        supported_suffixes: Optional[Iterable[str]] = None,
    ):
        """
        Initialize loader with configuration.

        Args:
            max_file_size: Maximum input file size in bytes
            supported_suffixes: Accepted file extensions (lowercase, with dot)
        """
        self.max_file_size = max_file_size
        self.supported_suffixes: Set[str] = set(supported_suffixes or SUPPORTED_SUFFIXES)

    def load(self, file_path: Path) -> AudioBuffer:
        """
        Load a WAV file.

        Args:
            file_path: Path to WAV file

        Returns:
            AudioBuffer: Decoded audio

        Raises:
            FileReadError: File is missing, unreadable or not valid WAV
            UnsupportedFormatError: Extension or sample encoding not supported
            FileTooLargeError: File exceeds size limit
        """
        file_path = Path(file_path)
        self._validate_file(file_path)

        try:
            buffer = read_wav(file_path)
        except UnsupportedFormatError as e:
            raise UnsupportedFormatError(
                f"Failed to read {file_path}: {e.message}",
                format=e.format,
                file_path=str(file_path),
            ) from e
        except FileReadError as e:
            raise FileReadError(
                f"Failed to read {file_path}: {e.message}", file_path=str(file_path)
            ) from e
        except OSError as e:
            raise FileReadError(
                f"Failed to read {file_path}: {e}", file_path=str(file_path)
            ) from e

        logger.info(
            f"Loaded {file_path.name}: {buffer.sample_rate} Hz, "
            f"{buffer.bit_depth}-bit, {buffer.num_channels} ch, {buffer.duration:.3f}s"
        )
        return buffer

    def save(self, buffer: AudioBuffer, output_path: Path) -> int:
        """
        Write a buffer to disk as WAV.

        Parent directories are created as needed. No cleanup is attempted
        if the write fails part-way.

        Returns:
            int: Size of the written file in bytes

        Raises:
            WriteError: Destination cannot be written
        """
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            write_wav(buffer, output_path)
            size = output_path.stat().st_size
        except (OSError, RuntimeError) as e:
            raise WriteError(
                f"Failed to write {output_path}: {e}", file_path=str(output_path)
            ) from e

        logger.info(f"Wrote {output_path} ({size} bytes, {buffer.duration:.3f}s)")
        return size

    def _validate_file(self, file_path: Path) -> None:
        """Validate file exists, has a supported extension, and is within size limit."""
        if not file_path.is_file():
            raise FileReadError(
                f"Failed to read {file_path}: file not found", file_path=str(file_path)
            )

        suffix = file_path.suffix.lower()
        if suffix not in self.supported_suffixes:
            raise UnsupportedFormatError(
                f"Failed to read {file_path}: format {suffix or '(none)'} not supported. "
                f"Supported formats: {', '.join(sorted(self.supported_suffixes))}",
                format=suffix,
                file_path=str(file_path),
            )

        file_size = file_path.stat().st_size
        if file_size > self.max_file_size:
            raise FileTooLargeError(
                f"File too large: {file_size / 1024 / 1024:.1f} MB. "
                f"Maximum: {self.max_file_size / 1024 / 1024:.1f} MB",
                file_size=file_size,
                max_size=self.max_file_size,
                file_path=str(file_path),
            )


def create_wav_loader(config: Optional[Dict[str, Any]] = None) -> WavLoader:
    """
    Factory function to create a WavLoader from the ``audio`` config section.

    Args:
        config: Optional configuration dict

    Returns:
        WavLoader: Configured loader instance
    """
    if config is None:
        config = {}

    return WavLoader(
        max_file_size=config.get('max_file_size', MAX_FILE_SIZE),
        supported_suffixes=config.get('supported_formats'),
    )
