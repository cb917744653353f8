"""
WAV container codec.

Encodes and decodes AudioBuffers to and from RIFF/WAVE bytes through
soundfile (libsndfile). Samples travel through libsndfile as int32:
narrower PCM is left-justified on read and truncated from the top bits
on write, so shifting by ``32 - bit_depth`` round-trips exactly.
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO, Dict, Union

import numpy as np
import soundfile as sf

from wavcraft.core.models import AudioBuffer
from wavcraft.utils.errors import FileReadError, UnsupportedFormatError

SUBTYPE_BIT_DEPTHS: Dict[str, int] = {
    'PCM_U8': 8,
    'PCM_S8': 8,
    'PCM_16': 16,
    'PCM_24': 24,
    'PCM_32': 32,
}

# WAV stores 8-bit PCM unsigned
BIT_DEPTH_SUBTYPES: Dict[int, str] = {
    8: 'PCM_U8',
    16: 'PCM_16',
    24: 'PCM_24',
    32: 'PCM_32',
}

WAV_CONTAINERS = {'WAV', 'WAVEX'}

logger = logging.getLogger(__name__)


def encode_wav(buffer: AudioBuffer) -> bytes:
    """Encode a buffer as complete WAV file bytes."""
    stream = io.BytesIO()
    write_wav(buffer, stream)
    return stream.getvalue()


def decode_wav(data: bytes) -> AudioBuffer:
    """
    Decode WAV file bytes into an AudioBuffer.

    Raises:
        UnsupportedFormatError: Not a WAV container, or not integer PCM
        FileReadError: Bytes are not a readable audio file
    """
    return read_wav(io.BytesIO(data))


def write_wav(buffer: AudioBuffer, target: Union[str, Path, BinaryIO]) -> None:
    """Write a buffer to a path or binary stream in WAV format."""
    shift = 32 - buffer.bit_depth
    data = buffer.frames.astype(np.int32) << shift

    sf.write(
        str(target) if isinstance(target, Path) else target,
        data,
        buffer.sample_rate,
        subtype=BIT_DEPTH_SUBTYPES[buffer.bit_depth],
        format='WAV',
    )


def read_wav(source: Union[str, Path, BinaryIO]) -> AudioBuffer:
    """
    Read a WAV file from a path or binary stream.

    Raises:
        UnsupportedFormatError: Not a WAV container, or not integer PCM
        FileReadError: Source is not a readable audio file
    """
    try:
        with sf.SoundFile(str(source) if isinstance(source, Path) else source) as f:
            if f.format not in WAV_CONTAINERS:
                raise UnsupportedFormatError(
                    f"Not a WAV container: {f.format}", format=f.format
                )

            bit_depth = SUBTYPE_BIT_DEPTHS.get(f.subtype)
            if bit_depth is None:
                raise UnsupportedFormatError(
                    f"Unsupported sample encoding {f.subtype}. "
                    f"Supported: {', '.join(SUBTYPE_BIT_DEPTHS)}",
                    format=f.subtype,
                )

            logger.debug(
                f"Decoding WAV: {f.samplerate} Hz, {f.channels} ch, "
                f"{f.subtype}, {f.frames} frames"
            )

            frames = f.read(dtype='int32', always_2d=True)
            sample_rate = f.samplerate
            num_channels = f.channels

    except RuntimeError as e:
        # LibsndfileError subclasses RuntimeError
        raise FileReadError(f"Invalid WAV data: {e}") from e

    samples = (frames >> (32 - bit_depth)).reshape(-1)

    return AudioBuffer(
        sample_rate=sample_rate,
        bit_depth=bit_depth,
        num_channels=num_channels,
        samples=samples,
    )
