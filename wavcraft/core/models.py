"""
Core data models for WavCraft.

Immutable value objects for PCM audio buffers, generation settings,
analysis reports and operation results.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import numpy as np

from wavcraft.utils.errors import InvalidBufferError

SUPPORTED_BIT_DEPTHS: Tuple[int, ...] = (8, 16, 24, 32)


def max_sample_value(bit_depth: int) -> int:
    """Largest positive sample for a signed bit depth (2^(n-1) - 1)."""
    return 2 ** (bit_depth - 1) - 1


def min_sample_value(bit_depth: int) -> int:
    """Most negative sample for a signed bit depth (-(2^(n-1)))."""
    return -(2 ** (bit_depth - 1))


@dataclass(frozen=True, eq=False)
class AudioBuffer:
    """
    Immutable in-memory PCM audio.

    Samples are signed integers, interleaved per channel: for stereo,
    even indices are left and odd indices are right. A frame is one
    sample per channel. The sample array is copied on construction and
    marked read-only, so every transform produces a new buffer.
    """

    sample_rate: int
    bit_depth: int
    num_channels: int
    samples: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        validate_format(self.sample_rate, self.bit_depth, self.num_channels)

        samples = np.array(self.samples, dtype=np.int64)
        if samples.ndim != 1:
            raise InvalidBufferError(
                f"Samples must be a flat interleaved sequence, got shape {samples.shape}"
            )
        if samples.size % self.num_channels != 0:
            raise InvalidBufferError(
                f"Sample count {samples.size} is not a multiple of "
                f"{self.num_channels} channels"
            )
        if samples.size:
            low, high = int(samples.min()), int(samples.max())
            if low < self.min_value or high > self.max_value:
                raise InvalidBufferError(
                    f"Samples [{low}, {high}] exceed the {self.bit_depth}-bit range "
                    f"[{self.min_value}, {self.max_value}]"
                )

        samples = samples.astype(np.int32)
        samples.setflags(write=False)
        object.__setattr__(self, 'samples', samples)

    @property
    def max_value(self) -> int:
        return max_sample_value(self.bit_depth)

    @property
    def min_value(self) -> int:
        return min_sample_value(self.bit_depth)

    @property
    def num_frames(self) -> int:
        return self.samples.size // self.num_channels

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.num_frames / self.sample_rate

    @property
    def frames(self) -> np.ndarray:
        """Read-only (num_frames, num_channels) view of the samples."""
        return self.samples.reshape(-1, self.num_channels)

    @property
    def format(self) -> Tuple[int, int, int]:
        """(sample_rate, bit_depth, num_channels)."""
        return (self.sample_rate, self.bit_depth, self.num_channels)

    def with_samples(self, samples: Any) -> AudioBuffer:
        """New buffer with the same format and different samples."""
        return replace(self, samples=samples)

    def __len__(self) -> int:
        return int(self.samples.size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AudioBuffer):
            return NotImplemented
        return self.format == other.format and np.array_equal(self.samples, other.samples)

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True)
class AudioConfig:
    """Format and amplitude settings for generated audio."""

    sample_rate: int = 44100
    bit_depth: int = 16
    num_channels: int = 1
    amplitude: float = 0.5

    def __post_init__(self) -> None:
        validate_format(self.sample_rate, self.bit_depth, self.num_channels)
        validate_amplitude(self.amplitude)

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]] = None) -> AudioConfig:
        """Build from a ``generation`` config section; missing keys use defaults."""
        config = config or {}
        defaults = cls()
        return cls(
            sample_rate=int(config.get('sample_rate', defaults.sample_rate)),
            bit_depth=int(config.get('bit_depth', defaults.bit_depth)),
            num_channels=int(config.get('num_channels', defaults.num_channels)),
            amplitude=float(config.get('amplitude', defaults.amplitude)),
        )


@dataclass(frozen=True)
class AnalysisReport:
    """Read-only statistics snapshot of an AudioBuffer."""

    duration: float  # seconds
    sample_rate: int
    bit_depth: int
    num_channels: int
    rms_level: float  # in sample units
    peak_level: int  # in sample units
    dynamic_range: float  # max_value / rms
    clipping_percentage: float  # [0.0, 100.0]
    is_clipping: bool
    file_size: int  # encoded WAV size in bytes

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'duration': self.duration,
            'sample_rate': self.sample_rate,
            'bit_depth': self.bit_depth,
            'num_channels': self.num_channels,
            'rms_level': self.rms_level,
            'peak_level': self.peak_level,
            'dynamic_range': self.dynamic_range,
            'clipping_percentage': self.clipping_percentage,
            'is_clipping': self.is_clipping,
            'file_size': self.file_size,
        }

    def get_summary(self) -> str:
        """Get human-readable one-line summary."""
        channels = {1: "mono", 2: "stereo"}.get(self.num_channels, f"{self.num_channels} ch")
        parts = [
            f"{self.duration:.3f}s",
            f"{self.sample_rate} Hz",
            f"{self.bit_depth}-bit",
            channels,
            f"RMS {self.rms_level:.1f}",
            f"Peak {self.peak_level}",
        ]
        if self.is_clipping:
            parts.append(f"CLIPPING {self.clipping_percentage:.2f}%")
        return " | ".join(parts)


@dataclass(frozen=True)
class SegmentInfo:
    """One file written by a split operation."""

    index: int  # 1-based
    path: Path
    start_time: float
    end_time: float
    duration: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'path': str(self.path),
            'start_time': self.start_time,
            'end_time': self.end_time,
            'duration': self.duration,
        }


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a file-producing operation.

    Either a success carrying the output path, written byte size and
    operation-specific metadata, or a failure carrying an error message.
    """

    operation: str
    success: bool
    output_path: Optional[Path] = None
    size: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def ok(
        cls,
        operation: str,
        output_path: Optional[Path] = None,
        size: Optional[int] = None,
        **metadata: Any,
    ) -> OperationResult:
        return cls(
            operation=operation,
            success=True,
            output_path=Path(output_path) if output_path is not None else None,
            size=size,
            metadata=metadata,
        )

    @classmethod
    def failure(cls, operation: str, error: str) -> OperationResult:
        return cls(operation=operation, success=False, error=error)

    def get(self, key: str, default: Any = None) -> Any:
        """Shortcut for ``metadata.get``."""
        return self.metadata.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            'operation': self.operation,
            'success': self.success,
            'timestamp': self.timestamp.isoformat(),
        }
        if self.success:
            result['output_path'] = str(self.output_path) if self.output_path else None
            result['size'] = self.size
            result.update(_to_serializable(self.metadata))
        else:
            result['error'] = self.error
        return result

    def to_json(self, indent: int = 2) -> str:
        """Export as JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)


def _to_serializable(value: Any) -> Any:
    """Convert nested metadata into JSON-friendly values."""
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, dict):
        return {str(k): _to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_serializable(v) for v in value]
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, np.generic):
        return value.item()
    return value


# Validation helpers

def validate_bit_depth(bit_depth: int) -> None:
    """Validate bit depth is one of the supported PCM depths."""
    if bit_depth not in SUPPORTED_BIT_DEPTHS:
        raise InvalidBufferError(
            f"Unsupported bit depth: {bit_depth}. Must be one of {SUPPORTED_BIT_DEPTHS}"
        )


def validate_format(sample_rate: int, bit_depth: int, num_channels: int) -> None:
    """Validate sample rate, bit depth and channel count."""
    if sample_rate <= 0:
        raise InvalidBufferError(f"Sample rate must be positive, got {sample_rate}")
    validate_bit_depth(bit_depth)
    if num_channels <= 0:
        raise InvalidBufferError(f"Channel count must be positive, got {num_channels}")


def validate_amplitude(amplitude: float) -> None:
    """Validate amplitude is in [0.0, 1.0]."""
    if not (0.0 <= amplitude <= 1.0):
        raise ValueError(f"Amplitude must be in [0.0, 1.0], got {amplitude}")
