"""
Audio processor for WavCraft.

File-to-file workflows composed from the buffer engine. Every public
operation returns an OperationResult; errors never escape an operation,
they are logged and reported as a failure result.
"""

import functools
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from wavcraft.core.analysis import analyze, normalization_gain
from wavcraft.core.batch_processor import BatchProcessor, BufferOperation, ProgressCallback
from wavcraft.core.conversion import change_bit_depth, convert_channels, resample
from wavcraft.core.generators import generate_silence, generate_tone
from wavcraft.core.loader import WavLoader, create_wav_loader
from wavcraft.core.models import AudioConfig, OperationResult, SegmentInfo, validate_bit_depth
from wavcraft.core.transforms import (
    change_volume,
    concatenate,
    fade_in,
    fade_out,
    mix,
    trim,
)
from wavcraft.utils.errors import WavCraftError, WriteError

PathLike = Union[str, Path]


@dataclass(frozen=True)
class MixInput:
    """One input of a mix: a file and the gain applied to it."""
    path: Path
    volume: float = 1.0


def _as_mix_input(item: Union[MixInput, Mapping[str, Any], PathLike]) -> MixInput:
    if isinstance(item, MixInput):
        return item
    if isinstance(item, Mapping):
        volume = item.get('volume')
        return MixInput(Path(item['path']), 1.0 if volume is None else float(volume))
    return MixInput(Path(item))


def operation(name: str) -> Callable:
    """Turn any exception raised by the wrapped method into a failure result."""
    def decorator(method: Callable[..., OperationResult]) -> Callable[..., OperationResult]:
        @functools.wraps(method)
        def wrapper(self: "AudioProcessor", *args: Any, **kwargs: Any) -> OperationResult:
            self.logger.info(f"Starting {name}")
            try:
                result = method(self, *args, **kwargs)
            except WavCraftError as e:
                self.logger.error(f"{name} failed: {e}")
                return OperationResult.failure(name, e.message)
            except Exception as e:
                self.logger.exception(f"{name} failed: {e}")
                return OperationResult.failure(name, str(e))
            self.logger.info(f"{name} succeeded: {result.output_path or ''}")
            return result
        return wrapper
    return decorator


class AudioProcessor:
    """
    High-level WAV workflows: combine, mix, extract, split, normalize,
    crossfade, convert, loop, batch process and analyze.

    Design:
    - Dependency Injection: file I/O goes through the injected WavLoader
    - Sequential: one file at a time, in input order
    - Error Handling: failures come back as OperationResult, never raised
    """

    def __init__(
        self,
        loader: Optional[WavLoader] = None,
        generation_config: Optional[AudioConfig] = None,
        normalize_target: float = 0.9,
        crossfade_duration: float = 2.0,
        loop_repetitions: int = 4,
        batch_suffix: str = "_processed",
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize audio processor.

        Args:
            loader: WavLoader instance (creates default if None)
            generation_config: Format used by the tone/silence generators
            normalize_target: Default peak level for normalize_volume
            crossfade_duration: Default crossfade length in seconds
            loop_repetitions: Default repetition count for create_loop
            batch_suffix: Default filename suffix for batch_process
            progress_callback: Optional callback(current, total, path) for batches
        """
        self.loader = loader or WavLoader()
        self.generation_config = generation_config or AudioConfig()
        self.normalize_target = normalize_target
        self.crossfade_duration = crossfade_duration
        self.loop_repetitions = loop_repetitions
        self.batch_suffix = batch_suffix
        self.progress_callback = progress_callback
        self.logger = logging.getLogger(__name__)

    @operation("combine_sequentially")
    def combine_sequentially(
        self, file_paths: Sequence[PathLike], output_path: PathLike
    ) -> OperationResult:
        """Concatenate files in order; stops at the first unreadable file."""
        buffers = [self.loader.load(Path(p)) for p in file_paths]
        combined = concatenate(buffers)
        size = self.loader.save(combined, Path(output_path))

        return OperationResult.ok(
            "combine_sequentially",
            output_path,
            size,
            num_files=len(buffers),
            duration=combined.duration,
        )

    @operation("mix_together")
    def mix_together(
        self,
        inputs: Sequence[Union[MixInput, Mapping[str, Any], PathLike]],
        output_path: PathLike,
    ) -> OperationResult:
        """
        Overlay files. Each input is a ``MixInput``, a ``{"path", "volume"}``
        mapping or a bare path; a missing volume means 1.0.
        """
        mix_inputs = [_as_mix_input(item) for item in inputs]
        buffers = [self.loader.load(item.path) for item in mix_inputs]
        mixed = mix(buffers, [item.volume for item in mix_inputs])
        size = self.loader.save(mixed, Path(output_path))

        return OperationResult.ok(
            "mix_together",
            output_path,
            size,
            num_files=len(buffers),
            duration=mixed.duration,
        )

    @operation("extract_segment")
    def extract_segment(
        self,
        input_path: PathLike,
        output_path: PathLike,
        start_time: float,
        end_time: float,
    ) -> OperationResult:
        """
        Write the ``[start_time, end_time)`` portion of a file.

        ``duration`` reports the length actually written, which is shorter
        than ``requested_duration`` when the range runs past the source.
        """
        buffer = self.loader.load(Path(input_path))
        segment = trim(buffer, start_time, end_time)
        size = self.loader.save(segment, Path(output_path))

        return OperationResult.ok(
            "extract_segment",
            output_path,
            size,
            start_time=start_time,
            end_time=end_time,
            duration=segment.duration,
            requested_duration=end_time - start_time,
        )

    @operation("split_into_segments")
    def split_into_segments(
        self,
        input_path: PathLike,
        output_dir: PathLike,
        segment_duration: float,
    ) -> OperationResult:
        """Cut a file into ``<stem>_segment_<n>.wav`` pieces of *segment_duration* seconds."""
        if segment_duration <= 0:
            raise ValueError(f"Segment duration must be positive, got {segment_duration}")

        input_path = Path(input_path)
        output_dir = Path(output_dir)
        buffer = self.loader.load(input_path)

        total_duration = buffer.duration
        # Rounding keeps 0.6 / 0.2 from producing an empty fourth segment
        num_segments = math.ceil(round(total_duration / segment_duration, 9))

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(
                f"Failed to create {output_dir}: {e}", file_path=str(output_dir)
            ) from e

        segments = []
        total_size = 0
        for i in range(num_segments):
            start = i * segment_duration
            end = min((i + 1) * segment_duration, total_duration)
            path = output_dir / f"{input_path.stem}_segment_{i + 1}.wav"

            total_size += self.loader.save(trim(buffer, start, end), path)
            segments.append(SegmentInfo(
                index=i + 1,
                path=path,
                start_time=start,
                end_time=end,
                duration=end - start,
            ))

        return OperationResult.ok(
            "split_into_segments",
            output_dir,
            total_size,
            num_segments=len(segments),
            segments=segments,
        )

    @operation("normalize_volume")
    def normalize_volume(
        self,
        input_path: PathLike,
        output_path: PathLike,
        target_level: Optional[float] = None,
    ) -> OperationResult:
        """Scale a file so its peak sits at ``target_level`` of full scale."""
        if target_level is None:
            target_level = self.normalize_target

        buffer = self.loader.load(Path(input_path))
        gain = normalization_gain(buffer, target_level)
        current_peak = analyze(buffer).peak_level
        target_peak = buffer.max_value * target_level
        normalized = change_volume(buffer, gain)
        size = self.loader.save(normalized, Path(output_path))

        return OperationResult.ok(
            "normalize_volume",
            output_path,
            size,
            gain_applied=gain,
            original_peak=current_peak,
            target_peak=target_peak,
            new_peak=analyze(normalized).peak_level,
        )

    @operation("crossfade")
    def crossfade(
        self,
        first_path: PathLike,
        second_path: PathLike,
        output_path: PathLike,
        crossfade_duration: Optional[float] = None,
    ) -> OperationResult:
        """
        Join two files with a fade between them.

        The first file is faded out and then trimmed by the fade length; the
        second is faded in and appended. The two fades are not summed, so
        this is a fade-and-append rather than an overlapping crossfade.
        """
        if crossfade_duration is None:
            crossfade_duration = self.crossfade_duration

        first = self.loader.load(Path(first_path))
        second = self.loader.load(Path(second_path))

        faded_out = fade_out(first, crossfade_duration)
        faded_in = fade_in(second, crossfade_duration)

        trim_end = max(0.0, faded_out.duration - crossfade_duration)
        head = trim(faded_out, 0, trim_end)

        combined = concatenate([head, faded_in])
        size = self.loader.save(combined, Path(output_path))

        return OperationResult.ok(
            "crossfade",
            output_path,
            size,
            crossfade_duration=crossfade_duration,
            duration=combined.duration,
        )

    @operation("convert_format")
    def convert_format(
        self,
        input_path: PathLike,
        output_path: PathLike,
        sample_rate: Optional[int] = None,
        bit_depth: Optional[int] = None,
        channels: Optional[int] = None,
    ) -> OperationResult:
        """Convert sample rate, then bit depth, then channels; unchanged targets are skipped."""
        if bit_depth is not None:
            validate_bit_depth(int(bit_depth))

        buffer = self.loader.load(Path(input_path))
        applied = []

        if sample_rate and sample_rate != buffer.sample_rate:
            buffer = resample(buffer, int(sample_rate))
            applied.append("sample_rate")
        if bit_depth and int(bit_depth) != buffer.bit_depth:
            buffer = change_bit_depth(buffer, int(bit_depth))
            applied.append("bit_depth")
        if channels and channels != buffer.num_channels:
            buffer = convert_channels(buffer, int(channels))
            applied.append("channels")

        size = self.loader.save(buffer, Path(output_path))

        return OperationResult.ok(
            "convert_format",
            output_path,
            size,
            conversions={
                'sample_rate': buffer.sample_rate,
                'bit_depth': buffer.bit_depth,
                'channels': buffer.num_channels,
            },
            applied=applied,
        )

    @operation("create_loop")
    def create_loop(
        self,
        input_path: PathLike,
        output_path: PathLike,
        repetitions: Optional[int] = None,
    ) -> OperationResult:
        """Repeat a file back to back *repetitions* times."""
        if repetitions is None:
            repetitions = self.loop_repetitions
        if repetitions < 1:
            raise ValueError(f"Repetitions must be at least 1, got {repetitions}")

        buffer = self.loader.load(Path(input_path))
        looped = concatenate([buffer] * repetitions)
        size = self.loader.save(looped, Path(output_path))

        return OperationResult.ok(
            "create_loop",
            output_path,
            size,
            repetitions=repetitions,
            total_duration=looped.duration,
        )

    @operation("batch_process")
    def batch_process(
        self,
        input_paths: Sequence[PathLike],
        output_dir: PathLike,
        transform: BufferOperation,
        suffix: Optional[str] = None,
    ) -> OperationResult:
        """
        Apply *transform* to every file, writing ``<stem><suffix>.wav`` files.

        Per-file failures are listed in ``results``; the batch itself
        succeeds unless the output directory cannot be created.
        """
        if suffix is None:
            suffix = self.batch_suffix

        processor = BatchProcessor(self.loader, progress_callback=self.progress_callback)
        batch = processor.process(
            [Path(p) for p in input_paths], Path(output_dir), transform, suffix
        )

        return OperationResult.ok(
            "batch_process",
            output_dir,
            total_files=batch.total_files,
            success_count=batch.success_count,
            failed_count=batch.failure_count,
            results=batch.items,
        )

    @operation("analyze_multiple")
    def analyze_multiple(self, file_paths: Sequence[PathLike]) -> OperationResult:
        """Aggregate duration, RMS and peak statistics over several files."""
        processor = BatchProcessor(self.loader, progress_callback=self.progress_callback)
        fleet = processor.analyze([Path(p) for p in file_paths])

        return OperationResult.ok(
            "analyze_multiple",
            file_count=fleet.file_count,
            total_duration=fleet.total_duration,
            average_rms=fleet.average_rms,
            maximum_peak=fleet.maximum_peak,
            files=fleet.reports,
            failed=fleet.failed,
        )

    @operation("analyze_file")
    def analyze_file(self, file_path: PathLike) -> OperationResult:
        """Level statistics for a single file under ``report``."""
        buffer = self.loader.load(Path(file_path))
        return OperationResult.ok("analyze_file", file=Path(file_path), report=analyze(buffer))

    @operation("generate_tone")
    def generate_tone_file(
        self,
        frequency: float,
        duration: float,
        output_path: PathLike,
        config: Optional[AudioConfig] = None,
    ) -> OperationResult:
        """Write a sine tone in the generation format (or *config*)."""
        tone = generate_tone(frequency, duration, config or self.generation_config)
        size = self.loader.save(tone, Path(output_path))
        return OperationResult.ok(
            "generate_tone", output_path, size, frequency=frequency, duration=tone.duration
        )

    @operation("generate_silence")
    def generate_silence_file(
        self,
        duration: float,
        output_path: PathLike,
        config: Optional[AudioConfig] = None,
    ) -> OperationResult:
        """Write silence in the generation format (or *config*)."""
        silence = generate_silence(duration, config or self.generation_config)
        size = self.loader.save(silence, Path(output_path))
        return OperationResult.ok("generate_silence", output_path, size, duration=silence.duration)


def create_audio_processor(
    config: Optional[Dict[str, Any]] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> AudioProcessor:
    """
    Factory function to create a configured AudioProcessor.

    Args:
        config: Configuration dict (see ``get_default_config``)
        progress_callback: Optional batch progress callback

    Returns:
        AudioProcessor: Configured processor
    """
    config = config or {}
    processing = config.get('processing', {})

    return AudioProcessor(
        loader=create_wav_loader(config.get('audio', {})),
        generation_config=AudioConfig.from_dict(config.get('generation', {})),
        normalize_target=processing.get('normalize_target', 0.9),
        crossfade_duration=processing.get('crossfade_duration', 2.0),
        loop_repetitions=processing.get('loop_repetitions', 4),
        batch_suffix=processing.get('batch_suffix', "_processed"),
        progress_callback=progress_callback,
    )
