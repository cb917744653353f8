"""
Batch processor for applying one transform or analysis to many WAV files.

Files are handled strictly in input order. A failure on one file is
recorded and processing continues with the next.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from wavcraft.core.analysis import analyze, normalization_gain
from wavcraft.core.conversion import convert_channels, resample
from wavcraft.core.loader import WavLoader
from wavcraft.core.models import AnalysisReport, AudioBuffer
from wavcraft.core.transforms import change_volume, fade_in, fade_out, reverse
from wavcraft.utils.logging import create_logger_with_context

BufferOperation = Callable[[AudioBuffer], AudioBuffer]
ProgressCallback = Callable[[int, int, Path], None]


@dataclass
class BatchItem:
    """Outcome for one file of a batch."""
    input_path: Path
    success: bool
    output_path: Optional[Path] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'input': str(self.input_path),
            'output': str(self.output_path) if self.output_path else None,
            'success': self.success,
            'error': self.error,
        }


@dataclass
class BatchResult:
    """Result of a batch processing operation."""
    items: List[BatchItem] = field(default_factory=list)
    total_files: int = 0
    total_time: float = 0.0

    @property
    def success_count(self) -> int:
        """Number of successfully processed files."""
        return sum(1 for item in self.items if item.success)

    @property
    def failure_count(self) -> int:
        """Number of failed files."""
        return self.total_files - self.success_count

    @property
    def success_rate(self) -> float:
        """Success rate as percentage."""
        if self.total_files == 0:
            return 0.0
        return (self.success_count / self.total_files) * 100

    def to_dict(self) -> Dict:
        return {
            'total_files': self.total_files,
            'success_count': self.success_count,
            'failed_count': self.failure_count,
            'total_time': self.total_time,
            'results': [item.to_dict() for item in self.items],
        }


@dataclass
class FleetAnalysis:
    """
    Aggregate statistics over several analyzed files.

    ``reports`` and ``failed`` hold one entry per input in input order, so a
    path given twice is counted twice.
    """
    reports: List[Tuple[Path, AnalysisReport]] = field(default_factory=list)
    failed: List[Tuple[Path, str]] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.reports)

    @property
    def total_duration(self) -> float:
        return sum(report.duration for _, report in self.reports)

    @property
    def average_rms(self) -> float:
        if not self.reports:
            return 0.0
        return sum(report.rms_level for _, report in self.reports) / len(self.reports)

    @property
    def maximum_peak(self) -> int:
        return max((report.peak_level for _, report in self.reports), default=0)

    def to_dict(self) -> Dict:
        return {
            'file_count': self.file_count,
            'total_duration': self.total_duration,
            'average_rms': self.average_rms,
            'maximum_peak': self.maximum_peak,
            'files': [
                {'file': str(path), **report.to_dict()}
                for path, report in self.reports
            ],
            'failed': [{'file': str(path), 'error': error} for path, error in self.failed],
        }


class BatchProcessor:
    """
    Runs a buffer transform or an analysis over a list of WAV files.

    Loading and saving are delegated to the injected WavLoader.
    """

    AUDIO_EXTENSIONS = {'.wav', '.wave'}

    def __init__(
        self,
        loader: WavLoader,
        progress_callback: Optional[ProgressCallback] = None
    ):
        """
        Initialize batch processor.

        Args:
            loader: WavLoader used for every read and write
            progress_callback: Optional callback(current, total, file_path)
        """
        self.loader = loader
        self.progress_callback = progress_callback
        self.logger = logging.getLogger(__name__)

    def collect_files(
        self,
        inputs: Union[Path, Iterable[Path]],
        recursive: bool = False
    ) -> List[Path]:
        """Expand files and directories into a sorted, de-duplicated list of WAV files."""
        if isinstance(inputs, (str, Path)):
            inputs = [inputs]

        files = set()
        for path in map(Path, inputs):
            if path.is_file():
                if path.suffix.lower() in self.AUDIO_EXTENSIONS:
                    files.add(path)
                else:
                    self.logger.warning(f"Skipping non-WAV file: {path}")
            elif path.is_dir():
                pattern = "**/*" if recursive else "*"
                files.update(
                    p for p in path.glob(pattern)
                    if p.is_file() and p.suffix.lower() in self.AUDIO_EXTENSIONS
                )
            else:
                self.logger.warning(f"Path not found: {path}")

        return sorted(files)

    def process(
        self,
        input_paths: Iterable[Path],
        output_dir: Path,
        operation: BufferOperation,
        suffix: str = "_processed"
    ) -> BatchResult:
        """
        Apply *operation* to each file and write ``<stem><suffix>.wav`` into *output_dir*.

        Raises:
            OSError: *output_dir* cannot be created
        """
        start_time = time.time()
        paths = [Path(p) for p in input_paths]
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        log = create_logger_with_context(
            __name__, {"operation": "batch_process", "output_dir": str(output_dir)}
        )
        log.info(f"Processing {len(paths)} files")

        result = BatchResult(total_files=len(paths))
        for index, input_path in enumerate(paths, start=1):
            self._report_progress(index, len(paths), input_path)
            output_path = output_dir / f"{input_path.stem}{suffix}.wav"

            try:
                buffer = self.loader.load(input_path)
                self.loader.save(operation(buffer), output_path)
            except Exception as e:
                result.items.append(BatchItem(input_path, success=False, error=str(e)))
                log.error(f"Failed to process {input_path}: {e}")
                continue

            result.items.append(BatchItem(input_path, success=True, output_path=output_path))
            log.debug(f"Processed {input_path} -> {output_path}")

        result.total_time = time.time() - start_time
        log.info(
            f"Batch complete: {result.success_count}/{result.total_files} succeeded "
            f"in {result.total_time:.2f}s"
        )
        return result

    def analyze(self, file_paths: Iterable[Path]) -> FleetAnalysis:
        """Analyze each readable file; unreadable ones are listed under ``failed``."""
        paths = [Path(p) for p in file_paths]
        fleet = FleetAnalysis()

        for index, file_path in enumerate(paths, start=1):
            self._report_progress(index, len(paths), file_path)
            try:
                fleet.reports.append((file_path, analyze(self.loader.load(file_path))))
            except Exception as e:
                fleet.failed.append((file_path, str(e)))
                self.logger.error(f"Failed to analyze {file_path}: {e}")

        return fleet

    def _report_progress(self, current: int, total: int, file_path: Path) -> None:
        if self.progress_callback:
            self.progress_callback(current, total, file_path)


def _normalize(target_level: float) -> BufferOperation:
    def operation(buffer: AudioBuffer) -> AudioBuffer:
        return change_volume(buffer, normalization_gain(buffer, target_level))
    return operation


# Named transforms for batch runs; each factory takes an optional numeric argument
BATCH_OPERATIONS: Dict[str, Callable[[Optional[float]], BufferOperation]] = {
    'reverse': lambda value: reverse,
    'normalize': lambda value: _normalize(0.9 if value is None else value),
    'gain': lambda value: (lambda b: change_volume(b, 1.0 if value is None else value)),
    'fade-in': lambda value: (lambda b: fade_in(b, 1.0 if value is None else value)),
    'fade-out': lambda value: (lambda b: fade_out(b, 1.0 if value is None else value)),
    'mono': lambda value: (lambda b: convert_channels(b, 1)),
    'stereo': lambda value: (lambda b: convert_channels(b, 2)),
    'resample': lambda value: (lambda b: resample(b, int(44100 if value is None else value))),
}


def build_operation(name: str, value: Optional[float] = None) -> BufferOperation:
    """
    Look up a named batch transform.

    Raises:
        ValueError: Unknown operation name
    """
    factory = BATCH_OPERATIONS.get(name)
    if factory is None:
        raise ValueError(
            f"Unknown operation: {name}. Supported: {', '.join(sorted(BATCH_OPERATIONS))}"
        )
    return factory(value)
