"""
Report writers for ``analyze`` results.

Each writer turns an ordered sequence of ``(path, AnalysisReport)`` pairs
into a file; a path analyzed twice appears twice.
New formats subclass ResultWriter and register in ``create_result_writer``.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple, Type

from wavcraft.core.models import AnalysisReport

WIDTH = 70

FileReport = Tuple[Path, AnalysisReport]

logger = logging.getLogger(__name__)


def summarize(reports: Sequence[FileReport]) -> Dict[str, Any]:
    """Totals shared by every report format."""
    count = len(reports)
    return {
        'total_files': count,
        'total_duration': sum(r.duration for _, r in reports),
        'average_rms': sum(r.rms_level for _, r in reports) / count if count else 0.0,
        'maximum_peak': max((r.peak_level for _, r in reports), default=0),
        'clipping_files': sum(1 for _, r in reports if r.is_clipping),
    }


class ResultWriter(ABC):
    """Writes analysis reports to a path, creating parent directories."""

    def write(self, reports: Sequence[FileReport], output_path: Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render(reports), encoding='utf-8')
        logger.info(f"Wrote {len(reports)} reports to {output_path}")

    @abstractmethod
    def render(self, reports: Sequence[FileReport]) -> str:
        """Report file contents."""


class TextResultWriter(ResultWriter):
    """Plain-text report, one block per file followed by totals."""

    def __init__(self, include_timestamp: bool = True):
        self.include_timestamp = include_timestamp

    def render(self, reports: Sequence[FileReport]) -> str:
        lines = ["=" * WIDTH, "WAVCRAFT ANALYSIS REPORT", "=" * WIDTH]
        if self.include_timestamp:
            lines.append(f"Generated: {datetime.now():%Y-%m-%d %H:%M:%S}")
        lines += [f"Total Files Analyzed: {len(reports)}", "=" * WIDTH, ""]

        for path, report in reports:
            lines += self._file_block(Path(path), report)

        totals = summarize(reports)
        lines += [
            "-" * WIDTH,
            "TOTALS",
            "-" * WIDTH,
            f"Total Duration: {totals['total_duration']:.3f}s",
            f"Average RMS: {totals['average_rms']:.1f}",
            f"Maximum Peak: {totals['maximum_peak']}",
            f"Files Clipping: {totals['clipping_files']}",
            "=" * WIDTH,
        ]
        return "\n".join(lines) + "\n"

    @staticmethod
    def _file_block(path: Path, report: AnalysisReport) -> List[str]:
        clipping = f"{report.clipping_percentage:.3f}%"
        if report.is_clipping:
            clipping += " (CLIPPING)"
        return [
            "-" * WIDTH,
            f"FILE: {path.name}",
            f"PATH: {path}",
            "-" * WIDTH,
            f"Duration: {report.duration:.3f}s",
            f"Format: {report.sample_rate} Hz, {report.bit_depth}-bit, "
            f"{report.num_channels} ch",
            f"RMS Level: {report.rms_level:.1f}",
            f"Peak Level: {report.peak_level}",
            f"Dynamic Range: {report.dynamic_range:.2f}",
            f"Clipping: {clipping}",
            f"File Size: {report.file_size} bytes",
            "",
        ]


class JSONResultWriter(ResultWriter):
    """JSON document with a per-file report list, plus totals."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def render(self, reports: Sequence[FileReport]) -> str:
        document = {
            'generated': datetime.now().isoformat(),
            **summarize(reports),
            'results': [
                {'file': str(path), **report.to_dict()} for path, report in reports
            ],
        }
        return json.dumps(document, indent=self.indent)


WRITERS: Dict[str, Type[ResultWriter]] = {
    'text': TextResultWriter,
    'txt': TextResultWriter,
    'json': JSONResultWriter,
}


def create_result_writer(format: str = "text", **kwargs: Any) -> ResultWriter:
    """
    Writer for *format* ("text", "txt" or "json").

    Raises:
        ValueError: Unknown format
    """
    writer_class = WRITERS.get(format.lower())
    if writer_class is None:
        raise ValueError(f"Unknown format: {format}. Supported: {', '.join(WRITERS)}")
    return writer_class(**kwargs)
