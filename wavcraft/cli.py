"""
WavCraft - WAV Buffer Toolkit CLI

This module provides the command-line interface. It can be invoked as
'wavcraft' from anywhere after installation.

Example usage:
    wavcraft tone 440 2 -o a4.wav --amplitude 0.8
    wavcraft combine intro.wav verse.wav outro.wav -o song.wav
    wavcraft mix drums.wav:0.8 bass.wav:0.6 -o groove.wav
    wavcraft split song.wav 30 -d segments/
    wavcraft batch normalize samples/ -d normalized/ --value 0.9
    wavcraft analyze --recursive samples/ --output-json report.json
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from wavcraft import __version__
from wavcraft.core.batch_processor import BATCH_OPERATIONS, BatchProcessor, build_operation
from wavcraft.core.models import AudioConfig, OperationResult
from wavcraft.core.processor import AudioProcessor, MixInput, create_audio_processor
from wavcraft.core.result_writer import create_result_writer
from wavcraft.utils.config import load_config
from wavcraft.utils.errors import ConfigurationError
from wavcraft.utils.logging import configure_from_section


def print_result(result: OperationResult) -> None:
    """Print an operation result to the console."""
    print("\n" + "=" * 60)
    status = "OK" if result.success else "FAILED"
    print(f"{result.operation.upper()}: {status}")
    print("=" * 60)

    if not result.success:
        print(f"Error: {result.error}")
        return

    if result.output_path:
        print(f"Output: {result.output_path}")
    if result.size is not None:
        print(f"Size: {result.size} bytes")

    for key, value in result.metadata.items():
        if key in ("segments", "results", "files", "failed", "report"):
            continue
        if isinstance(value, float):
            print(f"  {key}: {value:.3f}")
        else:
            print(f"  {key}: {value}")

    for segment in result.get("segments", []):
        print(f"  [{segment.index}] {segment.path.name}: "
              f"{segment.start_time:.2f}s - {segment.end_time:.2f}s")

    for item in result.get("results", []):
        if item.success:
            print(f"  OK   {item.input_path.name} -> {item.output_path}")
        else:
            print(f"  FAIL {item.input_path.name}: {item.error}")

    report = result.get("report")
    if report is not None:
        print(f"  {report.get_summary()}")

    for path, file_report in result.get("files", []):
        print(f"  {Path(path).name}: {file_report.get_summary()}")

    for path, error in result.get("failed", []):
        print(f"  FAIL {Path(path).name}: {error}")


def parse_mix_input(value: str) -> MixInput:
    """Parse ``path`` or ``path:volume``."""
    path, sep, volume = value.rpartition(":")
    if sep and path:
        try:
            return MixInput(Path(path), float(volume))
        except ValueError:
            pass
    return MixInput(Path(value))


def _generation_config(args: argparse.Namespace, base: AudioConfig) -> AudioConfig:
    return AudioConfig(
        sample_rate=args.sample_rate or base.sample_rate,
        bit_depth=args.bit_depth or base.bit_depth,
        num_channels=args.channels or base.num_channels,
        amplitude=base.amplitude if args.amplitude is None else args.amplitude,
    )


def _add_format_options(parser: argparse.ArgumentParser, amplitude: bool = False) -> None:
    parser.add_argument("--sample-rate", "-r", type=int, default=None, help="Sample rate in Hz")
    parser.add_argument("--bit-depth", "-b", type=int, default=None,
                        choices=[8, 16, 24, 32], help="Bits per sample")
    parser.add_argument("--channels", "-c", type=int, default=None, help="Channel count")
    if amplitude:
        parser.add_argument("--amplitude", "-a", type=float, default=None,
                            help="Peak amplitude in [0, 1]")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="wavcraft",
        description="Generate, edit, convert and analyze PCM WAV files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  wavcraft tone 440 1 -o a4.wav
  wavcraft silence 3 -o gap.wav --channels 2
  wavcraft combine a.wav b.wav -o ab.wav
  wavcraft mix a.wav:0.5 b.wav:0.5 -o mixed.wav
  wavcraft extract song.wav 10 20 -o chorus.wav
  wavcraft split song.wav 30 -d parts/
  wavcraft normalize quiet.wav -o loud.wav --target 0.9
  wavcraft crossfade a.wav b.wav -o ab.wav --duration 2
  wavcraft convert in.wav -o out.wav --sample-rate 48000 --bit-depth 24
  wavcraft loop beat.wav -o beat_x4.wav --repetitions 4
  wavcraft batch reverse samples/ -d reversed/
  wavcraft analyze samples/ --output-file report.txt
        """
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to configuration file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    parser.add_argument("--version", action="version", version=f"WavCraft {__version__}")

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    p = commands.add_parser("tone", help="Generate a sine tone")
    p.add_argument("frequency", type=float, help="Frequency in Hz")
    p.add_argument("duration", type=float, help="Duration in seconds")
    p.add_argument("--output", "-o", type=Path, required=True)
    _add_format_options(p, amplitude=True)

    p = commands.add_parser("silence", help="Generate silence")
    p.add_argument("duration", type=float, help="Duration in seconds")
    p.add_argument("--output", "-o", type=Path, required=True)
    _add_format_options(p)

    p = commands.add_parser("combine", help="Join files end to end")
    p.add_argument("inputs", type=Path, nargs="+")
    p.add_argument("--output", "-o", type=Path, required=True)

    p = commands.add_parser("mix", help="Overlay files (PATH or PATH:VOLUME)")
    p.add_argument("inputs", type=parse_mix_input, nargs="+")
    p.add_argument("--output", "-o", type=Path, required=True)

    p = commands.add_parser("extract", help="Extract a time range")
    p.add_argument("input", type=Path)
    p.add_argument("start", type=float, help="Start time in seconds")
    p.add_argument("end", type=float, help="End time in seconds")
    p.add_argument("--output", "-o", type=Path, required=True)

    p = commands.add_parser("split", help="Split into fixed-length segments")
    p.add_argument("input", type=Path)
    p.add_argument("segment_duration", type=float, help="Segment length in seconds")
    p.add_argument("--output-dir", "-d", type=Path, required=True)

    p = commands.add_parser("normalize", help="Scale peak to a target level")
    p.add_argument("input", type=Path)
    p.add_argument("--output", "-o", type=Path, required=True)
    p.add_argument("--target", type=float, default=None, help="Target peak in [0, 1]")

    p = commands.add_parser("crossfade", help="Fade one file into another")
    p.add_argument("first", type=Path)
    p.add_argument("second", type=Path)
    p.add_argument("--output", "-o", type=Path, required=True)
    p.add_argument("--duration", type=float, default=None, help="Fade length in seconds")

    p = commands.add_parser("convert", help="Change sample rate, bit depth or channels")
    p.add_argument("input", type=Path)
    p.add_argument("--output", "-o", type=Path, required=True)
    _add_format_options(p)

    p = commands.add_parser("loop", help="Repeat a file")
    p.add_argument("input", type=Path)
    p.add_argument("--output", "-o", type=Path, required=True)
    p.add_argument("--repetitions", "-n", type=int, default=None)

    p = commands.add_parser("batch", help="Apply one transform to many files")
    p.add_argument("operation", choices=sorted(BATCH_OPERATIONS))
    p.add_argument("inputs", type=Path, nargs="+", help="Files or directories")
    p.add_argument("--output-dir", "-d", type=Path, required=True)
    p.add_argument("--value", type=float, default=None,
                   help="Operation argument (gain, fade seconds, target level, sample rate)")
    p.add_argument("--suffix", type=str, default=None)
    p.add_argument("--recursive", action="store_true", help="Search directories recursively")

    p = commands.add_parser("analyze", help="Report levels for one or more files")
    p.add_argument("inputs", type=Path, nargs="+", help="Files or directories")
    p.add_argument("--recursive", action="store_true", help="Search directories recursively")
    p.add_argument("--output-file", type=Path, default=None, help="Save text report")
    p.add_argument("--output-json", type=Path, default=None, help="Save JSON report")

    return parser


def _collect(processor: AudioProcessor, inputs: List[Path], recursive: bool) -> List[Path]:
    return BatchProcessor(processor.loader).collect_files(inputs, recursive=recursive)


def run_command(args: argparse.Namespace, processor: AudioProcessor) -> OperationResult:
    """Dispatch parsed arguments to the matching processor operation."""
    command = args.command

    if command == "tone":
        config = _generation_config(args, processor.generation_config)
        return processor.generate_tone_file(args.frequency, args.duration, args.output, config)
    if command == "silence":
        args.amplitude = None
        config = _generation_config(args, processor.generation_config)
        return processor.generate_silence_file(args.duration, args.output, config)
    if command == "combine":
        return processor.combine_sequentially(args.inputs, args.output)
    if command == "mix":
        return processor.mix_together(args.inputs, args.output)
    if command == "extract":
        return processor.extract_segment(args.input, args.output, args.start, args.end)
    if command == "split":
        return processor.split_into_segments(args.input, args.output_dir, args.segment_duration)
    if command == "normalize":
        return processor.normalize_volume(args.input, args.output, args.target)
    if command == "crossfade":
        return processor.crossfade(args.first, args.second, args.output, args.duration)
    if command == "convert":
        return processor.convert_format(
            args.input, args.output,
            sample_rate=args.sample_rate, bit_depth=args.bit_depth, channels=args.channels,
        )
    if command == "loop":
        return processor.create_loop(args.input, args.output, args.repetitions)
    if command == "batch":
        files = _collect(processor, args.inputs, args.recursive)
        return processor.batch_process(
            files, args.output_dir, build_operation(args.operation, args.value), args.suffix
        )
    if command == "analyze":
        files = _collect(processor, args.inputs, args.recursive)
        result = processor.analyze_multiple(files)
        if result.success:
            _save_reports(result, args.output_file, args.output_json)
        return result

    raise ValueError(f"Unknown command: {command}")


def _save_reports(
    result: OperationResult, output_txt: Optional[Path], output_json: Optional[Path]
) -> None:
    outputs: Tuple[Tuple[str, Optional[Path]], ...] = (("text", output_txt), ("json", output_json))
    for format, path in outputs:
        if path:
            create_result_writer(format).write(result.get("files", []), path)
            print(f"Report saved to: {path}")


def run(argv: Optional[List[str]] = None) -> int:
    """
    Parse *argv*, run one command and return the exit code.

    Returns:
        0 on success, 1 on failure
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(str(args.config) if args.config else None)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 1

    configure_from_section(config.get("logging", {}), verbose=args.verbose)

    def progress_callback(current: int, total: int, file_path: Path) -> None:
        print(f"[{current}/{total}] Processing: {file_path.name}")

    processor = create_audio_processor(config, progress_callback=progress_callback)

    try:
        result = run_command(args, processor)
    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    print_result(result)
    if not result.success or result.get("failed_count") or result.get("failed"):
        return 1
    return 0


def main():
    """Main entry point for the wavcraft command."""
    sys.exit(run())


if __name__ == "__main__":
    main()
