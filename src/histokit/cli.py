from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path

from rich.console import Console

from histokit.errors import InvalidBoundariesError, SerializationError
from histokit.factory import factory_get
from histokit.histogram import Histogram
from histokit.models import SerializedHistogram
from histokit.ranges import BucketRanges
from histokit.reporters import RichReporter
from histokit.serializer import (
    parse_document,
    serialize,
    serialize_persist,
    snapshot_from_persisted,
    snapshot_from_serialized,
)
from histokit.snapshot import Snapshot


class SampleParseError(ValueError):
    """A line of sample input is not an integer."""


def _parse_bounds(text: str) -> list[int]:
    try:
        return [int(part) for part in text.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Boundaries must be comma-separated integers: {text!r}"
        ) from None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="histo", description="histokit CLI")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="ERROR",
        help="Root logging level (default: ERROR)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    record = subparsers.add_parser(
        "record", help="Record samples (one integer per line) into a histogram"
    )
    record.add_argument(
        "--ranges",
        type=_parse_bounds,
        required=True,
        help="Comma-separated ascending bucket lower bounds",
    )
    record.add_argument(
        "--sentinel",
        type=int,
        default=None,
        help="Overflow threshold closing the last bucket (default: INT32_MAX)",
    )
    record.add_argument("--min", type=int, default=1, help="Declared minimum")
    record.add_argument("--max", type=int, default=500, help="Declared maximum")
    record.add_argument(
        "--input",
        type=str,
        default=None,
        help="File with samples (default: stdin)",
    )
    record.add_argument(
        "--output",
        type=str,
        choices=["table", "serialized", "persisted"],
        default="table",
        help="Output format (default: table)",
    )

    show = subparsers.add_parser(
        "show", help="Render a serialized or persisted histogram document"
    )
    show.add_argument("document", type=str, help="Path to the JSON document")
    show.add_argument(
        "--ranges",
        type=_parse_bounds,
        default=None,
        help="Bucket lower bounds; required for persisted documents",
    )
    show.add_argument(
        "--sentinel",
        type=int,
        default=None,
        help="Overflow threshold closing the last bucket (default: INT32_MAX)",
    )
    return parser


def _read_samples(lines: Iterable[str]) -> list[int]:
    samples: list[int] = []
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped:
            continue
        try:
            samples.append(int(stripped))
        except ValueError:
            raise SampleParseError(
                f"Invalid sample on line {number}: {stripped!r}"
            ) from None
    return samples


def _record(histogram: Histogram, source: str | None) -> None:
    if source is None:
        histogram.add_many(_read_samples(sys.stdin))
        return
    with open(source, encoding="utf-8") as handle:
        histogram.add_many(_read_samples(handle))


def _run_record(args: argparse.Namespace, *, console: Console) -> int:
    bounds: list[int] = args.ranges
    if args.sentinel is not None:
        bounds = [*bounds, args.sentinel]
    try:
        histogram = factory_get(args.min, args.max, len(args.ranges), bounds)
    except InvalidBoundariesError as exc:
        console.print(f"Invalid bucket boundaries: {exc}", markup=False)
        return 2

    with histogram:
        try:
            _record(histogram, args.input)
        except FileNotFoundError:
            console.print(f"Sample file not found: {args.input}", markup=False)
            return 2
        except (SampleParseError, TypeError) as exc:
            console.print(str(exc), markup=False)
            return 1

        if args.output == "serialized":
            console.out(serialize(histogram), highlight=False)
        elif args.output == "persisted":
            console.out(serialize_persist(histogram), highlight=False)
        else:
            title = Path(args.input).name if args.input else "<stdin>"
            RichReporter(console).render(histogram.snapshot(), title)
    return 0


def _load_snapshot(args: argparse.Namespace, text: str) -> Snapshot:
    document = parse_document(text)
    if isinstance(document, SerializedHistogram):
        return snapshot_from_serialized(document)
    if args.ranges is None:
        raise InvalidBoundariesError("Persisted documents need --ranges.")
    return snapshot_from_persisted(
        document, BucketRanges(args.ranges, sentinel=args.sentinel)
    )


def _run_show(args: argparse.Namespace, *, console: Console) -> int:
    path = Path(args.document)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        console.print(f"Document not found: {path}", markup=False)
        return 2

    try:
        snapshot = _load_snapshot(args, text)
    except InvalidBoundariesError as exc:
        console.print(str(exc), markup=False)
        return 2
    except SerializationError as exc:
        console.print(f"Unreadable document: {exc}", markup=False)
        return 1

    with snapshot:
        RichReporter(console).render(snapshot, path.name)
    return 0


def run_cli(
    argv: Sequence[str] | None = None, *, console: Console | None = None
) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.getLogger().setLevel(getattr(logging, args.log_level))
    out_console = console or Console()
    if args.command == "record":
        return _run_record(args, console=out_console)
    if args.command == "show":
        return _run_show(args, console=out_console)
    parser.error("Unknown command.")
    return 2


def main() -> None:
    raise SystemExit(run_cli())
