from __future__ import annotations

from rich import box
from rich.console import Console
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from histokit.contracts import Reporter
from histokit.snapshot import Snapshot

BAR_CHAR = "∎"


class RichReporter(Reporter):
    """Render a snapshot as a bucket table with proportional bars."""

    def __init__(self, console: Console | None = None, bar_width: int = 50) -> None:
        if bar_width <= 0:
            raise ValueError("bar_width must be positive.")
        self._console = console or Console()
        self._bar_width = bar_width

    def render(self, snapshot: Snapshot, title: str) -> None:
        self._console.print()
        self._console.print(f"Histogram {title}", style="bold underline")
        self._console.print(Rule(style="dim"))
        self._console.print(self._build_summary_section(snapshot))
        self._console.print()
        self._render_buckets(snapshot)

    @staticmethod
    def _build_summary_section(snapshot: Snapshot) -> Table:
        table = Table.grid(padding=(0, 3))
        table.add_column("Field", style="bold cyan")
        table.add_column("Value")

        samples = snapshot.total_count()
        table.add_row("samples:", f"{samples:,}")
        table.add_row("sum:", f"{snapshot.sum():,}")
        mean = f"{snapshot.sum() / samples:.3f}" if samples else "n/a"
        table.add_row("mean:", mean)
        table.add_row("range:", f"{snapshot.min}..{snapshot.max}")
        table.add_row("buckets:", str(snapshot.bucket_count()))
        return table

    def _render_buckets(self, snapshot: Snapshot) -> None:
        if snapshot.is_empty():
            self._console.print("[dim]No samples recorded[/dim]")
            return

        buckets = list(snapshot.buckets())
        tallest = max(bucket.count for bucket in buckets)
        count_per_char = max(tallest // self._bar_width, 1)
        self._console.print(
            f"Each {BAR_CHAR} is a count of {count_per_char}", style="dim"
        )

        table = Table(
            box=box.SIMPLE_HEAD,
            show_header=True,
            header_style="bold",
            padding=(0, 1),
        )
        table.add_column("Start", justify="right")
        table.add_column("End", justify="right")
        table.add_column("Count", justify="right")
        table.add_column("Distribution", no_wrap=True)

        sentinel = snapshot.ranges.sentinel
        for bucket in buckets:
            end = "INF" if bucket.end == sentinel else str(bucket.end)
            table.add_row(
                str(bucket.start),
                end,
                str(bucket.count),
                Text(BAR_CHAR * (bucket.count // count_per_char), style="cyan"),
            )
        self._console.print(table)
