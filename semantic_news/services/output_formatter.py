"""Plain-text rendering of search comparisons and ingestion summaries.

Each pairing of a :class:`ComparisonReport` becomes its own table: a title
line with the store kind and search time, then ``Score | Result`` rows (or
the pairing's error).  Tables from pairings with different dimensions are
printed side by side only; their scores are not comparable.
"""

from __future__ import annotations

from semantic_news.models.benchmark import ComparisonReport, PairingResult
from semantic_news.models.news import IngestionResult
from semantic_news.utils.logging import get_logger

_SCORE_WIDTH = 7
_RESULT_WIDTH = 80


def _truncate(text: str, width: int) -> str:
    text = " ".join(text.split())
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


class OutputFormatter:
    """Renders harness and ingestion results as text for the CLI."""

    def __init__(self, result_width: int = _RESULT_WIDTH) -> None:
        self._result_width = result_width
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def format_report(self, report: ComparisonReport) -> str:
        """Render every pairing of *report*, separated by blank lines."""
        tables = [self.format_pairing(pairing) for pairing in report.pairings]
        self._logger.debug("report_formatted", query=report.query, tables=len(tables))
        header = f'Query: "{report.query}" (top {report.top_k})'
        return "\n\n".join([header, *tables])

    def format_pairing(self, pairing: PairingResult) -> str:
        kind = "exact" if pairing.exact else "indexed"
        if pairing.ok:
            title = (
                f"{pairing.label} [{kind}, {pairing.dimension}d] "
                f"search time: {pairing.elapsed_ms:.3f} ms"
            )
        else:
            title = f"{pairing.label} [{kind}, {pairing.dimension}d] FAILED"

        border = "+" + "-" * (_SCORE_WIDTH + 2) + "+" + "-" * (self._result_width + 2) + "+"
        lines = [title, border, self._row("Score", "Result"), border]

        if not pairing.ok:
            lines.append(self._row("", f"{pairing.error_type}: {pairing.error}"))
        elif not pairing.results:
            lines.append(self._row("", "(no results)"))
        else:
            for hit in pairing.results:
                lines.append(self._row(f"{hit.score:.4f}", hit.record.headline))
        lines.append(border)
        return "\n".join(lines)

    def format_ingestion(self, result: IngestionResult) -> str:
        """Summarise one ingestion run in a few lines."""
        if not result.stores_written:
            return (
                f"All stores for {result.provider_name} already contain data "
                f"({', '.join(result.stores_skipped)}); nothing indexed."
            )
        lines = [
            f"Indexed {len(result.records)} items with {result.provider_name} "
            f"in {result.elapsed_seconds:.1f}s",
            f"  lines read: {result.lines_read}, retained: {result.records_retained}",
            f"  written to: {', '.join(result.stores_written)}",
        ]
        if result.stores_skipped:
            lines.append(f"  skipped (already populated): {', '.join(result.stores_skipped)}")
        return "\n".join(lines)

    def format_stats(self, counts: dict[str, int | str]) -> str:
        """Render ``store name -> row count`` (or an error string)."""
        if not counts:
            return "No storage backends configured."
        width = max(len(name) for name in counts)
        return "\n".join(f"{name.ljust(width)}  {count}" for name, count in counts.items())

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _row(self, score: str, result: str) -> str:
        return (
            f"| {score.rjust(_SCORE_WIDTH)} | "
            f"{_truncate(result, self._result_width).ljust(self._result_width)} |"
        )
