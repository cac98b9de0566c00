"""Report building and rendering."""

from typing import Iterable, Sequence
import json

from ..models.result import ClassificationResult, Report, ScanWarning


EXIT_OK = 0
EXIT_FATAL = 1
EXIT_LEAKS = 2

LEFTOVER_HEADER = "Leftover matches:"
NO_LEAKS_MESSAGE = "No memory leaks found (hopefully)."
LEAKS_HEADER = "Found memory leaks:"


class LeakReporter:
    """Turn a classification result into the final report."""

    def build_report(
        self,
        symbols: Sequence[str],
        result: ClassificationResult,
        warnings: Iterable[ScanWarning] = (),
        files_scanned: int = 0,
    ) -> Report:
        """Compute leftover symbols and collect leaks.

        Leftover keeps scan order and duplicates; leaks are the flagged
        create symbols, each listed once.
        """
        leftover = tuple(s for s in symbols if s not in result.claimed)
        return Report(
            leftover=leftover,
            leaks=tuple(result.flagged),
            warnings=tuple(warnings),
            files_scanned=files_scanned,
        )

    def render(self, report: Report) -> str:
        """Render the report as plain text for stdout."""
        # print(header, items) puts a space between the two arguments
        lines = [f"{LEFTOVER_HEADER}\n " + ", ".join(report.leftover)]

        if not report.has_leaks:
            lines.append(NO_LEAKS_MESSAGE)
        else:
            lines.append(LEAKS_HEADER)
            lines.extend(report.leaks)

        return "\n".join(lines) + "\n"

    def render_json(self, report: Report) -> str:
        return json.dumps(report.to_dict(), indent=2, ensure_ascii=False) + "\n"

    def render_warnings(self, report: Report) -> str:
        """Render scan warnings for stderr; empty when there are none."""
        if not report.warnings:
            return ""

        lines = [f"Warnings ({len(report.warnings)}):"]
        lines.extend(f"  {w}" for w in report.warnings)
        return "\n".join(lines) + "\n"

    def exit_code(self, report: Report, fail_on_leaks: bool = True) -> int:
        """Map the report to a process exit status.

        Args:
            report: Final report
            fail_on_leaks: Return EXIT_LEAKS when leaks were found

        Returns:
            EXIT_OK or EXIT_LEAKS
        """
        if report.has_leaks and fail_on_leaks:
            return EXIT_LEAKS
        return EXIT_OK
