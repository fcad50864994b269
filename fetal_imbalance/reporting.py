"""Markdown report comparing the imbalance strategies."""
from __future__ import annotations

from collections.abc import Hashable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from textwrap import dedent

from .config import DataPaths
from .data_models import DataValidationResult, ExperimentResult


class ReportGenerator:
    """Builds lightweight markdown reports for the experiment runs."""

    def __init__(self, paths: DataPaths) -> None:
        self.paths = paths

    def create_report(
        self,
        experiments: Mapping[str, ExperimentResult],
        data_health: DataValidationResult | None,
        class_names: Mapping[Hashable, str] | None = None,
        train_rows: int | None = None,
        test_rows: int | None = None,
    ) -> Path:
        self.paths.report_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        report_path = self.paths.report_dir / "imbalance_report.md"
        class_names = class_names or {}

        header = dedent(
            f"""
            # Fetal health class-imbalance report ({timestamp})
            Each strategy rebalances (or weights) the training split only; all models are scored on the same untouched test split.
            """
        ).strip()

        lines = [header, "", "## Data health"]
        if data_health is None:
            lines.append("- No validation stats available.")
        else:
            lines.extend(
                [
                    f"- Rows after cleaning: {data_health.row_count}",
                    f"- Dropped duplicates: {data_health.dropped_duplicates}",
                    f"- Dropped incomplete rows: {data_health.dropped_missing}",
                    f"- Class counts: {self._format_counts(data_health.class_counts, class_names)}",
                ]
            )
        if train_rows is not None and test_rows is not None:
            lines.append(f"- Train/test rows: {train_rows} / {test_rows}")

        lines.extend(
            [
                "",
                "## Strategy comparison",
                "| Strategy | Train distribution | Best params | CV score | Accuracy | Macro F1 | Weighted F1 |",
                "| --- | --- | --- | --- | --- | --- | --- |",
            ]
        )
        for name, result in experiments.items():
            params = ", ".join(f"{key}={value}" for key, value in result.best_params.items()) or "-"
            lines.append(
                f"| {name} | {self._format_counts(result.distribution_after, class_names)} | {params} | "
                f"{result.cv_score:.3f} | {result.report.accuracy:.3f} | {result.report.macro_f1:.3f} | "
                f"{result.report.weighted_f1:.3f} |"
            )

        for name, result in experiments.items():
            lines.extend(["", f"### {name}"])
            if result.class_weights is not None:
                weights = ", ".join(
                    f"{class_names.get(label, label)}={weight:.3f}" for label, weight in result.class_weights.items()
                )
                lines.append(f"Class weights: {weights}")
                lines.append("")
            lines.append("| Class | Precision | Recall | F1 | Support |")
            lines.append("| --- | --- | --- | --- | --- |")
            for label, metrics in result.report.per_class.items():
                lines.append(
                    f"| {class_names.get(label, label)} | {metrics.precision:.3f} | {metrics.recall:.3f} | "
                    f"{metrics.f1:.3f} | {metrics.support} |"
                )

        content = "\n".join(lines) + "\n"
        report_path.write_text(content, encoding="utf-8")
        return report_path

    @staticmethod
    def _format_counts(counts: Mapping[Hashable, int], class_names: Mapping[Hashable, str]) -> str:
        return ", ".join(f"{class_names.get(label, label)}: {count}" for label, count in counts.items())
