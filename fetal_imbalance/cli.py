"""Console entry point for the fetal-health imbalance comparison."""
from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from .config import DEFAULT_CONFIG, PipelineConfig
from .pipeline import KNOWN_STRATEGIES, ImbalancePipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compare undersampling, oversampling, SMOTE and cost-sensitive SVMs on fetal health data"
    )
    parser.add_argument("--data", type=Path, default=None, help="Path to the fetal_health.csv file")
    parser.add_argument("--output-dir", type=Path, default=None, help="Directory for models and reports")
    parser.add_argument(
        "--strategies", nargs="+", choices=KNOWN_STRATEGIES, default=None, help="Strategies to compare"
    )
    parser.add_argument("--ratio", type=float, default=None, help="Target majority:minority ratio")
    parser.add_argument("--neighbors", type=int, default=None, help="Neighbours for synthetic oversampling")
    parser.add_argument("--seed", type=int, default=None, help="Seed for every rebalancing step")
    parser.add_argument("--no-report", action="store_true", help="Skip writing the markdown report")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return parser


def apply_overrides(config: PipelineConfig, args: argparse.Namespace) -> PipelineConfig:
    paths = config.paths
    balancing = config.balancing
    if args.data is not None:
        paths = replace(paths, dataset_csv=args.data)
    if args.output_dir is not None:
        paths = replace(paths, model_dir=args.output_dir / "models", report_dir=args.output_dir / "reports")
    if args.strategies:
        balancing = replace(balancing, strategies=tuple(args.strategies))
    if args.ratio is not None:
        balancing = replace(balancing, target_ratio=args.ratio)
    if args.neighbors is not None:
        balancing = replace(balancing, neighbors=args.neighbors)
    if args.seed is not None:
        balancing = replace(balancing, seed=args.seed)
    return replace(config, paths=paths, balancing=balancing)


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = apply_overrides(DEFAULT_CONFIG, args)
    pipeline = ImbalancePipeline(config)
    result = pipeline.run(persist_report=not args.no_report)

    if pipeline.data_health is not None:
        dh = pipeline.data_health
        print(
            f"Rows after cleaning: {dh.row_count} | dropped duplicates: {dh.dropped_duplicates} | "
            f"dropped incomplete: {dh.dropped_missing} | train/test: {result.train_rows}/{result.test_rows}"
        )
    for name, experiment in result.experiments.items():
        report = experiment.report
        print(
            "{name:<22} accuracy: {acc:.3f}  macro F1: {macro:.3f}  weighted F1: {weighted:.3f}".format(
                name=name, acc=report.accuracy, macro=report.macro_f1, weighted=report.weighted_f1
            )
        )
    if result.report_path is not None:
        print(f"Markdown report stored at: {result.report_path}")


if __name__ == "__main__":
    main()
