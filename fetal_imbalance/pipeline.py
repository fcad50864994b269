"""Top-level orchestration for the class-imbalance comparison."""
from __future__ import annotations

import logging
from collections.abc import Sequence

import pandas as pd

from .config import DEFAULT_CONFIG, PipelineConfig
from .data_loader import FetalHealthLoader
from .data_models import (
    STRATEGIES,
    DataValidationResult,
    Dataset,
    ExperimentResult,
    PipelineResult,
    RebalancePolicy,
)
from .errors import InvalidPolicy
from .evaluation import evaluate
from .modeling import SVMTrainer, Trainer
from .rebalancing import Rebalancer
from .reporting import ReportGenerator

logger = logging.getLogger(__name__)

BASELINE = "baseline"
COST_SENSITIVE = "cost-sensitive"
KNOWN_STRATEGIES = (BASELINE, *STRATEGIES, COST_SENSITIVE)


def _fingerprint(dataset: Dataset) -> int:
    return int(pd.util.hash_pandas_object(dataset.frame, index=True).sum())


class ImbalancePipeline:
    """Runs one train/evaluate experiment per rebalancing strategy.

    The train split is rebalanced (or weighted) per strategy; the test split is
    shared by all experiments and checked to be unchanged at the end.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        trainer: Trainer | None = None,
        rebalancer: Rebalancer | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.loader = FetalHealthLoader(self.config.paths, self.config.schema, self.config.model)
        self.rebalancer = rebalancer or Rebalancer()
        self.trainer = trainer or SVMTrainer(self.config.model, self.config.paths.model_dir)
        self.reporter = ReportGenerator(self.config.paths)
        self._data_health: DataValidationResult | None = None

    @property
    def data_health(self) -> DataValidationResult | None:
        return self._data_health

    def run(self, persist_report: bool = True) -> PipelineResult:
        dataset, validation = self.loader.load()
        self._data_health = validation
        train, test = self.loader.split(dataset)
        experiments = self.run_experiments(train, test)

        report_path = None
        if persist_report:
            report_path = self.reporter.create_report(
                experiments=experiments,
                data_health=validation,
                class_names=dict(zip(self.config.schema.classes, self.config.schema.class_names)),
                train_rows=len(train),
                test_rows=len(test),
            )

        return PipelineResult(
            experiments=experiments,
            train_rows=len(train),
            test_rows=len(test),
            report_path=report_path,
            data_health=validation,
        )

    def run_experiments(
        self, train: Dataset, test: Dataset, strategies: Sequence[str] | None = None
    ) -> dict[str, ExperimentResult]:
        strategies = tuple(strategies or self.config.balancing.strategies)
        unknown = [name for name in strategies if name not in KNOWN_STRATEGIES]
        if unknown:
            raise InvalidPolicy(
                f"Unknown strategies {unknown}",
                hint=f"choose from {', '.join(KNOWN_STRATEGIES)}",
            )

        test_hash = _fingerprint(test)
        experiments = {name: self.run_experiment(name, train, test) for name in strategies}
        if _fingerprint(test) != test_hash:
            raise RuntimeError("Held-out test split was modified during the experiments")
        return experiments

    def run_experiment(self, strategy: str, train: Dataset, test: Dataset) -> ExperimentResult:
        balancing = self.config.balancing
        weights = None
        rebalanced = train
        if strategy == COST_SENSITIVE:
            weights = self.rebalancer.compute_class_weights(train)
        elif strategy != BASELINE:
            policy = RebalancePolicy(
                strategy=strategy,
                target_ratio=balancing.target_ratio,
                neighbors=balancing.neighbors,
                seed=balancing.seed,
            )
            rebalanced = self.rebalancer.rebalance(train, policy)

        logger.info(f"[{strategy}] training on {len(rebalanced)} rows: {rebalanced.distribution().as_dict()}")
        model = self.trainer.train(rebalanced, weights=weights, name=strategy)
        predictions = model.predict(test.frame)
        report = evaluate(predictions, test.labels, test.classes)
        logger.info(f"[{strategy}] test accuracy={report.accuracy:.3f}, macro F1={report.macro_f1:.3f}")

        return ExperimentResult(
            strategy=strategy,
            distribution_before=train.distribution(),
            distribution_after=rebalanced.distribution(),
            best_params=getattr(model, "best_params", {}),
            cv_score=getattr(model, "cv_score", float("nan")),
            report=report,
            model_path=getattr(model, "model_path", None),
            class_weights=weights,
        )
