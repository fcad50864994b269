"""Dataclasses used across the fetal-health imbalance project."""
from __future__ import annotations

from collections.abc import Hashable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from .errors import ClassMismatch, InvalidPolicy

FEATURE_KINDS = ("numeric", "integer", "ordinal")
STRATEGIES = ("undersample", "oversample-duplicate", "oversample-synthetic")


@dataclass(frozen=True)
class FeatureSpec:
    """Declared type of a single feature column."""

    name: str
    kind: str = "numeric"
    levels: tuple[float, ...] | None = None
    bounds: tuple[float, float] | None = None

    def __post_init__(self) -> None:
        if self.kind not in FEATURE_KINDS:
            raise ValueError(f"Unknown feature kind {self.kind!r} for {self.name}; expected one of {FEATURE_KINDS}")
        if self.kind == "ordinal" and not self.levels:
            raise ValueError(f"Ordinal feature {self.name} needs its levels declared")


@dataclass(frozen=True)
class FeatureSchema:
    """Ordered collection of feature declarations."""

    features: tuple[FeatureSpec, ...]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.features)

    def __getitem__(self, name: str) -> FeatureSpec:
        for spec in self.features:
            if spec.name == name:
                return spec
        raise KeyError(name)

    def __iter__(self) -> Iterator[FeatureSpec]:
        return iter(self.features)

    def __len__(self) -> int:
        return len(self.features)

    @classmethod
    def numeric(cls, names: tuple[str, ...] | list[str]) -> FeatureSchema:
        return cls(features=tuple(FeatureSpec(name) for name in names))


class ClassDistribution(Mapping):
    """Read-only view of class label -> record count."""

    def __init__(self, counts: Mapping[Hashable, int]) -> None:
        self._counts = dict(counts)

    def __getitem__(self, label: Hashable) -> int:
        return self._counts[label]

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"ClassDistribution({self._counts!r})"

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    @property
    def majority(self) -> Hashable:
        return max(self._counts, key=self._counts.__getitem__)

    @property
    def minority(self) -> Hashable:
        return min(self._counts, key=self._counts.__getitem__)

    @property
    def ratio(self) -> float:
        """Majority count divided by minority count."""
        minority_count = self._counts[self.minority]
        if minority_count == 0:
            return float("inf")
        return self._counts[self.majority] / minority_count

    def as_dict(self) -> dict[Hashable, int]:
        return dict(self._counts)


@dataclass(frozen=True, eq=False)
class Dataset:
    """Labeled records: feature columns from ``schema`` plus one label column.

    The wrapped frame is treated as read-only. Rebalancing returns new
    ``Dataset`` instances built with :meth:`with_frame`.
    """

    frame: pd.DataFrame
    label_column: str
    classes: tuple[Hashable, ...]
    schema: FeatureSchema

    def __post_init__(self) -> None:
        missing = [name for name in (*self.schema.names, self.label_column) if name not in self.frame.columns]
        if missing:
            raise ValueError(f"Dataset frame is missing columns: {missing}")
        unknown = sorted(set(self.frame[self.label_column].unique()) - set(self.classes), key=str)
        if unknown:
            raise ClassMismatch(
                f"Labels {unknown} are not in the declared class set {list(self.classes)}",
                hint="declare every label in SchemaConfig.classes or clean the label column first",
            )

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def features(self) -> pd.DataFrame:
        return self.frame[list(self.schema.names)]

    @property
    def labels(self) -> pd.Series:
        return self.frame[self.label_column]

    def distribution(self) -> ClassDistribution:
        counts = self.labels.value_counts()
        return ClassDistribution({label: int(counts.get(label, 0)) for label in self.classes})

    def records_of(self, label: Hashable) -> pd.DataFrame:
        if label not in self.classes:
            raise ClassMismatch(f"Class {label!r} is not in the declared class set {list(self.classes)}")
        return self.frame.loc[self.labels == label]

    def with_frame(self, frame: pd.DataFrame) -> Dataset:
        return Dataset(frame=frame, label_column=self.label_column, classes=self.classes, schema=self.schema)


@dataclass(frozen=True)
class RebalancePolicy:
    """How a training set should be rebalanced for one experiment run."""

    strategy: str = "undersample"
    target_ratio: float = 4.0
    neighbors: int = 5
    seed: int = 29

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise InvalidPolicy(
                f"Unknown rebalancing strategy {self.strategy!r}",
                hint=f"choose one of {', '.join(STRATEGIES)}",
            )
        if not self.target_ratio > 0:
            raise InvalidPolicy(f"target_ratio must be positive, got {self.target_ratio}")
        if self.neighbors < 1:
            raise InvalidPolicy(f"neighbors must be at least 1, got {self.neighbors}")


class ClassWeights(Mapping):
    """Class label -> positive weight for cost-sensitive training."""

    def __init__(self, weights: Mapping[Hashable, float]) -> None:
        self._weights = dict(weights)

    def __getitem__(self, label: Hashable) -> float:
        return self._weights[label]

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def __repr__(self) -> str:
        return f"ClassWeights({self._weights!r})"

    def weight(self, label: Hashable) -> float:
        if label not in self._weights:
            raise ClassMismatch(f"No weight computed for class {label!r}; known classes: {list(self._weights)}")
        return self._weights[label]

    def to_sklearn(self) -> dict[Hashable, float]:
        """Dict usable as the ``class_weight`` argument of scikit-learn estimators."""
        return {label: float(weight) for label, weight in self._weights.items()}


@dataclass(frozen=True)
class ConfusionCounts:
    """One-vs-rest counts for a single class."""

    tp: int
    fp: int
    fn: int
    tn: int

    @property
    def support(self) -> int:
        return self.tp + self.fn


@dataclass(frozen=True)
class ClassMetrics:
    precision: float
    recall: float
    f1: float
    support: int


@dataclass(frozen=True)
class EvaluationReport:
    """Imbalance-aware metrics for one (predictions, ground truth) pair."""

    classes: tuple[Hashable, ...]
    per_class: Mapping[Hashable, ClassMetrics]
    accuracy: float
    macro_f1: float
    weighted_f1: float
    confusion_matrix: tuple[tuple[int, ...], ...]

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "class": label,
                "precision": metrics.precision,
                "recall": metrics.recall,
                "f1": metrics.f1,
                "support": metrics.support,
            }
            for label, metrics in self.per_class.items()
        ]
        return pd.DataFrame(rows).set_index("class")


@dataclass(frozen=True)
class DataValidationResult:
    """Information about dataset health after cleaning."""

    row_count: int
    dropped_duplicates: int
    dropped_missing: int
    class_counts: Mapping[Hashable, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ExperimentResult:
    """Outcome of a single rebalancing strategy run."""

    strategy: str
    distribution_before: ClassDistribution
    distribution_after: ClassDistribution
    best_params: Mapping[str, Any]
    cv_score: float
    report: EvaluationReport
    model_path: Path | None = None
    class_weights: ClassWeights | None = None


@dataclass(frozen=True)
class PipelineResult:
    """Snapshot of the complete pipeline execution."""

    experiments: Mapping[str, ExperimentResult]
    train_rows: int
    test_rows: int
    report_path: Path | None
    data_health: DataValidationResult | None = None
