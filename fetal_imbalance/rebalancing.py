"""Rebalancing strategies for imbalanced multi-class training sets."""
from __future__ import annotations

import logging
import math
from collections.abc import Hashable

import numpy as np
import pandas as pd
from sklearn.neighbors import NearestNeighbors

from .data_models import ClassDistribution, ClassWeights, Dataset, FeatureSchema, FeatureSpec, RebalancePolicy
from .errors import ClassMismatch, InsufficientNeighbors, InvalidPolicy

logger = logging.getLogger(__name__)


class Rebalancer:
    """Builds rebalanced copies of a training ``Dataset``.

    The rebalancer keeps no state between calls. Each operation creates its own
    ``numpy.random.Generator`` from ``policy.seed``, so the same input and seed
    always give the same output, record for record. Input datasets are only
    read; the held-out test split must never be passed here.
    """

    def rebalance(self, dataset: Dataset, policy: RebalancePolicy) -> Dataset:
        handlers = {
            "undersample": self.undersample,
            "oversample-duplicate": self.oversample_duplicate,
            "oversample-synthetic": self.oversample_synthetic,
        }
        handler = handlers.get(policy.strategy)
        if handler is None:
            raise InvalidPolicy(f"Unknown rebalancing strategy {policy.strategy!r}")
        return handler(dataset, policy)

    def undersample(self, dataset: Dataset, policy: RebalancePolicy) -> Dataset:
        """Reduce every class larger than ``ratio * minority`` (halves up) down to that size.

        Minority records are always kept. Kept records retain their original
        order. Returns the input unchanged when it already satisfies the ratio.
        """
        distribution = self._checked_distribution(dataset, policy)
        if policy.target_ratio >= distribution.ratio:
            logger.info(
                f"Undersampling skipped: current ratio {distribution.ratio:.2f} "
                f"is within target {policy.target_ratio:.2f}"
            )
            return dataset

        minority = distribution.minority
        target = max(1, math.floor(policy.target_ratio * distribution[minority] + 0.5))
        labels = dataset.labels.to_numpy()
        keep = np.ones(len(labels), dtype=bool)
        for label in self._by_size(distribution, descending=True):
            if label == minority or distribution[label] <= target:
                continue
            positions = np.flatnonzero(labels == label)
            # Re-seeded per reduction step so each class draw is reproducible on its own.
            rng = np.random.default_rng(policy.seed)
            chosen = rng.choice(positions, size=target, replace=False)
            keep[positions] = False
            keep[chosen] = True
            logger.debug(f"Class {label!r}: {distribution[label]} -> {target} records")

        result = dataset.with_frame(dataset.frame.iloc[np.flatnonzero(keep)].reset_index(drop=True))
        self._log_change("Undersampled", distribution, result.distribution())
        return result

    def oversample_duplicate(self, dataset: Dataset, policy: RebalancePolicy) -> Dataset:
        """Top up deficient classes with duplicates drawn with replacement."""
        distribution = self._checked_distribution(dataset, policy)
        target = self._oversample_target(distribution, policy)
        labels = dataset.labels.to_numpy()
        rng = np.random.default_rng(policy.seed)

        extras: list[pd.DataFrame] = []
        for label in self._by_size(distribution):
            missing = target - distribution[label]
            if missing <= 0:
                continue
            positions = np.flatnonzero(labels == label)
            drawn = rng.choice(positions, size=missing, replace=True)
            extras.append(dataset.frame.iloc[drawn])
            logger.debug(f"Class {label!r}: duplicated {missing} records")

        if not extras:
            return dataset
        result = dataset.with_frame(pd.concat([dataset.frame, *extras], ignore_index=True))
        self._log_change("Oversampled (duplicates)", distribution, result.distribution())
        return result

    def oversample_synthetic(self, dataset: Dataset, policy: RebalancePolicy) -> Dataset:
        """Top up deficient classes with SMOTE-style interpolated records.

        Every deficient class is synthesised from the original records only,
        smallest class first. Synthetic records are appended after the
        originals; integer and ordinal features are rounded back to valid
        values, which can move a point slightly off its interpolation segment.
        """
        distribution = self._checked_distribution(dataset, policy)
        target = self._oversample_target(distribution, policy)
        deficient = [label for label in self._by_size(distribution) if distribution[label] < target]
        for label in deficient:
            if distribution[label] < policy.neighbors + 1:
                raise InsufficientNeighbors(
                    f"Class {label!r} has {distribution[label]} records; "
                    f"{policy.neighbors} neighbours need at least {policy.neighbors + 1}",
                    hint="lower RebalancePolicy.neighbors or use duplicate oversampling",
                )

        rng = np.random.default_rng(policy.seed)
        synthetic: list[pd.DataFrame] = []
        for label in deficient:
            records = dataset.records_of(label)
            synthetic.append(
                self._synthesize(
                    records,
                    dataset.schema,
                    target - len(records),
                    policy.neighbors,
                    rng,
                )
            )
            logger.debug(f"Class {label!r}: synthesised {target - len(records)} records")

        if not synthetic:
            return dataset
        result = dataset.with_frame(pd.concat([dataset.frame, *synthetic], ignore_index=True))
        self._log_change("Oversampled (synthetic)", distribution, result.distribution())
        return result

    def compute_class_weights(self, dataset: Dataset) -> ClassWeights:
        """Weights ``total / (n_classes * count)``, inversely proportional to frequency."""
        distribution = dataset.distribution()
        self._require_all_present(distribution)
        total = distribution.total
        n_classes = len(distribution)
        weights = ClassWeights({label: total / (n_classes * count) for label, count in distribution.items()})
        logger.info(f"Computed class weights for {n_classes} classes: {weights.to_sklearn()}")
        return weights

    @staticmethod
    def _synthesize(
        records: pd.DataFrame,
        schema: FeatureSchema,
        n_new: int,
        k: int,
        rng: np.random.Generator,
    ) -> pd.DataFrame:
        specs = list(schema)
        matrix = np.column_stack([_to_distance_scale(records[spec.name], spec) for spec in specs])
        n = len(matrix)
        # kneighbors() without a query excludes each point from its own neighbours.
        neighbours = NearestNeighbors(n_neighbors=k).fit(matrix).kneighbors(return_distance=False)

        repeats, remainder = divmod(n_new, n)
        base = np.concatenate(
            [np.repeat(np.arange(n), repeats), np.sort(rng.choice(n, size=remainder, replace=False))]
        )
        picks = neighbours[base, rng.integers(0, k, size=len(base))]
        gaps = rng.random(len(base))[:, None]
        points = matrix[base] + gaps * (matrix[picks] - matrix[base])

        # Non-feature columns (label, ids) are carried over from the base record.
        frame = records.iloc[base].reset_index(drop=True)
        for idx, spec in enumerate(specs):
            frame[spec.name] = _from_distance_scale(points[:, idx], spec, records[spec.name].dtype)
        return frame

    @staticmethod
    def _oversample_target(distribution: ClassDistribution, policy: RebalancePolicy) -> int:
        # Derived once from the original majority so ratios do not compound across classes.
        # Capped at the majority count: ratios below 1 never grow the majority itself.
        majority_count = distribution[distribution.majority]
        return min(majority_count, math.ceil(majority_count / policy.target_ratio))

    @staticmethod
    def _by_size(distribution: ClassDistribution, descending: bool = False) -> list[Hashable]:
        order = {label: idx for idx, label in enumerate(distribution)}
        sign = -1 if descending else 1
        return sorted(distribution, key=lambda label: (sign * distribution[label], order[label]))

    def _checked_distribution(self, dataset: Dataset, policy: RebalancePolicy) -> ClassDistribution:
        if not policy.target_ratio > 0:
            raise InvalidPolicy(f"target_ratio must be positive, got {policy.target_ratio}")
        distribution = dataset.distribution()
        if len(distribution) < 2:
            raise InvalidPolicy(f"Rebalancing needs at least two classes, got {list(distribution)}")
        self._require_all_present(distribution)
        return distribution

    @staticmethod
    def _require_all_present(distribution: ClassDistribution) -> None:
        empty = [label for label, count in distribution.items() if count == 0]
        if empty:
            raise ClassMismatch(
                f"Declared classes {empty} have no records in the dataset",
                hint="check the stratified split or the declared class set",
            )

    @staticmethod
    def _log_change(action: str, before: ClassDistribution, after: ClassDistribution) -> None:
        logger.info(f"{action}: {before.as_dict()} -> {after.as_dict()}")


def _to_distance_scale(values: pd.Series, spec: FeatureSpec) -> np.ndarray:
    raw = values.to_numpy(dtype=float)
    if spec.kind != "ordinal":
        return raw
    levels = np.asarray(spec.levels, dtype=float)
    return np.abs(raw[:, None] - levels[None, :]).argmin(axis=1).astype(float)


def _from_distance_scale(points: np.ndarray, spec: FeatureSpec, dtype) -> np.ndarray:
    if spec.kind == "ordinal":
        levels = np.asarray(spec.levels, dtype=float)
        positions = np.clip(np.rint(points), 0, len(levels) - 1).astype(int)
        points = levels[positions]
    elif spec.kind == "integer" or pd.api.types.is_integer_dtype(dtype):
        points = np.rint(points)
    if spec.bounds is not None:
        points = np.clip(points, spec.bounds[0], spec.bounds[1])
    if pd.api.types.is_integer_dtype(dtype):
        return points.astype(dtype)
    return points


def undersample(dataset: Dataset, policy: RebalancePolicy) -> Dataset:
    return Rebalancer().undersample(dataset, policy)


def oversample_duplicate(dataset: Dataset, policy: RebalancePolicy) -> Dataset:
    return Rebalancer().oversample_duplicate(dataset, policy)


def oversample_synthetic(dataset: Dataset, policy: RebalancePolicy) -> Dataset:
    return Rebalancer().oversample_synthetic(dataset, policy)


def compute_class_weights(dataset: Dataset) -> ClassWeights:
    return Rebalancer().compute_class_weights(dataset)
