"""Imbalance-aware classification metrics.

All functions are pure: they keep no state between calls and can be re-run on
the same inputs any number of times. Ratios whose denominator is zero are
defined as ``0.0`` rather than NaN, which matters for classes that never occur
(or are never predicted) in a small test sample.
"""
from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Sequence

from sklearn.metrics import confusion_matrix as sk_confusion_matrix

from .data_models import ClassMetrics, ConfusionCounts, EvaluationReport
from .errors import ClassMismatch, EmptyInput

logger = logging.getLogger(__name__)


def _aligned(predicted: Iterable[Hashable], actual: Iterable[Hashable]) -> tuple[list, list]:
    predicted = list(predicted)
    actual = list(actual)
    if len(predicted) != len(actual):
        raise ValueError(f"predicted and actual differ in length: {len(predicted)} != {len(actual)}")
    return predicted, actual


def _check_classes(predicted: list, actual: list, classes: Sequence[Hashable]) -> None:
    unknown = (set(predicted) | set(actual)) - set(classes)
    if unknown:
        raise ClassMismatch(f"Labels {sorted(unknown, key=str)} are not in the declared classes {list(classes)}")


def _safe_ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator


def confusion_matrix(
    predicted: Iterable[Hashable], actual: Iterable[Hashable], classes: Sequence[Hashable]
) -> tuple[tuple[int, ...], ...]:
    """Rows are actual classes, columns are predicted classes, both in ``classes`` order."""
    predicted, actual = _aligned(predicted, actual)
    _check_classes(predicted, actual, classes)
    if not actual:
        return tuple(tuple(0 for _ in classes) for _ in classes)
    matrix = sk_confusion_matrix(actual, predicted, labels=list(classes))
    return tuple(tuple(int(value) for value in row) for row in matrix)


def confusion_counts(
    predicted: Iterable[Hashable], actual: Iterable[Hashable], classes: Sequence[Hashable]
) -> dict[Hashable, ConfusionCounts]:
    """One-vs-rest tp/fp/fn/tn for every class."""
    predicted, actual = _aligned(predicted, actual)
    matrix = confusion_matrix(predicted, actual, classes)
    total = len(actual)
    counts: dict[Hashable, ConfusionCounts] = {}
    for idx, label in enumerate(classes):
        tp = matrix[idx][idx]
        fn = sum(matrix[idx]) - tp
        fp = sum(row[idx] for row in matrix) - tp
        counts[label] = ConfusionCounts(tp=tp, fp=fp, fn=fn, tn=total - tp - fp - fn)
    return counts


def precision(counts: ConfusionCounts) -> float:
    return _safe_ratio(counts.tp, counts.tp + counts.fp)


def recall(counts: ConfusionCounts) -> float:
    return _safe_ratio(counts.tp, counts.tp + counts.fn)


def f1(counts: ConfusionCounts) -> float:
    p = precision(counts)
    r = recall(counts)
    return _safe_ratio(2 * p * r, p + r)


def accuracy(predicted: Iterable[Hashable], actual: Iterable[Hashable]) -> float:
    predicted, actual = _aligned(predicted, actual)
    if not actual:
        raise EmptyInput("Cannot compute accuracy on empty label sequences")
    hits = sum(1 for guess, truth in zip(predicted, actual) if guess == truth)
    return hits / len(actual)


def evaluate(
    predicted: Iterable[Hashable], actual: Iterable[Hashable], classes: Sequence[Hashable]
) -> EvaluationReport:
    """Aggregate per-class precision/recall/F1, accuracy and averaged F1."""
    predicted, actual = _aligned(predicted, actual)
    if not actual:
        raise EmptyInput("Cannot evaluate empty label sequences")
    classes = tuple(classes)
    counts = confusion_counts(predicted, actual, classes)

    per_class = {
        label: ClassMetrics(
            precision=precision(item),
            recall=recall(item),
            f1=f1(item),
            support=item.support,
        )
        for label, item in counts.items()
    }
    f1_scores = [metrics.f1 for metrics in per_class.values()]
    weighted = sum(metrics.f1 * metrics.support for metrics in per_class.values())
    report = EvaluationReport(
        classes=classes,
        per_class=per_class,
        accuracy=accuracy(predicted, actual),
        macro_f1=sum(f1_scores) / len(f1_scores),
        weighted_f1=_safe_ratio(weighted, len(actual)),
        confusion_matrix=confusion_matrix(predicted, actual, classes),
    )
    logger.debug(f"Evaluated {len(actual)} predictions: accuracy={report.accuracy:.3f}, macro F1={report.macro_f1:.3f}")
    return report
