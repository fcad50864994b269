from __future__ import annotations

import numpy as np
import pytest
from sklearn.metrics import accuracy_score, confusion_matrix as sk_confusion_matrix
from sklearn.metrics import f1_score, precision_recall_fscore_support

from fetal_imbalance.data_models import ConfusionCounts
from fetal_imbalance.errors import ClassMismatch, EmptyInput
from fetal_imbalance.evaluation import (
    accuracy,
    confusion_counts,
    confusion_matrix,
    evaluate,
    f1,
    precision,
    recall,
)


def test_documented_three_class_example() -> None:
    predicted = [1, 1, 2, 2, 3]
    actual = [1, 2, 2, 3, 3]

    counts = confusion_counts(predicted, actual, (1, 2, 3))

    assert counts[2] == ConfusionCounts(tp=1, fp=1, fn=1, tn=2)
    assert precision(counts[2]) == 0.5
    assert recall(counts[2]) == 0.5
    assert f1(counts[2]) == 0.5
    assert accuracy(predicted, actual) == pytest.approx(0.6)


def test_counts_partition_every_sample() -> None:
    predicted = [1, 3, 3, 2, 1, 1, 2]
    actual = [1, 1, 3, 2, 2, 1, 3]
    for item in confusion_counts(predicted, actual, (1, 2, 3)).values():
        assert item.tp + item.fp + item.fn + item.tn == len(actual)


def test_zero_denominators_give_zero() -> None:
    predicted = [1, 1, 1, 1]
    actual = [1, 1, 2, 1]

    counts = confusion_counts(predicted, actual, (1, 2, 3))

    # Class 2 is never predicted, class 3 never occurs at all.
    assert precision(counts[2]) == 0.0
    assert f1(counts[2]) == 0.0
    assert precision(counts[3]) == 0.0
    assert recall(counts[3]) == 0.0
    assert f1(counts[3]) == 0.0
    assert not np.isnan(f1(counts[3]))


def test_accuracy_and_evaluate_reject_empty_input() -> None:
    with pytest.raises(EmptyInput):
        accuracy([], [])
    with pytest.raises(EmptyInput):
        evaluate([], [], (1, 2))


def test_length_mismatch_is_rejected() -> None:
    with pytest.raises(ValueError):
        accuracy([1, 2], [1])
    with pytest.raises(ValueError):
        confusion_counts([1], [1, 2], (1, 2))


def test_unknown_labels_are_rejected() -> None:
    with pytest.raises(ClassMismatch):
        confusion_counts([1, 4], [1, 2], (1, 2, 3))


def test_confusion_matrix_layout() -> None:
    matrix = confusion_matrix(["b", "a", "a"], ["a", "a", "b"], ("a", "b"))
    # rows actual, columns predicted
    assert matrix == ((1, 1), (1, 0))


def test_evaluate_matches_scikit_learn() -> None:
    rng = np.random.default_rng(5)
    actual = rng.choice([1, 2, 3], size=300, p=[0.75, 0.17, 0.08])
    predicted = np.where(rng.random(300) < 0.7, actual, rng.choice([1, 2], size=300))
    classes = (1, 2, 3)

    report = evaluate(predicted, actual, classes)

    p, r, f, support = precision_recall_fscore_support(actual, predicted, labels=list(classes), zero_division=0)
    for idx, label in enumerate(classes):
        metrics = report.per_class[label]
        assert metrics.precision == pytest.approx(p[idx])
        assert metrics.recall == pytest.approx(r[idx])
        assert metrics.f1 == pytest.approx(f[idx])
        assert metrics.support == support[idx]
    assert report.accuracy == pytest.approx(accuracy_score(actual, predicted))
    assert report.macro_f1 == pytest.approx(f1_score(actual, predicted, average="macro", zero_division=0))
    assert report.weighted_f1 == pytest.approx(f1_score(actual, predicted, average="weighted", zero_division=0))
    assert np.array_equal(np.array(report.confusion_matrix), sk_confusion_matrix(actual, predicted, labels=list(classes)))


def test_evaluate_is_repeatable_and_exports_frame() -> None:
    predicted = [1, 2, 2, 3]
    actual = [1, 2, 3, 3]
    first = evaluate(predicted, actual, (1, 2, 3))
    second = evaluate(predicted, actual, (1, 2, 3))

    assert first == second
    frame = first.to_frame()
    assert list(frame.index) == [1, 2, 3]
    assert frame.loc[3, "recall"] == pytest.approx(0.5)
    assert frame.loc[3, "support"] == 2


def test_empty_confusion_counts_are_all_zero() -> None:
    counts = confusion_counts([], [], (1, 2))
    assert counts == {1: ConfusionCounts(0, 0, 0, 0), 2: ConfusionCounts(0, 0, 0, 0)}
    assert confusion_matrix([], [], (1, 2)) == ((0, 0), (0, 0))
    assert precision(counts[1]) == 0.0
