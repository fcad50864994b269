from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from fetal_imbalance.config import DataPaths, ModelConfig, SchemaConfig
from fetal_imbalance.data_loader import FetalHealthLoader
from fetal_imbalance.data_models import FeatureSchema
from fetal_imbalance.errors import ClassMismatch

SCHEMA = SchemaConfig(features=FeatureSchema.numeric(["baseline value", "accelerations"]))


def _write_csv(path: Path, labels: list[float]) -> Path:
    rng = np.random.default_rng(1)
    frame = pd.DataFrame(
        {
            "baseline value": rng.integers(110, 160, size=len(labels)).astype(float),
            "accelerations": rng.uniform(0, 0.02, size=len(labels)),
            "unused_column": ["x"] * len(labels),
            "fetal_health": labels,
        }
    )
    frame.to_csv(path, index=False)
    return path


def _loader(csv_path: Path, test_size: float = 0.25) -> FetalHealthLoader:
    return FetalHealthLoader(DataPaths(dataset_csv=csv_path), SCHEMA, ModelConfig(test_size=test_size))


def test_clean_drops_missing_and_duplicate_rows(tmp_path: Path) -> None:
    csv_path = _write_csv(tmp_path / "fetal_health.csv", [1.0] * 8 + [2.0] * 4 + [3.0] * 2)
    raw = pd.read_csv(csv_path)
    raw.loc[len(raw)] = raw.iloc[0]
    raw.loc[len(raw)] = raw.iloc[1]
    raw.loc[3, "accelerations"] = np.nan
    raw.to_csv(csv_path, index=False)

    dataset, validation = _loader(csv_path).load()

    assert validation.dropped_missing == 1
    assert validation.dropped_duplicates == 2
    assert validation.row_count == 13
    assert validation.class_counts == {1: 7, 2: 4, 3: 2}
    assert list(dataset.frame.columns) == ["baseline value", "accelerations", "fetal_health"]
    assert dataset.labels.dtype.kind == "i"


def test_split_is_stratified_and_reproducible(tmp_path: Path) -> None:
    csv_path = _write_csv(tmp_path / "fetal_health.csv", [1.0] * 80 + [2.0] * 16 + [3.0] * 8)
    loader = _loader(csv_path)
    dataset, _ = loader.load()

    train, test = loader.split(dataset)
    train_again, test_again = loader.split(dataset)

    assert len(train) + len(test) == len(dataset)
    assert test.distribution().as_dict() == {1: 20, 2: 4, 3: 2}
    pd.testing.assert_frame_equal(test.frame, test_again.frame)
    pd.testing.assert_frame_equal(train.frame, train_again.frame)


def test_missing_file_and_columns(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        _loader(tmp_path / "absent.csv").load_raw()

    broken = tmp_path / "broken.csv"
    pd.DataFrame({"accelerations": [0.1], "fetal_health": [1.0]}).to_csv(broken, index=False)
    with pytest.raises(ValueError, match="baseline value"):
        _loader(broken).load_raw()


def test_unknown_label_is_a_class_mismatch(tmp_path: Path) -> None:
    csv_path = _write_csv(tmp_path / "fetal_health.csv", [1.0, 2.0, 3.0, 4.0])
    with pytest.raises(ClassMismatch):
        _loader(csv_path).load()
