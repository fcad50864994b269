from __future__ import annotations

from pathlib import Path
import sys

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

import numpy as np
import pandas as pd
import pytest

from fetal_imbalance.data_models import Dataset, FeatureSchema, FeatureSpec

MIXED_SCHEMA = FeatureSchema(
    features=(
        FeatureSpec("signal"),
        FeatureSpec("variability"),
        FeatureSpec("peaks", "integer"),
        FeatureSpec("tendency", "ordinal", levels=(-1.0, 0.0, 1.0)),
    )
)


def build_frame(counts: dict, seed: int = 0, label_column: str = "label") -> pd.DataFrame:
    """Class-shifted random records for the mixed schema, labels in ``counts`` order."""
    rng = np.random.default_rng(seed)
    frames = []
    for offset, (label, count) in enumerate(counts.items()):
        frames.append(
            pd.DataFrame(
                {
                    "signal": rng.normal(offset * 3.0, 1.0, size=count),
                    "variability": rng.uniform(0, 1, size=count) + offset,
                    "peaks": rng.integers(0, 10, size=count) + offset,
                    "tendency": rng.choice([-1.0, 0.0, 1.0], size=count),
                    label_column: [label] * count,
                }
            )
        )
    return pd.concat(frames, ignore_index=True)


@pytest.fixture
def make_dataset():
    def _make(counts: dict, seed: int = 0) -> Dataset:
        return Dataset(
            frame=build_frame(counts, seed=seed),
            label_column="label",
            classes=tuple(counts),
            schema=MIXED_SCHEMA,
        )

    return _make


@pytest.fixture
def mixed_schema() -> FeatureSchema:
    return MIXED_SCHEMA
