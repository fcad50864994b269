from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from fetal_imbalance.config import DEFAULT_CONFIG, BalancingConfig, DataPaths, PipelineConfig, SchemaConfig
from fetal_imbalance.data_models import FeatureSchema, FeatureSpec
from fetal_imbalance.errors import InvalidPolicy
from fetal_imbalance.pipeline import ImbalancePipeline


def _config(tmp_path: Path) -> PipelineConfig:
    # Minimal fetal-health-like sample to keep the test lightweight.
    rng = np.random.default_rng(3)
    counts = {1.0: 160, 2.0: 40, 3.0: 24}
    frames = []
    for offset, (label, count) in enumerate(counts.items()):
        frames.append(
            pd.DataFrame(
                {
                    "baseline value": np.round(rng.normal(135 - 6 * offset, 4, size=count)),
                    "accelerations": np.abs(rng.normal(0.006 - 0.002 * offset, 0.001, size=count)),
                    "histogram_tendency": rng.choice([-1.0, 0.0, 1.0], size=count),
                    "fetal_health": label,
                }
            )
        )
    csv_path = tmp_path / "fetal_health.csv"
    pd.concat(frames, ignore_index=True).to_csv(csv_path, index=False)

    schema = SchemaConfig(
        features=FeatureSchema(
            features=(
                FeatureSpec("baseline value", "integer"),
                FeatureSpec("accelerations"),
                FeatureSpec("histogram_tendency", "ordinal", levels=(-1.0, 0.0, 1.0)),
            )
        )
    )
    return PipelineConfig(
        paths=DataPaths(dataset_csv=csv_path, model_dir=tmp_path / "models", report_dir=tmp_path / "reports"),
        schema=schema,
        balancing=BalancingConfig(target_ratio=2.0, neighbors=3),
        model=replace(DEFAULT_CONFIG.model, c_values=(1.0, 10.0), gamma_values=("scale",), cv_folds=3, n_jobs=1),
    )


def test_pipeline_end_to_end(tmp_path: Path) -> None:
    config = _config(tmp_path)

    pipeline = ImbalancePipeline(config)
    result = pipeline.run()

    assert list(result.experiments) == list(config.balancing.strategies)
    assert result.train_rows + result.test_rows == 224
    assert result.report_path is not None and result.report_path.exists()
    assert pipeline.data_health is not None and pipeline.data_health.row_count == 224

    for name, experiment in result.experiments.items():
        assert 0.0 <= experiment.report.accuracy <= 1.0
        assert experiment.model_path is not None and experiment.model_path.exists()
        assert sum(m.support for m in experiment.report.per_class.values()) == result.test_rows
        assert experiment.distribution_before.total == result.train_rows

    undersampled = result.experiments["undersample"].distribution_after
    assert undersampled.ratio <= 2.0 + 1 / undersampled[undersampled.minority]
    assert result.experiments["oversample-synthetic"].distribution_after[3] > undersampled[3] - 1
    assert result.experiments["cost-sensitive"].class_weights is not None
    assert result.experiments["baseline"].distribution_after.as_dict() == (
        result.experiments["baseline"].distribution_before.as_dict()
    )

    report = result.report_path.read_text(encoding="utf-8")
    for name in config.balancing.strategies:
        assert f"### {name}" in report
    assert "pathological" in report


def test_unknown_strategy_is_rejected(tmp_path: Path) -> None:
    config = _config(tmp_path)
    config = replace(config, balancing=replace(config.balancing, strategies=("baseline", "tomek-links")))
    with pytest.raises(InvalidPolicy):
        ImbalancePipeline(config).run(persist_report=False)
