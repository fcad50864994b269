"""Configuration objects for the fetal-health imbalance experiments."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .data_models import FeatureSchema, FeatureSpec

FETAL_HEALTH_FEATURES = FeatureSchema(
    features=(
        FeatureSpec("baseline value", "integer"),
        FeatureSpec("accelerations"),
        FeatureSpec("fetal_movement"),
        FeatureSpec("uterine_contractions"),
        FeatureSpec("light_decelerations"),
        FeatureSpec("severe_decelerations"),
        FeatureSpec("prolongued_decelerations"),
        FeatureSpec("abnormal_short_term_variability", "integer", bounds=(0.0, 100.0)),
        FeatureSpec("mean_value_of_short_term_variability"),
        FeatureSpec("percentage_of_time_with_abnormal_long_term_variability", "integer", bounds=(0.0, 100.0)),
        FeatureSpec("mean_value_of_long_term_variability"),
        FeatureSpec("histogram_width", "integer"),
        FeatureSpec("histogram_min", "integer"),
        FeatureSpec("histogram_max", "integer"),
        FeatureSpec("histogram_number_of_peaks", "integer"),
        FeatureSpec("histogram_number_of_zeroes", "integer"),
        FeatureSpec("histogram_mode", "integer"),
        FeatureSpec("histogram_mean", "integer"),
        FeatureSpec("histogram_median", "integer"),
        FeatureSpec("histogram_variance", "integer"),
        FeatureSpec("histogram_tendency", "ordinal", levels=(-1.0, 0.0, 1.0)),
    )
)


@dataclass(frozen=True)
class DataPaths:
    """Centralized storage for important project paths."""

    dataset_csv: Path = Path("data/fetal_health.csv")
    model_dir: Path = Path("models")
    report_dir: Path = Path("reports")


@dataclass(frozen=True)
class SchemaConfig:
    """Label column, declared classes and feature types of the dataset."""

    label_column: str = "fetal_health"
    classes: tuple[int, ...] = (1, 2, 3)
    class_names: tuple[str, ...] = ("normal", "suspect", "pathological")
    features: FeatureSchema = FETAL_HEALTH_FEATURES


@dataclass(frozen=True)
class BalancingConfig:
    """Which strategies to compare and how aggressively to rebalance."""

    strategies: tuple[str, ...] = (
        "baseline",
        "undersample",
        "oversample-duplicate",
        "oversample-synthetic",
        "cost-sensitive",
    )
    target_ratio: float = 4.0
    neighbors: int = 5
    seed: int = 29


@dataclass(frozen=True)
class ModelConfig:
    """Parameters for the SVM estimator and its grid search."""

    random_state: int = 29
    test_size: float = 0.2
    kernel: str = "rbf"
    c_values: tuple[float, ...] = (0.1, 1.0, 10.0, 100.0)
    gamma_values: tuple[float | str, ...] = ("scale", 0.01, 0.1, 1.0)
    cv_folds: int = 5
    scoring: str = "f1_macro"
    n_jobs: int = -1
    persist_models: bool = True


@dataclass(frozen=True)
class PipelineConfig:
    """Root configuration object that bundles all other configs."""

    paths: DataPaths = field(default_factory=DataPaths)
    schema: SchemaConfig = field(default_factory=SchemaConfig)
    balancing: BalancingConfig = field(default_factory=BalancingConfig)
    model: ModelConfig = field(default_factory=ModelConfig)


DEFAULT_CONFIG = PipelineConfig()
