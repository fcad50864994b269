"""Modeling utilities: SVM training with a hyperparameter grid search."""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import joblib
import numpy as np
import pandas as pd
from sklearn.model_selection import GridSearchCV, StratifiedKFold
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.svm import SVC

from .config import ModelConfig
from .data_models import ClassWeights, Dataset, FeatureSchema

logger = logging.getLogger(__name__)


class Model(Protocol):
    def predict(self, records: pd.DataFrame) -> np.ndarray: ...


class Trainer(Protocol):
    def train(
        self,
        dataset: Dataset,
        weights: ClassWeights | None = None,
        search_space: Mapping[str, Sequence[Any]] | None = None,
        name: str = "svm",
    ) -> Model: ...


@dataclass
class TrainedModel:
    """Fitted estimator plus the grid-search outcome that selected it."""

    estimator: Pipeline
    schema: FeatureSchema
    best_params: dict[str, Any] = field(default_factory=dict)
    cv_score: float = float("nan")
    model_path: Path | None = None

    def predict(self, records: pd.DataFrame) -> np.ndarray:
        return self.estimator.predict(records[list(self.schema.names)])


class SVMTrainer:
    """Scaled RBF support vector classifier tuned with ``GridSearchCV``."""

    def __init__(self, model_config: ModelConfig, model_dir: Path | None = None) -> None:
        self.model_config = model_config
        self.model_dir = model_dir
        self.last_model: TrainedModel | None = None

    def default_search_space(self) -> dict[str, list[Any]]:
        return {
            "C": list(self.model_config.c_values),
            "gamma": list(self.model_config.gamma_values),
        }

    def train(
        self,
        dataset: Dataset,
        weights: ClassWeights | None = None,
        search_space: Mapping[str, Sequence[Any]] | None = None,
        name: str = "svm",
    ) -> TrainedModel:
        space = search_space or self.default_search_space()
        param_grid = {f"model__{key}": list(values) for key, values in space.items()}
        search = GridSearchCV(
            self._build_pipeline(weights),
            param_grid=param_grid,
            scoring=self.model_config.scoring,
            cv=StratifiedKFold(
                n_splits=self.model_config.cv_folds,
                shuffle=True,
                random_state=self.model_config.random_state,
            ),
            n_jobs=self.model_config.n_jobs,
        )
        search.fit(dataset.features, dataset.labels)

        best_params = {key.removeprefix("model__"): value for key, value in search.best_params_.items()}
        logger.info(
            f"[{name}] best params {best_params} with {self.model_config.scoring}={search.best_score_:.3f}"
        )
        model = TrainedModel(
            estimator=search.best_estimator_,
            schema=dataset.schema,
            best_params=best_params,
            cv_score=float(search.best_score_),
        )
        if self.model_config.persist_models and self.model_dir is not None:
            model.model_path = self._persist_model(search.best_estimator_, name)
        self.last_model = model
        return model

    def predict(self, records: pd.DataFrame) -> np.ndarray:
        if self.last_model is None:
            raise RuntimeError("Model has not been trained yet.")
        return self.last_model.predict(records)

    def _build_pipeline(self, weights: ClassWeights | None) -> Pipeline:
        classifier = SVC(
            kernel=self.model_config.kernel,
            class_weight=weights.to_sklearn() if weights is not None else None,
            random_state=self.model_config.random_state,
        )
        return Pipeline(steps=[("scaler", StandardScaler()), ("model", classifier)])

    def _persist_model(self, pipeline: Pipeline, name: str) -> Path:
        self.model_dir.mkdir(parents=True, exist_ok=True)
        model_path = self.model_dir / f"{name}_svm.pkl"
        joblib.dump(pipeline, model_path)
        logger.info(f"[{name}] model stored at {model_path}")
        return model_path
