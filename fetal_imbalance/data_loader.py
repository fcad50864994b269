"""Data loading utilities for the fetal-health imbalance experiments."""
from __future__ import annotations

import logging

import pandas as pd
from sklearn.model_selection import train_test_split

from .config import DataPaths, ModelConfig, SchemaConfig
from .data_models import DataValidationResult, Dataset

logger = logging.getLogger(__name__)


class FetalHealthLoader:
    """Loads, cleans, and splits the cardiotocography (CTG) fetal-health table."""

    def __init__(self, paths: DataPaths, schema: SchemaConfig, model_config: ModelConfig) -> None:
        self.paths = paths
        self.schema = schema
        self.model_config = model_config

    def load_raw(self) -> pd.DataFrame:
        path = self.paths.dataset_csv
        if not path.exists():
            raise FileNotFoundError(f"Fetal health CSV not found at {path.resolve()}")
        header = pd.read_csv(path, nrows=0)
        required = [*self.schema.features.names, self.schema.label_column]
        missing = [col for col in required if col not in header.columns]
        if missing:
            raise ValueError(f"Columns {missing} not found in {path.name}")
        # Only declared columns are kept; anything else in the file is ignored.
        return pd.read_csv(path, usecols=required)[required].copy()

    def clean_and_validate(self, df: pd.DataFrame) -> tuple[Dataset, DataValidationResult]:
        before = len(df)
        df = df.dropna()
        dropped_missing = before - len(df)

        before = len(df)
        df = df.drop_duplicates()
        dropped_duplicates = before - len(df)

        df = df.reset_index(drop=True)
        df[self.schema.label_column] = df[self.schema.label_column].round().astype(int)

        dataset = Dataset(
            frame=df,
            label_column=self.schema.label_column,
            classes=self.schema.classes,
            schema=self.schema.features,
        )
        validation = DataValidationResult(
            row_count=len(df),
            dropped_duplicates=dropped_duplicates,
            dropped_missing=dropped_missing,
            class_counts=dataset.distribution().as_dict(),
        )
        logger.info(
            f"Loaded {validation.row_count} rows (dropped {dropped_missing} incomplete, "
            f"{dropped_duplicates} duplicate); class counts {validation.class_counts}"
        )
        return dataset, validation

    def split(self, dataset: Dataset) -> tuple[Dataset, Dataset]:
        """Stratified train/test split; the test half is never rebalanced."""
        train_frame, test_frame = train_test_split(
            dataset.frame,
            test_size=self.model_config.test_size,
            random_state=self.model_config.random_state,
            stratify=dataset.labels,
        )
        train = dataset.with_frame(train_frame.reset_index(drop=True))
        test = dataset.with_frame(test_frame.reset_index(drop=True))
        logger.info(f"Split into {len(train)} training and {len(test)} test rows")
        return train, test

    def load(self) -> tuple[Dataset, DataValidationResult]:
        return self.clean_and_validate(self.load_raw())
