from __future__ import annotations

import logging
from typing import Any

import numpy as np
import polars as pl
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from taxi_fare import reporting
from taxi_fare.config import Config
from taxi_fare.errors import TaxiFareError
from taxi_fare.loader import TextLoader
from taxi_fare.persistence import load_model, save_model
from taxi_fare.transforms import (
    Concatenate,
    CopyColumns,
    FastTreeRegression,
    OneHotEncoding,
    Pipeline,
    TransformerChain,
    feature_matrix,
)
from taxi_fare.tuning import HyperparameterTuner

logger = logging.getLogger("TaxiFare")

LABEL_COLUMN = "Label"
FEATURES_COLUMN = "Features"
SCORE_COLUMN = "Score"


def compute_metrics(
    df: pl.DataFrame, label_column: str = LABEL_COLUMN, score_column: str = SCORE_COLUMN
) -> dict[str, float]:
    if df.height == 0:
        raise TaxiFareError("Cannot compute metrics on an empty data set")
    y_true = df[label_column].cast(pl.Float64).to_numpy()
    y_pred = df[score_column].cast(pl.Float64).to_numpy()

    mse = float(mean_squared_error(y_true, y_pred))
    return {
        "rmse": float(np.sqrt(mse)),
        "mse": mse,
        "mae": float(mean_absolute_error(y_true, y_pred)),
        "r2": float(r2_score(y_true, y_pred)),
    }


class ModelTrainer:
    def __init__(self, config: Config, loader: TextLoader) -> None:
        self._config = config
        self._loader = loader

    def build_pipeline(self, trainer_params: dict[str, Any] | None = None) -> Pipeline:
        """Label copy, one-hot encodings and feature concatenation, then the
        regression trainer unless ``trainer_params`` is None."""
        pipeline = Pipeline().append(
            CopyColumns(self._config.label_source_column, LABEL_COLUMN)
        )
        for column in self._config.categorical_columns:
            pipeline = pipeline.append(OneHotEncoding(column))
        pipeline = pipeline.append(
            Concatenate(FEATURES_COLUMN, tuple(self._config.feature_columns))
        )
        if trainer_params is None:
            return pipeline
        return pipeline.append(FastTreeRegression(
            label_column=LABEL_COLUMN,
            feature_column=FEATURES_COLUMN,
            score_column=SCORE_COLUMN,
            seed=self._config.random_seed,
            **trainer_params,
        ))

    def train(self, data_path: str) -> TransformerChain:
        df = self._loader.read(data_path)
        if df.height == 0:
            raise TaxiFareError(f"No training rows in {data_path}")

        params = self._config.trainer_params()
        if self._config.n_trials > 0:
            features = self.build_pipeline().fit(df).transform(df)
            X = feature_matrix(features, FEATURES_COLUMN)
            y = features[LABEL_COLUMN].cast(pl.Float32).to_numpy()
            params.update(HyperparameterTuner(self._config).tune(X, y))
            logger.info("Tuned trainer params: %s", params)

        model = self.build_pipeline(params).fit(df)
        self.save(model)
        return model

    def evaluate(self, model: TransformerChain, data_path: str | None = None) -> dict[str, float]:
        data_path = data_path or self._config.test_data_path
        df = self._loader.read(data_path)
        if df.height == 0:
            raise TaxiFareError(f"No test rows in {data_path}")

        predictions = model.transform(df)
        metrics = compute_metrics(predictions)
        logger.info(
            "Test metrics: rmse=%.4f mae=%.4f mse=%.4f r2=%.4f",
            metrics["rmse"], metrics["mae"], metrics["mse"], metrics["r2"],
        )
        reporting.print_metrics(metrics)
        return metrics

    def save(self, model: TransformerChain) -> None:
        save_model(model, self._config.model_save_path)
        print(f"The model is saved to {self._config.model_save_path}")

    def load(self) -> TransformerChain:
        return load_model(self._config.model_save_path)
