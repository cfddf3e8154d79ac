"""Optuna search over the regression trainer's hyperparameters."""

from __future__ import annotations

import logging
from typing import Any

import lightgbm as lgb
import numpy as np
import optuna
from sklearn.metrics import mean_squared_error
from sklearn.model_selection import KFold

from taxi_fare.config import Config
from taxi_fare.transforms import FastTreeRegression

logger = logging.getLogger("TaxiFare")


class HyperparameterTuner:
    """Minimizes mean cross-validated RMSE over ``config.n_trials`` trials.

    Args:
        config: Run configuration; supplies trial count, fold count and seed.
    """

    def __init__(self, config: Config) -> None:
        self._config = config

    def tune(self, X: np.ndarray, y: np.ndarray) -> dict[str, Any]:
        """Search trainer parameters on featurized rows.

        Args:
            X: Feature matrix, one row per trip.
            y: Labels.

        Returns:
            Best ``num_trees``, ``num_leaves``, ``min_data_in_leaf`` and
            ``learning_rate`` found.
        """
        kfold = KFold(
            n_splits=self._config.n_cv_splits,
            shuffle=True,
            random_state=self._config.random_seed,
        )

        def objective(trial: optuna.Trial) -> float:
            stage = FastTreeRegression(
                num_trees=trial.suggest_int("num_trees", 50, 500),
                num_leaves=trial.suggest_int("num_leaves", 8, 128),
                min_data_in_leaf=trial.suggest_int("min_data_in_leaf", 5, 100),
                learning_rate=trial.suggest_float("learning_rate", 0.01, 0.3, log=True),
                seed=self._config.random_seed,
            )

            rmse_scores: list[float] = []
            for train_idx, val_idx in kfold.split(X):
                model = lgb.LGBMRegressor(**stage.lgbm_params())
                model.fit(X[train_idx], y[train_idx])
                y_pred = model.predict(X[val_idx])
                rmse_scores.append(float(np.sqrt(mean_squared_error(y[val_idx], y_pred))))

            return float(np.mean(rmse_scores))

        optuna.logging.set_verbosity(optuna.logging.WARNING)
        study = optuna.create_study(
            direction="minimize",
            study_name="taxi_fare_tuning",
            sampler=optuna.samplers.TPESampler(seed=self._config.random_seed),
        )
        study.optimize(
            objective,
            n_trials=self._config.n_trials,
            show_progress_bar=True,
        )

        logger.info(
            "Best trial %d: rmse=%.4f",
            study.best_trial.number, study.best_value,
        )
        return study.best_trial.params
