"""Run configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Config:
    """Central configuration for a training run.

    Args:
        train_data_path: CSV used to fit the pipeline.
        test_data_path: CSV used for evaluation.
        model_save_path: Where the fitted model is persisted.
        separator: Single-character field delimiter of the CSV files.
        has_header: Whether the first line of each CSV is a header.
        label_source_column: Ground-truth column copied into ``Label``.
        categorical_columns: Text columns that get one-hot encoded.
        feature_columns: Columns concatenated into ``Features``, in order.
        random_seed: Reproducibility seed for the trainer and tuning folds.
        num_trees: Boosting rounds of the regression tree ensemble.
        num_leaves: Maximum leaves per tree.
        min_data_in_leaf: Minimum rows per leaf.
        learning_rate: Shrinkage applied to each tree.
        n_trials: Optuna trials; 0 disables tuning.
        n_cv_splits: Number of KFold splits used while tuning.
        wait_for_key: Block on Enter before the program exits.
    """

    train_data_path: str = os.path.join("Data", "taxi-fare-train.csv")
    test_data_path: str = os.path.join("Data", "taxi-fare-test.csv")
    model_save_path: str = os.path.join("Data", "Model.zip")

    # Loader
    separator: str = ","
    has_header: bool = True

    # Pipeline
    label_source_column: str = "FareAmount"
    categorical_columns: list[str] = field(default_factory=lambda: [
        "VendorId",
        "RateCode",
        "PaymentType",
    ])
    feature_columns: list[str] = field(default_factory=lambda: [
        "VendorId",
        "RateCode",
        "PassengerCount",
        "TripDistance",
        "PaymentType",
    ])

    random_seed: int = 0

    # Trainer
    num_trees: int = 100
    num_leaves: int = 20
    min_data_in_leaf: int = 10
    learning_rate: float = 0.2

    # Optimization params
    n_trials: int = 0
    n_cv_splits: int = 5

    wait_for_key: bool = True

    def trainer_params(self) -> dict[str, Any]:
        """Hyperparameters handed to the regression trainer stage."""
        return {
            "num_trees": self.num_trees,
            "num_leaves": self.num_leaves,
            "min_data_in_leaf": self.min_data_in_leaf,
            "learning_rate": self.learning_rate,
        }
