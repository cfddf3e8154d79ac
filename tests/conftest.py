from __future__ import annotations

import os

import pytest

from taxi_fare.config import Config
from taxi_fare.data_utils import generate_synthetic_data
from taxi_fare.loader import TextLoader
from taxi_fare.trainer import ModelTrainer

HEADER = "vendor_id,rate_code,passenger_count,trip_time_in_secs,trip_distance,payment_type,fare_amount"


@pytest.fixture(scope="session")
def data_dir(tmp_path_factory):
    root = tmp_path_factory.mktemp("Data")
    generate_synthetic_data(str(root / "taxi-fare-train.csv"), rows=3_000, seed=0)
    generate_synthetic_data(str(root / "taxi-fare-test.csv"), rows=500, seed=1)
    return root


@pytest.fixture
def config(data_dir, tmp_path) -> Config:
    return Config(
        train_data_path=str(data_dir / "taxi-fare-train.csv"),
        test_data_path=str(data_dir / "taxi-fare-test.csv"),
        model_save_path=str(tmp_path / "Model.zip"),
        wait_for_key=False,
    )


@pytest.fixture
def loader() -> TextLoader:
    return TextLoader()


@pytest.fixture
def trainer(config, loader) -> ModelTrainer:
    return ModelTrainer(config, loader)


@pytest.fixture
def model(trainer, config):
    return trainer.train(config.train_data_path)


@pytest.fixture
def write_csv(tmp_path):
    """Write ``lines`` below the standard header and return the path."""

    def _write(lines: list[str], name: str = "trips.csv", header: str | None = HEADER) -> str:
        path = os.path.join(tmp_path, name)
        content = ([header] if header is not None else []) + lines
        with open(path, "w") as f:
            f.write("\n".join(content) + "\n")
        return path

    return _write
