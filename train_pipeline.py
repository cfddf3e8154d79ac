"""Taxi fare prediction: train, evaluate, persist and reload a fare regressor.

Trains a gradient-boosted regression tree on ``Data/taxi-fare-train.csv``,
reports R2 and RMS on ``Data/taxi-fare-test.csv``, then reloads the saved
model from ``Data/Model.zip`` and predicts the fare of one sample trip.
"""

from __future__ import annotations

import logging

from taxi_fare import reporting
from taxi_fare.config import Config
from taxi_fare.loader import TextLoader
from taxi_fare.prediction import PredictionEngine
from taxi_fare.schema import FarePrediction, TripRecord
from taxi_fare.trainer import ModelTrainer

logger = logging.getLogger("TaxiFare")

SAMPLE_TRIP = TripRecord(
    vendor_id="VTS",
    rate_code="1",
    passenger_count=1,
    trip_distance=3.75,
    payment_type="CRD",
    fare_amount=0,
)
SAMPLE_ACTUAL_FARE = 15.5


def predict_sample_trip(trainer: ModelTrainer) -> FarePrediction:
    """Reload the saved model and predict the fare of :data:`SAMPLE_TRIP`."""
    engine = PredictionEngine(trainer.load())
    prediction = engine.predict(SAMPLE_TRIP)
    reporting.print_prediction(prediction, SAMPLE_ACTUAL_FARE)
    return prediction


def run_pipeline(config: Config | None = None) -> None:
    """Orchestrate training, evaluation and the single prediction."""
    config = config or Config()
    loader = TextLoader.from_config(config)
    trainer = ModelTrainer(config, loader)

    logger.info("=" * 60)
    logger.info("TRAIN on %s", config.train_data_path)
    logger.info("=" * 60)
    model = trainer.train(config.train_data_path)

    logger.info("=" * 60)
    logger.info("EVALUATE on %s", config.test_data_path)
    logger.info("=" * 60)
    trainer.evaluate(model)

    logger.info("=" * 60)
    logger.info("PREDICT with model reloaded from %s", config.model_save_path)
    logger.info("=" * 60)
    predict_sample_trip(trainer)

    if config.wait_for_key:
        input()


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    run_pipeline()


if __name__ == "__main__":
    main()
