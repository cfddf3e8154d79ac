from taxi_fare.config import Config
from taxi_fare.loader import TextLoader
from taxi_fare.prediction import PredictionEngine
from taxi_fare.schema import FarePrediction, TripRecord
from taxi_fare.trainer import ModelTrainer

__all__ = ["Config", "TextLoader", "PredictionEngine", "FarePrediction", "TripRecord", "ModelTrainer"]
