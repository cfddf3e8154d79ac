"""Row-level predictions on a fitted chain."""

from __future__ import annotations

from taxi_fare.schema import FarePrediction, TripRecord, records_to_frame
from taxi_fare.transforms import TransformerChain


class PredictionEngine:
    """Maps :class:`TripRecord` objects to :class:`FarePrediction` objects.

    Args:
        model: Fitted chain ending in a regression stage.
        score_column: Column the regression stage writes predictions to.
    """

    def __init__(self, model: TransformerChain, score_column: str = "Score") -> None:
        self._model = model
        self._score_column = score_column

    def predict(self, record: TripRecord) -> FarePrediction:
        return self.predict_many([record])[0]

    def predict_many(self, records: list[TripRecord]) -> list[FarePrediction]:
        scored = self._model.transform(records_to_frame(records))
        return [FarePrediction(fare_amount=float(s)) for s in scored[self._score_column]]
