"""Column layout of the taxi trip CSV and the row types built on it."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import polars as pl


class DataKind(Enum):
    """Semantic type of a CSV column."""

    TEXT = "text"
    R4 = "r4"

    @property
    def dtype(self) -> pl.DataType:
        return pl.Utf8 if self is DataKind.TEXT else pl.Float32


@dataclass(frozen=True)
class Column:
    """A named column at a zero-based position in the source file."""

    name: str
    kind: DataKind
    index: int


TAXI_TRIP_COLUMNS: tuple[Column, ...] = (
    Column("VendorId", DataKind.TEXT, 0),
    Column("RateCode", DataKind.TEXT, 1),
    Column("PassengerCount", DataKind.R4, 2),
    Column("TripTime", DataKind.R4, 3),
    Column("TripDistance", DataKind.R4, 4),
    Column("PaymentType", DataKind.TEXT, 5),
    Column("FareAmount", DataKind.R4, 6),
)


def frame_schema(columns: tuple[Column, ...] = TAXI_TRIP_COLUMNS) -> dict[str, pl.DataType]:
    """Polars schema for ``columns``, ordered by position."""
    return {c.name: c.kind.dtype for c in sorted(columns, key=lambda c: c.index)}


@dataclass
class TripRecord:
    """One taxi trip. ``fare_amount`` is the label; leave it 0 to predict."""

    vendor_id: str
    rate_code: str
    passenger_count: float
    trip_distance: float
    payment_type: str
    trip_time: float = 0.0
    fare_amount: float = 0.0

    def as_row(self) -> dict[str, Any]:
        return {
            "VendorId": self.vendor_id,
            "RateCode": self.rate_code,
            "PassengerCount": self.passenger_count,
            "TripTime": self.trip_time,
            "TripDistance": self.trip_distance,
            "PaymentType": self.payment_type,
            "FareAmount": self.fare_amount,
        }


@dataclass
class FarePrediction:
    """Model output for one trip, read from the ``Score`` column."""

    fare_amount: float


def records_to_frame(records: list[TripRecord]) -> pl.DataFrame:
    """Build a frame with the trip schema from in-memory records."""
    schema = frame_schema()
    rows = [r.as_row() for r in records]
    return pl.DataFrame(
        {name: [row[name] for row in rows] for name in schema},
        schema=schema,
    )
