from __future__ import annotations

import os

import numpy as np
import polars as pl

JFK_FLAT_FARE = 52.0


def generate_synthetic_data(path: str, rows: int = 5_000, seed: int = 0) -> str:
    """Write a taxi-fare CSV with the seven-column tutorial layout.

    Used when the real dataset is unavailable. Fares follow a base charge
    plus a per-mile rate with noise; rate code 2 is the flat JFK fare.

    Args:
        path: Destination CSV.
        rows: Number of trips.
        seed: Random seed for reproducibility.

    Returns:
        ``path``.
    """
    rng = np.random.default_rng(seed)

    vendor_id = rng.choice(["CMT", "VTS"], size=rows, p=[0.5, 0.5])
    rate_code = rng.choice(["1", "2", "3", "4", "5"], size=rows, p=[0.94, 0.03, 0.01, 0.01, 0.01])
    passenger_count = rng.choice(
        [1, 2, 3, 4, 5, 6], size=rows,
        p=[0.70, 0.14, 0.05, 0.03, 0.05, 0.03],
    ).astype(np.float64)
    payment_type = rng.choice(["CRD", "CSH", "NOC", "DIS", "UNK"], size=rows, p=[0.55, 0.42, 0.01, 0.01, 0.01])

    trip_distance = rng.lognormal(mean=0.8, sigma=0.7, size=rows).clip(0.1, 40).round(2)
    speed_mph = rng.normal(12, 4, size=rows).clip(3, 40)
    trip_time = ((trip_distance / speed_mph) * 3600).astype(int).clip(60, 7200)

    fare_amount = 3.0 + 3.2 * trip_distance + rng.normal(0, 0.8, size=rows)
    fare_amount = np.where(rate_code == "2", JFK_FLAT_FARE, fare_amount)
    fare_amount = np.where(rate_code == "5", fare_amount * 1.5, fare_amount)
    fare_amount = fare_amount.clip(2.5, 300).round(1)

    df = pl.DataFrame({
        "vendor_id": vendor_id.tolist(),
        "rate_code": rate_code.tolist(),
        "passenger_count": passenger_count,
        "trip_time_in_secs": trip_time.astype(np.float64),
        "trip_distance": trip_distance,
        "payment_type": payment_type.tolist(),
        "fare_amount": fare_amount,
    })

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    df.write_csv(path)
    return path
