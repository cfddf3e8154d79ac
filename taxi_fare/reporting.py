"""Console report lines."""

from __future__ import annotations

from taxi_fare.schema import FarePrediction


def format_decimal(value: float, places: int, leading_zero: bool = True) -> str:
    """Round to at most ``places`` decimals and drop trailing zeros.

    ``leading_zero=False`` drops a lone integer zero, so 0.5 renders as
    ``.5`` and 0 as an empty string.
    """
    text = f"{value:.{places}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    if not leading_zero:
        if text.startswith("0"):
            text = text[1:]
        elif text.startswith("-0"):
            text = "-" + text[2:]
    return text


def print_metrics(metrics: dict[str, float]) -> None:
    print()
    print("*************************************************")
    print("*       Model quality metrics evaluation         ")
    print("*------------------------------------------------")
    print(f"*       R2 Score:      {format_decimal(metrics['r2'], 2)}")
    print(f"*       RMS loss:      {format_decimal(metrics['rmse'], 2, leading_zero=False)}")


def print_prediction(prediction: FarePrediction, actual: float) -> None:
    print("**********************************************************************")
    print(f"Predicted fare: {format_decimal(prediction.fare_amount, 4)}, actual fare: {actual}")
    print("**********************************************************************")
