"""Delimited text loading against a fixed column layout."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import polars as pl

from taxi_fare.config import Config
from taxi_fare.errors import FileAccessError, ParseError
from taxi_fare.schema import TAXI_TRIP_COLUMNS, Column, DataKind

logger = logging.getLogger("TaxiFare")


@dataclass(frozen=True)
class TextLoader:
    """Reads a delimited text file into a typed DataFrame.

    Columns are named by position, so header text is ignored. Numeric
    columns are parsed as ``Float32``; text columns are kept as-is with
    empty fields read as ``""``. Any row with the wrong number of fields or
    a missing, unparsable, NaN or infinite numeric value fails the whole read.

    Args:
        columns: Column layout of the file.
        separator: Single-character field delimiter.
        has_header: Skip the first line.
    """

    columns: tuple[Column, ...] = TAXI_TRIP_COLUMNS
    separator: str = ","
    has_header: bool = True

    def __post_init__(self) -> None:
        if len(self.separator) != 1:
            raise ValueError(f"separator must be a single character, got {self.separator!r}")
        indices = sorted(c.index for c in self.columns)
        if indices != list(range(len(self.columns))):
            raise ValueError(f"column positions must be 0..{len(self.columns) - 1}, got {indices}")

    @classmethod
    def from_config(cls, config: Config) -> TextLoader:
        return cls(separator=config.separator, has_header=config.has_header)

    @property
    def ordered_columns(self) -> list[Column]:
        return sorted(self.columns, key=lambda c: c.index)

    def read(self, path: str) -> pl.DataFrame:
        """Load ``path`` into a frame with one column per declared column.

        Args:
            path: CSV file to read.

        Returns:
            DataFrame typed according to the column layout.

        Raises:
            FileAccessError: The file does not exist or cannot be opened.
            ParseError: A row is malformed.
        """
        if not os.path.isfile(path):
            raise FileAccessError(f"Data file not found: {path}")

        try:
            raw = pl.read_csv(
                path,
                has_header=self.has_header,
                separator=self.separator,
                infer_schema=False,
                truncate_ragged_lines=False,
            )
        except OSError as exc:
            raise FileAccessError(f"Cannot read {path}: {exc}") from exc
        except pl.exceptions.PolarsError as exc:
            raise ParseError(f"Cannot parse {path}: {exc}") from exc

        columns = self.ordered_columns
        if raw.width != len(columns):
            raise ParseError(
                f"{path}: expected {len(columns)} columns, found {raw.width}"
            )
        raw = raw.rename({old: col.name for old, col in zip(raw.columns, columns)})

        numeric = [c.name for c in columns if c.kind is DataKind.R4]
        text = [c.name for c in columns if c.kind is DataKind.TEXT]
        self._check_numeric(raw, numeric, path)

        df = raw.with_columns(
            [pl.col(name).str.strip_chars().cast(pl.Float32) for name in numeric]
            + [pl.col(name).fill_null("") for name in text]
        )
        logger.info("Loaded %s (%d rows)", path, df.height)
        return df

    def _check_numeric(self, raw: pl.DataFrame, numeric: list[str], path: str) -> None:
        if not numeric or raw.height == 0:
            return
        bad = raw.with_row_index("row").filter(
            pl.any_horizontal([
                ~pl.col(name).str.strip_chars().cast(pl.Float32, strict=False).is_finite().fill_null(False)
                for name in numeric
            ])
        )
        if bad.height == 0:
            return

        first = bad.row(0, named=True)
        line = first["row"] + (2 if self.has_header else 1)
        offending = {name: first[name] for name in numeric}
        raise ParseError(
            f"{path}, line {line}: missing, non-numeric or non-finite value in {offending} "
            f"({bad.height} malformed row(s))"
        )
