"""Pipeline stages: estimators that fit on a frame and the transformers they produce.

A :class:`Pipeline` is an ordered list of estimators. Fitting folds over the
list, fitting each estimator on the output of the previous transformer, and
returns a :class:`TransformerChain`. Every transformer can describe itself as
JSON parameters plus optional text artifacts so the chain can be persisted.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

import lightgbm as lgb
import numpy as np
import polars as pl

from taxi_fare.errors import TaxiFareError

logger = logging.getLogger("TaxiFare")

TRANSFORMERS: dict[str, type[Transformer]] = {}


def register(cls: type[Transformer]) -> type[Transformer]:
    """Make a transformer class loadable by its ``kind``."""
    TRANSFORMERS[cls.kind] = cls
    return cls


class Transformer(ABC):
    """A fitted, immutable stage."""

    kind: ClassVar[str]

    @abstractmethod
    def transform(self, df: pl.DataFrame) -> pl.DataFrame:
        ...

    @abstractmethod
    def get_params(self) -> dict[str, Any]:
        """JSON-serializable parameters that rebuild this stage."""

    def get_artifacts(self) -> dict[str, str]:
        """Named text blobs stored next to the parameters."""
        return {}

    @classmethod
    @abstractmethod
    def from_params(cls, params: dict[str, Any], artifacts: dict[str, str]) -> Transformer:
        ...


class Estimator(ABC):
    """An unfitted stage."""

    @abstractmethod
    def fit(self, df: pl.DataFrame) -> Transformer:
        ...


def feature_matrix(df: pl.DataFrame, column: str, width: int | None = None) -> np.ndarray:
    """Stack a list column of floats into a 2-D ``float32`` array."""
    values = np.asarray(df[column].to_list(), dtype=np.float32)
    if width is not None:
        return values.reshape(df.height, width)
    return values.reshape(df.height, -1)


@register
@dataclass(frozen=True)
class CopyColumns(Estimator, Transformer):
    """Copy ``input_column`` into ``output_column``, keeping the source."""

    input_column: str
    output_column: str

    kind: ClassVar[str] = "CopyColumns"

    def fit(self, df: pl.DataFrame) -> CopyColumns:
        return self

    def transform(self, df: pl.DataFrame) -> pl.DataFrame:
        return df.with_columns(pl.col(self.input_column).alias(self.output_column))

    def get_params(self) -> dict[str, Any]:
        return {"input_column": self.input_column, "output_column": self.output_column}

    @classmethod
    def from_params(cls, params: dict[str, Any], artifacts: dict[str, str]) -> CopyColumns:
        return cls(params["input_column"], params["output_column"])


@dataclass(frozen=True)
class OneHotEncoding(Estimator):
    """Learn the distinct non-empty values of a text column."""

    column: str

    def fit(self, df: pl.DataFrame) -> OneHotEncodingTransformer:
        values = df[self.column].drop_nulls()
        vocabulary = tuple(sorted(values.filter(values != "").unique().to_list()))
        if not vocabulary:
            raise TaxiFareError(f"Cannot learn a vocabulary for {self.column!r} from an empty column")
        logger.info("One-hot %s: %d distinct values", self.column, len(vocabulary))
        return OneHotEncodingTransformer(self.column, vocabulary)


@register
@dataclass(frozen=True)
class OneHotEncodingTransformer(Transformer):
    """Replace a text column with a ``float32`` indicator vector.

    Slot ``i`` is 1.0 when the value equals ``vocabulary[i]``. Values outside
    the vocabulary produce the all-zero vector.
    """

    column: str
    vocabulary: tuple[str, ...]

    kind: ClassVar[str] = "OneHotEncoding"

    def transform(self, df: pl.DataFrame) -> pl.DataFrame:
        indicators = [
            (pl.col(self.column) == value).fill_null(False).cast(pl.Float32)
            for value in self.vocabulary
        ]
        return df.with_columns(pl.concat_list(indicators).alias(self.column))

    def get_params(self) -> dict[str, Any]:
        return {"column": self.column, "vocabulary": list(self.vocabulary)}

    @classmethod
    def from_params(cls, params: dict[str, Any], artifacts: dict[str, str]) -> OneHotEncodingTransformer:
        return cls(params["column"], tuple(params["vocabulary"]))


@register
@dataclass(frozen=True)
class Concatenate(Estimator, Transformer):
    """Join scalar and vector columns into one ``float32`` list column."""

    output_column: str
    input_columns: tuple[str, ...]

    kind: ClassVar[str] = "Concatenate"

    def fit(self, df: pl.DataFrame) -> Concatenate:
        return self

    def transform(self, df: pl.DataFrame) -> pl.DataFrame:
        parts = []
        for name in self.input_columns:
            if isinstance(df.schema[name], pl.List):
                parts.append(pl.col(name).cast(pl.List(pl.Float32)))
            else:
                parts.append(pl.concat_list([pl.col(name).cast(pl.Float32)]))
        return df.with_columns(pl.concat_list(parts).alias(self.output_column))

    def get_params(self) -> dict[str, Any]:
        return {"output_column": self.output_column, "input_columns": list(self.input_columns)}

    @classmethod
    def from_params(cls, params: dict[str, Any], artifacts: dict[str, str]) -> Concatenate:
        return cls(params["output_column"], tuple(params["input_columns"]))


@dataclass(frozen=True)
class FastTreeRegression(Estimator):
    """Gradient-boosted regression trees over a feature vector column.

    Args:
        label_column: Target column.
        feature_column: List column produced by :class:`Concatenate`.
        score_column: Output column for predictions.
        num_trees: Boosting rounds.
        num_leaves: Maximum leaves per tree.
        min_data_in_leaf: Minimum rows per leaf.
        learning_rate: Shrinkage per tree.
        seed: Random seed; training runs in LightGBM's deterministic mode.
    """

    label_column: str = "Label"
    feature_column: str = "Features"
    score_column: str = "Score"
    num_trees: int = 100
    num_leaves: int = 20
    min_data_in_leaf: int = 10
    learning_rate: float = 0.2
    seed: int = 0

    def lgbm_params(self) -> dict[str, Any]:
        return {
            "objective": "regression",
            "n_estimators": self.num_trees,
            "num_leaves": self.num_leaves,
            "min_child_samples": self.min_data_in_leaf,
            "learning_rate": self.learning_rate,
            "random_state": self.seed,
            "deterministic": True,
            "force_row_wise": True,
            "n_jobs": 1,
            "verbosity": -1,
        }

    def fit(self, df: pl.DataFrame) -> FastTreeRegressionTransformer:
        if df.height == 0:
            raise TaxiFareError("Cannot fit a regression model on zero rows")
        X = feature_matrix(df, self.feature_column)
        y = df[self.label_column].cast(pl.Float32).to_numpy()

        model = lgb.LGBMRegressor(**self.lgbm_params())
        model.fit(X, y)
        logger.info(
            "Fitted %d trees on %d rows x %d features",
            model.booster_.num_trees(), X.shape[0], X.shape[1],
        )
        return FastTreeRegressionTransformer(
            booster=model.booster_,
            n_features=X.shape[1],
            feature_column=self.feature_column,
            score_column=self.score_column,
        )


@register
@dataclass(frozen=True)
class FastTreeRegressionTransformer(Transformer):
    """Writes booster predictions for each row into ``score_column``."""

    booster: lgb.Booster
    n_features: int
    feature_column: str = "Features"
    score_column: str = "Score"

    kind: ClassVar[str] = "FastTreeRegression"

    def transform(self, df: pl.DataFrame) -> pl.DataFrame:
        if df.height == 0:
            scores = np.empty(0, dtype=np.float32)
        else:
            X = feature_matrix(df, self.feature_column, self.n_features)
            scores = np.asarray(self.booster.predict(X), dtype=np.float32)
        return df.with_columns(pl.Series(self.score_column, scores))

    def get_params(self) -> dict[str, Any]:
        return {
            "n_features": self.n_features,
            "feature_column": self.feature_column,
            "score_column": self.score_column,
        }

    def get_artifacts(self) -> dict[str, str]:
        return {"booster.txt": self.booster.model_to_string()}

    @classmethod
    def from_params(cls, params: dict[str, Any], artifacts: dict[str, str]) -> FastTreeRegressionTransformer:
        booster = lgb.Booster(model_str=artifacts["booster.txt"])
        return cls(
            booster=booster,
            n_features=int(params["n_features"]),
            feature_column=params["feature_column"],
            score_column=params["score_column"],
        )


@dataclass(frozen=True)
class TransformerChain:
    """Fitted stages applied in order."""

    stages: tuple[Transformer, ...]

    def transform(self, df: pl.DataFrame) -> pl.DataFrame:
        for stage in self.stages:
            df = stage.transform(df)
        return df


@dataclass(frozen=True)
class Pipeline:
    """Ordered estimators, fitted front to back."""

    stages: tuple[Estimator, ...] = ()

    def append(self, stage: Estimator) -> Pipeline:
        return Pipeline((*self.stages, stage))

    def fit(self, df: pl.DataFrame) -> TransformerChain:
        fitted: list[Transformer] = []
        for i, estimator in enumerate(self.stages):
            transformer = estimator.fit(df)
            fitted.append(transformer)
            if i < len(self.stages) - 1:
                df = transformer.transform(df)
        return TransformerChain(tuple(fitted))
