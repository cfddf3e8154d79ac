import os

import numpy as np
import polars as pl
import pytest

from taxi_fare.errors import TaxiFareError
from taxi_fare.trainer import ModelTrainer, compute_metrics
from taxi_fare.transforms import FastTreeRegressionTransformer
from taxi_fare.tuning import HyperparameterTuner


def test_train_saves_model_and_returns_chain(trainer, config, capsys):
    model = trainer.train(config.train_data_path)

    assert os.path.isfile(config.model_save_path)
    assert len(model.stages) == 6
    assert isinstance(model.stages[-1], FastTreeRegressionTransformer)
    assert f"The model is saved to {config.model_save_path}" in capsys.readouterr().out


def test_feature_vector_width(model):
    vendors, rates, payments = (stage.vocabulary for stage in model.stages[1:4])
    expected = len(vendors) + len(rates) + len(payments) + 2

    assert model.stages[-1].n_features == expected


def test_training_is_deterministic(config, loader, tmp_path):
    test_df = loader.read(config.test_data_path)
    scores = []
    for i in range(2):
        config.model_save_path = str(tmp_path / f"Model-{i}.zip")
        chain = ModelTrainer(config, loader).train(config.train_data_path)
        scores.append(chain.transform(test_df)["Score"].to_numpy())

    np.testing.assert_array_equal(scores[0], scores[1])


def test_train_overwrites_existing_model(config, trainer):
    with open(config.model_save_path, "wb") as f:
        f.write(b"stale")

    trainer.train(config.train_data_path)

    assert trainer.load().stages[-1].n_features > 0


def test_train_on_empty_file_fails(trainer, write_csv):
    path = write_csv([])

    with pytest.raises(TaxiFareError):
        trainer.train(path)


def test_evaluate_reports_metrics(trainer, model, capsys):
    metrics = trainer.evaluate(model)

    assert set(metrics) == {"rmse", "mse", "mae", "r2"}
    assert metrics["r2"] > 0.8
    assert metrics["rmse"] == pytest.approx(np.sqrt(metrics["mse"]))
    out = capsys.readouterr().out
    assert "*       R2 Score:      " in out
    assert "*       RMS loss:      " in out


def test_evaluate_perfect_agreement(trainer, model, loader, config, tmp_path):
    raw = loader.read(config.test_data_path)
    scored = model.transform(raw)
    perfect = raw.with_columns(scored["Score"].alias("FareAmount"))
    path = str(tmp_path / "perfect.csv")
    perfect.write_csv(path)

    metrics = trainer.evaluate(model, path)

    assert metrics["r2"] == pytest.approx(1.0)
    assert metrics["rmse"] == pytest.approx(0.0, abs=1e-5)


def test_compute_metrics_label_equals_score():
    df = pl.DataFrame({"Label": [5.0, 10.0, 52.0], "Score": [5.0, 10.0, 52.0]})

    metrics = compute_metrics(df)

    assert metrics["r2"] == 1.0
    assert metrics["rmse"] == 0.0
    assert metrics["mae"] == 0.0


def test_compute_metrics_empty_frame_fails():
    with pytest.raises(TaxiFareError):
        compute_metrics(pl.DataFrame({"Label": [], "Score": []}))


def test_tuning_returns_trainer_params(config, loader):
    config.n_trials = 2
    config.n_cv_splits = 3
    features = ModelTrainer(config, loader).build_pipeline().fit(
        loader.read(config.test_data_path)
    )
    df = features.transform(loader.read(config.test_data_path))
    X = np.asarray(df["Features"].to_list(), dtype=np.float32)
    y = df["Label"].to_numpy()

    params = HyperparameterTuner(config).tune(X, y)

    assert set(params) == {"num_trees", "num_leaves", "min_data_in_leaf", "learning_rate"}


def test_train_with_tuning(config, loader):
    config.n_trials = 2
    config.n_cv_splits = 3

    chain = ModelTrainer(config, loader).train(config.test_data_path)

    assert isinstance(chain.stages[-1], FastTreeRegressionTransformer)
