import polars as pl
import pytest

from taxi_fare.errors import FileAccessError, ParseError
from taxi_fare.loader import TextLoader
from taxi_fare.schema import TAXI_TRIP_COLUMNS, Column, DataKind


def test_read_applies_schema(loader, config):
    df = loader.read(config.train_data_path)

    assert df.columns == [c.name for c in TAXI_TRIP_COLUMNS]
    assert df.height == 3_000
    assert df.schema["VendorId"] == pl.Utf8
    assert df.schema["RateCode"] == pl.Utf8
    assert df.schema["PaymentType"] == pl.Utf8
    for name in ("PassengerCount", "TripTime", "TripDistance", "FareAmount"):
        assert df.schema[name] == pl.Float32


def test_header_is_skipped_and_values_parsed(loader, write_csv):
    path = write_csv([
        "CMT,1,1,1271,3.8,CRD,17.5",
        "VTS,2,2,474,1.5,CSH,8",
    ])

    df = loader.read(path)

    assert df.height == 2
    assert df.row(0) == ("CMT", "1", 1.0, 1271.0, pytest.approx(3.8), "CRD", 17.5)
    assert df["RateCode"].to_list() == ["1", "2"]


def test_without_header_first_line_is_data(write_csv):
    path = write_csv(["CMT,1,1,1271,3.8,CRD,17.5"], header=None)

    df = TextLoader(has_header=False).read(path)

    assert df.height == 1
    assert df["VendorId"][0] == "CMT"


def test_custom_separator(write_csv):
    path = write_csv(
        ["CMT;1;1;1271;3.8;CRD;17.5"],
        header="a;b;c;d;e;f;g",
    )

    df = TextLoader(separator=";").read(path)

    assert df["FareAmount"].to_list() == [17.5]


def test_empty_text_field_reads_as_empty_string(loader, write_csv):
    path = write_csv([",1,1,1271,3.8,CRD,17.5"])

    df = loader.read(path)

    assert df["VendorId"].to_list() == [""]


def test_too_many_fields_fails(loader, write_csv):
    path = write_csv([
        "CMT,1,1,1271,3.8,CRD,17.5",
        "CMT,1,1,1271,3.8,CRD,17.5,extra",
    ])

    with pytest.raises(ParseError):
        loader.read(path)


def test_too_few_fields_fails(loader, write_csv):
    path = write_csv([
        "CMT,1,1,1271,3.8,CRD,17.5",
        "CMT,1,1,1271,3.8,CRD",
    ])

    with pytest.raises(ParseError):
        loader.read(path)


def test_non_numeric_value_fails_with_line_number(loader, write_csv):
    path = write_csv([
        "CMT,1,1,1271,3.8,CRD,17.5",
        "CMT,1,one,1271,3.8,CRD,17.5",
    ])

    with pytest.raises(ParseError, match="line 3"):
        loader.read(path)


def test_header_with_wrong_column_count_fails(loader, write_csv):
    path = write_csv(["CMT,1,1,1271,3.8,CRD"], header="a,b,c,d,e,f")

    with pytest.raises(ParseError, match="expected 7 columns"):
        loader.read(path)


def test_missing_file(loader, tmp_path):
    with pytest.raises(FileAccessError):
        loader.read(str(tmp_path / "nope.csv"))


def test_separator_must_be_one_character():
    with pytest.raises(ValueError):
        TextLoader(separator=",,")


def test_column_positions_must_be_contiguous():
    with pytest.raises(ValueError):
        TextLoader(columns=(Column("a", DataKind.TEXT, 0), Column("b", DataKind.R4, 2)))


@pytest.mark.parametrize("value", ["nan", "NaN", "inf", "-inf"])
def test_non_finite_numeric_value_fails(loader, write_csv, value):
    path = write_csv([
        "CMT,1,1,1271,3.8,CRD,17.5",
        f"CMT,1,1,1271,3.8,CRD,{value}",
    ])

    with pytest.raises(ParseError, match="line 3"):
        loader.read(path)
