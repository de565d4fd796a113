"""Unit tests for loading and splitting return datasets."""

import numpy as np
import pandas as pd
import pytest

from portfolio_frontier.core.loader import (
    DataLoader,
    ReturnDataset,
    find_period_file,
    generate_sample_returns,
)


@pytest.fixture
def raw_frame() -> pd.DataFrame:
    return pd.DataFrame({
        "Date": pd.date_range("2020-01-01", periods=4, freq="MS"),
        "AAPL": [1.0, 2.0, -1.0, 0.5],
        "AXP": [0.5, np.nan, 1.5, 2.0],
        "Sector": ["Tech", "Fin", "Tech", "Fin"],
        "DJI": [0.2, 0.4, -0.3, 0.1],
        "SP500": [0.3, 0.5, -0.2, 0.2],
    })


class TestSplit:
    def test_separates_assets_and_benchmarks(self, sample_frame):
        dataset = DataLoader().split(sample_frame)
        assert isinstance(dataset, ReturnDataset)
        assert dataset.asset_names == ['AAPL', 'AXP', 'BA', 'CAT', 'CSCO', 'CVX']
        assert list(dataset.benchmark_returns.columns) == ['DJI', 'SP500']
        assert dataset.n_periods == 60

    def test_date_column_kept_aside(self, sample_frame):
        dataset = DataLoader().split(sample_frame)
        assert 'Date' not in dataset.asset_returns.columns
        assert len(dataset.dates) == 60

    def test_non_numeric_columns_skipped(self, raw_frame):
        dataset = DataLoader().split(raw_frame)
        assert dataset.asset_names == ['AAPL', 'AXP']

    def test_rows_with_missing_values_dropped(self, raw_frame):
        dataset = DataLoader().split(raw_frame)
        assert dataset.n_periods == 3
        assert len(dataset.dates) == 3
        assert dataset.asset_returns['AAPL'].tolist() == [1.0, -1.0, 0.5]

    def test_excluded_columns(self, raw_frame):
        dataset = DataLoader(exclude_columns=['AXP']).split(raw_frame)
        assert dataset.asset_names == ['AAPL']
        assert dataset.n_periods == 4

    def test_missing_benchmark(self, raw_frame):
        with pytest.raises(ValueError, match="Benchmark"):
            DataLoader(benchmark_columns=['DJI', 'NASDAQ']).split(raw_frame)

    def test_no_assets(self, raw_frame):
        frame = raw_frame[['Date', 'DJI', 'SP500']]
        with pytest.raises(ValueError, match="No asset"):
            DataLoader().split(frame)

    def test_numeric_strings_converted(self):
        frame = pd.DataFrame({
            "A": ["1.5", "2.5", "-0.5"],
            "DJI": [0.1, 0.2, 0.3],
            "SP500": [0.1, 0.2, 0.3],
        })
        dataset = DataLoader().split(frame)
        assert dataset.asset_returns['A'].dtype == float
        assert dataset.asset_returns['A'].sum() == pytest.approx(3.5)

    def test_input_frame_untouched(self, raw_frame):
        columns = list(raw_frame.columns)
        DataLoader().split(raw_frame)
        assert list(raw_frame.columns) == columns


class TestLoadFile:
    def test_csv_round_trip(self, tmp_path, sample_frame):
        path = tmp_path / "mpartition.csv"
        sample_frame.to_csv(path, index=False)
        dataset = DataLoader().load(str(path))
        assert dataset.asset_names == ['AAPL', 'AXP', 'BA', 'CAT', 'CSCO', 'CVX']
        np.testing.assert_allclose(
            dataset.asset_returns.to_numpy(),
            sample_frame[dataset.asset_names].to_numpy()
        )

    def test_excel_sheet(self, tmp_path, sample_frame):
        path = tmp_path / "wpartition.xlsx"
        with pd.ExcelWriter(path) as writer:
            pd.DataFrame({"note": ["cover"]}).to_excel(writer, sheet_name="Info", index=False)
            sample_frame.to_excel(writer, sheet_name="Returns", index=False)
        dataset = DataLoader().load(str(path), sheet_name="Returns")
        assert dataset.n_periods == 60

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DataLoader().load_file(str(tmp_path / "nope.csv"))

    def test_unsupported_type(self, tmp_path):
        path = tmp_path / "returns.json"
        path.write_text("{}")
        with pytest.raises(ValueError, match="Unsupported"):
            DataLoader().load_file(str(path))


class TestFindPeriodFile:
    def test_prefers_csv(self, tmp_path):
        (tmp_path / "dpartition.csv").write_text("x")
        (tmp_path / "dpartition.xlsx").write_text("x")
        assert find_period_file(str(tmp_path), 'd').name == "dpartition.csv"

    def test_falls_back_to_excel(self, tmp_path):
        (tmp_path / "wpartition.xlsx").write_text("x")
        assert find_period_file(str(tmp_path), 'w').name == "wpartition.xlsx"

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            find_period_file(str(tmp_path), 'm')


class TestGenerateSampleReturns:
    def test_reproducible(self):
        pd.testing.assert_frame_equal(generate_sample_returns(seed=3), generate_sample_returns(seed=3))

    def test_custom_size_and_benchmarks(self):
        frame = generate_sample_returns(n_assets=3, n_periods=12, benchmark_columns=['IDX'])
        assert list(frame.columns) == ['Date', 'Stock_1', 'Stock_2', 'Stock_3', 'IDX']
        assert len(frame) == 12
