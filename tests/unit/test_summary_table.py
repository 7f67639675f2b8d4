"""
Unit tests for the per-outcome summary statistics table.
"""

import pandas as pd
import pytest

from diabetes_report.data_cleaning import clean
from diabetes_report.dataset import PREDICTORS
from diabetes_report.exceptions import EmptyGroupError
from diabetes_report.summary_table import DISPLAY_COLUMNS, SummaryTable, describe, summarize

pytestmark = pytest.mark.unit


class TestDescribe:
    def test_type7_quantiles(self):
        cell = describe(pd.Series([1, 2, 3, 4], name="x"))

        assert cell.pct25 == pytest.approx(1.75)
        assert cell.pct75 == pytest.approx(3.25)
        assert cell.median == pytest.approx(2.5)
        assert cell.mean == pytest.approx(2.5)
        assert (cell.min, cell.max, cell.n) == (1, 4, 4)

    def test_display_strings(self):
        cell = describe(pd.Series([1, 2, 3, 4], name="x"))

        assert cell.range == "1 - 4"
        assert cell.median_iqr == "2.5 (1.8 - 3.3)"
        assert cell.display() == {"range": "1 - 4", "mean": "2.5", "median_iqr": "2.5 (1.8 - 3.3)"}

    def test_small_values_use_three_decimals(self):
        cell = describe(pd.Series([0.078, 0.2, 0.5, 2.42], name="pedigree_score"))

        assert cell.range == "0.078 - 2.4"
        assert cell.formatted["median"] == "0.350"

    def test_no_values_raises(self):
        with pytest.raises(EmptyGroupError):
            describe(pd.Series([float("nan")], name="x"))


class TestSummarize:
    def test_keys_cover_groups_and_variables(self, ten_records):
        table = summarize(clean(ten_records))

        assert isinstance(table, SummaryTable)
        assert len(table) == 2 * len(PREDICTORS)
        assert list(table)[0] == (0, PREDICTORS[0])
        assert table[(1, "glucose")].n == 3

    def test_group_values(self, ten_records):
        table = summarize(clean(ten_records))
        positive_glucose = table[(1, "glucose")]

        # positives: 148, 183, 137
        assert positive_glucose.range == "137 - 183"
        assert positive_glucose.display()["mean"] == "156"
        assert positive_glucose.median_iqr == "148 (142.5 - 165.5)"

    def test_to_frame_layout(self, ten_records):
        frame = summarize(clean(ten_records)).to_frame()

        assert list(frame.index) == list(PREDICTORS)
        assert list(frame.columns.get_level_values(0)) == [0, 0, 0, 1, 1, 1]
        assert list(frame.columns.get_level_values(1)) == list(DISPLAY_COLUMNS) * 2
        assert frame.loc["glucose", (1, "range")] == "137 - 183"

    def test_records_long_form(self, ten_records):
        records = summarize(clean(ten_records)).records()

        assert len(records) == 2 * len(PREDICTORS)
        assert set(records[0]) == {"variable", "outcome", "range", "mean", "median_iqr"}
        assert (records[0]["variable"], records[0]["outcome"]) == (PREDICTORS[0], 0)

    def test_deterministic(self, pima_like):
        df = clean(pima_like)
        first = summarize(df)
        second = summarize(df)

        assert first.to_frame().to_csv() == second.to_frame().to_csv()
        assert first.records() == second.records()
        assert first == second

    def test_cells_are_read_only(self, ten_records):
        table = summarize(clean(ten_records))

        with pytest.raises(TypeError):
            table.cells[(1, "glucose")] = table[(0, "glucose")]

    def test_source_dict_changes_do_not_leak(self, ten_records):
        cells = dict(summarize(clean(ten_records)).cells)
        table = SummaryTable(cells=cells)
        cells.pop((1, "glucose"))

        assert table[(1, "glucose")].n == 3

    def test_empty_group_raises(self, ten_records):
        df = clean(ten_records)
        only_negative = df[df["outcome"] == 0]

        with pytest.raises(EmptyGroupError, match="pos"):
            summarize(only_negative)

    def test_input_not_modified(self, ten_records):
        df = clean(ten_records)
        original = df.copy()
        summarize(df)
        pd.testing.assert_frame_equal(df, original)
