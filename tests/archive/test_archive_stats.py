"""Tests for stats tables and CSV output."""
import pytest

from pathfind.archive.stats import stats_to_csv, write_stats_csv
from pathfind.archive.types import validate_stats_table
from pathfind.exceptions import StatsSchemaError


HEADER = ["Study ID", "Sample", "Lane", "Species", "Reads", "Bases", "QC status"]
ROW = ["607", "ERS001", "10018_1#1", "Streptococcus pneumoniae", 1000, 100000, "passed"]


class TestValidateStatsTable:
    """Test row-width checking."""

    def test_matching_rows_pass(self):
        table = [HEADER, ROW, ROW]
        assert validate_stats_table(table) is table

    def test_empty_table_passes(self):
        assert validate_stats_table([]) == []

    def test_header_only_passes(self):
        assert validate_stats_table([HEADER]) == [HEADER]

    @pytest.mark.parametrize("row", [ROW[:-1], ROW + ["extra"]])
    def test_wrong_width_raises(self, row):
        with pytest.raises(StatsSchemaError, match="row 2"):
            validate_stats_table([HEADER, ROW, row])


class TestStatsToCsv:
    """Test CSV rendering."""

    def test_header_and_rows(self):
        csv_text = stats_to_csv([HEADER, ROW])
        lines = csv_text.splitlines()
        assert lines[0] == ",".join(HEADER)
        assert lines[1] == "607,ERS001,10018_1#1,Streptococcus pneumoniae,1000,100000,passed"

    def test_missing_values_are_empty_fields(self):
        csv_text = stats_to_csv([["Lane", "Reads"], ["10018_1#3", None]])
        assert csv_text.splitlines()[1] == "10018_1#3,"

    def test_custom_delimiter(self):
        csv_text = stats_to_csv([["a", "b"], [1, 2]], delimiter="\t")
        assert csv_text == "a\tb\n1\t2\n"

    def test_empty_table(self):
        assert stats_to_csv([]) == ""

    def test_mismatched_table_is_rejected(self):
        with pytest.raises(StatsSchemaError):
            stats_to_csv([["a", "b"], [1]])

    def test_write_stats_csv(self, tmp_path):
        path = write_stats_csv([["a", "b"], [1, 2]], tmp_path / "stats.csv")
        assert path.read_text(encoding="utf-8") == "a,b\n1,2\n"

    def test_ints_survive_missing_values_in_other_rows(self):
        """A None in one row doesn't turn the rest of the column into floats."""
        csv_text = stats_to_csv([["Lane", "Reads"], ["10018_1#1", 1000], ["10018_1#3", None]])
        assert csv_text == "Lane,Reads\n10018_1#1,1000\n10018_1#3,\n"
