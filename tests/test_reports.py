"""
Tests for the roster listing and CSV export
"""

from decimal import Decimal

import pandas as pd

from roster.models import EmployeeType
from roster.reports import ROSTER_COLUMNS, roster_frame, write_roster_csv


class TestRosterFrame:
    """Test the tabular listing"""

    def test_empty(self):
        df = roster_frame([])
        assert list(df.columns) == ROSTER_COLUMNS
        assert len(df) == 0

    def test_rows_follow_roster_order(self, repo, make_fields):
        repo.add(make_fields(first_name="Carol", department="sales", salary=Decimal("1000")))
        repo.add(make_fields(first_name="Alice", employee_type=EmployeeType.INTERN))
        df = roster_frame(repo.list_all())
        assert df["ID"].tolist() == [1000, 1001]
        assert df["Name"].tolist() == ["Carol Hopper", "Alice Hopper"]
        assert df["Department"].tolist() == ["Sales", "Operations"]
        assert df["Type"].tolist() == ["FullTime", "Intern"]
        assert df.loc[0, "Salary"] == Decimal("1000")


class TestCsvExport:
    """Test writing the listing to disk"""

    def test_write_and_read_back(self, repo, make_fields, tmp_path):
        repo.add(make_fields())
        repo.add(make_fields(first_name="Mary Ann", salary=Decimal("75000.50")))
        out = write_roster_csv(repo.list_all(), tmp_path / "exports" / "roster.csv")
        assert out.exists()
        df = pd.read_csv(out, dtype=str)
        assert list(df.columns) == ROSTER_COLUMNS
        assert df["Name"].tolist() == ["Grace Hopper", "Mary Ann Hopper"]
        assert df["Salary"].tolist() == ["50000", "75000.50"]
