"""
Test configuration and fixtures
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from roster.core.config import get_settings
from roster.models import EmployeeType
from roster.repository import EmployeeRepository
from roster.validators import years_before


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests that touch the env need a fresh copy"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def today():
    return date.today()


@pytest.fixture
def snapshot_path(tmp_path):
    return tmp_path / "employees.dat"


@pytest.fixture
def repo(snapshot_path):
    """Empty repository writing to a temporary snapshot file"""
    return EmployeeRepository(data_path=snapshot_path)


@pytest.fixture
def ada_fields(today):
    """Valid creation fields: Ada Lovelace, 30 years old, IT contractor"""
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "date_of_birth": years_before(today, 30),
        "department": "it",
        "salary": Decimal("85000"),
        "employee_type": EmployeeType.CONTRACT,
    }


@pytest.fixture
def make_fields(today):
    """Factory for valid creation fields with overrides"""

    def _make(**overrides):
        fields = {
            "first_name": "Grace",
            "last_name": "Hopper",
            "date_of_birth": years_before(today, 40) - timedelta(days=10),
            "department": "Operations",
            "salary": Decimal("50000"),
            "employee_type": EmployeeType.FULL_TIME,
        }
        fields.update(overrides)
        return fields

    return _make
