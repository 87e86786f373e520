"""
Unit tests for EmployeeRepository: CRUD, editing policy and statistics
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from roster.exceptions import EmployeeNotFoundError, EmployeeValidationError
from roster.models import Employee, EmployeeType
from roster.repository import EmployeeRepository
from roster.schemas import EmployeeIn
from roster.validators import MAX_EMPLOYEE_ID, EmployeeIdSequence, years_before


class TestAdd:
    """Test creation"""

    def test_ada_lovelace_scenario(self, repo, ada_fields, today):
        """Test the stored record holds the normalized inputs"""
        emp = repo.add(ada_fields)
        assert emp.employee_id == 1000
        assert emp.first_name == "Ada"
        assert emp.last_name == "Lovelace"
        assert emp.department == "IT"
        assert emp.salary == Decimal("85000")
        assert emp.employee_type is EmployeeType.CONTRACT
        assert emp.hire_date == today
        assert emp.age == 30

    def test_trims_names(self, repo, make_fields):
        emp = repo.add(make_fields(first_name="  Grace ", last_name=" Hopper  "))
        assert emp.full_name == "Grace Hopper"

    def test_accepts_schema_instance(self, repo, make_fields):
        emp = repo.add(EmployeeIn(**make_fields()))
        assert repo.find_by_id(emp.employee_id) is emp

    def test_ids_strictly_increase(self, repo, make_fields):
        ids = [repo.add(make_fields()).employee_id for _ in range(5)]
        assert ids == sorted(set(ids))
        assert ids == [1000, 1001, 1002, 1003, 1004]

    def test_injected_id_sequence(self, snapshot_path, make_fields):
        repo = EmployeeRepository(data_path=snapshot_path, id_sequence=EmployeeIdSequence(7))
        assert repo.add(make_fields()).employee_id == 7

    def test_string_inputs_are_parsed(self, repo, make_fields):
        emp = repo.add(make_fields(date_of_birth="1990-01-01", salary="75000.50", employee_type="Intern"))
        assert emp.date_of_birth == date(1990, 1, 1)
        assert emp.salary == Decimal("75000.50")
        assert emp.employee_type is EmployeeType.INTERN

    @pytest.mark.parametrize("override,field", [
        ({"first_name": ""}, "First name"),
        ({"first_name": "A"}, "First name"),
        ({"last_name": "Lovelace3"}, "Last name"),
        ({"department": "Marekting"}, "Department"),
        ({"salary": Decimal("-1")}, "Salary"),
        ({"salary": Decimal("1000001")}, "Salary"),
    ])
    def test_invalid_fields_rejected(self, repo, make_fields, override, field):
        with pytest.raises(EmployeeValidationError) as exc_info:
            repo.add(make_fields(**override))
        assert exc_info.value.field == field
        assert len(repo) == 0

    @pytest.mark.parametrize("years,days", [(0, -1), (200, 0), (15, 0), (101, 1)])
    def test_birth_date_policy(self, repo, make_fields, today, years, days):
        """Test tomorrow, 200 years ago, under 16 and over 100 all fail"""
        dob = years_before(today, years) - timedelta(days=days)
        with pytest.raises(EmployeeValidationError):
            repo.add(make_fields(date_of_birth=dob))
        assert repo.list_all() == ()

    def test_failed_add_does_not_consume_id(self, repo, make_fields):
        with pytest.raises(EmployeeValidationError):
            repo.add(make_fields(salary=-5))
        assert repo.next_employee_id == 1000
        assert repo.add(make_fields()).employee_id == 1000

    def test_hire_date_cannot_be_supplied(self, repo, make_fields):
        with pytest.raises(EmployeeValidationError) as exc_info:
            repo.add(make_fields(hire_date=date(2010, 1, 1)))
        assert exc_info.value.field == "hire_date"

    def test_missing_field_rejected(self, repo, make_fields):
        fields = make_fields()
        del fields["salary"]
        with pytest.raises(EmployeeValidationError) as exc_info:
            repo.add(fields)
        assert exc_info.value.field == "salary"

    def test_id_space_exhausted(self, snapshot_path, make_fields):
        """Test ids never go past what the snapshot can store"""
        repo = EmployeeRepository(
            data_path=snapshot_path, id_sequence=EmployeeIdSequence(MAX_EMPLOYEE_ID),
        )
        last = repo.add(make_fields())
        assert last.employee_id == MAX_EMPLOYEE_ID
        with pytest.raises(EmployeeValidationError, match="No employee IDs left"):
            repo.add(make_fields(first_name="Alan"))
        assert repo.list_all() == (last,)
        assert repo.save_snapshot() == 1


class TestLookupAndRemove:
    """Test find, get, list and remove"""

    def test_find_after_add(self, repo, ada_fields):
        emp = repo.add(ada_fields)
        assert repo.find_by_id(emp.employee_id) is emp
        assert repo.get(emp.employee_id) is emp

    def test_find_unknown(self, repo):
        assert repo.find_by_id(4242) is None
        with pytest.raises(EmployeeNotFoundError) as exc_info:
            repo.get(4242)
        assert exc_info.value.employee_id == 4242

    def test_remove(self, repo, make_fields):
        first = repo.add(make_fields(first_name="Alan"))
        second = repo.add(make_fields(first_name="Barbara"))
        removed = repo.remove(first.employee_id)
        assert removed is first
        assert repo.find_by_id(first.employee_id) is None
        assert repo.list_all() == (second,)

    def test_remove_unknown(self, repo):
        with pytest.raises(EmployeeNotFoundError):
            repo.remove(1000)

    def test_ids_not_reused_after_remove(self, repo, make_fields):
        emp = repo.add(make_fields())
        repo.remove(emp.employee_id)
        assert repo.add(make_fields()).employee_id == emp.employee_id + 1

    def test_list_all_keeps_insertion_order(self, repo, make_fields):
        names = ["Carol", "Alice", "Bob"]
        for name in names:
            repo.add(make_fields(first_name=name))
        listed = repo.list_all()
        assert isinstance(listed, tuple)
        assert [e.first_name for e in listed] == names


class TestUpdate:
    """Test the lenient edit policy"""

    def test_applies_valid_fields(self, repo, ada_fields):
        emp = repo.add(ada_fields)
        result = repo.update(
            emp.employee_id,
            first_name=" Augusta ",
            department="finance",
            salary="90000",
            employee_type=EmployeeType.FULL_TIME,
        )
        assert result.employee is emp
        assert result.applied == ["first_name", "department", "salary", "employee_type"]
        assert result.rejected == {}
        assert result.changed
        assert emp.first_name == "Augusta"
        assert emp.department == "Finance"
        assert emp.salary == Decimal("90000")
        assert emp.employee_type is EmployeeType.FULL_TIME

    def test_invalid_fields_keep_current_value(self, repo, ada_fields):
        emp = repo.add(ada_fields)
        result = repo.update(
            emp.employee_id,
            first_name="A",
            last_name="Byron",
            department="Marekting",
            salary="lots",
        )
        assert result.applied == ["last_name"]
        assert set(result.rejected) == {"first_name", "department", "salary"}
        assert "Must be one of" in result.rejected["department"]
        assert emp.first_name == "Ada"
        assert emp.last_name == "Byron"
        assert emp.department == "IT"
        assert emp.salary == Decimal("85000")

    def test_out_of_range_salary_rejected(self, repo, ada_fields):
        emp = repo.add(ada_fields)
        result = repo.update(emp.employee_id, salary=Decimal("1000001"))
        assert result.rejected == {"salary": "Salary cannot exceed $1,000,000!"}
        assert emp.salary == Decimal("85000")

    def test_name_characters_checked_on_edit(self, repo, ada_fields):
        emp = repo.add(ada_fields)
        result = repo.update(emp.employee_id, last_name="L0velace")
        assert "last_name" in result.rejected
        assert emp.last_name == "Lovelace"

    def test_blank_values_are_skipped(self, repo, ada_fields):
        emp = repo.add(ada_fields)
        result = repo.update(emp.employee_id, first_name="   ", department=None)
        assert result.applied == []
        assert result.rejected == {}
        assert not result.changed

    def test_birth_date_edit_uses_base_rule(self, repo, ada_fields, today):
        emp = repo.add(ada_fields)
        result = repo.update(emp.employee_id, date_of_birth=years_before(today, 12))
        assert result.applied == ["date_of_birth"]
        assert emp.age == 12

    def test_hire_date_and_id_not_editable(self, repo, ada_fields, today):
        emp = repo.add(ada_fields)
        with pytest.raises(EmployeeValidationError, match="cannot be edited"):
            repo.update(emp.employee_id, hire_date=date(2010, 1, 1), first_name="Augusta")
        with pytest.raises(EmployeeValidationError):
            repo.update(emp.employee_id, employee_id=1)
        assert emp.hire_date == today
        assert emp.first_name == "Ada"

    def test_employee_id_keyword_is_a_change_not_the_target(self, repo, ada_fields):
        emp = repo.add(ada_fields)
        with pytest.raises(EmployeeValidationError) as exc_info:
            repo.update(emp.employee_id, employee_id=1)
        assert exc_info.value.field == "employee_id"
        assert emp.employee_id == 1000
        assert repo.find_by_id(1) is None

    def test_unknown_id(self, repo):
        with pytest.raises(EmployeeNotFoundError):
            repo.update(999, first_name="Nobody")


class TestStatistics:
    """Test aggregate statistics"""

    def test_empty_roster(self, repo):
        stats = repo.statistics()
        assert not stats.has_data
        assert stats.total_count == 0
        assert stats.total_salary == Decimal("0")
        assert stats.average_salary is None
        assert stats.min_salary is None
        assert stats.max_salary is None
        assert stats.average_age is None
        assert set(stats.department_counts.values()) == {0}
        assert set(stats.type_counts.values()) == {0}
        assert stats.department_share("IT") == 0.0

    def test_single_record(self, repo, make_fields):
        repo.add(make_fields(salary=Decimal("50000")))
        stats = repo.statistics()
        assert stats.total_count == 1
        assert stats.min_salary == stats.max_salary == Decimal("50000")
        assert stats.average_salary == stats.total_salary == Decimal("50000")

    def test_distributions(self, repo, make_fields):
        today = date(2024, 6, 15)
        repo.add(make_fields(department="IT", salary=100, date_of_birth=date(1990, 1, 1)))
        repo.add(make_fields(department="it", salary=200, date_of_birth=date(1980, 6, 16),
                             employee_type=EmployeeType.INTERN))
        repo.add(make_fields(department="Sales", salary=600, date_of_birth=date(2000, 6, 15),
                             employee_type=EmployeeType.CONTRACT))
        repo.add(make_fields(department="HR", salary=300, date_of_birth=date(1970, 1, 1)))

        stats = repo.statistics(today=today)
        assert stats.total_count == 4
        assert stats.total_salary == Decimal("1200")
        assert stats.average_salary == Decimal("300")
        assert stats.min_salary == Decimal("100")
        assert stats.max_salary == Decimal("600")
        assert stats.department_counts == {
            "HR": 1, "IT": 2, "Finance": 0, "Marketing": 0, "Operations": 0, "Sales": 1,
        }
        assert stats.type_counts[EmployeeType.FULL_TIME] == 2
        assert stats.type_counts[EmployeeType.INTERN] == 1
        assert stats.type_counts[EmployeeType.PART_TIME] == 0
        # 34, 43, 24, 54
        assert stats.min_age == 24
        assert stats.max_age == 54
        assert stats.average_age == pytest.approx(38.75)
        assert stats.department_share("IT") == pytest.approx(50.0)
        assert stats.type_share(EmployeeType.CONTRACT) == pytest.approx(25.0)

    def test_unknown_department_from_snapshot_not_counted(self, repo, make_fields):
        """Test trusted snapshot data outside the valid set is ignored by the per-department counts"""
        repo.add(make_fields())
        repo._employees.append(Employee.model_construct(
            employee_id=5000, first_name="Old", last_name="Record",
            date_of_birth=date(1980, 1, 1), department="Legal", salary=Decimal("10"),
            hire_date=date(2005, 1, 1), employee_type=EmployeeType.PART_TIME,
        ))
        stats = repo.statistics()
        assert stats.total_count == 2
        assert sum(stats.department_counts.values()) == 1
        assert stats.type_counts[EmployeeType.PART_TIME] == 1
