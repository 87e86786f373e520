"""Parseo de texto crudo del menú a valores tipados."""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from roster.exceptions import EmployeeValidationError
from roster.models import EmployeeType

DATE_FORMAT = "%Y-%m-%d"

# opción de menú -> tipo
EMPLOYEE_TYPE_CHOICES = {
    "1": EmployeeType.FULL_TIME,
    "2": EmployeeType.PART_TIME,
    "3": EmployeeType.CONTRACT,
    "4": EmployeeType.INTERN,
}


def parse_date(raw: str, field_label: str = "Date") -> date:
    """Sólo acepta exactamente YYYY-MM-DD."""
    s = (raw or "").strip()
    try:
        parsed = datetime.strptime(s, DATE_FORMAT).date()
    except ValueError:
        raise EmployeeValidationError(
            field_label,
            "Invalid date format! Please use exactly: YYYY-MM-DD (e.g. 1990-05-15)",
        )
    # strptime acepta "1990-5-1"; el formato es estricto
    if parsed.strftime(DATE_FORMAT) != s:
        raise EmployeeValidationError(
            field_label,
            "Invalid date format! Please use exactly: YYYY-MM-DD (e.g. 1990-05-15)",
        )
    return parsed


def parse_salary(raw: str) -> Decimal:
    s = (raw or "").strip().lstrip("$").replace(",", "")
    try:
        amount = Decimal(s)
    except InvalidOperation:
        raise EmployeeValidationError(
            "Salary",
            "Invalid salary amount! Please enter a valid number (e.g., 50000 or 75000.50)",
        )
    if not amount.is_finite():
        raise EmployeeValidationError("Salary", f"Invalid salary amount: {raw!r}")
    return amount


def parse_employee_type_choice(raw: str) -> EmployeeType:
    try:
        return EMPLOYEE_TYPE_CHOICES[(raw or "").strip()]
    except KeyError:
        raise EmployeeValidationError(
            "Employee type",
            "Invalid choice! Please enter 1, 2, 3, or 4.",
            allowed=EMPLOYEE_TYPE_CHOICES.keys(),
        )


def parse_employee_id(raw: str) -> int:
    try:
        return int((raw or "").strip())
    except ValueError:
        raise EmployeeValidationError("Employee ID", "Invalid Employee ID format.")


def parse_employee_form(form: Mapping[str, Optional[str]]) -> dict:
    """Textos del formulario de alta -> campos tipados para EmployeeRepository.add."""
    return {
        "first_name": form.get("first_name"),
        "last_name": form.get("last_name"),
        "date_of_birth": parse_date(form.get("date_of_birth"), "Date of birth"),
        "department": form.get("department"),
        "salary": parse_salary(form.get("salary")),
        "employee_type": parse_employee_type_choice(form.get("employee_type")),
    }
