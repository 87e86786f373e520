from datetime import date
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator

from roster import validators
from roster.models import Employee, EmployeeType


class EmployeeIn(BaseModel):
    """Campos de alta tal como los entrega el colaborador (menú/CLI)."""

    model_config = ConfigDict(extra="forbid")

    first_name:    str
    last_name:     str
    date_of_birth: date
    department:    str
    salary:        Decimal
    employee_type: EmployeeType = EmployeeType.FULL_TIME

    @field_validator("first_name")
    @classmethod
    def first_name_ok(cls, v):
        v = validators.validate_name(v, "First name")
        return validators.validate_name_characters(v, "First name")

    @field_validator("last_name")
    @classmethod
    def last_name_ok(cls, v):
        v = validators.validate_name(v, "Last name")
        return validators.validate_name_characters(v, "Last name")

    @field_validator("date_of_birth")
    @classmethod
    def hiring_age(cls, v):
        v = validators.validate_hiring_age(v)
        # el setter del modelo también debe aceptarla
        return validators.validate_date_of_birth(v)

    @field_validator("department")
    @classmethod
    def department_ok(cls, v):
        return validators.validate_department(v)

    @field_validator("salary")
    @classmethod
    def salary_ok(cls, v):
        return validators.validate_salary(v)

    @field_validator("employee_type", mode="before")
    @classmethod
    def employee_type_ok(cls, v):
        return EmployeeType.parse(v)


class UpdateResult(BaseModel):
    """Resultado de una edición: campos aplicados y campos descartados con su motivo."""

    employee: Employee
    applied:  list[str] = Field(default_factory=list)
    rejected: dict[str, str] = Field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.applied)


class RosterStatistics(BaseModel):
    total_count:    int = 0
    total_salary:   Decimal = Decimal("0")
    average_salary: Decimal | None = None
    min_salary:     Decimal | None = None
    max_salary:     Decimal | None = None

    department_counts: dict[str, int] = Field(
        default_factory=lambda: {d: 0 for d in validators.VALID_DEPARTMENTS}
    )
    type_counts: dict[EmployeeType, int] = Field(
        default_factory=lambda: {t: 0 for t in EmployeeType}
    )

    average_age: float | None = None
    min_age:     int | None = None
    max_age:     int | None = None

    @property
    def has_data(self) -> bool:
        return self.total_count > 0

    def _share(self, count: int) -> float:
        if not self.total_count:
            return 0.0
        return count / self.total_count * 100

    def department_share(self, department: str) -> float:
        """Porcentaje del total en ese departamento."""
        return self._share(self.department_counts.get(department, 0))

    def type_share(self, employee_type: EmployeeType) -> float:
        return self._share(self.type_counts.get(employee_type, 0))
