from datetime import date
from decimal import Decimal
from enum import IntEnum
from pydantic import BaseModel, ConfigDict, Field, field_validator

from roster import validators


class EmployeeType(IntEnum):
    # el ordinal es lo que se guarda en el snapshot
    FULL_TIME = 0
    PART_TIME = 1
    CONTRACT = 2
    INTERN = 3

    @property
    def label(self) -> str:
        return _TYPE_LABELS[self]

    @classmethod
    def parse(cls, value) -> "EmployeeType":
        """Acepta miembro, ordinal o nombre ("Contract", "full_time", "Full Time")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        key = str(value).strip().replace(" ", "").replace("_", "").replace("-", "").casefold()
        for member in cls:
            if key == member.label.casefold():
                return member
        raise ValueError(
            f"Invalid employee type {value!r}! Must be one of: "
            + ", ".join(m.label for m in cls)
        )

    def __str__(self) -> str:
        return self.label


_TYPE_LABELS = {
    EmployeeType.FULL_TIME: "FullTime",
    EmployeeType.PART_TIME: "PartTime",
    EmployeeType.CONTRACT: "Contract",
    EmployeeType.INTERN: "Intern",
}


class Employee(BaseModel):
    """Registro de empleado.

    Cada asignación pasa por los validadores de campo, así que un registro
    guardado siempre cumple las reglas. `employee_id` es inmutable.
    """

    model_config = ConfigDict(validate_assignment=True)

    employee_id: int = Field(frozen=True)
    first_name: str
    last_name: str
    date_of_birth: date
    department: str
    salary: Decimal
    hire_date: date = Field(default_factory=date.today)
    employee_type: EmployeeType = EmployeeType.FULL_TIME

    @field_validator("first_name")
    @classmethod
    def _first_name(cls, v):
        return validators.validate_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def _last_name(cls, v):
        return validators.validate_name(v, "Last name")

    @field_validator("date_of_birth")
    @classmethod
    def _date_of_birth(cls, v):
        return validators.validate_date_of_birth(v)

    @field_validator("department")
    @classmethod
    def _department(cls, v):
        return validators.validate_department(v)

    @field_validator("salary")
    @classmethod
    def _salary(cls, v):
        return validators.validate_salary(v)

    @field_validator("hire_date")
    @classmethod
    def _hire_date(cls, v):
        return validators.validate_hire_date(v)

    @field_validator("employee_type", mode="before")
    @classmethod
    def _employee_type(cls, v):
        return EmployeeType.parse(v)

    # -------- derivados --------
    @property
    def age(self) -> int:
        return validators.compute_age(self.date_of_birth)

    @property
    def years_of_service(self) -> int:
        return validators.compute_years_of_service(self.hire_date)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def basic_info(self) -> str:
        return (
            f"Name: {self.full_name}, Age: {self.age}, "
            f"Department: {self.department}, Type: {self.employee_type.label}"
        )

    def detailed_info(self) -> str:
        return "\n".join([
            f"ID: {self.employee_id}",
            f"Name: {self.full_name}",
            f"Date of Birth: {self.date_of_birth:%Y-%m-%d}",
            f"Age: {self.age}",
            f"Department: {self.department}",
            f"Salary: ${self.salary:,.2f}",
            f"Hire Date: {self.hire_date:%Y-%m-%d}",
            f"Years of Service: {self.years_of_service}",
            f"Employee Type: {self.employee_type.label}",
        ])
