import logging
from decimal import Decimal
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from roster import snapshot
from roster.core.config import get_settings
from roster.exceptions import (
    EmployeeNotFoundError,
    EmployeeValidationError,
    validation_error_from_pydantic,
)
from roster.models import Employee
from roster.schemas import EmployeeIn, RosterStatistics, UpdateResult
from roster.validators import (
    EmployeeIdSequence,
    compute_age,
    validate_name,
    validate_name_characters,
)

logger = logging.getLogger("roster.repository")

# hire_date y employee_id no se editan
EDITABLE_FIELDS = (
    "first_name",
    "last_name",
    "date_of_birth",
    "department",
    "salary",
    "employee_type",
)

_NAME_LABELS = {"first_name": "First name", "last_name": "Last name"}


def _reason(exc: ValueError) -> str:
    if isinstance(exc, ValidationError):
        return validation_error_from_pydantic(exc).reason
    if isinstance(exc, EmployeeValidationError):
        return exc.reason
    return str(exc)


class EmployeeRepository:
    """Colección ordenada de empleados en memoria y su snapshot en disco.

    El orden de inserción se conserva para listar; la identidad es el id.
    """

    def __init__(
        self,
        data_path: Optional[Union[str, Path]] = None,
        encoding: Optional[str] = None,
        id_sequence: Optional[EmployeeIdSequence] = None,
    ):
        settings = get_settings()
        self.data_path = Path(data_path) if data_path is not None else settings.data_path
        self.encoding = encoding or settings.SNAPSHOT_ENCODING
        self._ids = id_sequence or EmployeeIdSequence(settings.EMPLOYEE_ID_START)
        self._employees: list[Employee] = []

    def __len__(self) -> int:
        return len(self._employees)

    @property
    def next_employee_id(self) -> int:
        return self._ids.peek

    # -------- alta --------
    def add(self, fields: Union[EmployeeIn, Mapping[str, Any]]) -> Employee:
        """Valida con la política de alta, asigna id y agrega al final.

        Si algún campo es inválido levanta EmployeeValidationError y no se
        agrega nada.
        """
        try:
            data = fields if isinstance(fields, EmployeeIn) else EmployeeIn.model_validate(fields)
            employee = Employee(employee_id=self._ids.check_available(), **data.model_dump())
        except ValidationError as exc:
            err = validation_error_from_pydantic(exc)
            logger.info("add_rejected", extra={"field": err.field, "reason": err.reason})
            raise err from exc
        self._ids.next_id()
        self._employees.append(employee)
        logger.info("employee_added", extra={
            "employee_id": employee.employee_id, "department": employee.department,
        })
        return employee

    # -------- consulta --------
    def find_by_id(self, employee_id: int) -> Optional[Employee]:
        for emp in self._employees:
            if emp.employee_id == employee_id:
                return emp
        return None

    def get(self, employee_id: int) -> Employee:
        emp = self.find_by_id(employee_id)
        if emp is None:
            raise EmployeeNotFoundError(employee_id)
        return emp

    def list_all(self) -> tuple[Employee, ...]:
        return tuple(self._employees)

    # -------- edición --------
    def update(self, employee_id: int, /, **changes: Any) -> UpdateResult:
        """Aplica cada campo por separado.

        Un valor vacío o None deja el actual. Un valor inválido también deja
        el actual y queda anotado en `rejected`; la edición no falla por eso.
        """
        not_editable = sorted(set(changes) - set(EDITABLE_FIELDS))
        if not_editable:
            raise EmployeeValidationError(
                not_editable[0],
                f"Field(s) cannot be edited: {', '.join(not_editable)}",
                allowed=EDITABLE_FIELDS,
            )
        employee = self.get(employee_id)
        result = UpdateResult(employee=employee)

        for field, raw in changes.items():
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                continue
            try:
                value = raw
                if field in _NAME_LABELS:
                    label = _NAME_LABELS[field]
                    value = validate_name_characters(validate_name(raw, label), label)
                setattr(employee, field, value)
            except ValueError as exc:
                result.rejected[field] = _reason(exc)
                logger.info("update_field_rejected", extra={
                    "employee_id": employee_id, "field": field, "reason": result.rejected[field],
                })
                continue
            result.applied.append(field)

        if result.applied:
            logger.info("employee_updated", extra={
                "employee_id": employee_id, "fields": result.applied,
            })
        return result

    # -------- baja --------
    def remove(self, employee_id: int) -> Employee:
        """Quita y devuelve el registro. La confirmación es cosa del colaborador."""
        for idx, emp in enumerate(self._employees):
            if emp.employee_id == employee_id:
                del self._employees[idx]
                logger.info("employee_removed", extra={"employee_id": employee_id})
                return emp
        raise EmployeeNotFoundError(employee_id)

    # -------- estadísticas --------
    def statistics(self, today: Optional[date] = None) -> RosterStatistics:
        stats = RosterStatistics()
        if not self._employees:
            return stats

        count = len(self._employees)
        salaries = [emp.salary for emp in self._employees]
        ages = [compute_age(emp.date_of_birth, today) for emp in self._employees]
        total_salary = sum(salaries, Decimal("0"))

        department_counts = dict(stats.department_counts)
        type_counts = dict(stats.type_counts)
        for emp in self._employees:
            # departamentos fuera del set (snapshot no validado) no se cuentan
            if emp.department in department_counts:
                department_counts[emp.department] += 1
            type_counts[emp.employee_type] += 1

        return RosterStatistics(
            total_count=count,
            total_salary=total_salary,
            average_salary=total_salary / count,
            min_salary=min(salaries),
            max_salary=max(salaries),
            department_counts=department_counts,
            type_counts=type_counts,
            average_age=sum(ages) / count,
            min_age=min(ages),
            max_age=max(ages),
        )

    # -------- snapshot --------
    def save_snapshot(self, path: Optional[Union[str, Path]] = None) -> int:
        target = Path(path) if path is not None else self.data_path
        return snapshot.write_snapshot(target, self._employees, self.encoding)

    def load_snapshot(self, path: Optional[Union[str, Path]] = None) -> int:
        """Reemplaza el roster con el contenido del archivo.

        Si el archivo no existe no hace nada. Si está dañado levanta
        SnapshotError y el roster actual queda intacto.
        """
        source = Path(path) if path is not None else self.data_path
        if not source.exists():
            logger.info("snapshot_missing", extra={"path": str(source)})
            return 0
        employees = snapshot.read_snapshot(source, self.encoding)
        self._employees = employees
        for emp in employees:
            self._ids.advance_past(emp.employee_id)
        logger.info("roster_loaded", extra={
            "path": str(source), "records": len(employees), "next_employee_id": self._ids.peek,
        })
        return len(employees)
