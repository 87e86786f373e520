"""
Excepciones de dominio del roster.

No dependen de la capa de presentación (menú/CLI): el colaborador las
captura y decide cómo mostrarlas.
"""

from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import ValidationError


class RosterException(Exception):
    """Base de todos los errores del roster."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class EmployeeValidationError(RosterException, ValueError):
    """A field value violates one of the record constraints."""

    def __init__(
        self,
        field: str,
        reason: str,
        allowed: Optional[Iterable[str]] = None,
    ):
        self.field = field
        self.reason = reason
        self.allowed = list(allowed) if allowed is not None else None
        details: dict[str, Any] = {"field": field, "reason": reason}
        if self.allowed is not None:
            details["allowed"] = self.allowed
        super().__init__(message=reason, details=details)


class EmployeeNotFoundError(RosterException, LookupError):
    """No employee with the given id."""

    def __init__(self, employee_id: int):
        self.employee_id = employee_id
        super().__init__(
            message=f"Employee with ID {employee_id} not found.",
            details={"employee_id": employee_id},
        )


class SnapshotError(RosterException, OSError):
    """Snapshot file could not be read or written, or its content is malformed."""

    def __init__(self, path: Optional[Path], reason: str):
        self.path = path
        self.reason = reason
        message = f"Snapshot error: {reason}"
        if path is not None:
            message = f"Snapshot error ({path}): {reason}"
        super().__init__(
            message=message,
            details={"path": str(path) if path is not None else None, "reason": reason},
        )


def validation_error_from_pydantic(exc: ValidationError) -> EmployeeValidationError:
    """Convierte el primer error de pydantic en EmployeeValidationError.

    Si el error lo levantó uno de nuestros validadores se devuelve esa misma
    instancia, con su mensaje y su lista de valores permitidos.
    """
    errors = exc.errors()
    if not errors:
        return EmployeeValidationError("record", str(exc))
    first = errors[0]
    original = (first.get("ctx") or {}).get("error")
    if isinstance(original, EmployeeValidationError):
        return original
    loc = first.get("loc") or ("record",)
    field = ".".join(str(part) for part in loc)
    return EmployeeValidationError(field, first.get("msg", str(exc)))
