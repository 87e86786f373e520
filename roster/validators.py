"""
Reglas de validación de un registro de empleado.

Funciones puras: devuelven el valor normalizado o levantan
EmployeeValidationError. No hacen I/O.
"""

import re
from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, localcontext
from typing import Optional

from roster.exceptions import EmployeeValidationError

VALID_DEPARTMENTS = ("HR", "IT", "Finance", "Marketing", "Operations", "Sales")

MIN_NAME_LENGTH = 2
NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-']+$")

MAX_SALARY = Decimal("1000000")
LOW_SALARY_THRESHOLD = Decimal("300")

MAX_AGE_YEARS = 100
MIN_HIRING_AGE = 16
MAX_HIRING_AGE = 100
EARLIEST_BIRTH_DATE = date(1900, 1, 1)
EARLIEST_HIRE_DATE = date(2000, 1, 1)

DEFAULT_FIRST_EMPLOYEE_ID = 1000
# los ids se guardan como int32
MAX_EMPLOYEE_ID = 2**31 - 1

# decimal de .NET: coeficiente de 96 bits, hasta 28 decimales
DECIMAL_MAX_SCALE = 28
DECIMAL_MAX_COEFFICIENT = (1 << 96) - 1


def _today(today: Optional[date]) -> date:
    return today if today is not None else date.today()


def years_before(reference: date, years: int) -> date:
    """Misma fecha `years` años antes; 29/02 cae en 28/02 si el año no es bisiesto."""
    try:
        return reference.replace(year=reference.year - years)
    except ValueError:
        return reference.replace(year=reference.year - years, day=28)


def _anniversary_years(start: date, today: date) -> int:
    years = today.year - start.year
    if (start.month, start.day) > (today.month, today.day):
        years -= 1
    return years


def compute_age(dob: date, today: Optional[date] = None) -> int:
    return _anniversary_years(dob, _today(today))


def compute_years_of_service(hire_date: date, today: Optional[date] = None) -> int:
    return _anniversary_years(hire_date, _today(today))


# -------- nombres --------

def validate_name(value: Optional[str], field_label: str) -> str:
    if value is None or not str(value).strip():
        raise EmployeeValidationError(field_label, f"{field_label} cannot be empty!")
    if not isinstance(value, str):
        raise EmployeeValidationError(field_label, f"{field_label} must be text!")
    trimmed = value.strip()
    if len(trimmed) < MIN_NAME_LENGTH:
        raise EmployeeValidationError(
            field_label,
            f"{field_label} must be at least {MIN_NAME_LENGTH} characters long!",
        )
    return trimmed


def validate_name_characters(value: str, field_label: str) -> str:
    """Regla de la captura interactiva: letras, espacios, guiones y apóstrofes."""
    if not NAME_PATTERN.match(value):
        raise EmployeeValidationError(
            field_label,
            f"{field_label} can only contain letters, spaces, hyphens (-) and apostrophes (').",
        )
    return value


# -------- fechas --------

def validate_date_of_birth(value: date, today: Optional[date] = None) -> date:
    today = _today(today)
    if value > today:
        raise EmployeeValidationError("Date of birth", "Date of birth cannot be in the future!")
    if value < years_before(today, MAX_AGE_YEARS):
        raise EmployeeValidationError(
            "Date of birth",
            f"Date of birth cannot be more than {MAX_AGE_YEARS} years ago!",
        )
    return value


def validate_hiring_age(value: date, today: Optional[date] = None) -> date:
    """Política de alta: 16 a 100 años y no antes de 1900.

    Sólo se aplica al crear el registro; el setter del modelo usa
    validate_date_of_birth.
    """
    today = _today(today)
    if value > today:
        raise EmployeeValidationError("Date of birth", "Date of birth cannot be in the future!")
    age = compute_age(value, today)
    if age < MIN_HIRING_AGE:
        raise EmployeeValidationError(
            "Date of birth",
            f"Employee must be at least {MIN_HIRING_AGE} years old! (Would be {age} years)",
        )
    if age > MAX_HIRING_AGE:
        raise EmployeeValidationError(
            "Date of birth",
            f"Employee cannot be older than {MAX_HIRING_AGE} years! (Would be {age} years)",
        )
    if value < EARLIEST_BIRTH_DATE:
        raise EmployeeValidationError("Date of birth", "Date of birth cannot be before 1900!")
    return value


def validate_hire_date(value: date, today: Optional[date] = None) -> date:
    today = _today(today)
    if value > today:
        raise EmployeeValidationError("Hire date", "Hire date cannot be in the future!")
    if value < EARLIEST_HIRE_DATE:
        raise EmployeeValidationError("Hire date", "Hire date cannot be before year 2000!")
    return value


# -------- departamento / salario --------

def validate_department(value: Optional[str]) -> str:
    candidate = (value or "").strip()
    for dept in VALID_DEPARTMENTS:
        if candidate.casefold() == dept.casefold():
            return dept
    raise EmployeeValidationError(
        "Department",
        f"Invalid department! Must be one of: {', '.join(VALID_DEPARTMENTS)}",
        allowed=VALID_DEPARTMENTS,
    )


def validate_salary(value) -> Decimal:
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise EmployeeValidationError("Salary", f"Invalid salary amount: {value!r}")
    if not amount.is_finite():
        raise EmployeeValidationError("Salary", f"Invalid salary amount: {value!r}")
    if amount < 0:
        raise EmployeeValidationError("Salary", "Salary cannot be negative!")
    if amount > MAX_SALARY:
        raise EmployeeValidationError("Salary", "Salary cannot exceed $1,000,000!")
    return fit_decimal(amount)


def _coefficient(value: Decimal) -> int:
    _, digits, exponent = value.as_tuple()
    coefficient = int("".join(map(str, digits))) if digits else 0
    return coefficient * 10 ** exponent if exponent > 0 else coefficient


def fit_decimal(value: Decimal) -> Decimal:
    """Redondea (half-even) hasta que el valor entra en un decimal de .NET.

    Baja la escala de a un dígito, empezando en 28, mientras el coeficiente
    no entre en 96 bits. Si ni con escala 0 entra, lo devuelve igual y el
    snapshot lo rechaza.
    """
    if not value.is_finite():
        return value
    exponent = value.as_tuple().exponent
    if exponent >= -DECIMAL_MAX_SCALE and _coefficient(value) <= DECIMAL_MAX_COEFFICIENT:
        return value
    with localcontext() as ctx:
        ctx.prec = 2 * DECIMAL_MAX_SCALE + len(value.as_tuple().digits)
        scale = min(-exponent, DECIMAL_MAX_SCALE)
        while True:
            candidate = value.quantize(Decimal(1).scaleb(-scale), rounding=ROUND_HALF_EVEN)
            if scale <= 0 or _coefficient(candidate) <= DECIMAL_MAX_COEFFICIENT:
                return candidate
            scale -= 1


def needs_salary_confirmation(salary: Decimal) -> bool:
    """True si el salario está bajo el mínimo típico y conviene confirmarlo."""
    return salary < LOW_SALARY_THRESHOLD


# -------- ids --------

class EmployeeIdSequence:
    """Contador de ids de empleado. Nunca retrocede ni reutiliza valores."""

    def __init__(self, start: int = DEFAULT_FIRST_EMPLOYEE_ID):
        self._next = start

    @property
    def peek(self) -> int:
        return self._next

    def check_available(self) -> int:
        """Devuelve el próximo id sin consumirlo; falla si ya no entra en int32."""
        if self._next > MAX_EMPLOYEE_ID:
            raise EmployeeValidationError(
                "Employee ID",
                f"No employee IDs left: IDs cannot exceed {MAX_EMPLOYEE_ID}!",
            )
        return self._next

    def next_id(self) -> int:
        current = self.check_available()
        self._next += 1
        return current

    def advance_past(self, employee_id: int) -> None:
        if employee_id >= self._next:
            self._next = employee_id + 1
