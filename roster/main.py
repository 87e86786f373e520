# roster/main.py
import logging
from pathlib import Path
from typing import Mapping, Optional
from roster.core.config import get_settings, Settings
from roster.models import Employee
from roster.parsing import parse_employee_form
from roster.reports import write_roster_csv
from roster.repository import EmployeeRepository
from roster.validators import EmployeeIdSequence

def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger("roster").setLevel(settings.LOG_LEVEL)

def create_repository(settings: Settings | None = None) -> EmployeeRepository:
    """Arma el repositorio y carga el snapshot configurado (si existe)."""
    settings = settings or get_settings()
    configure_logging(settings)
    logging.getLogger("roster").info("%s %s", settings.APP_NAME, settings.APP_VERSION)
    repo = EmployeeRepository(
        data_path=settings.data_path,
        encoding=settings.SNAPSHOT_ENCODING,
        id_sequence=EmployeeIdSequence(settings.EMPLOYEE_ID_START),
    )
    repo.load_snapshot()
    return repo

def add_from_form(repo: EmployeeRepository, form: Mapping[str, Optional[str]]) -> Employee:
    """Alta desde los textos tal como los escribe el usuario en el menú."""
    return repo.add(parse_employee_form(form))

def export_roster(repo: EmployeeRepository, path: Optional[Path] = None) -> Path:
    # por defecto, al lado del snapshot: employees.dat -> employees.csv
    target = Path(path) if path is not None else repo.data_path.with_suffix(".csv")
    return write_roster_csv(repo.list_all(), target)
