from pathlib import Path
from typing import Iterable
import logging
import pandas as pd

from roster.models import Employee

logger = logging.getLogger("roster.reports")

ROSTER_COLUMNS = ["ID", "Name", "Department", "Salary", "Type"]


def roster_frame(employees: Iterable[Employee]) -> pd.DataFrame:
    """Listado de empleados (vista "mostrar todos") como DataFrame, en orden."""
    rows = [
        {
            "ID": emp.employee_id,
            "Name": emp.full_name,
            "Department": emp.department,
            "Salary": emp.salary,
            "Type": emp.employee_type.label,
        }
        for emp in employees
    ]
    return pd.DataFrame(rows, columns=ROSTER_COLUMNS)


def write_roster_csv(employees: Iterable[Employee], path: Path) -> Path:
    df = roster_frame(employees)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False, encoding="utf-8")
    logger.info("roster_exported", extra={"path": str(path), "rows": len(df)})
    return path
