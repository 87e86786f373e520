"""
Snapshot binario del roster.

Formato (little-endian, sin versión ni checksum):

    int32 count
    count x {
        int32   employee_id
        string  first_name
        string  last_name
        int64   date_of_birth   (DateTime binario: ticks + kind)
        decimal salary          (lo, mid, hi, flags: 4 x int32)
        string  department
        int64   hire_date
        int32   employee_type   (ordinal)
    }

`string` es un largo en bytes codificado en 7 bits seguido del texto
codificado. Con encoding utf-8 el archivo es el mismo que escribe un
BinaryWriter de .NET.
"""

import logging
import struct
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional

from roster.exceptions import SnapshotError
from roster.models import Employee, EmployeeType
from roster.validators import DECIMAL_MAX_SCALE, fit_decimal

logger = logging.getLogger("roster.snapshot")

DEFAULT_ENCODING = "utf-16-le"

TICKS_PER_DAY = 864_000_000_000
TICKS_MASK = 0x3FFF_FFFF_FFFF_FFFF
TICKS_CEILING = 0x4000_0000_0000_0000
MAX_TICKS = 3_155_378_975_999_999_999
KIND_SHIFT = 62
KIND_LOCAL_FLAG = 0b10

DECIMAL_SIGN_FLAG = 0x8000_0000
DECIMAL_SCALE_MASK = 0x00FF_0000

_INT32 = struct.Struct("<i")
_INT64 = struct.Struct("<q")
_DECIMAL = struct.Struct("<IIII")


# -------- escritura --------

def _pack_string(value: str, encoding: str) -> bytes:
    try:
        raw = value.encode(encoding)
    except UnicodeEncodeError as exc:
        raise SnapshotError(None, f"unencodable string {value!r} ({exc.reason})") from exc
    n = len(raw)
    prefix = bytearray()
    while n >= 0x80:
        prefix.append((n & 0x7F) | 0x80)
        n >>= 7
    prefix.append(n)
    return bytes(prefix) + raw


def date_to_binary(value: date) -> int:
    """Fecha a la medianoche como DateTime binario de kind Unspecified."""
    return (value.toordinal() - 1) * TICKS_PER_DAY


def decimal_to_parts(value: Decimal) -> tuple[int, int, int, int]:
    value = fit_decimal(value)
    sign, digits, exponent = value.as_tuple()
    coefficient = int("".join(map(str, digits))) if digits else 0
    if exponent > 0:
        coefficient *= 10 ** exponent
        scale = 0
    else:
        scale = -exponent
    if coefficient >= 1 << 96:
        raise SnapshotError(None, f"decimal out of range: {value}")
    flags = scale << 16
    if sign:
        flags |= DECIMAL_SIGN_FLAG
    return (
        coefficient & 0xFFFF_FFFF,
        (coefficient >> 32) & 0xFFFF_FFFF,
        (coefficient >> 64) & 0xFFFF_FFFF,
        flags,
    )


def encode_snapshot(employees: Iterable[Employee], encoding: str = DEFAULT_ENCODING) -> bytes:
    employees = list(employees)
    out = bytearray(_INT32.pack(len(employees)))
    for emp in employees:
        try:
            out += _INT32.pack(emp.employee_id)
        except struct.error as exc:
            raise SnapshotError(None, f"employee ID out of int32 range: {emp.employee_id}") from exc
        out += _pack_string(emp.first_name, encoding)
        out += _pack_string(emp.last_name, encoding)
        out += _INT64.pack(date_to_binary(emp.date_of_birth))
        out += _DECIMAL.pack(*decimal_to_parts(emp.salary))
        out += _pack_string(emp.department, encoding)
        out += _INT64.pack(date_to_binary(emp.hire_date))
        out += _INT32.pack(int(emp.employee_type))
    return bytes(out)


# -------- lectura --------

class _SnapshotReader:
    def __init__(self, data: bytes, encoding: str, path: Optional[Path] = None):
        self._data = data
        self._pos = 0
        self._encoding = encoding
        self._path = path

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def _fail(self, reason: str) -> SnapshotError:
        return SnapshotError(self._path, f"{reason} at byte {self._pos}")

    def _take(self, size: int) -> bytes:
        if size > self.remaining:
            raise self._fail(f"truncated snapshot: expected {size} bytes, {self.remaining} left")
        chunk = self._data[self._pos:self._pos + size]
        self._pos += size
        return chunk

    def read_int32(self) -> int:
        return _INT32.unpack(self._take(4))[0]

    def read_int64(self) -> int:
        return _INT64.unpack(self._take(8))[0]

    def read_string(self) -> str:
        length = shift = 0
        for _ in range(5):
            byte = self._take(1)[0]
            length |= (byte & 0x7F) << shift
            if not byte & 0x80:
                break
            shift += 7
        else:
            raise self._fail("bad string length prefix")
        raw = self._take(length)
        try:
            return raw.decode(self._encoding)
        except UnicodeDecodeError as exc:
            raise self._fail(f"undecodable string ({exc.reason})") from exc

    def read_decimal(self) -> Decimal:
        lo, mid, hi, flags = _DECIMAL.unpack(self._take(16))
        scale = (flags & DECIMAL_SCALE_MASK) >> 16
        if flags & ~(DECIMAL_SCALE_MASK | DECIMAL_SIGN_FLAG) or scale > DECIMAL_MAX_SCALE:
            raise self._fail(f"bad decimal flags 0x{flags:08x}")
        coefficient = lo | (mid << 32) | (hi << 64)
        sign = 1 if flags & DECIMAL_SIGN_FLAG else 0
        digits = tuple(int(c) for c in str(coefficient))
        return Decimal((sign, digits, -scale))

    def read_date(self) -> date:
        data = self.read_int64() & 0xFFFF_FFFF_FFFF_FFFF
        kind = data >> KIND_SHIFT
        ticks = data & TICKS_MASK
        if kind & KIND_LOCAL_FLAG:
            # kind Local guarda ticks UTC; se pasan a la hora local como hace .NET
            if ticks > TICKS_CEILING - TICKS_PER_DAY:
                ticks -= TICKS_CEILING
            try:
                utc = datetime(1, 1, 1, tzinfo=timezone.utc) + timedelta(microseconds=ticks // 10)
                return utc.astimezone().date()
            except (OverflowError, ValueError) as exc:
                raise self._fail(f"bad local date ticks {ticks}") from exc
        if ticks > MAX_TICKS:
            raise self._fail(f"date ticks out of range: {ticks}")
        return date.fromordinal(ticks // TICKS_PER_DAY + 1)


def decode_snapshot(
    data: bytes,
    encoding: str = DEFAULT_ENCODING,
    path: Optional[Path] = None,
) -> list[Employee]:
    """Reconstruye los registros tal como están en el archivo.

    No re-valida: los ids y los valores se toman literalmente.
    """
    reader = _SnapshotReader(data, encoding, path)
    count = reader.read_int32()
    if count < 0:
        raise SnapshotError(path, f"negative record count {count}")
    employees: list[Employee] = []
    for _ in range(count):
        employee_id = reader.read_int32()
        first_name = reader.read_string()
        last_name = reader.read_string()
        dob = reader.read_date()
        salary = reader.read_decimal()
        department = reader.read_string()
        hire_date = reader.read_date()
        ordinal = reader.read_int32()
        try:
            employee_type = EmployeeType(ordinal)
        except ValueError as exc:
            raise SnapshotError(path, f"unknown employee type ordinal {ordinal}") from exc
        employees.append(Employee.model_construct(
            employee_id=employee_id,
            first_name=first_name,
            last_name=last_name,
            date_of_birth=dob,
            department=department,
            salary=salary,
            hire_date=hire_date,
            employee_type=employee_type,
        ))
    if reader.remaining:
        logger.warning("snapshot_trailing_bytes", extra={
            "path": str(path) if path else None, "trailing_bytes": reader.remaining,
        })
    return employees


def write_snapshot(path: Path, employees: Iterable[Employee], encoding: str = DEFAULT_ENCODING) -> int:
    """Sobrescribe `path` con el snapshot. Devuelve la cantidad de registros."""
    employees = list(employees)
    try:
        payload = encode_snapshot(employees, encoding)
    except SnapshotError as exc:
        raise SnapshotError(path, exc.reason) from exc
    try:
        with path.open("wb") as fh:
            fh.write(payload)
    except OSError as exc:
        raise SnapshotError(path, f"cannot write snapshot: {exc.strerror or exc}") from exc
    logger.info("snapshot_written", extra={
        "path": str(path), "records": len(employees), "bytes": len(payload),
    })
    return len(employees)


def read_snapshot(path: Path, encoding: str = DEFAULT_ENCODING) -> list[Employee]:
    try:
        with path.open("rb") as fh:
            data = fh.read()
    except OSError as exc:
        raise SnapshotError(path, f"cannot read snapshot: {exc.strerror or exc}") from exc
    employees = decode_snapshot(data, encoding, path)
    logger.info("snapshot_read", extra={"path": str(path), "records": len(employees)})
    return employees
