# gymxp/services/ledger.py
"""
Ledger de progreso por usuario: workout -> fecha -> ProgressEntry.

La parte pura (ProgressEntry, build_entry, ProgressLedger) no toca la BD;
las funciones del final son el adaptador sobre la tabla progress_records.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from gymxp.errors import ValidationError
from gymxp.services.catalog import ALLOWED_UNITS, get_definition
from gymxp.services.store import guarded_read

# Tope de magnitud para value / target_value
MAX_VALUE = 1e6


@dataclass(frozen=True)
class ProgressEntry:
    value: float
    completed: bool
    timestamp: datetime
    unit: str
    intensity: Optional[str] = None
    calories: Optional[int] = None
    is_additional: bool = False

    def is_stale_candidate(self) -> bool:
        # Solo se purgan entradas "vacías": sin valor y sin completar
        return not (self.value > 0 or self.completed is True)


Triple = Tuple[str, str, ProgressEntry]


# -------------------------------------------------------------------
# Validación / normalización
# -------------------------------------------------------------------
def parse_date(date_iso: Any) -> date:
    """'YYYY-MM-DD' -> date, o ValidationError."""
    if isinstance(date_iso, date) and not isinstance(date_iso, datetime):
        return date_iso
    s = (str(date_iso) if date_iso is not None else "").strip()
    try:
        if len(s) != 10:
            raise ValueError(s)
        return date.fromisoformat(s)
    except ValueError:
        raise ValidationError("date debe tener formato YYYY-MM-DD", date=s) from None


def coerce_value(raw: Any) -> float:
    """Número finito (acepta strings numéricos). bool, NaN e inf no valen."""
    if isinstance(raw, bool) or raw is None:
        raise ValidationError("value debe ser numérico", value=raw)
    if isinstance(raw, (int, float)):
        v = float(raw)
    elif isinstance(raw, str):
        try:
            v = float(raw.strip().replace(",", "."))
        except ValueError:
            raise ValidationError("value debe ser numérico", value=raw) from None
    else:
        raise ValidationError("value debe ser numérico", value=repr(raw))
    if math.isnan(v) or math.isinf(v):
        raise ValidationError("value debe ser un número finito", value=raw)
    if abs(v) > MAX_VALUE:
        raise ValidationError(f"value fuera de rango (máx. {MAX_VALUE:g})", value=raw)
    return v


def _normalize_name(workout_name: Any) -> str:
    name = (str(workout_name) if workout_name is not None else "").strip()
    if not name:
        raise ValidationError("workout es obligatorio")
    if len(name) > 80:
        raise ValidationError("workout demasiado largo (máx. 80)")
    return name


def _normalize_unit(unit: Any) -> str:
    u = (str(unit) if unit is not None else "").strip().lower()
    if u not in ALLOWED_UNITS:
        raise ValidationError(f"unit inválida; usa una de {', '.join(ALLOWED_UNITS)}", unit=unit)
    return u


def build_entry(
    workout_name: str,
    date_iso: str,
    raw_value: Any,
    unit: str,
    is_additional: bool,
    target_value: Any = None,
    intensity: Optional[str] = None,
    calories: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Tuple[str, str, ProgressEntry]:
    """
    Valida y normaliza un registro. Devuelve (workout_name, date_iso, entry).
      - adicional: value > 0 obligatorio, completed siempre True
      - catálogo: value = min(raw, target), completed = value >= target
    Sin target explícito se usa el del catálogo; si tampoco hay -> ValidationError.
    """
    name = _normalize_name(workout_name)
    day = parse_date(date_iso).isoformat()
    u = _normalize_unit(unit)
    value = coerce_value(raw_value)
    ts = now or datetime.now(timezone.utc)
    intensity = (intensity or "").strip() or None

    if is_additional:
        if value <= 0:
            raise ValidationError("value debe ser mayor que 0", value=raw_value)
        entry = ProgressEntry(
            value=value, completed=True, timestamp=ts, unit=u,
            intensity=intensity, calories=calories, is_additional=True,
        )
        return name, day, entry

    if target_value is None:
        definition = get_definition(name)
        target_value = definition.default_target if definition else None
    if target_value is None:
        raise ValidationError("target_value es obligatorio para entrenos de catálogo", workout=name)
    target = coerce_value(target_value)
    if target <= 0:
        raise ValidationError("target_value debe ser mayor que 0", target_value=target_value)

    clamped = min(value, target)
    entry = ProgressEntry(
        value=clamped, completed=clamped >= target, timestamp=ts, unit=u,
        intensity=intensity, calories=calories, is_additional=False,
    )
    return name, day, entry


# -------------------------------------------------------------------
# Ledger en memoria
# -------------------------------------------------------------------
class ProgressLedger:
    """workout_name -> date_iso -> ProgressEntry, con iteración ordenada de tripletas."""

    def __init__(self, triples: Iterable[Triple] = ()):
        self._data: Dict[str, Dict[str, ProgressEntry]] = {}
        for name, day, entry in triples:
            self.put(name, day, entry)

    # ---- mutaciones ----
    def put(self, workout_name: str, date_iso: str, entry: ProgressEntry) -> None:
        self._data.setdefault(workout_name, {})[date_iso] = entry

    def record_progress(self, workout_name, date_iso, raw_value, unit, is_additional,
                        target_value=None, intensity=None, calories=None, now=None) -> ProgressEntry:
        name, day, entry = build_entry(
            workout_name, date_iso, raw_value, unit, is_additional,
            target_value=target_value, intensity=intensity, calories=calories, now=now,
        )
        self.put(name, day, entry)
        return entry

    def remove_record(self, workout_name: str, date_iso: str) -> bool:
        dates = self._data.get(workout_name)
        if not dates or date_iso not in dates:
            return False
        del dates[date_iso]
        if not dates:
            del self._data[workout_name]
        return True

    def stale_keys(self, as_of: date) -> List[Tuple[str, str]]:
        """Claves anteriores a (as_of - 1 día) sin valor ni completadas."""
        cutoff = (as_of - timedelta(days=1)).isoformat()
        return [
            (name, day)
            for name, day, entry in self.entries()
            if day < cutoff and entry.is_stale_candidate()
        ]

    def cleanup_stale(self, as_of: date) -> int:
        keys = self.stale_keys(as_of)
        for name, day in keys:
            self.remove_record(name, day)
        return len(keys)

    # ---- lectura ----
    def get(self, workout_name: str, date_iso: str) -> Optional[ProgressEntry]:
        return self._data.get(workout_name, {}).get(date_iso)

    def entries(self) -> Iterator[Triple]:
        """Tripletas (workout, fecha, entry) ordenadas por (fecha, workout)."""
        flat = [
            (name, day, entry)
            for name, dates in self._data.items()
            for day, entry in dates.items()
        ]
        flat.sort(key=lambda t: (t[1], t[0]))
        return iter(flat)

    def on_date(self, date_iso: str) -> List[Triple]:
        return [t for t in self.entries() if t[1] == date_iso]

    def has_catalog_entry(self, workout_name: str, date_iso: str) -> bool:
        """'Ya añadido hoy': solo cuentan los registros de catálogo."""
        entry = self.get(workout_name, date_iso)
        return entry is not None and not entry.is_additional

    def catalog_names_on(self, date_iso: str) -> List[str]:
        return [name for name, _, _e in self.on_date(date_iso) if self.has_catalog_entry(name, date_iso)]

    def active_dates(self) -> List[str]:
        """Fechas con actividad real (value > 0 o completado), ordenadas."""
        return sorted({day for _, day, e in self.entries() if e.value > 0 or e.completed is True})

    def workout_names(self) -> List[str]:
        return sorted(self._data)

    def __len__(self) -> int:
        return sum(len(d) for d in self._data.values())

    def __contains__(self, key) -> bool:
        name, day = key
        return self.get(name, day) is not None


# -------------------------------------------------------------------
# Adaptador BD (tabla progress_records)
# -------------------------------------------------------------------
def _row_to_entry(row) -> ProgressEntry:
    return ProgressEntry(
        value=float(row.value or 0.0),
        completed=bool(row.completed),
        timestamp=row.timestamp,
        unit=row.unit,
        intensity=row.intensity,
        calories=row.calories,
        is_additional=bool(row.is_additional),
    )


def load_ledger(user_id: int) -> ProgressLedger:
    from gymxp.models.progress import ProgressRecord

    with guarded_read(f"ledger user={user_id}"):
        rows = ProgressRecord.query.filter_by(user_id=user_id).all()
    return ProgressLedger((r.workout_name, r.date, _row_to_entry(r)) for r in rows)


def upsert_record(user_id: int, workout_name: str, date_iso: str, entry: ProgressEntry):
    """Sobrescribe (sin merge) el registro (usuario, workout, fecha). No hace commit."""
    from gymxp import db
    from gymxp.models.progress import ProgressRecord

    with guarded_read(f"registro {workout_name} {date_iso}"):
        row = ProgressRecord.query.filter_by(
            user_id=user_id, workout_name=workout_name, date=date_iso
        ).first()
    if not row:
        row = ProgressRecord(user_id=user_id, workout_name=workout_name, date=date_iso)
        db.session.add(row)
    row.value = entry.value
    row.completed = entry.completed
    row.timestamp = entry.timestamp
    row.unit = entry.unit
    row.intensity = entry.intensity
    row.calories = entry.calories
    row.is_additional = entry.is_additional
    return row


def delete_record(user_id: int, workout_name: str, date_iso: str) -> bool:
    """Borra un único registro. No hace commit."""
    from gymxp import db
    from gymxp.models.progress import ProgressRecord

    with guarded_read(f"registro {workout_name} {date_iso}"):
        row = ProgressRecord.query.filter_by(
            user_id=user_id, workout_name=workout_name, date=date_iso
        ).first()
    if not row:
        return False
    db.session.delete(row)
    return True


def delete_stale(user_id: int, as_of: date) -> int:
    """Barrido de registros caducados del usuario. No hace commit."""
    ledger = load_ledger(user_id)
    keys = ledger.stale_keys(as_of)
    for name, day in keys:
        delete_record(user_id, name, day)
    return len(keys)
