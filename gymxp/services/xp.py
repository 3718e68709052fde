# gymxp/services/xp.py
"""
Agregador de XP: recálculo completo (nunca incremental) a partir del ledger.

  daily_xp[fecha] = min(100, sum(floor(value * rate)))  solo registros completed is True
  total_xp        = sum(daily_xp)
Semana (domingo-sábado) y mes son vistas sobre daily_xp; no se vuelven a capar.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, Mapping, Tuple, Union

from gymxp.services.ledger import ProgressEntry, ProgressLedger

DAILY_XP_CAP = 100
DEFAULT_RATE = 0.1

# XP por unidad, por (workout, unidad)
XP_RATES: Dict[Tuple[str, str], float] = {
    # Cardiovascular (por km)
    ("running", "km"): 10.0,
    ("cycling", "km"): 4.0,
    ("swimming", "km"): 30.0,
    ("walking", "km"): 6.0,
    ("sprint intervals", "km"): 15.0,
    # Cardiovascular (por minuto)
    ("running", "minutes"): 1.0,
    ("cycling", "minutes"): 0.5,
    ("swimming", "minutes"): 1.0,
    ("walking", "minutes"): 0.5,
    ("sprint intervals", "meters"): 0.015,
    ("sprint intervals", "minutes"): 1.0,
    # Fuerza (por repetición / minuto)
    ("push-ups", "reps"): 0.1,
    ("pull-ups", "reps"): 0.3,
    ("squats", "reps"): 0.1,
    ("planks", "minutes"): 2.0,
    ("planks", "seconds"): 0.03,
    # Flexibilidad / equilibrio (por minuto)
    ("static stretching", "minutes"): 0.5,
    ("dynamic stretching", "minutes"): 0.5,
    ("yoga", "minutes"): 0.5,
    ("pilates", "minutes"): 0.5,
    ("pnf stretching", "minutes"): 0.5,
    ("tai chi", "minutes"): 0.5,
    ("yoga balance poses", "minutes"): 0.5,
    ("single-leg stand", "minutes"): 0.5,
    ("single-leg stand", "seconds"): 0.01,
    ("heel-to-toe walking", "minutes"): 0.5,
    ("heel-to-toe walking", "meters"): 0.01,
    ("balance board", "minutes"): 0.5,
    # HIIT
    ("circuit training", "minutes"): 1.5,
    ("tabata", "minutes"): 2.5,
    ("burpees", "reps"): 0.3,
    ("box jumps", "reps"): 0.2,
    # Funcional
    ("lunges", "reps"): 0.1,
    ("step-ups", "reps"): 0.1,
    ("medicine ball throws", "reps"): 0.15,
    ("kettlebell swings", "reps"): 0.15,
}


@dataclass(frozen=True)
class AggregateXP:
    total_xp: int
    daily_xp: Dict[str, int] = field(default_factory=dict)

    def same_as(self, total_xp, daily_xp: Mapping) -> bool:
        """Compara con el agregado almacenado (para saltarse escrituras redundantes)."""
        stored = {str(k): int(v) for k, v in (daily_xp or {}).items()}
        return int(total_xp or 0) == self.total_xp and stored == self.daily_xp


def rate_per_unit(workout_name: str, unit: str) -> float:
    key = ((workout_name or "").strip().lower(), (unit or "").strip().lower())
    return XP_RATES.get(key, DEFAULT_RATE)


def earned_xp(value: float, rate: float) -> int:
    raw = float(value) * rate
    if math.isnan(raw) or raw <= 0:
        return 0
    if math.isinf(raw):
        return DAILY_XP_CAP
    # El redondeo previo evita que 0.29 * 100 = 28.999... pierda un punto
    return max(0, math.floor(round(raw, 9)))


def recompute_all(
    ledger: Union[ProgressLedger, Iterable[Tuple[str, str, ProgressEntry]]],
) -> AggregateXP:
    """Recalcula el agregado desde cero. Pura e idempotente."""
    triples = ledger.entries() if isinstance(ledger, ProgressLedger) else ledger

    raw: Dict[str, int] = {}
    for workout_name, day, entry in triples:
        if entry.completed is not True:
            continue
        xp = earned_xp(entry.value, rate_per_unit(workout_name, entry.unit))
        raw[day] = raw.get(day, 0) + xp

    daily = {day: max(0, min(DAILY_XP_CAP, xp)) for day, xp in sorted(raw.items())}
    return AggregateXP(total_xp=sum(daily.values()), daily_xp=daily)


def is_cap_reached(daily_xp: Mapping, date_iso: str) -> bool:
    return int((daily_xp or {}).get(date_iso, 0) or 0) >= DAILY_XP_CAP


# -------------------------------------------------------------------
# Ventanas de calendario
# -------------------------------------------------------------------
def week_bounds(day: date) -> Tuple[date, date]:
    """Semana domingo..sábado que contiene `day`."""
    # weekday(): lunes=0 ... domingo=6
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def month_bounds(day: date) -> Tuple[date, date]:
    start = day.replace(day=1)
    if start.month == 12:
        nxt = start.replace(year=start.year + 1, month=1)
    else:
        nxt = start.replace(month=start.month + 1)
    return start, nxt - timedelta(days=1)


def window_xp(daily_xp: Mapping, start: date, end: date) -> int:
    lo, hi = start.isoformat(), end.isoformat()
    total = 0
    for day, xp in (daily_xp or {}).items():
        if lo <= str(day) <= hi:
            total += int(xp or 0)
    return total


def xp_views(daily_xp: Mapping, today: date, total_xp: int | None = None) -> Dict[str, int]:
    """XP de hoy / semana / mes / total para un daily_xp ya capado."""
    ws, we = week_bounds(today)
    ms, me = month_bounds(today)
    if total_xp is None:
        total_xp = sum(int(v or 0) for v in (daily_xp or {}).values())
    return {
        "daily_xp": int((daily_xp or {}).get(today.isoformat(), 0) or 0),
        "weekly_xp": window_xp(daily_xp, ws, we),
        "monthly_xp": window_xp(daily_xp, ms, me),
        "total_xp": int(total_xp),
    }
