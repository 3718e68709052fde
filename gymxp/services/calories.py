# gymxp/services/calories.py
from __future__ import annotations

import math
from typing import Optional, Union

DEFAULT_WEIGHT_KG = 70.0

# Marcadores de intensidad (búsqueda por subcadena, sin distinguir mayúsculas)
LOW_MARKERS = ("low", "slow", "light", "gentle", "beginner")
HIGH_MARKERS = ("high", "fast", "intense", "power", "advanced")

# MET por actividad: (lento, medio, rápido)
MET_BY_PACE = {
    "running": (7.0, 9.0, 12.0),
    "cycling": (4.0, 6.0, 10.0),
    "walking": (2.5, 3.0, 4.0),
    "swimming": (5.0, 6.0, 8.0),
}
# MET fijos (primera coincidencia gana)
MET_FLAT = (
    (("yoga", "pilates"), 2.5),
    (("circuit", "hiit"), 6.0),
    (("strength", "weight"), 3.5),
)
DEFAULT_MET = 3.0

# kcal por kg de peso y km
PER_KM_FACTOR = (
    ("running", 1.0),
    ("cycling", 0.5),
    ("walking", 0.6),
    ("swimming", 2.0),
)
DEFAULT_PER_KM = 0.8

# kcal base por repetición
PER_REP_FACTOR = (
    ("push", 0.1),
    ("pull", 0.15),
    ("squat", 0.15),
    ("burpee", 0.3),
    ("lunge", 0.1),
)
DEFAULT_PER_REP = 0.12


def _weight(weight_kg: Union[str, float, int, None]) -> float:
    """Peso válido (> 0) o 70 kg por defecto."""
    try:
        w = float(weight_kg)
    except (TypeError, ValueError):
        return DEFAULT_WEIGHT_KG
    if math.isnan(w) or w <= 0:
        return DEFAULT_WEIGHT_KG
    return w


def intensity_multiplier(intensity: Optional[str]) -> float:
    s = (intensity or "").lower()
    if any(m in s for m in LOW_MARKERS):
        return 0.8
    if any(m in s for m in HIGH_MARKERS):
        return 1.2
    return 1.0


def _pace_index(intensity: Optional[str]) -> int:
    # El ritmo solo distingue 'slow' / 'fast' (el resto es medio)
    s = (intensity or "").lower()
    if "slow" in s:
        return 0
    if "fast" in s:
        return 2
    return 1


def met_value(workout_type: str, intensity: Optional[str] = None) -> float:
    name = (workout_type or "").lower()
    for key, mets in MET_BY_PACE.items():
        if key in name:
            return mets[_pace_index(intensity)]
    for keys, met in MET_FLAT:
        if any(k in name for k in keys):
            return met
    return DEFAULT_MET


def _lookup(name: str, table, default: float) -> float:
    for key, factor in table:
        if key in name:
            return factor
    return default


def _round_half_up(x: float) -> int:
    # Redondeo "comercial" (0.5 -> 1), no el bancario de round()
    if not math.isfinite(x):
        return 0
    return int(math.floor(x + 0.5))


def estimate_calories(
    workout_type: str,
    value: float,
    unit: str,
    intensity: Optional[str] = "Medium",
    weight_kg: Union[float, int, None] = DEFAULT_WEIGHT_KG,
) -> int:
    """
    kcal estimadas (entero) para una actividad. Solo informativo: no afecta al XP.

      minutes -> MET * peso * horas
      km      -> peso * factor_km * km
      reps    -> factor_rep * (1 + peso/100) * reps
      meters  -> 0.06 * (1 + peso/100) * metros
      seconds -> (peso/70) * 0.05 * segundos
    Unidades desconocidas -> 0.
    """
    weight = _weight(weight_kg)
    try:
        v = float(value or 0)
    except (TypeError, ValueError):
        return 0
    name = (workout_type or "").lower()
    u = (unit or "").lower()

    if u == "minutes":
        base = met_value(workout_type, intensity) * weight * (v / 60.0)
    elif u == "km":
        base = weight * _lookup(name, PER_KM_FACTOR, DEFAULT_PER_KM) * v
    elif u == "reps":
        base = _lookup(name, PER_REP_FACTOR, DEFAULT_PER_REP) * (1 + weight / 100.0) * v
    elif u == "meters":
        base = 0.06 * (1 + weight / 100.0) * v
    elif u == "seconds":
        base = (weight / 70.0) * 0.05 * v
    else:
        base = 0.0

    return _round_half_up(base * intensity_multiplier(intensity))
