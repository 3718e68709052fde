# gymxp/services/catalog.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

ALLOWED_UNITS = ("km", "minutes", "reps", "meters", "seconds")


@dataclass(frozen=True)
class WorkoutDefinition:
    name: str
    category: str
    icon: str
    metric: str
    unit: str
    default_target: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


def _w(name, category, icon, metric, unit, target=None):
    return WorkoutDefinition(name, category, icon, metric, unit, target)


# ---- Catálogo fijo (plantillas de entreno diario) ----
WORKOUT_CATALOG: List[WorkoutDefinition] = [
    # Cardiovascular
    _w("Running", "cardiovascular", "run", "Distance", "km", 5),
    _w("Cycling", "cardiovascular", "bike", "Distance", "km", 15),
    _w("Swimming", "cardiovascular", "swim", "Distance", "km", 1),
    _w("Walking", "cardiovascular", "walk", "Distance", "km", 5),
    # Fuerza
    _w("Push-ups", "strength", "human", "Reps", "reps", 30),
    _w("Pull-ups", "strength", "human-handsup", "Reps", "reps", 10),
    _w("Squats", "strength", "human-handsdown", "Reps", "reps", 30),
    _w("Planks", "strength", "human", "Time", "minutes", 3),
    # Flexibilidad y movilidad
    _w("Static Stretching", "flexibility", "human", "Time", "minutes", 10),
    _w("Dynamic Stretching", "flexibility", "run", "Time", "minutes", 10),
    _w("Yoga", "flexibility", "yoga", "Time/Session", "minutes", 30),
    _w("Pilates", "flexibility", "human", "Time/Session", "minutes", 30),
    _w("PNF Stretching", "flexibility", "human", "Time", "minutes", 10),
    # Equilibrio y estabilidad
    _w("Tai Chi", "balance", "human", "Time/Session", "minutes", 20),
    _w("Yoga Balance Poses", "balance", "yoga", "Time/Session", "minutes", 15),
    _w("Single-Leg Stand", "balance", "human", "Time", "minutes", 5),
    _w("Heel-to-Toe Walking", "balance", "walk", "Distance/Time", "minutes", 5),
    _w("Balance Board", "balance", "human-balance", "Time", "minutes", 10),
    # HIIT
    _w("Sprint Intervals", "hiit", "run-fast", "Distance", "km", 2),
    _w("Circuit Training", "hiit", "sync", "Time", "minutes", 20),
    _w("Tabata", "hiit", "timer", "Time", "minutes", 8),
    _w("Burpees", "hiit", "human", "Reps/Time", "reps", 20),
    _w("Box Jumps", "hiit", "arrow-up-box", "Reps", "reps", 20),
    # Funcional
    _w("Lunges", "functional", "human", "Reps", "reps", 30),
    _w("Step-Ups", "functional", "stairs-up", "Reps", "reps", 30),
    _w("Medicine Ball Throws", "functional", "basketball", "Reps", "reps", 20),
    _w("Kettlebell Swings", "functional", "weight", "Reps", "reps", 30),
]

_BY_NAME: Dict[str, WorkoutDefinition] = {w.name.lower(): w for w in WORKOUT_CATALOG}


def get_definition(name: str) -> Optional[WorkoutDefinition]:
    return _BY_NAME.get((name or "").strip().lower())


def categories() -> Dict[str, List[WorkoutDefinition]]:
    out: Dict[str, List[WorkoutDefinition]] = {}
    for w in WORKOUT_CATALOG:
        out.setdefault(w.category, []).append(w)
    return out
