# gymxp/services/streaks.py
from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Tuple

from gymxp.services.ledger import ProgressLedger, parse_date


def compute_streaks(ledger: ProgressLedger, today: date) -> Tuple[int, int]:
    """
    (racha_actual, mejor_racha) en días consecutivos con actividad.
    La racha actual solo cuenta si el último día activo es hoy o ayer.
    """
    days = [parse_date(d) for d in ledger.active_dates()]
    if not days:
        return 0, 0

    current = 0
    if days[-1] in (today, today - timedelta(days=1)):
        current = 1
        prev = days[-1]
        for d in reversed(days[:-1]):
            if (prev - d).days != 1:
                break
            current += 1
            prev = d

    best = run = 1
    for a, b in zip(days, days[1:]):
        run = run + 1 if (b - a).days == 1 else 1
        best = max(best, run)

    return current, max(best, current)


def monthly_heatmap(ledger: ProgressLedger, year: int, month: int) -> Dict[str, int]:
    """Nº de registros por día del mes indicado (para el calendario de actividad)."""
    prefix = f"{year:04d}-{month:02d}-"
    counts: Dict[str, int] = {}
    for _, day, _entry in ledger.entries():
        if day.startswith(prefix):
            counts[day] = counts.get(day, 0) + 1
    return counts
