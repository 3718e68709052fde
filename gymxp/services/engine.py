# gymxp/services/engine.py
"""
Orquestación: mutación del ledger -> recálculo completo -> agregado + snapshot.

Toda llamada recibe un EngineContext explícito (usuario, "hoy", peso); nada se lee
de estado global. Los errores de BD salen como PersistenceFailure (services/store.py).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from gymxp import db
from gymxp.errors import CapReached
from gymxp.services import ledger as ledger_svc
from gymxp.services.calories import DEFAULT_WEIGHT_KG, estimate_calories
from gymxp.services.store import commit, guarded_read
from gymxp.services.streaks import compute_streaks
from gymxp.services.xp import AggregateXP, DAILY_XP_CAP, is_cap_reached, recompute_all, xp_views
from gymxp.utils.geocode import UNKNOWN

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineContext:
    user_id: int
    today: date
    weight_kg: float = DEFAULT_WEIGHT_KG

    @classmethod
    def for_user(cls, user, config: Optional[dict] = None) -> "EngineContext":
        fixed = (config or {}).get("FIXED_TODAY")
        today = ledger_svc.parse_date(fixed) if fixed else date.today()
        weight = user.weight_kg if user.weight_kg and user.weight_kg > 0 else DEFAULT_WEIGHT_KG
        return cls(user_id=user.id, today=today, weight_kg=float(weight))


@dataclass
class SyncResult:
    aggregate: AggregateXP
    aggregate_written: bool
    snapshot_written: bool
    views: Dict[str, int]
    streak: int = 0
    best_streak: int = 0


@dataclass
class LogResult:
    record: Dict[str, Any]
    sync: SyncResult
    notice: Optional[CapReached] = None


def _get_user(user_id: int):
    from gymxp.models.user import User

    with guarded_read(f"usuario {user_id}"):
        return db.session.get(User, user_id)


# -------------------------------------------------------------------
# Snapshot de ranking
# -------------------------------------------------------------------
def snapshot_fields(user, aggregate: AggregateXP, today: date) -> Dict[str, Any]:
    views = xp_views(aggregate.daily_xp, today, aggregate.total_xp)
    return {
        "username": user.username,
        "theme": user.theme or "default",
        "total_xp": views["total_xp"],
        "daily_xp": views["daily_xp"],
        "weekly_xp": views["weekly_xp"],
        "monthly_xp": views["monthly_xp"],
        "country": user.country or UNKNOWN,
        "continent": user.continent or UNKNOWN,
        "lat": user.lat,
        "lon": user.lon,
    }


def refresh_snapshot(user, aggregate: AggregateXP, today: date) -> bool:
    """Upsert del snapshot. Devuelve False si no había nada que cambiar. No hace commit."""
    from gymxp.models.ranking import RankingSnapshot

    fields = snapshot_fields(user, aggregate, today)
    with guarded_read(f"snapshot user={user.id}"):
        snap = db.session.get(RankingSnapshot, user.id)
    if snap and all(getattr(snap, k) == v for k, v in fields.items()):
        return False
    if not snap:
        snap = RankingSnapshot(user_id=user.id)
        db.session.add(snap)
    for k, v in fields.items():
        setattr(snap, k, v)
    snap.updated_at = datetime.now(timezone.utc)
    return True


# -------------------------------------------------------------------
# Recalcular (idempotente)
# -------------------------------------------------------------------
def sync_user(ctx: EngineContext, user=None) -> SyncResult:
    """
    Recalcula desde el ledger y persiste solo si cambia algo.
    Siempre calcula; la escritura del agregado se salta si coincide con lo guardado.
    """
    user = user or _get_user(ctx.user_id)
    ledger = ledger_svc.load_ledger(ctx.user_id)
    aggregate = recompute_all(ledger)

    written = False
    if not aggregate.same_as(user.total_xp, user.daily_xp):
        user.total_xp = aggregate.total_xp
        user.daily_xp = dict(aggregate.daily_xp)   # dict nuevo: el JSON se marca como sucio
        written = True

    streak, best = compute_streaks(ledger, ctx.today)
    best = max(best, int(user.best_streak or 0))
    if (user.streak, user.best_streak) != (streak, best):
        user.streak, user.best_streak = streak, best
        written = True

    snap_written = refresh_snapshot(user, aggregate, ctx.today)
    if written or snap_written:
        commit()
        logger.info("XP sincronizado user=%s total=%s", user.id, aggregate.total_xp)

    return SyncResult(
        aggregate=aggregate,
        aggregate_written=written,
        snapshot_written=snap_written,
        views=xp_views(aggregate.daily_xp, ctx.today, aggregate.total_xp),
        streak=streak,
        best_streak=best,
    )


# -------------------------------------------------------------------
# Operaciones sobre el ledger
# -------------------------------------------------------------------
def log_workout(
    ctx: EngineContext,
    workout_name: str,
    date_iso: str,
    raw_value: Any,
    unit: str,
    is_additional: bool = False,
    target_value: Any = None,
    intensity: Optional[str] = None,
) -> LogResult:
    """Valida (antes de escribir nada), sobrescribe el registro y recalcula."""
    name, day, entry = ledger_svc.build_entry(
        workout_name, date_iso, raw_value, unit, is_additional,
        target_value=target_value, intensity=intensity,
    )
    calories = None
    if entry.value > 0:
        calories = estimate_calories(name, entry.value, entry.unit, entry.intensity or "Medium", ctx.weight_kg)
    entry = ledger_svc.ProgressEntry(
        value=entry.value, completed=entry.completed, timestamp=entry.timestamp, unit=entry.unit,
        intensity=entry.intensity, calories=calories, is_additional=entry.is_additional,
    )

    user = _get_user(ctx.user_id)
    was_capped = is_cap_reached(user.daily_xp, day)

    row = ledger_svc.upsert_record(ctx.user_id, name, day, entry)
    commit()
    record = row.to_dict()

    result = sync_user(ctx, user)
    notice = None
    if was_capped and entry.completed:
        notice = CapReached(day, DAILY_XP_CAP)
    return LogResult(record=record, sync=result, notice=notice)


def remove_workout(ctx: EngineContext, workout_name: str, date_iso: str) -> Optional[SyncResult]:
    """Borra un registro; None si no existía (no hay nada que recalcular)."""
    day = ledger_svc.parse_date(date_iso).isoformat()
    if not ledger_svc.delete_record(ctx.user_id, (workout_name or "").strip(), day):
        return None
    commit()
    return sync_user(ctx)


def start_session(ctx: EngineContext, as_of: Optional[date] = None) -> int:
    """
    Barrido de caducados al iniciar sesión (una vez, síncrono) y recálculo.
    `as_of` solo mueve el corte del barrido; el recálculo usa siempre ctx.today.
    """
    with guarded_read(f"barrido user={ctx.user_id}"):
        removed = ledger_svc.delete_stale(ctx.user_id, as_of or ctx.today)
    if removed:
        commit()
        logger.info("cleanup user=%s: %d registros caducados", ctx.user_id, removed)
    sync_user(ctx)
    return removed
