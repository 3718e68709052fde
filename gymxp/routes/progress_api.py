# gymxp/routes/progress_api.py
from datetime import date

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from gymxp.models.progress import ProgressRecord
from gymxp.services.catalog import WORKOUT_CATALOG, categories
from gymxp.services.engine import EngineContext, log_workout, remove_workout, sync_user
from gymxp.services.ledger import load_ledger, parse_date
from gymxp.services.store import guarded_read
from gymxp.services.streaks import monthly_heatmap
from gymxp.utils.levels import level_of

progress_bp = Blueprint("progress_api", __name__, url_prefix="/api")


def _ctx() -> EngineContext:
    return EngineContext.for_user(current_user, current_app.config)


def _date_arg(ctx: EngineContext, raw) -> str:
    raw = (raw or "").strip()
    return parse_date(raw).isoformat() if raw else ctx.today.isoformat()


def _as_bool(x) -> bool:
    if isinstance(x, bool):
        return x
    return str(x or "").strip().lower() in ("1", "true", "yes", "on")


# ---------- Catálogo ----------

@progress_bp.route("/catalog", methods=["GET"])
@login_required
def get_catalog():
    """Catálogo con 'already_added' (solo cuentan registros de catálogo, no los adicionales)."""
    ctx = _ctx()
    day = _date_arg(ctx, request.args.get("date"))
    added = set(load_ledger(ctx.user_id).catalog_names_on(day))
    items = []
    for w in WORKOUT_CATALOG:
        d = w.to_dict()
        d["already_added"] = w.name in added
        items.append(d)
    return jsonify({"data": {"date": day, "categories": list(categories()), "workouts": items}})


# ---------- Progreso ----------

@progress_bp.route("/progress", methods=["POST"])
@login_required
def create_progress():
    """
    Body JSON:
      {
        "workout": "Push-ups", "date": "YYYY-MM-DD" (opcional, hoy por defecto),
        "value": 25, "unit": "reps",
        "is_additional": false, "target_value": 30,   # target opcional en catálogo
        "intensity": "Medium"                          # opcional
      }
    """
    if not request.is_json:
        return jsonify({"error": "Content-Type must be application/json"}), 415
    b = request.get_json(silent=True) or {}
    ctx = _ctx()

    result = log_workout(
        ctx,
        workout_name=b.get("workout"),
        date_iso=b.get("date") or ctx.today.isoformat(),
        raw_value=b.get("value"),
        unit=b.get("unit"),
        is_additional=_as_bool(b.get("is_additional")),
        target_value=b.get("target_value"),
        intensity=b.get("intensity"),
    )
    day = result.record["date"]
    return jsonify({"data": {
        "record": result.record,
        "day_xp": result.sync.aggregate.daily_xp.get(day, 0),
        "total_xp": result.sync.aggregate.total_xp,
        "level": level_of(result.sync.aggregate.total_xp).to_dict(),
        "notice": result.notice.to_dict() if result.notice else None,
    }}), 201


@progress_bp.route("/progress", methods=["DELETE"])
@login_required
def delete_progress():
    workout = (request.args.get("workout") or "").strip()
    if not workout:
        return jsonify({"error": "workout es obligatorio"}), 400
    ctx = _ctx()
    day = _date_arg(ctx, request.args.get("date"))

    res = remove_workout(ctx, workout, day)
    if res is None:
        return jsonify({"data": {"deleted": False}}), 200
    return jsonify({"data": {"deleted": True, "total_xp": res.aggregate.total_xp}}), 200


@progress_bp.route("/progress/day", methods=["GET"])
@login_required
def get_day():
    """Registros del día separados en catálogo / adicionales, con XP y kcal."""
    ctx = _ctx()
    day = _date_arg(ctx, request.args.get("date"))

    with guarded_read(f"día {day}"):
        rows = (
            ProgressRecord.query.filter_by(user_id=ctx.user_id, date=day)
            .order_by(ProgressRecord.timestamp.desc())
            .all()
        )
    catalog, additional = [], []
    kcal = 0
    for r in rows:
        (additional if r.is_additional else catalog).append(r.to_dict())
        kcal += int(r.calories or 0)

    daily = current_user.daily_xp or {}
    return jsonify({"data": {
        "date": day,
        "catalog": catalog,
        "additional": additional,
        "day_xp": int(daily.get(day, 0) or 0),
        "calories": kcal,
    }})


# ---------- Estadísticas ----------

@progress_bp.route("/stats", methods=["GET"])
@login_required
def get_stats():
    ctx = _ctx()
    res = sync_user(ctx, current_user)
    return jsonify({"data": {
        **res.views,
        "level": level_of(res.aggregate.total_xp).to_dict(),
        "streak": res.streak,
        "best_streak": res.best_streak,
    }})


@progress_bp.route("/stats/heatmap", methods=["GET"])
@login_required
def get_heatmap():
    ctx = _ctx()
    raw = (request.args.get("month") or "").strip()
    if raw:
        first = parse_date(f"{raw}-01")
    else:
        first = date(ctx.today.year, ctx.today.month, 1)
    counts = monthly_heatmap(load_ledger(ctx.user_id), first.year, first.month)
    return jsonify({"data": {
        "month": f"{first.year:04d}-{first.month:02d}",
        "days": counts,
        "max": max(counts.values()) if counts else 0,
    }})
