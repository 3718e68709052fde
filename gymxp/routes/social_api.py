# gymxp/routes/social_api.py
from flask import Blueprint, abort, current_app, jsonify, request
from flask_login import current_user, login_required

from gymxp import db
from gymxp.errors import ValidationError
from gymxp.models.user import User
from gymxp.services.engine import EngineContext, sync_user
from gymxp.services.ledger import load_ledger
from gymxp.services.social import follow, unfollow, update_location
from gymxp.services.store import commit, guarded_read
from gymxp.services.streaks import monthly_heatmap
from gymxp.services.xp import xp_views
from gymxp.utils.levels import level_of

social_bp = Blueprint("social_api", __name__, url_prefix="/api")


def _target(user_id: int) -> User:
    with guarded_read(f"usuario {user_id}"):
        u = db.session.get(User, user_id)
    if not u:
        abort(404, description="usuario no encontrado")
    return u


@social_bp.route("/users/<int:uid>/follow", methods=["POST"])
@login_required
def follow_user(uid: int):
    changed = follow(current_user, _target(uid))
    return jsonify({"data": {"following": True, "changed": changed}}), 200


@social_bp.route("/users/<int:uid>/follow", methods=["DELETE"])
@login_required
def unfollow_user(uid: int):
    changed = unfollow(current_user, _target(uid))
    return jsonify({"data": {"following": False, "changed": changed}}), 200


@social_bp.route("/users/<int:uid>/followers", methods=["GET"])
@login_required
def list_followers(uid: int):
    u = _target(uid)
    with guarded_read(f"seguidores user={uid}"):
        mine = current_user.following_ids()
        items = [{**f.to_public_dict(), "is_followed": f.id in mine} for f in u.followers]
    return jsonify({"data": sorted(items, key=lambda x: x["id"])})


@social_bp.route("/users/<int:uid>/following", methods=["GET"])
@login_required
def list_following(uid: int):
    u = _target(uid)
    with guarded_read(f"seguidos user={uid}"):
        mine = current_user.following_ids()
        items = [{**f.to_public_dict(), "is_followed": f.id in mine} for f in u.following]
    return jsonify({"data": sorted(items, key=lambda x: x["id"])})


@social_bp.route("/users/<int:uid>", methods=["GET"])
@login_required
def get_profile(uid: int):
    """Perfil público: XP, nivel, rachas, seguidores/seguidos y actividad del mes."""
    u = _target(uid)
    today = EngineContext.for_user(current_user, current_app.config).today
    with guarded_read(f"perfil user={uid}"):
        followers = u.follower_ids()
        following = u.following_ids()
        is_followed = uid in current_user.following_ids()
    ledger = load_ledger(uid)
    return jsonify({"data": {
        **u.to_public_dict(),
        **xp_views(u.daily_xp or {}, today, u.total_xp),
        "level": level_of(u.total_xp).to_dict(),
        "streak": u.streak,
        "best_streak": u.best_streak,
        "followers_count": len(followers),
        "following_count": len(following),
        "is_followed": is_followed,
        "is_current_user": uid == current_user.id,
        "workouts": ledger.workout_names(),
        "heatmap": monthly_heatmap(ledger, today.year, today.month),
    }})


# ---------- Perfil propio ----------

@social_bp.route("/me/location", methods=["PUT"])
@login_required
def put_location():
    """Body JSON: {"lat": 40.4, "lon": -3.7, "country": "Spain", "continent": "Europe"} (país/continente opcionales)."""
    if not request.is_json:
        return jsonify({"error": "Content-Type must be application/json"}), 415
    b = request.get_json(silent=True) or {}
    cfg = current_app.config
    u = update_location(
        EngineContext.for_user(current_user, cfg),
        current_user,
        b.get("lat"),
        b.get("lon"),
        country=b.get("country"),
        continent=b.get("continent"),
        geocode=cfg.get("REVERSE_GEOCODE", True),
        geocoder_url=cfg.get("GEOCODER_URL"),
        geocoder_timeout=cfg.get("GEOCODER_TIMEOUT", 5),
    )
    return jsonify({"data": {"lat": u.lat, "lon": u.lon, "country": u.country, "continent": u.continent}})


@social_bp.route("/me", methods=["PATCH"])
@login_required
def patch_me():
    if not request.is_json:
        return jsonify({"error": "Content-Type must be application/json"}), 415
    b = request.get_json(silent=True) or {}
    u = current_user

    if "username" in b:
        name = (b.get("username") or "").strip()
        if not name or len(name) > 80:
            raise ValidationError("username inválido")
        u.username = name
    if "weight_kg" in b:
        w = b.get("weight_kg")
        try:
            w = float(w) if w is not None else None
        except (TypeError, ValueError):
            raise ValidationError("weight_kg debe ser numérico") from None
        if w is not None and not (20 <= w <= 400):
            raise ValidationError("weight_kg fuera de rango (20-400)")
        u.weight_kg = w
    commit()

    # El nombre va en el snapshot de ranking
    sync_user(EngineContext.for_user(u, current_app.config), u)
    return jsonify({"data": {"username": u.username, "weight_kg": u.weight_kg}})
