# gymxp/routes/auth.py
import logging

from flask import Blueprint, current_app, jsonify, request
from werkzeug.security import check_password_hash, generate_password_hash
from flask_login import current_user, login_required, login_user, logout_user

from gymxp import db, login_manager
from gymxp.models.user import User
from gymxp.errors import PersistenceFailure
from gymxp.services.engine import EngineContext, start_session
from gymxp.services.store import commit, guarded_read

logger = logging.getLogger(__name__)

auth_routes = Blueprint("auth", __name__)


@login_manager.unauthorized_handler
def _unauthorized():
    return jsonify(error_code="unauthorized", message="Inicia sesión primero."), 401


def _payload() -> dict:
    # Acepta JSON o formulario
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


@auth_routes.route("/register", methods=["POST"])
def register():
    b = _payload()
    email = (b.get("email") or "").strip().lower()
    password = b.get("password") or ""
    username = (b.get("username") or "").strip() or email.split("@")[0]

    if not email or not password:
        return jsonify({"error": "email y password son obligatorios"}), 400
    with guarded_read("usuario"):
        exists = User.query.filter_by(email=email).first() is not None
    if exists:
        return jsonify({"error": "El usuario ya existe"}), 409

    user = User(
        email=email,
        username=username[:80],
        password=generate_password_hash(password),
        daily_xp={},
    )
    db.session.add(user)
    commit()
    return jsonify({"data": {"id": user.id, "username": user.username}}), 201


@auth_routes.route("/login", methods=["POST"])
def login():
    b = _payload()
    email = (b.get("email") or "").strip().lower()
    with guarded_read("usuario"):
        user = User.query.filter_by(email=email).first()
    if not user or not check_password_hash(user.password, b.get("password") or ""):
        return jsonify({"error": "Credenciales inválidas"}), 401

    # Barrido de caducados (una vez) + recálculo; si la BD falla no bloquea el login
    ctx = EngineContext.for_user(user, current_app.config)
    try:
        removed = start_session(ctx)
    except PersistenceFailure:
        logger.warning("login user=%s: barrido omitido por fallo de BD", user.id)
        removed = 0

    login_user(user)
    return jsonify({"data": {"id": user.id, "username": user.username, "cleaned": removed}}), 200


@auth_routes.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"data": "ok"}), 200


@auth_routes.route("/api/me", methods=["GET"])
@login_required
def me():
    u = current_user
    return jsonify({"data": {
        **u.to_public_dict(),
        "weight_kg": u.weight_kg,
        "lat": u.lat,
        "lon": u.lon,
        "following": sorted(u.following_ids()),
        "followers": sorted(u.follower_ids()),
    }})
