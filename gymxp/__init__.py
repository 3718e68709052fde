# gymxp/__init__.py

import os
import logging
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate

# Carga variables de entorno (.env)
load_dotenv()

# Extensiones compartidas
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()


def _require_secret_key() -> str:
    """Lee SECRET_KEY de entorno y exige mínimo 32 bytes."""
    secret = os.getenv("SECRET_KEY", "")
    if not secret or len(secret) < 32:
        raise RuntimeError(
            "SECRET_KEY no configurado o demasiado corto. "
            "Añade una clave segura al .env (32 caracteres o más)."
        )
    return secret


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _configure_logging(app: Flask) -> None:
    """Logging simple y consistente."""
    level = logging.DEBUG if app.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)


def create_app(overrides: dict | None = None) -> Flask:
    """Factory principal de la aplicación."""
    app = Flask(__name__, instance_relative_config=True)
    overrides = dict(overrides or {})

    os.makedirs(app.instance_path, exist_ok=True)

    # DB por defecto (SQLite en instance/gymxp.db)
    db_path = os.path.join(app.instance_path, "gymxp.db")
    default_db_uri = f"sqlite:///{db_path}"

    app.config.from_mapping(
        SECRET_KEY=overrides.get("SECRET_KEY") or _require_secret_key(),
        SQLALCHEMY_DATABASE_URI=os.getenv("SQLALCHEMY_DATABASE_URI", default_db_uri),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        JSON_SORT_KEYS=False,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        SESSION_COOKIE_SECURE=os.getenv("FLASK_ENV", "").lower() != "development",
        PERMANENT_SESSION_LIFETIME=timedelta(days=7),
        MAX_CONTENT_LENGTH=1 * 1024 * 1024,
        # Motor de ranking
        LEADERBOARD_LIMIT=int(os.getenv("LEADERBOARD_LIMIT", 100)),
        REGIONAL_RADIUS_KM=float(os.getenv("REGIONAL_RADIUS_KM", 100)),
        # Geocodificación inversa (país / continente a partir de lat/lon)
        REVERSE_GEOCODE=_env_bool("REVERSE_GEOCODE", True),
        GEOCODER_URL=os.getenv(
            "GEOCODER_URL",
            "https://api.bigdatacloud.net/data/reverse-geocode-client",
        ),
        GEOCODER_TIMEOUT=float(os.getenv("GEOCODER_TIMEOUT", 5)),
        # Fecha "hoy" fija (YYYY-MM-DD); útil en tests y reprocesos
        FIXED_TODAY=os.getenv("FIXED_TODAY") or None,
    )
    # Los overrides van antes de inicializar extensiones (el engine se crea en init_app)
    app.config.update(overrides)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    _configure_logging(app)

    # ---------------------------------------------------------
    # MODELOS (importar para que Flask-Migrate los detecte)
    # ---------------------------------------------------------
    from gymxp.models.user import User, follows  # noqa: F401
    from gymxp.models.progress import ProgressRecord  # noqa: F401
    from gymxp.models.ranking import RankingSnapshot  # noqa: F401

    # ---------------------------------------------------------
    # BLUEPRINTS
    # ---------------------------------------------------------
    from gymxp.routes.auth import auth_routes
    from gymxp.routes.progress_api import progress_bp
    from gymxp.routes.leaderboard_api import leaderboard_bp
    from gymxp.routes.social_api import social_bp

    app.register_blueprint(auth_routes)
    app.register_blueprint(progress_bp)
    app.register_blueprint(leaderboard_bp)
    app.register_blueprint(social_bp)

    # CLI (xp, export)
    from gymxp.cli import register_cli
    register_cli(app)

    # ---------------------------------------------------------
    # Healthcheck y manejo de errores JSON
    # ---------------------------------------------------------
    from gymxp.errors import EngineError

    @app.get("/healthz")
    def _healthz():
        return {"status": "ok"}, 200

    @app.errorhandler(EngineError)
    def _engine_errors(err: EngineError):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(400)
    @app.errorhandler(401)
    @app.errorhandler(403)
    @app.errorhandler(404)
    @app.errorhandler(405)
    @app.errorhandler(409)
    @app.errorhandler(500)
    def _http_errors(err):
        if request.is_json or request.path.startswith("/api/"):
            code = getattr(err, "code", 500) or 500
            return jsonify(error_code="http_error", message=str(err)), code
        return err

    return app
