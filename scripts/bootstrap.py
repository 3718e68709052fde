# scripts/bootstrap.py
from sqlalchemy import text

from gymxp import create_app, db

# Asegúrate de importar todos los modelos registrados
from gymxp.models.user import User
from gymxp.models.progress import ProgressRecord  # noqa: F401
from gymxp.models.ranking import RankingSnapshot

from gymxp.services.engine import EngineContext, sync_user


def table_exists(conn, name: str) -> bool:
    row = conn.execute(
        text("SELECT name FROM sqlite_master WHERE type='table' AND name=:n"),
        {"n": name},
    ).fetchone()
    return bool(row)


def ensure_snapshots(app):
    """Usuarios sin snapshot de ranking -> recálculo completo."""
    missing = (
        User.query.outerjoin(RankingSnapshot, RankingSnapshot.user_id == User.id)
        .filter(RankingSnapshot.user_id.is_(None))
        .all()
    )
    for u in missing:
        sync_user(EngineContext.for_user(u, app.config), u)
    print(f"[snapshots] usuarios actualizados: {len(missing)}")


def main():
    app = create_app()
    with app.app_context():
        print("DB =>", app.config.get("SQLALCHEMY_DATABASE_URI"))

        # crea tablas faltantes
        db.create_all()

        with db.engine.begin() as conn:
            for t in ["user", "follows", "progress_records", "ranking_snapshots"]:
                print(f"[table] {t:18s}", "OK" if table_exists(conn, t) else "FALTA")

        ensure_snapshots(app)


if __name__ == "__main__":
    main()
