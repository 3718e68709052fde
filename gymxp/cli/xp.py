# gymxp/cli/xp.py

import click
from flask import current_app
from flask.cli import AppGroup

from gymxp import db
from gymxp.errors import PersistenceFailure
from gymxp.models.user import User
from gymxp.services.engine import EngineContext, start_session, sync_user
from gymxp.services.ledger import parse_date

xp_group = AppGroup("xp", help="Mantenimiento de XP, snapshots y ledger")


def _users(user_id):
    if user_id is not None:
        u = db.session.get(User, user_id)
        if not u:
            raise click.ClickException(f"Usuario {user_id} no existe")
        return [u]
    return User.query.order_by(User.id.asc()).all()


@xp_group.command("recompute")
@click.option("--user", "user_id", type=int, default=None, help="Solo este usuario (por defecto: todos).")
def recompute(user_id):
    """
    Recalcula desde el ledger el XP diario/total, rachas y snapshot de ranking.
    Idempotente: solo escribe si algo cambia.
    """
    written, failed = 0, 0
    users = _users(user_id)
    for u in users:
        ctx = EngineContext.for_user(u, current_app.config)
        try:
            res = sync_user(ctx, u)
        except PersistenceFailure as e:
            failed += 1
            click.secho(f"[{u.id}] {e.message}", fg="red")
            continue
        if res.aggregate_written or res.snapshot_written:
            written += 1
    click.secho(f"Hecho. Usuarios: {len(users)}, Actualizados: {written}, Fallidos: {failed}", fg="green")


@xp_group.command("cleanup")
@click.option("--as-of", "as_of", default=None, help="Fecha de referencia YYYY-MM-DD (por defecto: hoy).")
def cleanup(as_of):
    """Purga registros sin valor ni completar anteriores a ayer (para todos los usuarios)."""
    ref = parse_date(as_of) if as_of else None
    removed = 0
    for u in _users(None):
        # --as-of solo mueve el corte del barrido; las vistas se recalculan respecto a hoy
        removed += start_session(EngineContext.for_user(u, current_app.config), as_of=ref)
    click.secho(f"Registros caducados eliminados: {removed}", fg="green")
