# gymxp/cli/export.py
import csv
import os
from datetime import datetime

import click
from flask.cli import AppGroup

from gymxp.models.ranking import RankingSnapshot
from gymxp.services.ranking import WINDOW_FIELDS, Requester, build_leaderboard, snapshot_to_row

export_group = AppGroup("export", help="Comandos de exportación (CSV, etc.)")


@export_group.command("leaderboard")
@click.option("--to", "dest_path", default=None,
              help="Ruta destino del CSV (por defecto: instance/leaderboard_YYYYMMDD.csv)")
@click.option("--window", type=click.Choice(list(WINDOW_FIELDS)), default="overall",
              help="Ventana de XP que se muestra (el orden es siempre por XP total)")
@click.option("--limit", type=int, default=100)
def export_leaderboard(dest_path, window, limit):
    """Exporta el ranking global a CSV."""
    if not dest_path:
        ts = datetime.now().strftime("%Y%m%d")
        dest_path = os.path.join("instance", f"leaderboard_{ts}.csv")

    os.makedirs(os.path.dirname(dest_path) or ".", exist_ok=True)

    rows = [snapshot_to_row(s) for s in RankingSnapshot.query.all()]
    # Sin usuario solicitante: nadie es "current user"
    view = build_leaderboard(rows, Requester(user_id=0), "global", window, limit=limit)

    fields = ["rank", "user_id", "username", "xp", "total_xp", "level"]
    with open(dest_path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=fields)
        writer.writeheader()
        for e in view.entries:
            writer.writerow({k: getattr(e, k) for k in fields})

    click.secho(f"Exportadas {len(view.entries)} filas ({window}) a: {dest_path}", fg="green")
